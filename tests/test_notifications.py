"""Notification fan-out, templates and mail transports"""

import base64
import json
from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import httpx
import pytest

from meeting_scheduler import email_service
from meeting_scheduler.config import EmailSettings
from meeting_scheduler.email_service import (
    EmailApiTransport,
    EmailDeliveryError,
    ResendTransport,
    SmtpTransport,
    build_transport,
)
from meeting_scheduler.email_templates import format_meeting_date, meeting_invitation_template
from meeting_scheduler.models import Meeting
from meeting_scheduler.services.notification_service import NotificationService, collect_recipients


def _meeting(**overrides) -> Meeting:
    fields = {
        "id": 1,
        "title": "Q4 Renewal <Draft>",
        "date": datetime(2026, 10, 20, 2, 0, tzinfo=timezone.utc),
        "time": "10:00 AM",
        "venue": "Level 12",
        "company_a": {"name": "Acme", "email": "alice@acme.com"},
        "company_b": {"name": "Global Re", "email": "bob@globalre.com"},
        "broker1": {"name": "Carol", "email": "carol@broker.com"},
        "broker2": {"name": "No Email Broker"},
        "client_contact": {},
    }
    fields.update(overrides)
    return Meeting(**fields)


def test_collect_recipients_skips_participants_without_email():
    recipients = collect_recipients(_meeting())

    assert [r["email"] for r in recipients] == ["alice@acme.com", "bob@globalre.com", "carol@broker.com"]


def test_collect_recipients_excludes_address_case_insensitively():
    recipients = collect_recipients(_meeting(), exclude_email=" Carol@Broker.com ")

    assert [r["email"] for r in recipients] == ["alice@acme.com", "bob@globalre.com"]


async def test_invitation_goes_to_every_participant(transport_factory):
    transport = transport_factory()
    service = NotificationService(EmailSettings(), transport=transport)

    result = await service.send_meeting_invitation(_meeting())

    assert result == {"success": True, "count": 3}
    assert len(transport.sent) == 3
    assert transport.sent[0]["subject"] == "Meeting Invitation: Q4 Renewal <Draft>"


async def test_one_failed_recipient_fails_the_batch(transport_factory):
    transport = transport_factory(fail_for=["bob@globalre.com"])
    service = NotificationService(EmailSettings(), transport=transport)

    with pytest.raises(EmailDeliveryError):
        await service.send_meeting_invitation(_meeting())

    assert sorted(transport.recipients) == ["alice@acme.com", "carol@broker.com"]


async def test_unexpected_transport_errors_are_wrapped(transport_factory):
    transport = transport_factory()

    async def explode(**kwargs):
        raise RuntimeError("socket closed")

    transport.send = explode
    service = NotificationService(EmailSettings(), transport=transport)

    with pytest.raises(EmailDeliveryError, match="socket closed"):
        await service.send_party_joined_notification(_meeting(), {"name": "Alice", "email": "alice@acme.com"})


async def test_invitation_attaches_promotion_poster(tmp_path, transport_factory):
    poster = tmp_path / "promotionPoster.png"
    poster.write_bytes(b"\x89PNG fake")
    transport = transport_factory()
    settings = EmailSettings(promotion_poster_path=poster, vital_scan_url="https://scan.example.com")
    service = NotificationService(settings, transport=transport)

    await service.send_meeting_invitation(_meeting())

    attachment = transport.sent[0]["attachments"][0]
    assert attachment["cid"] == "promotion-poster-image"
    assert attachment["content"] == b"\x89PNG fake"


def test_invitation_template_escapes_values():
    mjml = meeting_invitation_template(_meeting())

    assert "Q4 Renewal &lt;Draft&gt;" in mjml
    assert "<Draft>" not in mjml
    assert format_meeting_date(datetime(2026, 10, 20, tzinfo=timezone.utc)) in mjml


def test_format_meeting_date():
    assert format_meeting_date(datetime(2026, 10, 20, tzinfo=timezone.utc)) == "Tuesday, 20 October 2026"


def test_build_transport_picks_configured_transport():
    assert isinstance(build_transport(EmailSettings(transport="smtp")), SmtpTransport)
    assert isinstance(build_transport(EmailSettings(transport="resend", resend_api_key="re_test")), ResendTransport)
    assert isinstance(build_transport(EmailSettings(transport="api")), EmailApiTransport)

    with pytest.raises(ValueError, match="Unknown EMAIL_TRANSPORT"):
        build_transport(EmailSettings(transport="pigeon"))


def test_sender_uses_display_name():
    settings = EmailSettings(from_address="meetings@example.com", from_name="Meetings")

    assert settings.sender == '"Meetings" <meetings@example.com>'


async def test_smtp_transport_uses_starttls_and_login():
    settings = EmailSettings(host="smtp.example.com", port=587, user="mailer", password="s3cret")
    server = MagicMock()
    server.has_extn.return_value = True

    with patch("meeting_scheduler.email_service.smtplib.SMTP", return_value=server) as smtp:
        await SmtpTransport(settings).send("alice@acme.com", "Hello", "<p>Hi</p>")

    smtp.assert_called_once_with("smtp.example.com", 587, timeout=30)
    server.starttls.assert_called_once()
    server.login.assert_called_once_with("mailer", "s3cret")
    from_addr, to_addrs, _ = server.sendmail.call_args.args
    assert from_addr == settings.from_address
    assert to_addrs == ["alice@acme.com"]
    server.quit.assert_called_once()


async def test_smtp_transport_requires_host():
    with pytest.raises(EmailDeliveryError, match="EMAIL_HOST"):
        await SmtpTransport(EmailSettings()).send("alice@acme.com", "Hello", "<p>Hi</p>")


async def test_api_transport_requires_service_url():
    with pytest.raises(EmailDeliveryError, match="EMAIL_SERVICE_URL"):
        await EmailApiTransport(EmailSettings(transport="api")).send("alice@acme.com", "Hello", "<p>Hi</p>")


def _relay_client(handler):
    """AsyncClient factory that routes the relay call through handler"""
    real_client = httpx.AsyncClient

    def factory(**kwargs):
        return real_client(transport=httpx.MockTransport(handler), **kwargs)

    return patch.object(email_service.httpx, "AsyncClient", factory)


def _relay_settings() -> EmailSettings:
    return EmailSettings(
        transport="api", service_url="https://relay.example.com/send", user="mailer", password="s3cret"
    )


async def test_api_transport_posts_payload():
    captured = {}

    def handler(request):
        captured["body"] = json.loads(request.content)
        return httpx.Response(200, json={"id": "relay-1"})

    with _relay_client(handler):
        result = await EmailApiTransport(_relay_settings()).send("alice@acme.com", "Hello", "<p>Hi</p>")

    assert result == {"id": "relay-1"}
    assert captured["body"]["to"] == "alice@acme.com"
    assert captured["body"]["htmlTemplate"] == "<p>Hi</p>"
    assert captured["body"]["emailCredentials"]["user"] == "mailer"


async def test_api_transport_reports_relay_errors():
    def handler(request):
        return httpx.Response(502, json={"message": "relay down"})

    with _relay_client(handler):
        with pytest.raises(EmailDeliveryError, match="Email service error: relay down"):
            await EmailApiTransport(_relay_settings()).send("alice@acme.com", "Hello", "<p>Hi</p>")


async def test_api_transport_reports_unreachable_relay():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with _relay_client(handler):
        with pytest.raises(EmailDeliveryError, match="Email service is not responding"):
            await EmailApiTransport(_relay_settings()).send("alice@acme.com", "Hello", "<p>Hi</p>")


async def test_resend_transport_sends_inline_attachment():
    settings = EmailSettings(transport="resend", resend_api_key="re_test")
    attachment = {"filename": "poster.png", "content": b"img", "content_type": "image/png", "cid": "poster"}

    with patch.object(email_service.resend.Emails, "send", return_value={"id": "re_1"}) as send:
        result = await ResendTransport(settings).send("alice@acme.com", "Hello", "<p>Hi</p>", attachments=[attachment])

    assert result == {"id": "re_1"}
    email_data = send.call_args.args[0]
    assert email_data["to"] == ["alice@acme.com"]
    assert email_data["from"] == settings.sender
    assert email_data["attachments"] == [
        {"filename": "poster.png", "content": base64.b64encode(b"img").decode(), "content_id": "poster"}
    ]


async def test_resend_transport_wraps_sdk_errors():
    settings = EmailSettings(transport="resend", resend_api_key="re_test")

    with patch.object(email_service.resend.Emails, "send", side_effect=RuntimeError("rate limited")):
        with pytest.raises(EmailDeliveryError, match="rate limited"):
            await ResendTransport(settings).send("alice@acme.com", "Hello", "<p>Hi</p>")
