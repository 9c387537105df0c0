"""
Email delivery using SMTP, Resend or an HTTP email relay
Templates are written in MJML and compiled to HTML before sending
"""

import asyncio
import base64
import logging
import smtplib
import ssl
from datetime import datetime, timezone
from email import encoders
from email.mime.base import MIMEBase
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional

import httpx
import resend
from mjml import mjml_to_html

from .config import EmailSettings

logger = logging.getLogger(__name__)


class EmailDeliveryError(Exception):
    """Raised when a transport could not hand a message over"""


def compile_mjml_to_html(mjml_content: str) -> str:
    """Compile MJML template to production-ready HTML"""
    try:
        result = mjml_to_html(mjml_content)
        # mjml_to_html returns a dict with 'html' and 'errors' keys
        if isinstance(result, dict):
            if result.get("errors"):
                logger.warning(f"MJML compilation warnings: {result['errors']}")
            return result.get("html", "")
        return str(result)
    except Exception as e:
        logger.error(f"MJML compilation error: {e}")
        raise Exception(f"Failed to compile MJML template: {str(e)}") from e


class MailTransport:
    """Sends one HTML message to one recipient"""

    name = "base"

    def __init__(self, settings: EmailSettings):
        self.settings = settings

    async def send(
        self,
        to: str,
        subject: str,
        html_content: str,
        from_address: Optional[str] = None,
        attachments: Optional[list[dict]] = None,
    ) -> dict:
        raise NotImplementedError


class SmtpTransport(MailTransport):
    """Plain SMTP; SSL when EMAIL_SECURE is set or on port 465, STARTTLS otherwise"""

    name = "smtp"

    def _build_message(self, to, subject, html_content, from_address, attachments) -> MIMEMultipart:
        inline = [a for a in attachments or [] if a.get("cid")]
        regular = [a for a in attachments or [] if not a.get("cid")]

        msg = MIMEMultipart("mixed")
        msg["Subject"] = subject
        msg["From"] = from_address
        msg["To"] = to

        related = MIMEMultipart("related")
        related.attach(MIMEText(html_content, "html", "utf-8"))
        for attachment in inline:
            maintype, _, subtype = attachment.get("content_type", "application/octet-stream").partition("/")
            part = MIMEBase(maintype, subtype)
            part.set_payload(attachment["content"])
            encoders.encode_base64(part)
            part.add_header("Content-ID", f"<{attachment['cid']}>")
            part.add_header("Content-Disposition", "inline", filename=attachment["filename"])
            related.attach(part)
        msg.attach(related)

        for attachment in regular:
            part = MIMEBase("application", "octet-stream")
            part.set_payload(attachment["content"])
            encoders.encode_base64(part)
            part.add_header("Content-Disposition", "attachment", filename=attachment["filename"])
            msg.attach(part)

        return msg

    def _send_sync(self, to, subject, html_content, from_address, attachments) -> dict:
        settings = self.settings
        if not settings.host:
            raise EmailDeliveryError("Email service not configured - EMAIL_HOST missing")

        msg = self._build_message(to, subject, html_content, from_address, attachments)

        try:
            if settings.secure or settings.port == 465:
                context = ssl.create_default_context()
                server = smtplib.SMTP_SSL(settings.host, settings.port, context=context, timeout=30)
            else:
                server = smtplib.SMTP(settings.host, settings.port, timeout=30)
                server.ehlo()
                if server.has_extn("starttls"):
                    server.starttls(context=ssl.create_default_context())
                    server.ehlo()

            try:
                if settings.user:
                    server.login(settings.user, settings.password or "")
                server.sendmail(from_address.split("<")[-1].rstrip(">"), [to], msg.as_string())
            finally:
                server.quit()
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"❌ SMTP send to {to} failed: {e}")
            raise EmailDeliveryError(f"SMTP send failed: {str(e)}") from e

        logger.info(f"✅ SMTP email sent to {to} via {settings.host}")
        return {"id": f"smtp-{datetime.now(timezone.utc).timestamp()}", "success": True}

    async def send(self, to, subject, html_content, from_address=None, attachments=None) -> dict:
        return await asyncio.to_thread(
            self._send_sync, to, subject, html_content, from_address or self.settings.sender, attachments
        )


class ResendTransport(MailTransport):
    name = "resend"

    def __init__(self, settings: EmailSettings):
        super().__init__(settings)
        resend.api_key = settings.resend_api_key

    async def send(self, to, subject, html_content, from_address=None, attachments=None) -> dict:
        if not self.settings.resend_api_key:
            logger.error("❌ No email service configured - RESEND_API_KEY missing")
            raise EmailDeliveryError("Email service not configured")

        email_data = {
            "from": from_address or self.settings.sender,
            "to": [to],
            "subject": subject,
            "html": html_content,
        }
        if attachments:
            email_data["attachments"] = []
            for attachment in attachments:
                entry = {
                    "filename": attachment["filename"],
                    "content": base64.b64encode(attachment["content"]).decode(),
                }
                if attachment.get("cid"):
                    entry["content_id"] = attachment["cid"]
                email_data["attachments"].append(entry)

        try:
            logger.info(f"📧 Sending email via Resend to: {to}")
            response = await asyncio.to_thread(resend.Emails.send, email_data)
            logger.info(f"✅ Email sent successfully via Resend: {response}")
            return response
        except Exception as e:
            logger.error(f"❌ Email send error to {to}: {e}")
            raise EmailDeliveryError(f"Failed to send email: {str(e)}") from e


class EmailApiTransport(MailTransport):
    """JSON relay at EMAIL_SERVICE_URL; SMTP credentials travel with each request"""

    name = "api"

    def _payload(self, to, subject, html_content, from_address, attachments) -> dict:
        payload = {
            "to": to,
            "subject": subject,
            "htmlTemplate": html_content,
            "from": from_address,
            "emailCredentials": {
                "service": "gmail",
                "user": self.settings.user,
                "password": self.settings.password,
            },
        }
        if attachments:
            payload["attachments"] = [
                {
                    "filename": a["filename"],
                    "content": base64.b64encode(a["content"]).decode(),
                    "encoding": "base64",
                    **({"cid": a["cid"]} if a.get("cid") else {}),
                }
                for a in attachments
            ]
        return payload

    async def send(self, to, subject, html_content, from_address=None, attachments=None) -> dict:
        if not to or not subject:
            raise EmailDeliveryError("Missing required fields: to and subject are mandatory")
        if not html_content:
            raise EmailDeliveryError("An HTML template is required")
        if not self.settings.service_url:
            raise EmailDeliveryError("Email configuration error: EMAIL_SERVICE_URL missing")

        payload = self._payload(to, subject, html_content, from_address or self.settings.sender, attachments)
        logger.info(f"📧 Sending email request to: {self.settings.service_url} (recipient {to})")

        try:
            async with httpx.AsyncClient(timeout=self.settings.api_timeout) as client:
                response = await client.post(
                    self.settings.service_url,
                    json=payload,
                    headers={"Accept": "application/json"},
                )
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            try:
                detail = e.response.json().get("message")
            except ValueError:
                detail = None
            logger.error(f"❌ Email API error response: {e.response.status_code} {e.response.text[:200]}")
            raise EmailDeliveryError(f"Email service error: {detail or e.response.reason_phrase}") from e
        except httpx.RequestError as e:
            logger.error(f"❌ No response from email service: {e}")
            raise EmailDeliveryError("Email service is not responding. Please try again later.") from e
        except Exception as e:
            raise EmailDeliveryError(f"Email configuration error: {str(e)}") from e

        try:
            data = response.json() if response.content else {}
        except ValueError:
            data = {"raw": response.text}
        logger.info(f"✅ Email API response for {to}: {data}")
        return data


TRANSPORTS = {
    SmtpTransport.name: SmtpTransport,
    ResendTransport.name: ResendTransport,
    EmailApiTransport.name: EmailApiTransport,
}


def build_transport(settings: EmailSettings) -> MailTransport:
    try:
        transport_class = TRANSPORTS[settings.transport]
    except KeyError:
        raise ValueError(
            f"Unknown EMAIL_TRANSPORT '{settings.transport}'. Expected one of: {', '.join(TRANSPORTS)}"
        ) from None
    return transport_class(settings)
