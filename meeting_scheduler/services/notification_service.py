"""
Meeting Notification Service
Invitation and party-joined emails for every participant on a meeting
"""

import asyncio
import logging
from functools import lru_cache
from typing import Optional

from ..config import EmailSettings, get_email_settings
from ..email_service import EmailDeliveryError, MailTransport, build_transport, compile_mjml_to_html
from ..email_templates import (
    PROMOTION_CID,
    meeting_invitation_template,
    party_joined_template,
    promotion_section,
)
from ..models import Meeting

logger = logging.getLogger(__name__)


def collect_recipients(meeting: Meeting, exclude_email: Optional[str] = None) -> list[dict]:
    """Every participant with an email, optionally skipping one address"""
    excluded = (exclude_email or "").strip().lower()
    recipients = []
    for _, participant in meeting.participants():
        email = participant.get("email")
        if not email or (excluded and email.lower() == excluded):
            continue
        recipients.append({"name": participant.get("name", ""), "email": email})
    return recipients


class NotificationService:
    """Renders meeting emails and fans them out through a mail transport"""

    def __init__(self, settings: EmailSettings, transport: Optional[MailTransport] = None):
        self.settings = settings
        self.transport = transport or build_transport(settings)

    def _promotion(self) -> tuple[str, list[dict]]:
        poster = self.settings.promotion_poster_path
        if not poster:
            return "", []

        try:
            content = poster.read_bytes()
        except OSError as e:
            logger.warning(f"⚠️ Promotion poster unreadable at {poster}: {e}")
            return "", []

        attachment = {
            "filename": poster.name,
            "content": content,
            "content_type": "image/png",
            "cid": PROMOTION_CID,
        }
        return promotion_section(self.settings.vital_scan_url), [attachment]

    async def _dispatch(
        self,
        recipients: list[dict],
        subject: str,
        html_content: str,
        attachments: Optional[list[dict]] = None,
    ) -> dict:
        sends = [
            self.transport.send(
                to=recipient["email"],
                subject=subject,
                html_content=html_content,
                from_address=self.settings.sender,
                attachments=[dict(a) for a in attachments or []],
            )
            for recipient in recipients
        ]

        # One failed recipient fails the batch; the other sends are not recalled
        try:
            await asyncio.gather(*sends)
        except EmailDeliveryError:
            raise
        except Exception as e:
            raise EmailDeliveryError(str(e)) from e

        return {"success": True, "count": len(recipients)}

    async def send_meeting_invitation(self, meeting: Meeting) -> dict:
        recipients = collect_recipients(meeting)
        promotion_html, attachments = self._promotion()
        html_content = compile_mjml_to_html(meeting_invitation_template(meeting, promotion_html))

        try:
            result = await self._dispatch(
                recipients,
                subject=f"Meeting Invitation: {meeting.title}",
                html_content=html_content,
                attachments=attachments,
            )
        except EmailDeliveryError as e:
            logger.error(f"❌ Error sending invitations for meeting {meeting.id}: {e}")
            raise

        logger.info(f"✅ Invitations sent to {result['count']} recipients for meeting: {meeting.title}")
        return result

    async def send_party_joined_notification(self, meeting: Meeting, joined: dict) -> dict:
        recipients = collect_recipients(meeting, exclude_email=joined.get("email"))
        html_content = compile_mjml_to_html(
            party_joined_template(meeting, joined["name"], joined.get("email"))
        )

        try:
            result = await self._dispatch(
                recipients,
                subject=f"{joined['name']} has joined: {meeting.title}",
                html_content=html_content,
            )
        except EmailDeliveryError as e:
            logger.error(f"❌ Error sending party joined notifications for meeting {meeting.id}: {e}")
            raise

        logger.info(f"✅ Party joined notifications sent to {result['count']} recipients")
        return result


@lru_cache
def get_notification_service() -> NotificationService:
    """Dependency injection for NotificationService"""
    settings = get_email_settings()
    if not settings.is_configured:
        logger.warning(f"⚠️ Email transport '{settings.transport}' is not fully configured")
    return NotificationService(settings)
