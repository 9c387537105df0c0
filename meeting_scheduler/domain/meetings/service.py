"""Meeting service - Business logic for meeting operations"""

import csv
import logging
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from fastapi import HTTPException, UploadFile
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...config import UPLOAD_DIR
from ...models import Meeting, User
from ...services.notification_service import NotificationService
from .csv_import import MeetingImporter, read_csv_rows
from .repository import MeetingRepository
from .schemas import MeetingCreate, MeetingUpdate, PartyJoinedRequest

logger = logging.getLogger(__name__)

# API field -> model attribute
FIELD_MAP = {
    "title": "title",
    "description": "description",
    "date": "date",
    "time": "time",
    "venue": "venue",
    "country": "country",
    "location": "location",
    "companyA": "company_a",
    "companyB": "company_b",
    "broker1": "broker1",
    "broker2": "broker2",
    "clientContact": "client_contact",
    "statusCompanyA": "status_company_a",
    "statusCompanyB": "status_company_b",
    "status": "status",
}

OPTIONAL_PARTICIPANTS = ("broker1", "broker2", "clientContact")


def _to_model_fields(payload: dict) -> dict:
    fields = {}
    for key, value in payload.items():
        if key in OPTIONAL_PARTICIPANTS and value is None:
            value = {}
        fields[FIELD_MAP[key]] = value
    return fields


def is_csv_upload(upload: UploadFile) -> bool:
    return upload.content_type == "text/csv" or (upload.filename or "").lower().endswith(".csv")


class MeetingService:
    """Service layer for meeting business logic"""

    def __init__(self, db: Session, notifier: NotificationService):
        self.db = db
        self.notifier = notifier
        self.repo = MeetingRepository()

    def get_meetings(self) -> list[Meeting]:
        return self.repo.get_meetings(self.db)

    def get_meeting(self, meeting_id: int) -> Meeting:
        meeting = self.repo.get_meeting_by_id(self.db, meeting_id)
        if not meeting:
            raise HTTPException(status_code=404, detail="Meeting not found")
        return meeting

    def get_stats(self) -> dict:
        return self.repo.get_stats(self.db, datetime.now(timezone.utc))

    async def _send_invitations(self, meeting: Meeting, mark_sent: bool) -> None:
        try:
            await self.notifier.send_meeting_invitation(meeting)
            if mark_sent:
                self.repo.mark_invitations_sent(self.db, meeting)
        except Exception as e:
            logger.error(f"❌ Error sending invitations for meeting {meeting.id}: {e}")

    async def create_meeting(self, data: MeetingCreate, user: User) -> Meeting:
        logger.info(f"📥 Creating meeting for user_id: {user.id}")
        fields = _to_model_fields(data.model_dump())

        try:
            meeting = self.repo.create_meeting(self.db, created_by=user.id, **fields)
        except (ValueError, SQLAlchemyError) as e:
            self.db.rollback()
            logger.warning(f"⚠️ Meeting rejected by the store: {e}")
            raise HTTPException(status_code=400, detail=str(e)) from e

        await self._send_invitations(meeting, mark_sent=True)
        return meeting

    async def update_meeting(self, meeting_id: int, data: MeetingUpdate) -> Meeting:
        meeting = self.get_meeting(meeting_id)
        updates = _to_model_fields(data.model_dump(exclude_unset=True))

        try:
            meeting = self.repo.update_meeting(self.db, meeting, **updates)
        except (ValueError, SQLAlchemyError) as e:
            self.db.rollback()
            logger.warning(f"⚠️ Meeting rejected by the store: {e}")
            raise HTTPException(status_code=400, detail=str(e)) from e

        await self._send_invitations(meeting, mark_sent=False)
        return meeting

    def delete_meeting(self, meeting_id: int) -> dict:
        meeting = self.get_meeting(meeting_id)
        self.repo.delete_meeting(self.db, meeting)
        logger.info(f"🗑️ Deleted meeting {meeting_id}")
        return {"message": "Meeting deleted successfully"}

    async def notify_party_joined(self, meeting_id: int, data: PartyJoinedRequest) -> dict:
        meeting = self.get_meeting(meeting_id)

        joined = data.joinedParticipant
        if not joined or not joined.name:
            raise HTTPException(status_code=400, detail="Joined participant information is required")

        try:
            await self.notifier.send_party_joined_notification(meeting, joined.model_dump())
        except Exception as e:
            logger.error(f"❌ Error sending party joined notification: {e}")
            raise HTTPException(status_code=500, detail="Server error sending notification") from e

        return {"message": "Notification sent successfully"}

    async def bulk_upload(self, upload: Optional[UploadFile], user: User) -> dict:
        """Import meetings from an uploaded CSV sheet"""
        if upload is None or not upload.filename:
            raise HTTPException(status_code=400, detail="Please upload a CSV file")

        if not is_csv_upload(upload):
            raise HTTPException(status_code=400, detail="Only CSV files are allowed")

        UPLOAD_DIR.mkdir(parents=True, exist_ok=True)
        fd, temp_name = tempfile.mkstemp(suffix=".csv", dir=UPLOAD_DIR)
        file_path = Path(temp_name)

        try:
            with os.fdopen(fd, "wb") as f:
                f.write(await upload.read())

            try:
                rows = read_csv_rows(file_path)
            except (csv.Error, UnicodeDecodeError) as e:
                logger.error(f"❌ Error in bulk upload: {e}")
                raise HTTPException(
                    status_code=500,
                    detail={"message": "Server error during bulk upload", "error": str(e)},
                ) from e

            if not rows:
                raise HTTPException(status_code=400, detail="CSV file is empty")

            report = await MeetingImporter(self.db, self.notifier, user).run(rows)
            return report.to_response()
        finally:
            if file_path.exists():
                file_path.unlink()
