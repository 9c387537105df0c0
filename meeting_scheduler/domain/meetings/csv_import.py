"""
CSV bulk import

Rows are mapped onto the meeting shape, checked for the three fields the
sheet must carry, persisted one at a time and announced to participants.
A failing row is recorded in the report and never stops the rows after it.
"""

import csv
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from ...models import User
from ...services.notification_service import NotificationService
from .repository import MeetingRepository

logger = logging.getLogger(__name__)

COMPANY_A = "CEDANT / COMPANY A"
COMPANY_B = "REINSURER / COMPANY B"

# Meeting attribute -> column label; each label carries "<label> Email" and "<label> Phone"
PARTICIPANT_COLUMNS = {
    "company_a": COMPANY_A,
    "company_b": COMPANY_B,
    "broker1": "1st Broker",
    "broker2": "2nd Broker",
    "client_contact": "CLIENT's CONTACT",
}

DEFAULT_TIME = "10:00 AM"
DEFAULT_VENUE = "TBD"
MISSING_REQUIRED_FIELDS = "Missing required fields (Company A, Company B, or Venue)"

# Header line plus 1-based numbering
ROW_OFFSET = 2


def _cell(row: dict, column: str) -> str:
    return row.get(column) or ""


def map_row(row: dict, created_by: Optional[int], now: Optional[datetime] = None) -> dict:
    """Turn one flat CSV row into meeting fields. Never raises"""
    company_a = _cell(row, COMPANY_A)
    company_b = _cell(row, COMPANY_B)

    meeting_data = {
        "title": f"Meeting: {company_a} - {company_b}",
        "description": f"Meeting between {company_a} and {company_b}",
        # The sheet carries no date column
        "date": now or datetime.now(timezone.utc),
        "time": _cell(row, "TIME") or DEFAULT_TIME,
        "venue": _cell(row, "VENUE") or DEFAULT_VENUE,
        "country": _cell(row, "country"),
        "location": _cell(row, "SG/MUM"),
        "status_company_a": _cell(row, "STATUS (Company A)"),
        "status_company_b": _cell(row, "STATUS (Company B)"),
        "created_by": created_by,
    }

    for attribute, label in PARTICIPANT_COLUMNS.items():
        meeting_data[attribute] = {
            "name": _cell(row, label),
            "email": _cell(row, f"{label} Email"),
            "phone": _cell(row, f"{label} Phone"),
        }

    return meeting_data


def missing_required_fields(meeting_data: dict) -> bool:
    return not (
        meeting_data["company_a"]["name"]
        and meeting_data["company_b"]["name"]
        and meeting_data["venue"]
    )


@dataclass
class RowFailure:
    row: int
    error: str


@dataclass
class ImportReport:
    total_rows: int = 0
    success_count: int = 0
    failed_count: int = 0
    failures: list[RowFailure] = field(default_factory=list)

    def record_success(self) -> None:
        self.success_count += 1

    def record_failure(self, row: int, error: str) -> None:
        self.failed_count += 1
        self.failures.append(RowFailure(row=row, error=error))

    @property
    def message(self) -> str:
        return (
            f"Bulk upload completed. {self.success_count} meetings created, "
            f"{self.failed_count} failed"
        )

    def to_response(self) -> dict:
        response = {
            "message": self.message,
            "totalRows": self.total_rows,
            "successCount": self.success_count,
            "failedCount": self.failed_count,
        }
        if self.failures:
            response["errors"] = [{"row": f.row, "error": f.error} for f in self.failures]
        return response


def read_csv_rows(path: Path) -> list[dict]:
    """Parse a CSV file with a header line into ordered dict rows"""
    with open(path, newline="", encoding="utf-8-sig") as f:
        return [row for row in csv.DictReader(f)]


class MeetingImporter:
    """Single-use importer for one uploaded sheet"""

    def __init__(self, db: Session, notifier: NotificationService, user: User):
        self.db = db
        self.notifier = notifier
        self.user = user
        self.repo = MeetingRepository()
        self.report = ImportReport()

    async def _notify(self, meeting, row_number: int) -> None:
        try:
            await self.notifier.send_meeting_invitation(meeting)
            self.repo.mark_invitations_sent(self.db, meeting)
        except Exception as e:
            # The meeting stays; invitations_sent remains False
            logger.error(f"❌ Error sending invitations for row {row_number}: {e}")

    async def _import_row(self, row: dict, row_number: int) -> None:
        meeting_data = map_row(row, created_by=self.user.id)

        if missing_required_fields(meeting_data):
            self.report.record_failure(row_number, MISSING_REQUIRED_FIELDS)
            return

        try:
            meeting = self.repo.create_meeting(self.db, **meeting_data)
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Error processing row {row_number}: {e}")
            self.report.record_failure(row_number, str(e))
            return

        await self._notify(meeting, row_number)
        self.report.record_success()

    async def run(self, rows: Iterable[dict]) -> ImportReport:
        rows = list(rows)
        self.report.total_rows = len(rows)
        logger.info(f"📥 Importing {len(rows)} meeting rows for user {self.user.id}")

        for index, row in enumerate(rows):
            await self._import_row(row, index + ROW_OFFSET)

        logger.info(
            f"✅ Bulk import finished: {self.report.success_count} created, {self.report.failed_count} failed"
        )
        return self.report
