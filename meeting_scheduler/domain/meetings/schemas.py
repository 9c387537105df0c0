"""Meeting domain schemas - Pydantic models for validation"""

from datetime import datetime, timezone
from typing import Literal, Optional

from pydantic import BaseModel, field_validator

LocationCode = Literal["SG", "MUM", ""]
MeetingStatus = Literal["scheduled", "completed", "cancelled"]


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return value
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class Participant(BaseModel):
    """Contact triple attached to a meeting slot"""

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None


class MeetingCreate(BaseModel):
    """Schema for creating a new meeting"""

    title: str
    description: Optional[str] = None
    date: datetime
    time: str
    venue: str
    country: Optional[str] = None
    location: LocationCode = ""
    companyA: Participant
    companyB: Participant
    broker1: Optional[Participant] = None
    broker2: Optional[Participant] = None
    clientContact: Optional[Participant] = None
    statusCompanyA: Optional[str] = None
    statusCompanyB: Optional[str] = None
    status: MeetingStatus = "scheduled"

    @field_validator("date")
    @classmethod
    def normalize_date(cls, v):
        return _as_utc(v)


class MeetingUpdate(BaseModel):
    """Schema for updating a meeting; only fields sent are applied"""

    title: Optional[str] = None
    description: Optional[str] = None
    date: Optional[datetime] = None
    time: Optional[str] = None
    venue: Optional[str] = None
    country: Optional[str] = None
    location: Optional[LocationCode] = None
    companyA: Optional[Participant] = None
    companyB: Optional[Participant] = None
    broker1: Optional[Participant] = None
    broker2: Optional[Participant] = None
    clientContact: Optional[Participant] = None
    statusCompanyA: Optional[str] = None
    statusCompanyB: Optional[str] = None
    status: Optional[MeetingStatus] = None

    @field_validator("date")
    @classmethod
    def normalize_date(cls, v):
        return _as_utc(v)


class MeetingResponse(BaseModel):
    """Schema for meeting response"""

    id: int
    title: str
    description: Optional[str] = None
    date: datetime
    time: str
    venue: str
    country: Optional[str] = None
    location: str
    companyA: dict
    companyB: dict
    broker1: dict
    broker2: dict
    clientContact: dict
    statusCompanyA: Optional[str] = None
    statusCompanyB: Optional[str] = None
    status: str
    invitationsSent: bool
    createdBy: Optional[int] = None
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None

    # SQLite hands timestamps back without tzinfo; they are stored as UTC
    @field_validator("date", "createdAt", "updatedAt")
    @classmethod
    def attach_utc(cls, v):
        return _as_utc(v)


class MeetingStats(BaseModel):
    totalMeetings: int
    upcomingMeetings: int
    completedMeetings: int


class JoinedParticipant(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None


class PartyJoinedRequest(BaseModel):
    joinedParticipant: Optional[JoinedParticipant] = None


class MessageResponse(BaseModel):
    message: str


class RowError(BaseModel):
    row: int
    error: str


class BulkUploadResponse(BaseModel):
    message: str
    totalRows: int
    successCount: int
    failedCount: int
    errors: Optional[list[RowError]] = None
