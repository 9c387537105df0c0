"""Meeting router - FastAPI endpoints for meeting operations"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import Meeting, User
from ...services.notification_service import NotificationService, get_notification_service
from .schemas import (
    BulkUploadResponse,
    MeetingCreate,
    MeetingResponse,
    MeetingStats,
    MeetingUpdate,
    MessageResponse,
    PartyJoinedRequest,
)
from .service import MeetingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/meetings", tags=["Meetings"])


def get_meeting_service(
    db: Session = Depends(get_db),
    notifier: NotificationService = Depends(get_notification_service),
) -> MeetingService:
    """Dependency injection for MeetingService"""
    return MeetingService(db, notifier)


def serialize_meeting(m: Meeting) -> MeetingResponse:
    return MeetingResponse(
        id=m.id,
        title=m.title,
        description=m.description,
        date=m.date,
        time=m.time,
        venue=m.venue,
        country=m.country,
        location=m.location or "",
        companyA=m.company_a or {},
        companyB=m.company_b or {},
        broker1=m.broker1 or {},
        broker2=m.broker2 or {},
        clientContact=m.client_contact or {},
        statusCompanyA=m.status_company_a,
        statusCompanyB=m.status_company_b,
        status=m.status,
        invitationsSent=m.invitations_sent,
        createdBy=m.created_by,
        createdAt=m.created_at,
        updatedAt=m.updated_at,
    )


# ============================================================================
# CORE CRUD OPERATIONS
# ============================================================================


@router.get("/stats", response_model=MeetingStats)
async def get_meeting_stats(
    current_user: User = Depends(get_current_user),
    service: MeetingService = Depends(get_meeting_service),
):
    """Total, upcoming and completed meeting counts"""
    return service.get_stats()


@router.get("", response_model=list[MeetingResponse])
async def get_meetings(
    current_user: User = Depends(get_current_user),
    service: MeetingService = Depends(get_meeting_service),
):
    """Get all meetings, latest first"""
    return [serialize_meeting(m) for m in service.get_meetings()]


@router.get("/{meeting_id}", response_model=MeetingResponse)
async def get_meeting(
    meeting_id: int,
    current_user: User = Depends(get_current_user),
    service: MeetingService = Depends(get_meeting_service),
):
    return serialize_meeting(service.get_meeting(meeting_id))


@router.post("", response_model=MeetingResponse, status_code=201)
async def create_meeting(
    data: MeetingCreate,
    current_user: User = Depends(get_current_user),
    service: MeetingService = Depends(get_meeting_service),
):
    """Create a meeting and email invitations to its participants"""
    meeting = await service.create_meeting(data, current_user)
    return serialize_meeting(meeting)


@router.put("/{meeting_id}", response_model=MeetingResponse)
async def update_meeting(
    meeting_id: int,
    data: MeetingUpdate,
    current_user: User = Depends(get_current_user),
    service: MeetingService = Depends(get_meeting_service),
):
    """Update a meeting and re-send invitations"""
    meeting = await service.update_meeting(meeting_id, data)
    return serialize_meeting(meeting)


@router.delete("/{meeting_id}", response_model=MessageResponse)
async def delete_meeting(
    meeting_id: int,
    current_user: User = Depends(get_current_user),
    service: MeetingService = Depends(get_meeting_service),
):
    return service.delete_meeting(meeting_id)


# ============================================================================
# NOTIFICATIONS & IMPORT
# ============================================================================


@router.post("/{meeting_id}/party-joined", response_model=MessageResponse)
async def party_joined(
    meeting_id: int,
    data: PartyJoinedRequest,
    current_user: User = Depends(get_current_user),
    service: MeetingService = Depends(get_meeting_service),
):
    """Tell the other participants that someone has arrived"""
    return await service.notify_party_joined(meeting_id, data)


@router.post("/bulk-upload", response_model=BulkUploadResponse, response_model_exclude_none=True)
async def bulk_upload_meetings(
    csvFile: Optional[UploadFile] = File(None),
    current_user: User = Depends(get_current_user),
    service: MeetingService = Depends(get_meeting_service),
):
    """Bulk upload meetings from a CSV file"""
    return await service.bulk_upload(csvFile, current_user)


__all__ = [
    "router",
    "get_meetings",
    "get_meeting",
    "get_meeting_stats",
    "create_meeting",
    "update_meeting",
    "delete_meeting",
    "party_joined",
    "bulk_upload_meetings",
]
