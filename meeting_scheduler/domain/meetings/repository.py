"""Meeting repository - Database operations for meetings"""

from datetime import datetime
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...models import Meeting


class MeetingRepository:
    """Repository for meeting database operations"""

    @staticmethod
    def get_meetings(db: Session) -> list[Meeting]:
        """Get all meetings, latest first"""
        return db.query(Meeting).order_by(Meeting.date.desc(), Meeting.time.desc()).all()

    @staticmethod
    def get_meeting_by_id(db: Session, meeting_id: int) -> Optional[Meeting]:
        return db.query(Meeting).filter(Meeting.id == meeting_id).first()

    @staticmethod
    def create_meeting(db: Session, **meeting_data) -> Meeting:
        """Create a new meeting. Model validators raise ValueError on bad fields"""
        meeting = Meeting(**meeting_data)
        db.add(meeting)
        db.commit()
        db.refresh(meeting)
        return meeting

    @staticmethod
    def update_meeting(db: Session, meeting: Meeting, **updates) -> Meeting:
        """Update a meeting with provided fields"""
        for key, value in updates.items():
            if hasattr(meeting, key):
                setattr(meeting, key, value)

        db.commit()
        db.refresh(meeting)
        return meeting

    @staticmethod
    def mark_invitations_sent(db: Session, meeting: Meeting) -> Meeting:
        meeting.invitations_sent = True
        db.commit()
        db.refresh(meeting)
        return meeting

    @staticmethod
    def delete_meeting(db: Session, meeting: Meeting) -> None:
        db.delete(meeting)
        db.commit()

    @staticmethod
    def get_stats(db: Session, now: datetime) -> dict:
        """Totals for the dashboard"""
        total = db.query(func.count(Meeting.id)).scalar()

        upcoming = (
            db.query(func.count(Meeting.id))
            .filter(Meeting.date >= now, Meeting.status == "scheduled")
            .scalar()
        )

        completed = (
            db.query(func.count(Meeting.id)).filter(Meeting.status == "completed").scalar()
        )

        return {
            "totalMeetings": total or 0,
            "upcomingMeetings": upcoming or 0,
            "completedMeetings": completed or 0,
        }
