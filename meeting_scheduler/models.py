from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship, validates
from sqlalchemy.sql import func

from .database import Base

USER_ROLES = ("admin", "user")
PASSWORD_FORMATS = ("plaintext", "hashed")

LOCATION_CODES = ("SG", "MUM", "")
MEETING_STATUSES = ("scheduled", "completed", "cancelled")
PARTICIPANT_FIELDS = ("name", "email", "phone")


def normalize_participant(value) -> dict:
    """Trim a {name, email, phone} triple and lower-case the email"""
    value = value or {}
    participant = {}
    for field in PARTICIPANT_FIELDS:
        raw = value.get(field)
        if raw is None:
            continue
        cleaned = str(raw).strip()
        participant[field] = cleaned.lower() if field == "email" else cleaned
    return participant


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password = Column(String(255), nullable=False)
    # Tells bcrypt hashes apart from legacy plain-text rows
    password_format = Column(String(20), default="hashed", nullable=False)
    role = Column(String(20), default="user", nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    meetings = relationship("Meeting", back_populates="creator")

    @validates("email")
    def validate_email(self, key, value):
        return value.strip().lower() if value else value

    @validates("role")
    def validate_role(self, key, value):
        if value not in USER_ROLES:
            raise ValueError(f"User validation failed: role '{value}' is not one of {', '.join(USER_ROLES)}")
        return value

    @validates("password_format")
    def validate_password_format(self, key, value):
        if value not in PASSWORD_FORMATS:
            raise ValueError(f"Unknown password format '{value}'")
        return value

    def is_password_hashed(self) -> bool:
        return self.password_format == "hashed"


class Meeting(Base):
    __tablename__ = "meetings"
    __table_args__ = (Index("ix_meetings_date_time", "date", "time"),)

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(500), nullable=False)
    description = Column(Text, nullable=True)
    date = Column(DateTime(timezone=True), nullable=False)
    time = Column(String(50), nullable=False)
    venue = Column(String(500), nullable=False)
    country = Column(String(100), nullable=True)
    location = Column(String(10), default="", nullable=False)  # SG, MUM or empty

    # Participants: {name, email, phone}
    company_a = Column(JSON, nullable=False)
    company_b = Column(JSON, nullable=False)
    broker1 = Column(JSON, default=dict, nullable=False)
    broker2 = Column(JSON, default=dict, nullable=False)
    client_contact = Column(JSON, default=dict, nullable=False)

    status_company_a = Column(String(255), nullable=True)
    status_company_b = Column(String(255), nullable=True)
    status = Column(String(20), default="scheduled", nullable=False)
    invitations_sent = Column(Boolean, default=False, nullable=False)

    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    creator = relationship("User", back_populates="meetings")

    @validates("title", "time", "venue")
    def validate_required_text(self, key, value):
        cleaned = value.strip() if isinstance(value, str) else value
        if not cleaned:
            raise ValueError(f"Meeting validation failed: {key} is required")
        return cleaned

    @validates("date")
    def validate_date(self, key, value):
        if value is None:
            raise ValueError("Meeting validation failed: date is required")
        return value

    @validates("description", "country", "status_company_a", "status_company_b")
    def validate_optional_text(self, key, value):
        return value.strip() if isinstance(value, str) else value

    @validates("location")
    def validate_location(self, key, value):
        value = value or ""
        if value not in LOCATION_CODES:
            raise ValueError(
                f"Meeting validation failed: location '{value}' is not a valid location code (SG, MUM or empty)"
            )
        return value

    @validates("status")
    def validate_status(self, key, value):
        if value not in MEETING_STATUSES:
            raise ValueError(
                f"Meeting validation failed: status '{value}' is not one of {', '.join(MEETING_STATUSES)}"
            )
        return value

    @validates("company_a", "company_b")
    def validate_company(self, key, value):
        if value is None:
            raise ValueError(f"Meeting validation failed: {key} is required")
        return normalize_participant(value)

    @validates("broker1", "broker2", "client_contact")
    def validate_participant(self, key, value):
        return normalize_participant(value)

    def participants(self) -> list[tuple[str, dict]]:
        """Participant slots in display order"""
        return [
            ("Company A", self.company_a or {}),
            ("Company B", self.company_b or {}),
            ("1st Broker", self.broker1 or {}),
            ("2nd Broker", self.broker2 or {}),
            ("Client Contact", self.client_contact or {}),
        ]
