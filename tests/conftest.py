"""Test fixtures for the meeting scheduler API.

Provides:
- In-memory SQLite database, recreated for every test
- Recording mail transport injected in place of the real one
- Async HTTP client for API testing
- A logged-in user and its bearer token
"""

from __future__ import annotations

import os
import tempfile
from collections.abc import AsyncGenerator

# Configure the app before it is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["ENVIRONMENT"] = "test"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="meeting-uploads-")
os.environ["PUBLIC_DIR"] = tempfile.mkdtemp(prefix="meeting-public-")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from meeting_scheduler.config import EmailSettings
from meeting_scheduler.database import Base, SessionLocal, engine
from meeting_scheduler.domain.users.repository import UserRepository
from meeting_scheduler.email_service import EmailDeliveryError, MailTransport
from meeting_scheduler.main import app
from meeting_scheduler.security_utils import create_jwt_token, hash_password_bcrypt
from meeting_scheduler.services.notification_service import (
    NotificationService,
    get_notification_service,
)


class RecordingTransport(MailTransport):
    """Keeps every message instead of sending it; addresses in fail_for are rejected"""

    name = "recording"

    def __init__(self, fail_for=()):
        super().__init__(EmailSettings())
        self.sent = []
        self.fail_for = {email.lower() for email in fail_for}

    async def send(self, to, subject, html_content, from_address=None, attachments=None) -> dict:
        if to.lower() in self.fail_for:
            raise EmailDeliveryError(f"Mailbox unavailable: {to}")
        self.sent.append(
            {
                "to": to,
                "subject": subject,
                "html": html_content,
                "from": from_address,
                "attachments": attachments or [],
            }
        )
        return {"id": f"test-{len(self.sent)}", "success": True}

    @property
    def recipients(self) -> list[str]:
        return [message["to"] for message in self.sent]


@pytest.fixture(autouse=True)
def setup_database():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db(setup_database):
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def transport_factory():
    return RecordingTransport


@pytest.fixture
def transport(transport_factory) -> RecordingTransport:
    return transport_factory()


@pytest.fixture
def notifier(transport) -> NotificationService:
    return NotificationService(EmailSettings(), transport=transport)


@pytest_asyncio.fixture
async def client(notifier) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client for testing the API."""
    app.dependency_overrides[get_notification_service] = lambda: notifier
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def user(db):
    return UserRepository.create_user(
        db,
        name="Test Organiser",
        email="organiser@example.com",
        password=hash_password_bcrypt("secret123"),
        password_format="hashed",
        role="user",
    )


@pytest.fixture
def auth_headers(user) -> dict:
    token = create_jwt_token({"userId": user.id, "email": user.email})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def upload_dir():
    from meeting_scheduler.config import UPLOAD_DIR

    return UPLOAD_DIR


@pytest.fixture
def meeting_payload() -> dict:
    return {
        "title": "Treaty Renewal",
        "description": "Annual property treaty review",
        "date": "2099-10-20T02:00:00Z",
        "time": "10:00 AM",
        "venue": "Marina Bay Sands, Room 3",
        "country": "Singapore",
        "location": "SG",
        "companyA": {"name": "Acme Insurance", "email": "Alice@Acme.com", "phone": "+65 1111"},
        "companyB": {"name": "Global Re", "email": "bob@globalre.com"},
    }
