import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load .env from project root
BASE_DIR = Path(__file__).resolve().parent.parent
load_dotenv(dotenv_path=BASE_DIR / ".env")

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./meetings.db")

# "development" exposes stack traces in error responses
ENVIRONMENT = os.getenv("ENVIRONMENT", "production")
PORT = int(os.getenv("PORT", "9080"))

# Security - CRITICAL: No default secret key in production
SECRET_KEY = os.getenv("JWT_SECRET") or os.getenv("SECRET_KEY")
if not SECRET_KEY:
    import warnings

    warnings.warn(
        "JWT_SECRET not set! Using insecure default - DO NOT USE IN PRODUCTION", RuntimeWarning, stacklevel=2
    )
    SECRET_KEY = "INSECURE-DEV-KEY-CHANGE-IN-PRODUCTION"  # noqa: S105 - Dev fallback only

JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_EXPIRES_DAYS = int(os.getenv("JWT_EXPIRES_DAYS", "7"))
BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "12"))

# CORS: localhost on any port plus the production frontend
ALLOWED_ORIGIN_REGEX = os.getenv(
    "ALLOWED_ORIGIN_REGEX",
    r"^(http://localhost(:\d+)?|https://sirc\.travyfy\.com)$",
)

# Uploaded CSV files are staged here and removed after processing
UPLOAD_DIR = Path(os.getenv("UPLOAD_DIR", str(BASE_DIR / "uploads")))
PUBLIC_DIR = Path(os.getenv("PUBLIC_DIR", str(BASE_DIR / "public")))

# Email Configuration
# EMAIL_TRANSPORT: "smtp" (default), "resend" or "api" (HTTP email relay)
EMAIL_TRANSPORT = os.getenv("EMAIL_TRANSPORT", "smtp").lower()
EMAIL_HOST = os.getenv("EMAIL_HOST")
EMAIL_PORT = int(os.getenv("EMAIL_PORT", "587"))
EMAIL_SECURE = os.getenv("EMAIL_SECURE", "false").lower() == "true"
EMAIL_USER = os.getenv("EMAIL_USER")
EMAIL_PASSWORD = os.getenv("EMAIL_PASSWORD")
EMAIL_FROM = os.getenv("EMAIL_FROM", "sirc.meeting@actofit.com")
EMAIL_FROM_NAME = os.getenv("EMAIL_FROM_NAME", "Meeting Scheduler")
EMAIL_SERVICE_URL = os.getenv("EMAIL_SERVICE_URL")
EMAIL_API_TIMEOUT = float(os.getenv("EMAIL_API_TIMEOUT", "30"))
RESEND_API_KEY = os.getenv("RESEND_API_KEY")

# Promotion block appended to invitations when a poster image is available
PROMOTION_POSTER_PATH = os.getenv("PROMOTION_POSTER_PATH")
VITAL_SCAN_URL = os.getenv("VITAL_SCAN_URL", "#")


@dataclass(frozen=True)
class EmailSettings:
    """Everything a mail transport and the notification service need"""

    transport: str = "smtp"
    host: Optional[str] = None
    port: int = 587
    secure: bool = False
    user: Optional[str] = None
    password: Optional[str] = None
    from_address: str = "sirc.meeting@actofit.com"
    from_name: str = "Meeting Scheduler"
    service_url: Optional[str] = None
    api_timeout: float = 30.0
    resend_api_key: Optional[str] = None
    promotion_poster_path: Optional[Path] = None
    vital_scan_url: str = "#"

    @property
    def sender(self) -> Optional[str]:
        address = self.from_address or self.user
        if address and "@" in address:
            return f'"{self.from_name}" <{address}>'
        return self.user

    @property
    def is_configured(self) -> bool:
        if self.transport == "resend":
            return bool(self.resend_api_key)
        if self.transport == "api":
            return bool(self.service_url)
        return bool(self.host and self.user)


def resolve_poster_path() -> Optional[Path]:
    """Find the promotion poster, preferring PROMOTION_POSTER_PATH"""
    candidates = []
    if PROMOTION_POSTER_PATH:
        candidates.append(Path(PROMOTION_POSTER_PATH).resolve())
    candidates.append(PUBLIC_DIR / "promotionPoster.png")

    for candidate in candidates:
        if candidate.is_file():
            return candidate
    return None


def get_email_settings() -> EmailSettings:
    return EmailSettings(
        transport=EMAIL_TRANSPORT,
        host=EMAIL_HOST,
        port=EMAIL_PORT,
        secure=EMAIL_SECURE,
        user=EMAIL_USER,
        password=EMAIL_PASSWORD,
        from_address=EMAIL_FROM,
        from_name=EMAIL_FROM_NAME,
        service_url=EMAIL_SERVICE_URL,
        api_timeout=EMAIL_API_TIMEOUT,
        resend_api_key=RESEND_API_KEY,
        promotion_poster_path=resolve_poster_path(),
        vital_scan_url=VITAL_SCAN_URL,
    )
