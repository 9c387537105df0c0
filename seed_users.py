"""
Seed the default user accounts
Usage: python seed_users.py
"""

import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))

from meeting_scheduler import models  # noqa: F401
from meeting_scheduler.database import Base, SessionLocal, engine
from meeting_scheduler.domain.users.repository import UserRepository
from meeting_scheduler.security_utils import hash_password_bcrypt

logging.basicConfig(level=logging.INFO, format="%(message)s")
logger = logging.getLogger(__name__)

DEFAULT_USERS = [
    {"name": "Admin User", "email": "admin@example.com", "password": "admin123", "role": "admin"},
    {"name": "John Doe", "email": "john@example.com", "password": "john123", "role": "user"},
    {"name": "Jane Smith", "email": "jane@example.com", "password": "jane123", "role": "user"},
    {"name": "Mike Johnson", "email": "mike@example.com", "password": "mike123", "role": "user"},
    {"name": "Sarah Williams", "email": "sarah@example.com", "password": "sarah123", "role": "user"},
]


def seed_users(db, confirm=input) -> int:
    """Create the default users; existing users are removed only after a 'yes'"""
    existing = UserRepository.count_users(db)
    if existing:
        logger.warning(f"⚠️ Found {existing} existing users")
        answer = confirm("Delete all existing users and re-seed? Type 'yes' to continue: ")
        if answer.strip().lower() != "yes":
            logger.info("Seeding cancelled")
            return 0
        deleted = UserRepository.delete_all_users(db)
        logger.info(f"🗑️ Deleted {deleted} users")

    for user in DEFAULT_USERS:
        UserRepository.create_user(
            db,
            name=user["name"],
            email=user["email"],
            password=hash_password_bcrypt(user["password"]),
            password_format="hashed",
            role=user["role"],
        )
        logger.info(f"✅ Created {user['role']}: {user['email']}")

    return len(DEFAULT_USERS)


if __name__ == "__main__":
    Base.metadata.create_all(bind=engine, checkfirst=True)
    db = SessionLocal()
    try:
        created = seed_users(db)
    except Exception as e:
        logger.error(f"❌ Seeding failed: {e}")
        sys.exit(1)
    finally:
        db.close()

    if created:
        logger.info("\nLogin credentials:")
        for user in DEFAULT_USERS:
            logger.info(f"  {user['email']} / {user['password']} ({user['role']})")
