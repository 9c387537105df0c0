"""Auth service - credential checks, legacy password migration and token issuance"""

import logging

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...models import USER_ROLES, User
from ...security_utils import (
    constant_time_equals,
    create_jwt_token,
    hash_password_bcrypt,
    verify_password_bcrypt,
)
from .repository import UserRepository
from .schemas import LoginRequest, RegisterRequest, UserSummary

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"


def ensure_password_hashed(db: Session, user: User) -> bool:
    """
    Hash a legacy plain-text password in place.

    Idempotent: returns False when the stored password is already hashed,
    True when this call performed the migration.
    """
    if user.is_password_hashed():
        return False

    UserRepository.save_password(db, user, hash_password_bcrypt(user.password), "hashed")
    logger.info(f"🔐 Migrated legacy plain-text password to bcrypt for user {user.id}")
    return True


class AuthService:
    """Service layer for login and registration"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = UserRepository()

    def _password_matches(self, user: User, password: str) -> bool:
        if user.is_password_hashed():
            return verify_password_bcrypt(password, user.password)

        if not constant_time_equals(user.password, password):
            return False

        ensure_password_hashed(self.db, user)
        return verify_password_bcrypt(password, user.password)

    def login(self, data: LoginRequest) -> dict:
        if not data.email or not data.password:
            raise HTTPException(status_code=400, detail="Please provide email and password")

        user = self.repo.get_user_by_email(self.db, data.email)
        if not user or not user.is_active:
            logger.warning(f"⚠️ Login rejected for {data.email.strip().lower()}: unknown or inactive account")
            raise HTTPException(status_code=401, detail=INVALID_CREDENTIALS)

        if not self._password_matches(user, data.password):
            logger.warning(f"⚠️ Login rejected for user {user.id}: password mismatch")
            raise HTTPException(status_code=401, detail=INVALID_CREDENTIALS)

        token = create_jwt_token({"userId": user.id, "email": user.email})
        logger.info(f"✅ User {user.id} logged in")

        return {"token": token, "user": UserSummary.model_validate(user)}

    def register(self, data: RegisterRequest) -> dict:
        if not data.name or not data.email or not data.password:
            raise HTTPException(status_code=400, detail="Please provide all required fields")

        role = data.role or "user"
        if role not in USER_ROLES:
            raise HTTPException(status_code=400, detail=f"Role must be one of: {', '.join(USER_ROLES)}")

        if self.repo.get_user_by_email(self.db, data.email):
            raise HTTPException(status_code=400, detail="User already exists with this email")

        try:
            user = self.repo.create_user(
                self.db,
                name=data.name.strip(),
                email=data.email,
                password=hash_password_bcrypt(data.password),
                password_format="hashed",
                role=role,
            )
        except IntegrityError as e:
            self.db.rollback()
            logger.error(f"❌ Email {data.email} was taken concurrently: {e}")
            raise HTTPException(status_code=400, detail="User already exists with this email") from e

        logger.info(f"🆕 Registered user {user.id} ({user.role})")
        return {"message": "User registered successfully", "user": UserSummary.model_validate(user)}
