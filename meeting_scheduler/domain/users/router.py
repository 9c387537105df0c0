"""Auth router - FastAPI endpoints for login and registration"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...database import get_db
from .schemas import LoginRequest, LoginResponse, RegisterRequest, RegisterResponse
from .service import AuthService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


def get_auth_service(db: Session = Depends(get_db)) -> AuthService:
    """Dependency injection for AuthService"""
    return AuthService(db)


@router.post("/login", response_model=LoginResponse)
async def login(data: LoginRequest, service: AuthService = Depends(get_auth_service)):
    """Exchange email and password for a bearer token"""
    return service.login(data)


@router.post("/register", response_model=RegisterResponse, status_code=201)
async def register(data: RegisterRequest, service: AuthService = Depends(get_auth_service)):
    """Create a user account"""
    return service.register(data)


__all__ = ["router", "login", "register"]
