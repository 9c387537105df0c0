"""User domain schemas - Pydantic models for auth requests and responses"""

from typing import Optional

from pydantic import BaseModel


class LoginRequest(BaseModel):
    """Presence is checked by the service so the error message stays uniform"""

    email: Optional[str] = None
    password: Optional[str] = None


class RegisterRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    role: Optional[str] = None


class UserSummary(BaseModel):
    id: int
    name: str
    email: str
    role: str

    class Config:
        from_attributes = True


class LoginResponse(BaseModel):
    token: str
    user: UserSummary


class RegisterResponse(BaseModel):
    message: str
    user: UserSummary
