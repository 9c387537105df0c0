"""User domain - login, registration and password migration"""

from .router import router
from .service import AuthService, ensure_password_hashed

__all__ = ["router", "AuthService", "ensure_password_hashed"]
