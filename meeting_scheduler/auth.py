import logging
from typing import Optional

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from .database import get_db
from .models import User
from .security_utils import verify_jwt_token

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)

NOT_AUTHORIZED = "Not authorized"


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """Get current user from the bearer token issued at login"""

    if not credentials:
        logger.warning("❌ No bearer token provided")
        raise HTTPException(status_code=401, detail=NOT_AUTHORIZED)

    payload = verify_jwt_token(credentials.credentials)
    if not payload:
        raise HTTPException(status_code=401, detail=NOT_AUTHORIZED)

    user_id = payload.get("userId")
    if user_id is None:
        logger.error(f"❌ Token missing user ID claim. Available claims: {list(payload.keys())}")
        raise HTTPException(status_code=401, detail=NOT_AUTHORIZED)

    user = db.query(User).filter(User.id == user_id).first()
    if not user or not user.is_active:
        logger.warning(f"⚠️ Token presented for missing or inactive user {user_id}")
        raise HTTPException(status_code=401, detail=NOT_AUTHORIZED)

    logger.debug(f"✅ User authenticated: {user.email}")
    return user
