import logging

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from .database import get_db
from .models import User
from .security_utils import verify_jwt_token

logger = logging.getLogger(__name__)

security = HTTPBearer()


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """Resolve the bearer token to a user; identity is trusted from here on"""
    payload = verify_jwt_token(credentials.credentials)
    if not payload or "sub" not in payload:
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    try:
        user_id = int(payload["sub"])
    except (TypeError, ValueError):
        logger.warning(f"❌ Token subject is not a user id: {payload.get('sub')!r}")
        raise HTTPException(status_code=401, detail="Invalid token subject") from None

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        logger.warning(f"❌ Token for unknown user {user_id}")
        raise HTTPException(status_code=401, detail="User not found")
    return user


async def get_current_admin(current_user: User = Depends(get_current_user)) -> User:
    if not current_user.is_admin:
        logger.warning(f"⚠️ Non-admin user {current_user.id} tried to access an admin endpoint")
        raise HTTPException(status_code=403, detail="Admin access required")
    return current_user


async def get_current_vendor(current_user: User = Depends(get_current_user)) -> User:
    if not current_user.is_vendor:
        raise HTTPException(status_code=403, detail="Vendor access required")
    return current_user
