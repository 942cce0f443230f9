# app/api/deps.py

from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
import jwt

from app.core.config import settings
from app.core.security import decode_access_token
from app.db.database import get_db
from app.db.models import User
from app.utils.exceptions import (
    AdminRequiredError,
    AuthenticationRequiredError,
    InvalidTokenError,
)

# auto_error=False: the httpOnly cookie is the primary carrier, bearer is optional
security = HTTPBearer(auto_error=False)

# ============================================================================
# JWT Dependency
# ============================================================================

def extract_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = None,
) -> Optional[str]:
    """Cookie first, then ``Authorization: Bearer``."""
    token = request.cookies.get(settings.AUTH_COOKIE_NAME)
    if token:
        return token
    if credentials and credentials.credentials:
        return credentials.credentials
    return None


def user_from_token(token: str, db: Session) -> User:
    try:
        payload = decode_access_token(token)
    except jwt.PyJWTError:
        raise InvalidTokenError()

    user_id = payload.get("id") or payload.get("sub")
    if user_id is None:
        raise InvalidTokenError()

    try:
        user = db.query(User).filter(User.id == int(user_id)).first()
    except (TypeError, ValueError):
        raise InvalidTokenError()

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found"
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is deactivated"
        )

    return user


def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> User:
    """
    Validate JWT token and return current user.
    """
    token = extract_token(request, credentials)
    if not token:
        raise AuthenticationRequiredError()
    return user_from_token(token, db)


def current_user_or_none(request: Request, db: Session) -> Optional[User]:
    """None when no token was sent; invalid tokens still raise."""
    token = extract_token(request)
    if not token:
        return None
    return user_from_token(token, db)


def require_staff(current_user: User = Depends(get_current_user)) -> User:
    """admin and preparer share every admin route."""
    if not current_user.is_staff:
        raise AdminRequiredError()
    return current_user
