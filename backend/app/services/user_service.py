"""
services/user_service.py

Account operations shared by the auth endpoints and the OAuth callback page.

All functions take the SQLAlchemy session first and commit their own work.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Optional, Tuple

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.security import (
    create_access_token,
    generate_random_password,
    generate_reset_token,
    get_password_hash,
    hash_token,
    verify_password,
)
from app.db.models import AuthIdentity, PasswordResetToken, User, UserRole
from app.db.schemas import OAuthLoginRequest, RegisterRequest
from app.services.activity_service import activity_service
from app.utils.helpers import normalize_email, split_full_name

logger = logging.getLogger(__name__)


# ============================================================================
# Tokens
# ============================================================================

def token_claims(user: User) -> dict:
    role = getattr(user.role, "value", user.role)
    return {
        "sub": str(user.id),
        "id": user.id,
        "email": user.email,
        "role": role,
        "name": user.name,
    }


def issue_access_token(user: User) -> str:
    return create_access_token(
        data=token_claims(user),
        expires_delta=timedelta(days=settings.ACCESS_TOKEN_EXPIRE_DAYS),
    )


# ============================================================================
# Local accounts
# ============================================================================

def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == normalize_email(email)).first()


def register_user(db: Session, data: RegisterRequest) -> User:
    email = normalize_email(data.email)
    if get_user_by_email(db, email):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already registered")

    user = User(
        email=email,
        password=get_password_hash(data.password),
        name=data.name.strip(),
        phone=(data.phone or "").strip() or None,
        role=UserRole.client,
        is_active=True,
    )
    db.add(user)
    db.flush()
    activity_service.log(db, user.id, "user_registered", f"New user registered: {email}", commit=False)
    db.commit()
    db.refresh(user)
    return user


def authenticate(db: Session, email: str, password: str) -> User:
    user = get_user_by_email(db, email)
    if not user or not verify_password(password, user.password):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is inactive")

    _record_login(db, user, f"User logged in: {user.email}")
    return user


def _record_login(db: Session, user: User, details: str) -> None:
    user.last_login_at = datetime.utcnow()
    activity_service.log(db, user.id, "user_login", details, commit=False)
    db.commit()
    db.refresh(user)


# ============================================================================
# Federated accounts
# ============================================================================

def login_with_oauth(db: Session, data: OAuthLoginRequest) -> User:
    """
    Resolve a provider profile to a local user.

    1. existing identity (provider, provider_user_id) -> its user
    2. existing user with the same email            -> link identity
    3. otherwise create a client with a random password
    """
    provider = (data.provider or "oauth").strip().lower()
    provider_user_id = data.provider_id.strip()
    email = normalize_email(data.email) or f"oauth_{provider_user_id}@placeholder.local"

    identity = (
        db.query(AuthIdentity)
        .filter(
            AuthIdentity.provider == provider,
            AuthIdentity.provider_user_id == provider_user_id,
        )
        .first()
    )
    user = identity.user if identity else get_user_by_email(db, email)

    if user is None:
        user = User(
            email=email,
            password=get_password_hash(generate_random_password()),
            name=(data.name or "").strip() or None,
            role=UserRole.client,
            is_active=True,
        )
        db.add(user)
        db.flush()
        activity_service.log(db, user.id, "user_registered", f"New OAuth user registered via {provider}: {email}", commit=False)
        logger.info("Created local account for %s identity %s", provider, provider_user_id)
    elif not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is inactive")

    if identity is None:
        first_name, last_name = split_full_name(data.name)
        db.add(AuthIdentity(
            user_id=user.id,
            provider=provider,
            provider_user_id=provider_user_id,
            email=normalize_email(data.email) or None,
            first_name=first_name,
            last_name=last_name,
        ))

    _record_login(db, user, f"User logged in via {provider}: {user.email}")
    return user


# ============================================================================
# Password reset
# ============================================================================

def create_password_reset(db: Session, user: User) -> Tuple[str, PasswordResetToken]:
    """Returns the raw token (for the email) and the stored row."""
    raw_token = generate_reset_token()
    record = PasswordResetToken(
        user_id=user.id,
        token_hash=hash_token(raw_token),
        expires_at=datetime.utcnow() + timedelta(hours=settings.RESET_TOKEN_EXPIRE_HOURS),
    )
    db.add(record)
    db.commit()
    return raw_token, record


def find_valid_reset_token(db: Session, raw_token: str) -> Optional[PasswordResetToken]:
    token = (raw_token or "").strip()
    if not token:
        return None
    return (
        db.query(PasswordResetToken)
        .filter(
            PasswordResetToken.token_hash == hash_token(token),
            PasswordResetToken.used_at.is_(None),
            PasswordResetToken.expires_at > datetime.utcnow(),
        )
        .first()
    )


def reset_password(db: Session, raw_token: str, new_password: str) -> User:
    record = find_valid_reset_token(db, raw_token)
    if record is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid or expired reset link. Please request a new one.",
        )

    user = record.user
    user.password = get_password_hash(new_password)
    record.used_at = datetime.utcnow()
    activity_service.log(db, user.id, "password_reset", "Password reset via email link", commit=False)
    db.commit()
    return user
