# backend/app/db/seed.py

"""
Database Seeding Script

Creates the tables and the first admin account.

    python -m app.db.seed

The admin email comes from SEED_ADMIN_EMAIL. When SEED_ADMIN_PASSWORD is not
set a random password is generated and printed once.
"""

from typing import Optional, Tuple

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.security import generate_random_password, get_password_hash
from app.db.database import SessionLocal, init_db
from app.db.models import User, UserRole
from app.utils.helpers import normalize_email

# ============================================================================
# Seed Data
# ============================================================================

def create_admin_user(
    db: Session,
    email: Optional[str] = None,
    password: Optional[str] = None,
) -> Tuple[User, Optional[str]]:
    """
    Create the admin account if it does not exist.

    Returns (user, generated_password); the password is None when the account
    already existed or an explicit password was given.
    """
    email = normalize_email(email or settings.SEED_ADMIN_EMAIL)
    existing = db.query(User).filter(User.email == email).first()
    if existing:
        return existing, None

    generated = None
    if not password:
        password = settings.SEED_ADMIN_PASSWORD
    if not password:
        generated = password = generate_random_password()

    user = User(
        email=email,
        password=get_password_hash(password),
        name="Administrator",
        role=UserRole.admin,
        is_active=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user, generated


def seed_database() -> None:
    init_db()
    db = SessionLocal()
    try:
        user, generated = create_admin_user(db)
        if generated:
            print(f"✅ Created admin {user.email} with password: {generated}")
        else:
            print(f"✅ Admin account ready: {user.email}")
    finally:
        db.close()


if __name__ == "__main__":
    seed_database()
