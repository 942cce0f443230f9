"""
Shared fixtures.

Settings are read at import time, so the environment is pointed at a
throwaway SQLite file and upload directory before ``app`` is imported.
"""

import os
import tempfile

_TMP_DIR = tempfile.mkdtemp(prefix="highlight-tax-tests-")

os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP_DIR, 'test.db')}"
os.environ["JWT_SECRET_KEY"] = "test-secret-key"
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ["EMAIL_PROVIDER"] = "dev"
os.environ["UPLOAD_DIR"] = os.path.join(_TMP_DIR, "uploads")
os.environ["COOKIE_SECURE"] = "false"
os.environ["SUPABASE_URL"] = ""
os.environ["SUPABASE_ANON_KEY"] = ""
os.environ["R2_ACCOUNT_ID"] = ""
os.environ["R2_ACCESS_KEY_ID"] = ""
os.environ["R2_SECRET_ACCESS_KEY"] = ""
os.environ["R2_BUCKET_NAME"] = ""

import pytest
from fastapi.testclient import TestClient

from app.core import security
from app.db.database import Base, SessionLocal, engine
from app.db import models  # noqa: F401
from app.db.models import User, UserRole
from app.main import app
from app.services import user_service
from app.services.email_service import email_service

# Full-strength bcrypt makes every fixture user cost a quarter second
security.pwd_context.update(bcrypt__rounds=4)

DEFAULT_PASSWORD = "Secret123"


# =============================================================================
# Database
# =============================================================================

@pytest.fixture(autouse=True)
def reset_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    """No context manager: startup (init_db, scheduler) is not needed here."""
    return TestClient(app)


# =============================================================================
# Users
# =============================================================================

@pytest.fixture
def make_user(db):
    def _make_user(
        email: str = "client@example.com",
        role: UserRole = UserRole.client,
        name: str = "Test Client",
        password: str = DEFAULT_PASSWORD,
        is_active: bool = True,
    ) -> User:
        user = User(
            email=email,
            password=security.get_password_hash(password),
            name=name,
            role=role,
            is_active=is_active,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def client_user(make_user):
    return make_user()


@pytest.fixture
def other_client(make_user):
    return make_user(email="other@example.com", name="Other Client")


@pytest.fixture
def admin_user(make_user):
    return make_user(email="admin@example.com", role=UserRole.admin, name="Admin")


@pytest.fixture
def preparer_user(make_user):
    return make_user(email="preparer@example.com", role=UserRole.preparer, name="Preparer")


def bearer(user: User) -> dict:
    return {"Authorization": f"Bearer {user_service.issue_access_token(user)}"}


@pytest.fixture
def auth_headers():
    return bearer


# =============================================================================
# Outbound services
# =============================================================================

@pytest.fixture
def sent_emails(monkeypatch):
    """Captures every email instead of logging or sending it."""
    outbox = []

    def fake_send(to, subject, html):
        outbox.append({"to": to, "subject": subject, "html": html})
        return {"id": f"test-{len(outbox)}"}

    monkeypatch.setattr(email_service, "send", fake_send)
    return outbox
