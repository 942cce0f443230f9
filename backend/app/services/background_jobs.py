"""
services/background_jobs.py

Work that runs outside the request/response cycle.

1. Notification tasks, queued with FastAPI ``BackgroundTasks`` after the
   response is sent.  Delivery failures are logged and never reach the user.

2. ``purge_expired_auth_records``, an APScheduler interval job that
   deletes expired ``sessions`` rows and spent or expired password-reset
   tokens.  Started by the ``startup`` event in main.py when
   SCHEDULER_ENABLED is true.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy import or_

from app.core.config import settings
from app.db.database import SessionLocal
from app.services.email_service import email_service

logger = logging.getLogger(__name__)

_scheduler: AsyncIOScheduler | None = None


def _run_quietly(task_name: str, fn: Callable, *args, **kwargs) -> None:
    try:
        fn(*args, **kwargs)
    except Exception:
        logger.exception("Background task %s failed", task_name)


# ============================================================================
# Notifications
# ============================================================================

def notify_welcome(name: str, email: str) -> None:
    _run_quietly(f"welcome_email({email})", email_service.send_welcome_email, name, email)


def notify_contact_submission(
    name: str,
    email: str,
    message: str,
    phone: Optional[str] = None,
    service: Optional[str] = None,
) -> None:
    _run_quietly(
        f"contact_notification({email})",
        email_service.send_contact_form_notification,
        name, email, message, phone=phone, service=service,
    )


def notify_document_upload(client_name: str, client_email: str, file_name: str, category: str) -> None:
    _run_quietly(
        f"document_notification({client_email})",
        email_service.send_document_upload_notification,
        client_name, client_email, file_name, category,
    )


def notify_case_status(client_name: str, client_email: str, case_id: int, filing_year: int, status: str) -> None:
    _run_quietly(
        f"case_status_update({case_id})",
        email_service.send_case_status_update,
        client_name, client_email, case_id, filing_year, status,
    )


def notify_password_reset(name: str, email: str, reset_token: str) -> None:
    _run_quietly(
        f"password_reset_email({email})",
        email_service.send_password_reset_email,
        name, email, reset_token, settings.RESET_TOKEN_EXPIRE_HOURS * 60,
    )


def notify_appointment(client_name: str, client_email: str, appointment_date: datetime, notes: Optional[str]) -> None:
    _run_quietly(
        f"appointment_confirmation({client_email})",
        email_service.send_appointment_confirmation,
        client_name, client_email, appointment_date, notes,
    )


# ============================================================================
# Scheduled cleanup
# ============================================================================

def purge_expired_auth_records() -> dict:
    """Delete expired sessions and used/expired reset tokens. Returns counts."""
    from app.db.models import PasswordResetToken, SessionRecord

    now = datetime.utcnow()
    db = SessionLocal()
    try:
        sessions = (
            db.query(SessionRecord)
            .filter(SessionRecord.expire < now)
            .delete(synchronize_session=False)
        )
        tokens = (
            db.query(PasswordResetToken)
            .filter(or_(PasswordResetToken.expires_at < now, PasswordResetToken.used_at.isnot(None)))
            .delete(synchronize_session=False)
        )
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("purge_expired_auth_records failed")
        raise
    finally:
        db.close()

    if sessions or tokens:
        logger.info("Auth cleanup removed %d sessions, %d reset tokens", sessions, tokens)
    return {"sessions": sessions, "reset_tokens": tokens}


def start_scheduler() -> None:
    global _scheduler

    if not settings.SCHEDULER_ENABLED:
        logger.info("Background scheduler disabled")
        return

    _scheduler = AsyncIOScheduler(timezone="UTC")
    _scheduler.add_job(
        purge_expired_auth_records,
        trigger=IntervalTrigger(minutes=settings.CLEANUP_INTERVAL_MINUTES),
        id="purge_expired_auth_records",
        name="Purge expired sessions and reset tokens",
        replace_existing=True,
        max_instances=1,
        misfire_grace_time=300,
    )
    _scheduler.start()
    logger.info("Background scheduler started")


def shutdown_scheduler() -> None:
    """Gracefully shuts down the scheduler. Call from FastAPI lifespan shutdown."""
    global _scheduler
    if _scheduler and _scheduler.running:
        _scheduler.shutdown(wait=False)
        logger.info("Background scheduler shut down")
    _scheduler = None
