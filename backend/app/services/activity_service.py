# app/services/activity_service.py

from typing import List, Optional

from sqlalchemy.orm import Session

from app.core.logger import logger
from app.db.models import ActivityLog


class ActivityService:
    """
    Audit trail of portal actions, stored in ``activity_logs``.

    Actions in use: user_registered, user_login, document_uploaded,
    appointment_scheduled, case_created, case_updated, password_reset,
    message_sent.
    """

    def log(
        self,
        db: Session,
        user_id: Optional[int],
        action: str,
        details: Optional[str] = None,
        commit: bool = True,
    ) -> ActivityLog:
        entry = ActivityLog(user_id=user_id, action=action, details=details)
        db.add(entry)
        if commit:
            db.commit()
        logger.info("activity action=%s user_id=%s", action, user_id)
        return entry

    def recent(self, db: Session, user_id: Optional[int] = None, limit: int = 50) -> List[ActivityLog]:
        query = db.query(ActivityLog)
        if user_id is not None:
            query = query.filter(ActivityLog.user_id == user_id)
        return query.order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc()).limit(limit).all()


# Singleton instance
activity_service = ActivityService()
