"""
Liveness and readiness checks
"""
import time
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.logger import logger
from app.db.database import get_db

router = APIRouter()

_STARTED_AT = time.monotonic()


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("")
def health_check():
    return {
        "status": "ok",
        "timestamp": _timestamp(),
        "uptime": round(time.monotonic() - _STARTED_AT, 3),
    }


@router.get("/detailed")
def detailed_health_check(db: Session = Depends(get_db)):
    """Readiness: 503 when the database does not answer ``SELECT 1``."""
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.exception("Database health check failed")
        return JSONResponse(
            status_code=503,
            content={"status": "degraded", "database": "disconnected", "timestamp": _timestamp()},
        )
    return {"status": "ok", "database": "connected", "timestamp": _timestamp()}
