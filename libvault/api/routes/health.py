from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from libvault.core.config import get_settings
from libvault.db.session import session_scope

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


def _database_status() -> str:
    try:
        with session_scope() as session:
            session.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.warning("Database health check failed", exc_info=True)
        return "unavailable"
    return "ok"


@router.get("/health")
def get_health() -> dict[str, object]:
    settings = get_settings()
    database = _database_status()
    return {
        "status": "ok" if database == "ok" else "degraded",
        "service": settings.app_name,
        "environment": settings.environment,
        "database": database,
        "timestamp": datetime.now(tz=timezone.utc),
    }
