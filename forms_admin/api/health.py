"""Liveness and readiness probes"""
import time
from datetime import datetime
from typing import Any, Dict

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from forms_admin import __version__
from forms_admin.config import Settings, get_settings
from forms_admin.database import get_db
from forms_admin.models.admin_user import AdminUser

router = APIRouter(prefix="/health", tags=["health"])

STARTUP_TIME = time.time()
MAX_DB_LATENCY_MS = 1000


def _now() -> str:
    return datetime.utcnow().isoformat()


@router.get("")
def health_check():
    """Process is up"""
    return {"status": "healthy", "service": "forms-admin", "version": __version__, "timestamp": _now()}


@router.get("/ready")
def readiness_check(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> Dict[str, Any]:
    """
    Ready to serve logins: the account table answers within the latency budget.

    Mail delivery is reported but never blocks readiness; without SendGrid the
    service runs in dev mode and logs reset links instead.
    Returns 503 when the database is unreachable, the schema is missing, or
    queries are too slow.
    """
    checks: Dict[str, Any] = {
        "database": False,
        "database_latency_ms": None,
        "mail": "sendgrid" if settings.sendgrid_configured else "log_only",
    }

    started = time.perf_counter()
    try:
        db.query(func.count(AdminUser.id)).scalar()
    except SQLAlchemyError as exc:
        checks["database_error"] = exc.__class__.__name__
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "unhealthy", "checks": checks, "timestamp": _now()},
        )

    latency_ms = round((time.perf_counter() - started) * 1000, 2)
    checks["database"] = True
    checks["database_latency_ms"] = latency_ms

    if latency_ms > MAX_DB_LATENCY_MS:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "degraded", "checks": checks, "timestamp": _now()},
        )

    return {"status": "ready", "checks": checks, "timestamp": _now()}


@router.get("/live")
def liveness_check():
    return {"status": "alive", "uptime_seconds": round(time.time() - STARTUP_TIME, 2), "timestamp": _now()}
