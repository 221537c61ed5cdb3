# backend/qrmenu/routes/system.py
"""
System health endpoint.
"""

import time

from flask import Blueprint
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..time_utils import to_utc_z, utcnow

system_bp = Blueprint("system", __name__)


def check_database_health() -> dict:
    """Round-trip a trivial query and report latency."""
    start_time = time.time()
    try:
        db.session.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        db.session.rollback()
        return {"status": "unhealthy", "error": str(exc)}
    return {"status": "healthy", "latency_ms": round((time.time() - start_time) * 1000, 2)}


@system_bp.get("/api/health")
def health():
    database = check_database_health()
    status = "ok" if database["status"] == "healthy" else "degraded"
    return {
        "status": status,
        "timestamp": to_utc_z(utcnow()),
        "checks": {"database": database},
    }, (200 if status == "ok" else 503)
