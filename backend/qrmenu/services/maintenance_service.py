# Overview: Service-layer operations for maintenance; retention of the audit log.

from __future__ import annotations

from datetime import timedelta

from ..extensions import db
from ..models import SecurityEvent
from ..time_utils import utcnow


def cleanup_security_events(*, retention_days: int = 90) -> int:
    """Delete security events older than retention_days."""
    if retention_days < 0:
        raise ValueError("retention_days must be >= 0")
    cutoff = utcnow() - timedelta(days=retention_days)
    deleted = db.session.query(SecurityEvent).filter(
        SecurityEvent.occurred_at < cutoff
    ).delete(synchronize_session=False)
    db.session.commit()
    return deleted
