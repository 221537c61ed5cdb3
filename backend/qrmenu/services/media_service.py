# Overview: Service-layer operations for media housekeeping.

from __future__ import annotations

from datetime import timedelta
from typing import Callable, Optional

from flask import current_app

from ..extensions import db
from ..models import Media
from ..time_utils import utcnow
from .tenant_service import TenantScope


def purge_deleted_media(
    scope: TenantScope,
    days: int,
    remove_file: Optional[Callable[[str], None]] = None,
) -> int:
    """
    Hard-delete media soft-deleted more than `days` days ago, across all
    restaurants.

    Runs with the scope's tenant predicate lifted; the predicate is back in
    place when this returns or raises. remove_file receives each storage
    path before its row is deleted (the storage backend lives elsewhere).
    """
    if days < 0:
        raise ValueError("days must be >= 0")

    cutoff = utcnow() - timedelta(days=days)
    purged = 0

    with scope.lifted():
        stale = (
            scope.query(Media, include_deleted=True)
            .filter(Media.deleted_at.isnot(None), Media.deleted_at < cutoff)
            .order_by(Media.id)
            .all()
        )
        for media in stale:
            if remove_file is not None:
                remove_file(media.storage_path)
            db.session.delete(media)
            purged += 1
        db.session.commit()

    current_app.logger.info("Purged %d media deleted before %s", purged, cutoff.isoformat())
    return purged
