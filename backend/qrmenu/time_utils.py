from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Optional

from flask import current_app, has_app_context


class SystemClock:
    """Wall clock. Every time-dependent check reads time through a clock."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def today(self) -> date:
        return self.now().date()


class FixedClock(SystemClock):
    """
    Clock frozen at a given instant; tests move it explicitly.

    Naive datetimes are interpreted as UTC.
    """

    def __init__(self, instant: datetime):
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=timezone.utc)
        self._instant = instant

    def now(self) -> datetime:
        return self._instant

    def advance(self, seconds: float = 0, days: float = 0) -> None:
        self._instant = self._instant + timedelta(seconds=seconds, days=days)

    def set(self, instant: datetime) -> None:
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=timezone.utc)
        self._instant = instant


_default_clock = SystemClock()


def get_clock() -> SystemClock:
    """Clock configured on the current app (CLOCK), or the system clock."""
    if has_app_context():
        return current_app.extensions.get("qrmenu.clock", _default_clock)
    return _default_clock


def utcnow() -> datetime:
    """Server-side 'now' in UTC (naive, canonical)."""
    return get_clock().now().astimezone(timezone.utc).replace(tzinfo=None)


def to_utc_z(dt: Optional[datetime]) -> Optional[str]:
    """
    Serializes datetime to ISO-8601 with trailing 'Z'.
    If dt is naive, it is treated as UTC.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt_utc = dt.astimezone(timezone.utc).replace(microsecond=0)
    return dt_utc.isoformat().replace("+00:00", "Z")
