# academy_reservations/services/reservations/clock.py
"""
Time sources for the reservation engine.

All expiration decisions read the current time through a Clock so tests can
freeze and advance it.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Protocol


class Clock(Protocol):
    def now(self) -> datetime:
        """Current time, timezone-aware UTC."""
        ...


class SystemClock:
    """Wall clock."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FrozenClock:
    """Clock pinned to a fixed instant that only moves when told to."""

    def __init__(self, current: Optional[datetime] = None):
        self.current = as_utc(current) if current else datetime.now(timezone.utc)

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> datetime:
        """Move the clock forward, e.g. advance(minutes=16)."""
        self.current = self.current + timedelta(**kwargs)
        return self.current


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive datetimes (as returned by SQLite) as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
