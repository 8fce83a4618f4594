"""
Time sources for request signing and artifact naming.

Inject a FrozenClock in tests so signatures and artifact names are
reproducible.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Protocol, runtime_checkable


@runtime_checkable
class Clock(Protocol):
    """Protocol for time sources."""

    def now(self) -> datetime:
        """Return the current time as a timezone-aware UTC datetime."""
        ...


class SystemClock:
    """Clock backed by the system time."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FrozenClock:
    """
    Clock that always returns the same instant.

    Example:
        >>> clock = FrozenClock(datetime(2024, 1, 1, tzinfo=timezone.utc))
        >>> clock.now().isoformat()
        '2024-01-01T00:00:00+00:00'
    """

    def __init__(self, moment: datetime) -> None:
        self._moment = to_utc(moment)

    def now(self) -> datetime:
        return self._moment

    def advance(self, delta: timedelta) -> None:
        """Move the frozen instant forward by ``delta``."""
        self._moment = self._moment + delta


def to_utc(moment: datetime) -> datetime:
    """Convert a datetime to UTC, treating naive values as UTC already."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)
