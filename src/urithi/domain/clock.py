"""Clock abstraction for injectable time.

Entities and aggregates never call ``datetime.now()`` directly; they ask the
clock they were given. Production code uses `SystemClock`; tests use
`FixedClock` to make timestamps deterministic.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Protocol


class Clock(Protocol):
    """Clock interface used by all time-dependent domain code."""

    def now(self) -> datetime:
        """Current time as a timezone-aware UTC datetime."""
        ...  # pylint: disable=unnecessary-ellipsis

    def today(self) -> date:
        """Current calendar date (UTC)."""
        ...  # pylint: disable=unnecessary-ellipsis


class SystemClock:
    """Real wall-clock time."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def today(self) -> date:
        return self.now().date()


class FixedClock:
    """Deterministic clock that only moves when told to."""

    def __init__(self, start: datetime | None = None) -> None:
        start = start or datetime(2025, 1, 1, tzinfo=timezone.utc)
        if start.tzinfo is None:
            raise ValueError("FixedClock requires a timezone-aware datetime.")
        self._time = start.astimezone(timezone.utc)

    def now(self) -> datetime:
        return self._time

    def today(self) -> date:
        return self._time.date()

    def set_time(self, moment: datetime) -> None:
        """Move the clock to *moment*. Time may not run backwards."""
        if moment < self._time:
            raise ValueError(f"FixedClock cannot go backwards: {moment} < {self._time}")
        self._time = moment

    def advance(self, **kwargs: float) -> None:
        """Advance by a ``timedelta(**kwargs)`` (e.g. ``days=30``)."""
        self.set_time(self._time + timedelta(**kwargs))


SYSTEM_CLOCK = SystemClock()
