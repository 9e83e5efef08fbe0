"""Injectable time source.

Services never call ``datetime.now()`` themselves: they receive a ``Clock`` so
audit runs and dashboards can be evaluated against a fixed or advancing date.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Protocol


class Clock(Protocol):
    def now_utc(self) -> datetime:
        """Return the current time as a timezone-aware UTC datetime."""
        ...  # pragma: no cover

    def today(self) -> date:
        """Return the current calendar date (UTC)."""
        ...  # pragma: no cover


class SystemClock:
    """Production clock backed by the system time."""

    def now_utc(self) -> datetime:
        return datetime.now(timezone.utc)

    def today(self) -> date:
        return self.now_utc().date()


class FixedClock:
    """Clock pinned to a given instant; move it forward with ``advance``.

    Usage:
        clock = FixedClock(datetime(2024, 1, 15, 9, 0, tzinfo=timezone.utc))
        clock.advance(days=46)
        assert clock.today() == date(2024, 3, 1)
    """

    def __init__(self, fixed_dt: datetime) -> None:
        if fixed_dt.tzinfo is None:
            raise ValueError("FixedClock requires a timezone-aware datetime.")
        self._fixed_dt = fixed_dt.astimezone(timezone.utc)

    @classmethod
    def on(cls, day: date) -> "FixedClock":
        """Clock fixed at midnight UTC of *day*."""
        return cls(datetime(day.year, day.month, day.day, tzinfo=timezone.utc))

    def now_utc(self) -> datetime:
        return self._fixed_dt

    def today(self) -> date:
        return self._fixed_dt.date()

    def set(self, fixed_dt: datetime) -> None:
        if fixed_dt.tzinfo is None:
            raise ValueError("FixedClock requires a timezone-aware datetime.")
        self._fixed_dt = fixed_dt.astimezone(timezone.utc)

    def advance(self, *, days: int = 0, seconds: float = 0) -> None:
        self._fixed_dt = self._fixed_dt + timedelta(days=days, seconds=seconds)


_system_clock = SystemClock()


def get_clock() -> Clock:
    """FastAPI dependency returning the process clock (overridden in tests)."""
    return _system_clock
