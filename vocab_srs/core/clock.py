"""
Clock: current time and local calendar-day boundaries.

All timestamps written by the engine are naive wall-clock datetimes in the
configured timezone. Day boundaries (streaks, "today", next review dates)
are computed from those values, never from rolling 24h windows.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo


def start_of_day(moment: datetime) -> datetime:
    """Return local midnight of the day containing ``moment``."""
    return datetime.combine(moment.date(), time.min)


def calendar_days_between(earlier: datetime | date, later: datetime | date) -> int:
    """
    Count calendar-day boundaries between two moments.

    23:59 -> 00:01 the next day is 1, 00:01 -> 23:59 the same day is 0.
    Negative when ``later`` is on an earlier day.
    """
    earlier_day = earlier.date() if isinstance(earlier, datetime) else earlier
    later_day = later.date() if isinstance(later, datetime) else later
    return (later_day - earlier_day).days


class Clock:
    """Supplies the current time in a fixed IANA timezone."""

    def __init__(self, timezone: str = "UTC"):
        self.timezone = timezone
        self._zone = ZoneInfo(timezone)

    def now(self) -> datetime:
        """Current naive wall-clock time in the configured zone."""
        return datetime.now(self._zone).replace(tzinfo=None, microsecond=0)

    def today(self) -> date:
        return self.now().date()

    def start_of_day(self, moment: datetime | None = None) -> datetime:
        """Local midnight of ``moment`` (defaults to now)."""
        return start_of_day(moment if moment is not None else self.now())


class FixedClock(Clock):
    """Clock frozen at a given moment, advanced by hand in tests."""

    def __init__(self, current: datetime, timezone: str = "UTC"):
        super().__init__(timezone)
        self.current = current

    def now(self) -> datetime:
        return self.current

    def advance(self, days: int = 0, hours: int = 0, minutes: int = 0) -> datetime:
        self.current = self.current + timedelta(days=days, hours=hours, minutes=minutes)
        return self.current
