"""Injectable wall clock.

Date-relative labels ("today", "yesterday") and period day divisors depend on the
current time. Reports take a :class:`Clock` so the current time can be fixed in tests.
"""
import datetime
import zoneinfo
from typing import Optional

DEFAULT_TIMEZONE = 'Asia/Jakarta'


class Clock:
    """Returns the current time in a fixed, named timezone."""

    def __init__(self, timezone: Optional[str] = None) -> None:
        if timezone is None:
            from ..settings import lib
            timezone = lib.settings['timezone'] or DEFAULT_TIMEZONE
        self.tz = zoneinfo.ZoneInfo(timezone)

    def now(self) -> datetime.datetime:
        """The current, timezone-aware time."""
        return datetime.datetime.now(self.tz)

    def today(self) -> datetime.date:
        """The current calendar day in the clock's timezone."""
        return self.now().date()


class FixedClock(Clock):
    """A clock that always returns the same instant.

    Naive datetimes are taken to be wall time in the clock's timezone.
    """

    def __init__(self, fixed: datetime.datetime, timezone: Optional[str] = DEFAULT_TIMEZONE) -> None:
        super().__init__(timezone)
        if fixed.tzinfo is None:
            fixed = fixed.replace(tzinfo=self.tz)
        self.fixed = fixed.astimezone(self.tz)

    def now(self) -> datetime.datetime:
        return self.fixed
