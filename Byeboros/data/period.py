"""Reporting periods.

Maps a reporting period to the month sheets that hold its data, to the number of
days the daily average is taken over, and to a display label. Month sheets are
named after the locale's wide month names, e.g. 'Januari' ... 'Desember'.
"""
import datetime
import enum
import logging
from typing import List, Optional

from dateutil.relativedelta import relativedelta

from ..core.clock import Clock
from ..settings import locale
from ..status import status


class Period(enum.StrEnum):
    Day = 'Day'
    Month = 'Month'
    ThreeMonths = '3 Months'
    SixMonths = '6 Months'
    Year = 'Year'

    @classmethod
    def parse(cls, value) -> 'Period':
        """Parse a caller-supplied period, case-insensitively.

        Raises:
            status.InvalidPeriodException: If the value is not a known period.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            for period in cls:
                if period.value.lower() == value.strip().lower():
                    return period
        raise status.InvalidPeriodException(
            f'"{value}" is not one of {", ".join(p.value for p in cls)}.'
        )

    @classmethod
    def coerce(cls, value) -> 'Period':
        """Like :meth:`parse`, but unknown values fall back to :attr:`Month`."""
        try:
            return cls.parse(value)
        except status.InvalidPeriodException:
            logging.warning(f'Unknown period "{value}", using {cls.Month.value}.')
            return cls.Month


MONTH_SPANS = {
    Period.ThreeMonths: 3,
    Period.SixMonths: 6,
}


def _locale() -> str:
    from ..settings import lib
    return lib.settings['locale'] or locale.DEFAULT_LOCALE


def _window_start(period: Period, today: datetime.date) -> datetime.date:
    """First day of the oldest month of a rolling multi-month window."""
    return today.replace(day=1) - relativedelta(months=MONTH_SPANS[period] - 1)


def is_multi_sheet(period) -> bool:
    return Period.coerce(period) in (Period.ThreeMonths, Period.SixMonths, Period.Year)


def resolve_sheets(current_sheet: str, period, clock: Clock, locale_name: Optional[str] = None) -> List[str]:
    """Return the names of the sheets holding a period's data.

    Args:
        current_sheet: The sheet of the current month.
        period: The reporting period.
        clock: Clock giving the current day.
        locale_name: Locale of the month names.

    Returns:
        list[str]: Sheet names, oldest first.
    """
    period = Period.coerce(period)
    names = locale.month_names(locale_name or _locale())

    if period == Period.Year:
        return names
    if period in MONTH_SPANS:
        today = clock.today()
        return [
            names[(today - relativedelta(months=i)).month - 1]
            for i in reversed(range(MONTH_SPANS[period]))
        ]
    return [current_sheet]


def resolve_day_divisor(period, clock: Clock) -> int:
    """Return the number of days the daily average of a period is taken over.

    Day is 1, Month the current day of the month, Year the current day of the year.
    Multi-month periods count the days from the first day of the oldest month in the
    window up to and including today. Never less than 1.
    """
    period = Period.coerce(period)
    today = clock.today()

    if period == Period.Day:
        days = 1
    elif period in MONTH_SPANS:
        days = (today - _window_start(period, today)).days + 1
    elif period == Period.Year:
        days = today.timetuple().tm_yday
    else:
        days = today.day
    return max(days, 1)


def period_label(period, current_sheet: str, clock: Clock, locale_name: Optional[str] = None) -> str:
    """Return the display label of a period, e.g. 'Februari 2026' or 'Desember - Februari 2026'."""
    period = Period.coerce(period)
    locale_name = locale_name or _locale()
    today = clock.today()

    if period == Period.Day:
        return locale.format_group_date(today, locale_name)
    if period == Period.Year:
        return str(today.year)
    if period in MONTH_SPANS:
        sheets = resolve_sheets(current_sheet, period, clock, locale_name=locale_name)
        return f'{sheets[0]} - {sheets[-1]} {today.year}'
    return f'{current_sheet} {today.year}'
