"""Transaction filtering and day grouping.

Records are loaded into a DataFrame, filtered by date and category, sorted by
time-of-day and grouped by calendar day. Note that the sort only considers the
time-of-day component: records of different days interleave by clock time, and the
day groups come out in the order their first record appears in that sequence.
"""
import dataclasses
import datetime
import logging
from typing import Any, Dict, List, Optional, Union

import pandas as pd

from .mapper import Kind, TransactionRecord
from ..core.clock import Clock
from ..settings import locale
from ..status import status

DATE_FILTER_FORMAT = '%Y-%m-%d'


@dataclasses.dataclass(frozen=True)
class TransactionGroup:
    """The transactions of one calendar day."""
    date: datetime.date
    label: str
    total_expense: float
    total_income: float
    items: tuple

    def to_dict(self, currency_symbol: Optional[str] = None, income_label: Optional[str] = None) -> Dict[str, Any]:
        return {
            'group_label': self.label,
            'group_date': self.date.strftime(DATE_FILTER_FORMAT),
            'total_expense': self.total_expense,
            'total_income': self.total_income,
            'items': [
                r.to_dict(currency_symbol=currency_symbol, income_label=income_label) for r in self.items
            ],
        }


def parse_date_filter(value: Union[str, datetime.date, None]) -> Optional[datetime.date]:
    """Validate a date filter.

    Args:
        value: A ``YYYY-MM-DD`` string, a date, or None.

    Returns:
        The filter date, or None when no filter was given.

    Raises:
        status.InvalidFilterException: If the value is not a valid date.
    """
    if value is None or value == '':
        return None
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    if not isinstance(value, str):
        raise status.InvalidFilterException(f'Date filter must be a string, got {type(value)}.')
    try:
        return datetime.datetime.strptime(value.strip(), DATE_FILTER_FORMAT).date()
    except ValueError as ex:
        raise status.InvalidFilterException(f'Date filter "{value}" is not a YYYY-MM-DD date.') from ex


def _to_frame(records: List[TransactionRecord]) -> pd.DataFrame:
    df = pd.DataFrame({
        'record': pd.Series(records, dtype='object'),
        'occurred_at': pd.to_datetime(pd.Series([r.occurred_at for r in records], dtype='object')),
        'category': pd.Series([r.category for r in records], dtype='object'),
        'amount': pd.Series([r.amount for r in records], dtype='float64'),
        'kind': pd.Series([r.kind.value for r in records], dtype='object'),
    })
    df['date'] = df['occurred_at'].dt.date
    return df


def _filter_date(df: pd.DataFrame, date_filter: Optional[datetime.date]) -> pd.DataFrame:
    if date_filter is None:
        return df
    return df[df['date'] == date_filter]


def _filter_category(df: pd.DataFrame, category_filter: Optional[str]) -> pd.DataFrame:
    if not category_filter:
        return df
    return df[df['category'].str.lower() == category_filter.strip().lower()]


def _sort_by_time_of_day(df: pd.DataFrame) -> pd.DataFrame:
    """Sort by time-of-day, latest first; ties keep their input order."""
    df = df.assign(time_of_day=df['occurred_at'] - df['occurred_at'].dt.normalize())
    return df.sort_values(by='time_of_day', ascending=False, kind='stable')


def group_label(date: datetime.date, clock: Clock, labels: Optional[Dict[str, str]] = None,
                locale_name: Optional[str] = None) -> str:
    """Return the display label of a day group.

    Args:
        date: The group's calendar date.
        clock: Clock giving the current day.
        labels: The 'labels' config section. Defaults to the configured labels.
        locale_name: Locale used to format other dates.

    Returns:
        str: The 'today' or 'yesterday' label, or the formatted date.
    """
    if labels is None:
        from ..settings import lib
        labels = lib.settings.get_section('labels')
    today = clock.today()
    if date == today:
        return labels['today']
    if date == today - datetime.timedelta(days=1):
        return labels['yesterday']

    if locale_name is None:
        from ..settings import lib
        locale_name = lib.settings['locale'] or locale.DEFAULT_LOCALE
    return locale.format_group_date(date, locale_name)


def group_transactions(records: List[TransactionRecord],
                       date_filter: Union[str, datetime.date, None] = None,
                       category_filter: Optional[str] = None,
                       clock: Optional[Clock] = None) -> List[TransactionGroup]:
    """Filter, sort and group transaction records by calendar day.

    Args:
        records: Mapped transaction records.
        date_filter: Only keep records of this day (``YYYY-MM-DD`` or a date).
        category_filter: Only keep records of this category, case-insensitively.
        clock: Clock used for the 'today'/'yesterday' labels.

    Returns:
        list[TransactionGroup]: The day groups.

    Raises:
        status.InvalidFilterException: If the date filter is invalid.
    """
    date_filter = parse_date_filter(date_filter)
    if category_filter is not None and not isinstance(category_filter, str):
        raise status.InvalidFilterException(f'Category filter must be a string, got {type(category_filter)}.')

    if not records:
        return []
    clock = clock or Clock()

    df = (
        _to_frame(records)
        .pipe(_filter_date, date_filter)
        .pipe(_filter_category, category_filter)
        .pipe(_sort_by_time_of_day)
    )
    if df.empty:
        logging.debug('No transactions left after filtering.')
        return []

    groups: List[TransactionGroup] = []
    for date, _df in df.groupby('date', sort=False):
        expense = _df['kind'] == Kind.Expense.value
        groups.append(TransactionGroup(
            date=date,
            label=group_label(date, clock),
            total_expense=float(_df.loc[expense, 'amount'].abs().sum()),
            total_income=float(_df.loc[~expense, 'amount'].sum()),
            items=tuple(_df['record']),
        ))

    logging.debug(f'Grouped {len(df)} transactions into {len(groups)} days.')
    return groups
