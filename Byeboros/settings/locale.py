"""
Module for formatting amounts, dates and month names using Babel.

"""
import datetime
import logging
from typing import List

from babel import Locale, UnknownLocaleError, numbers
from babel.dates import format_date, get_month_names

DEFAULT_LOCALE: str = 'id_ID'
GROUP_DATE_FORMAT: str = 'dd MMM yyyy'


def _parse_locale(locale: str) -> Locale:
    try:
        return Locale.parse(locale)
    except (ValueError, TypeError, UnknownLocaleError) as ex:
        logging.warning(f'Unknown locale "{locale}", falling back to {DEFAULT_LOCALE}: {ex}')
        return Locale.parse(DEFAULT_LOCALE)


def format_grouped_integer(value: int, locale: str = DEFAULT_LOCALE) -> str:
    """
    Format an integer with the locale's thousands separator and no decimals.

    Args:
        value (int): The value to format.
        locale (str): Locale string, e.g. 'id_ID'.

    Returns:
        str: The grouped integer, e.g. '1.234.567' for 'id_ID'.
    """
    return numbers.format_decimal(value, format='#,##0', locale=_parse_locale(locale))


def month_names(locale: str = DEFAULT_LOCALE) -> List[str]:
    """
    Return the wide, stand-alone month names of a locale from January to December.

    Sheet partitions are named after these, e.g. 'Januari', 'Februari'.

    Args:
        locale (str): Locale string.

    Returns:
        list[str]: The twelve month names.
    """
    names = get_month_names('wide', context='stand-alone', locale=_parse_locale(locale))
    return [names[i] for i in range(1, 13)]


def format_group_date(date: datetime.date, locale: str = DEFAULT_LOCALE) -> str:
    """
    Format a calendar date as a transaction group label, e.g. '15 Feb 2026'.

    Args:
        date (datetime.date): The date to format.
        locale (str): Locale string.

    Returns:
        str: The formatted date.
    """
    return format_date(date, format=GROUP_DATE_FORMAT, locale=_parse_locale(locale))
