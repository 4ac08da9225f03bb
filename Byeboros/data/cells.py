"""Cell value normalization.

Spreadsheet cells arrive loosely typed. :func:`to_cell` turns a raw value into the
closed :class:`Cell` variant ``{Number, Text, Empty}`` and the parsers below are the
only place cell contents are interpreted. Parsing is best-effort: a bad amount
reads as ``0`` and a bad timestamp reads as ``NaT``.
"""
import dataclasses
import datetime
import enum
import logging
import math
import re
import zoneinfo
from typing import Any, Optional, Union

import pandas as pd

from ..settings import locale

# Month-first formats are tried before their day-first counterparts
DATE_FORMATS = [
    '%m/%d/%Y %H:%M:%S',
    '%d/%m/%Y %H:%M:%S',
    '%Y-%m-%d %H:%M:%S',
    '%m/%d/%Y %H:%M',
    '%d/%m/%Y %H:%M',
    '%Y-%m-%d %H:%M',
    '%m/%d/%Y',
    '%d/%m/%Y',
    '%Y-%m-%d',
]

GOOGLE_EPOCH = datetime.datetime(1899, 12, 30)


class CellKind(enum.StrEnum):
    Number = 'number'
    Text = 'text'
    Empty = 'empty'


@dataclasses.dataclass(frozen=True)
class Cell:
    """A spreadsheet cell value: a number, a non-blank stripped string, or nothing."""
    kind: CellKind
    value: Union[float, str, None] = None

    @property
    def text(self) -> str:
        """The cell as display text; numbers without a fractional part lose their '.0'."""
        if self.kind == CellKind.Empty:
            return ''
        if self.kind == CellKind.Number and float(self.value).is_integer():
            return str(int(self.value))
        return str(self.value)


EMPTY = Cell(CellKind.Empty)


def to_cell(value: Any) -> Cell:
    """Convert a raw cell value to a :class:`Cell`.

    Args:
        value: A value as returned by the Sheets API, or an existing Cell.

    Returns:
        Cell: The typed cell.
    """
    if isinstance(value, Cell):
        return value
    if value is None:
        return EMPTY
    if isinstance(value, bool):
        return Cell(CellKind.Text, str(value).upper())
    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            return EMPTY
        return Cell(CellKind.Number, float(value))
    text = str(value).strip()
    if not text:
        return EMPTY
    return Cell(CellKind.Text, text)


def cell_at(row: list, idx: int) -> Cell:
    """Return the cell at ``idx`` of a row, or an empty cell past the row's end."""
    return to_cell(row[idx]) if idx < len(row) else EMPTY


def _currency_symbol() -> str:
    from ..settings import lib
    return lib.settings['currency_symbol'] or 'Rp'


def _timezone() -> str:
    from ..settings import lib
    return lib.settings['timezone'] or 'Asia/Jakarta'


def _locale() -> str:
    from ..settings import lib
    return lib.settings['locale'] or locale.DEFAULT_LOCALE


def parse_amount(value: Any, currency_symbol: Optional[str] = None) -> float:
    """Parse a cell as an amount.

    Numbers are returned as-is. Text is read as an Indonesian-formatted currency
    value: the currency symbol and whitespace are stripped, '.' thousands separators
    removed and the ',' decimal separator replaced, e.g. 'Rp 1.500.000,50' -> 1500000.5.

    Args:
        value: The raw cell value or a Cell.
        currency_symbol: The symbol to strip. Defaults to the configured symbol.

    Returns:
        float: The amount, or 0.0 if the cell is empty or cannot be parsed.
    """
    cell = to_cell(value)
    if cell.kind == CellKind.Number:
        return float(cell.value)
    if cell.kind == CellKind.Empty:
        return 0.0

    symbol = currency_symbol if currency_symbol is not None else _currency_symbol()
    s = cell.value.replace(symbol, '') if symbol else cell.value
    s = re.sub(r'\s+', '', s)
    s = s.replace('.', '').replace(',', '.')
    try:
        amount = float(s)
    except ValueError:
        logging.debug(f'Could not parse "{cell.value}" as an amount, using 0.')
        return 0.0
    return amount if math.isfinite(amount) else 0.0


def _from_serial(serial: float) -> pd.Timestamp:
    """Convert a Google Sheets serial date-time (days since 1899-12-30) to a Timestamp."""
    if serial < -20000 or serial > 2958465:
        logging.debug(f'Google date serial "{serial}" is out of plausible range.')
        return pd.NaT
    ts = GOOGLE_EPOCH + datetime.timedelta(days=serial)
    return pd.Timestamp(ts).round('s')


def parse_date(value: Any, timezone: Optional[str] = None) -> pd.Timestamp:
    """Parse a cell as a timestamp.

    Text is tried against :data:`DATE_FORMATS` in order and the first match wins, so
    '2/3/2026' reads as February 3rd. ISO 8601 values are accepted last; offset-aware
    ones are converted to ``timezone`` and returned as naive wall time. Numbers are
    read as Google Sheets serial date-times.

    Args:
        value: The raw cell value or a Cell.
        timezone: Timezone for offset-aware values. Defaults to the configured timezone.

    Returns:
        pd.Timestamp: A naive timestamp, or ``pd.NaT`` if the cell cannot be parsed.
    """
    cell = to_cell(value)
    if cell.kind == CellKind.Empty:
        return pd.NaT
    if cell.kind == CellKind.Number:
        return _from_serial(cell.value)

    for fmt in DATE_FORMATS:
        try:
            return pd.Timestamp(datetime.datetime.strptime(cell.value, fmt))
        except ValueError:
            continue

    try:
        dt = datetime.datetime.fromisoformat(cell.value)
    except ValueError:
        logging.debug(f'Could not parse "{cell.value}" as a date.')
        return pd.NaT
    if dt.tzinfo is not None:
        tz = zoneinfo.ZoneInfo(timezone or _timezone())
        dt = dt.astimezone(tz).replace(tzinfo=None)
    return pd.Timestamp(dt)


def format_amount(amount: float, is_income: bool, currency_symbol: Optional[str] = None,
                  locale_name: Optional[str] = None) -> str:
    """Format an amount for display, e.g. '-Rp 1.234.567'.

    The fractional part is truncated and the sign is given by the flow direction,
    not by the sign of ``amount``.

    Args:
        amount: The amount to format.
        is_income: '+' prefix when True, '-' otherwise.
        currency_symbol: Defaults to the configured symbol.
        locale_name: Locale used for digit grouping. Defaults to the configured locale.

    Returns:
        str: The formatted amount.
    """
    symbol = currency_symbol if currency_symbol is not None else _currency_symbol()
    grouped = locale.format_grouped_integer(abs(int(amount)), locale_name or _locale())
    sign = '+' if is_income else '-'
    return f'{sign}{symbol} {grouped}'
