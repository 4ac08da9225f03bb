"""Transaction row mapping.

Maps the two fixed column blocks of a month sheet into :class:`TransactionRecord` items.

Expense block (``A:G`` by default)::

    description | category | priority | amount | notes | timestamp | author

Income block (``I:N`` by default)::

    description | category | amount | notes | timestamp | author

Record ids are ``txn_exp_<n>`` / ``txn_inc_<n>`` where ``n`` is the 1-based position of
the row inside its block. They shift when rows are inserted or deleted in the sheet.
"""
import dataclasses
import datetime
import enum
import logging
from typing import Any, Dict, List, Optional

import pandas as pd

from . import cells


class Kind(enum.StrEnum):
    Expense = 'expense'
    Income = 'income'


@dataclasses.dataclass(frozen=True)
class BlockColumns:
    """Column offsets of a transaction block, relative to the block's first column."""
    prefix: str
    description: int
    category: int
    amount: int
    notes: int
    timestamp: int
    author: int
    priority: Optional[int] = None

    @property
    def min_length(self) -> int:
        """Rows must reach the timestamp column to be mapped."""
        return self.timestamp + 1

    @property
    def width(self) -> int:
        return self.author + 1


EXPENSE_COLUMNS = BlockColumns(
    prefix='txn_exp', description=0, category=1, priority=2, amount=3, notes=4, timestamp=5, author=6,
)
INCOME_COLUMNS = BlockColumns(
    prefix='txn_inc', description=0, category=1, amount=2, notes=3, timestamp=4, author=5,
)

BLOCK_COLUMNS: Dict[Kind, BlockColumns] = {
    Kind.Expense: EXPENSE_COLUMNS,
    Kind.Income: INCOME_COLUMNS,
}


@dataclasses.dataclass(frozen=True)
class TransactionRecord:
    """A single expense or income transaction read from a sheet.

    ``amount`` is negative for expenses and positive for income.
    """
    id: str
    description: str
    category: str
    occurred_at: datetime.datetime
    amount: float
    kind: Kind
    priority: Optional[str] = None
    notes: str = ''
    author: str = ''

    @property
    def date(self) -> datetime.date:
        return self.occurred_at.date()

    def to_dict(self, currency_symbol: Optional[str] = None, income_label: Optional[str] = None) -> Dict[str, Any]:
        """Serialize the record with the field names used by the HTTP responses."""
        is_income = self.kind == Kind.Income
        data = {
            'id': self.id,
            'transaction_name': self.description,
            'category': self.category,
            'time': self.occurred_at.strftime('%H:%M'),
            'amount': self.amount,
            'amount_display': cells.format_amount(self.amount, is_income, currency_symbol=currency_symbol),
            'type': self.kind.value,
        }
        if self.priority:
            data['priority'] = self.priority
        if is_income:
            if income_label is None:
                from ..settings import lib
                income_label = lib.settings.get_section('labels')['income']
            data['label'] = income_label
        return data


def _strict_rows() -> bool:
    from ..settings import lib
    return bool(lib.settings['strict_rows'])


def map_rows(rows: List[List[Any]], kind: Kind, currency_symbol: Optional[str] = None,
             timezone: Optional[str] = None) -> List[TransactionRecord]:
    """Map the rows of one block to transaction records.

    Rows shorter than the timestamp column and rows with an unparseable timestamp
    are skipped. Skipped rows still consume their position in the id sequence.

    Args:
        rows: The block's rows, first row first.
        kind: The kind of the block.
        currency_symbol: Symbol stripped from text amounts.
        timezone: Timezone for offset-aware timestamps.

    Returns:
        list[TransactionRecord]: The mapped records in row order.
    """
    columns = BLOCK_COLUMNS[kind]
    strict = _strict_rows()
    records: List[TransactionRecord] = []
    dropped = 0

    for i, row in enumerate(rows):
        position = i + 1
        if len(row) < columns.min_length:
            if row:
                dropped += 1
                if strict:
                    logging.warning(f'{kind.value} row {position} has {len(row)} cells, skipped.')
            continue

        occurred_at = cells.parse_date(row[columns.timestamp], timezone=timezone)
        if pd.isna(occurred_at):
            dropped += 1
            if strict:
                logging.warning(f'{kind.value} row {position} has an unparseable timestamp "{row[columns.timestamp]}", skipped.')
            continue

        amount = abs(cells.parse_amount(row[columns.amount], currency_symbol=currency_symbol))
        if kind == Kind.Expense:
            amount = -amount

        priority = None
        if columns.priority is not None:
            priority = cells.cell_at(row, columns.priority).text or None

        records.append(TransactionRecord(
            id=f'{columns.prefix}_{position}',
            description=cells.cell_at(row, columns.description).text,
            category=cells.cell_at(row, columns.category).text,
            occurred_at=occurred_at.to_pydatetime(),
            amount=amount,
            kind=kind,
            priority=priority,
            notes=cells.cell_at(row, columns.notes).text,
            author=cells.cell_at(row, columns.author).text,
        ))

    if dropped:
        logging.warning(f'Dropped {dropped} malformed {kind.value} rows.')
    logging.debug(f'Mapped {len(records)} {kind.value} records from {len(rows)} rows.')
    return records


def map_transactions(expense_rows: Optional[List[List[Any]]], income_rows: Optional[List[List[Any]]],
                     currency_symbol: Optional[str] = None,
                     timezone: Optional[str] = None) -> List[TransactionRecord]:
    """Map both blocks into one list, expenses first.

    A block passed as ``None`` is not mapped at all. The id counters of the two
    blocks are independent.
    """
    records: List[TransactionRecord] = []
    if expense_rows is not None:
        records.extend(map_rows(expense_rows, Kind.Expense, currency_symbol=currency_symbol, timezone=timezone))
    if income_rows is not None:
        records.extend(map_rows(income_rows, Kind.Income, currency_symbol=currency_symbol, timezone=timezone))
    return records
