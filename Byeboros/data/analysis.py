"""Expense and income analysis.

Category and priority rows are loaded into DataFrames, one per month sheet, and
summed with ``groupby(..., sort=False)`` so that rows read from several sheets merge
into a single entry per category in first-seen order. The summed frames are then
turned into a frozen :class:`AnalysisReport` with percentages, the top category,
priority buckets and the daily average.
"""
import dataclasses
import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple

import pandas as pd

from . import cells
from .mapper import TransactionRecord
from .period import Period

CATEGORY_COLUMNS: List[str] = ['category', 'sub_category', 'amount']
PRIORITY_COLUMNS: List[str] = ['level', 'amount']

PRIORITY_ALIASES: Dict[str, str] = {
    'tinggi': 'high',
    'high': 'high',
    'sedang': 'medium',
    'medium': 'medium',
    'rendah': 'low',
    'low': 'low',
}
PRIORITY_LEVELS: List[str] = ['high', 'medium', 'low', 'other']


@dataclasses.dataclass(frozen=True)
class CategoryAggregate:
    category_name: str
    amount: float
    percent_of_total: int
    sub_category_name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'name': self.category_name,
            'amount': self.amount,
            'percent': self.percent_of_total,
        }
        if self.sub_category_name is not None:
            data['sub_category_name'] = self.sub_category_name
        return data


@dataclasses.dataclass(frozen=True)
class PriorityBucket:
    level: str
    label: str
    amount: float
    display: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'level': self.level,
            'label': self.label,
            'amount': self.amount,
            'amount_display': self.display,
        }


@dataclasses.dataclass(frozen=True)
class AnalysisReport:
    """The analysis of one flow direction over a period.

    ``to_dict`` nests the values the way the HTTP responses do: the total under
    ``summary`` (``total_spent`` or ``total_income``), the categories under
    ``chart`` and the daily average with its display label.
    """
    period: Period
    period_label: str
    is_income: bool
    total_amount: float
    total_display: str
    categories: Tuple[CategoryAggregate, ...]
    top_category: Optional[CategoryAggregate]
    top_category_display: str
    daily_average: float
    daily_average_display: str
    daily_average_label: str
    priority_distribution: Tuple[PriorityBucket, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        total_key = 'total_income' if self.is_income else 'total_spent'
        top = self.top_category
        data = {
            'period': self.period.value,
            'period_label': self.period_label,
            'summary': {
                total_key: self.total_amount,
                f'{total_key}_display': self.total_display,
            },
            'chart': {
                'categories': [c.to_dict() for c in self.categories],
            },
            'top_category': {
                'name': top.category_name if top else '',
                'total': top.amount if top else 0.0,
                'total_display': self.top_category_display,
            },
            'daily_average': {
                'label': self.daily_average_label,
                'amount': self.daily_average,
                'amount_display': self.daily_average_display,
            },
        }
        if not self.is_income:
            data['priority_distribution'] = [p.to_dict() for p in self.priority_distribution]
        return data


@dataclasses.dataclass(frozen=True)
class AnalysisResult:
    expense: AnalysisReport
    income: AnalysisReport

    def to_dict(self) -> Dict[str, Any]:
        return {
            'expense': self.expense.to_dict(),
            'income': self.income.to_dict(),
        }


def _labels() -> Dict[str, str]:
    from ..settings import lib
    return lib.settings.get_section('labels')


def _empty_frame(columns: List[str]) -> pd.DataFrame:
    return pd.DataFrame({c: pd.Series(dtype='float64' if c == 'amount' else 'object') for c in columns})


def priority_level(label: Any) -> str:
    """Map a free-text priority label to 'high', 'medium', 'low' or 'other'."""
    text = cells.to_cell(label).text.lower()
    return PRIORITY_ALIASES.get(text, 'other')


def category_frame(rows: List[List[Any]], with_sub_category: bool = False,
                   currency_symbol: Optional[str] = None,
                   other_label: Optional[str] = None) -> pd.DataFrame:
    """Load category breakdown rows into a ``category | sub_category | amount`` frame.

    Rows are ``category | amount`` or, with ``with_sub_category``,
    ``category | sub-category | amount``. Blank rows are ignored and amounts
    without a category are booked to the 'other' label.

    Args:
        rows: The breakdown rows.
        with_sub_category: Whether the rows carry a sub-category column.
        currency_symbol: Symbol stripped from text amounts.
        other_label: Category name used for rows without a category.

    Returns:
        pd.DataFrame: One row per breakdown row, in sheet order. The sub-category
        is None when the rows have no sub-category column.
    """
    amount_idx = 2 if with_sub_category else 1
    data = []
    for row in rows:
        category = cells.cell_at(row, 0).text
        sub_category = cells.cell_at(row, 1).text if with_sub_category else None
        amount = cells.parse_amount(cells.cell_at(row, amount_idx), currency_symbol=currency_symbol)
        if not category:
            if not amount:
                continue
            category = other_label if other_label is not None else _labels()['other']
        data.append((category, sub_category, amount))

    if not data:
        return _empty_frame(CATEGORY_COLUMNS)
    return pd.DataFrame(data, columns=CATEGORY_COLUMNS).astype({'amount': 'float64'})


def record_frame(records: Iterable[TransactionRecord], other_label: Optional[str] = None) -> pd.DataFrame:
    """Load transaction records into a category frame, keyed by category only."""
    data = []
    for record in records:
        category = record.category
        if not category:
            category = other_label if other_label is not None else _labels()['other']
        data.append((category, None, record.amount))

    if not data:
        return _empty_frame(CATEGORY_COLUMNS)
    return pd.DataFrame(data, columns=CATEGORY_COLUMNS).astype({'amount': 'float64'})


def priority_frame(rows: List[List[Any]], currency_symbol: Optional[str] = None) -> pd.DataFrame:
    """Load ``label | amount`` priority rows into a ``level | amount`` frame."""
    data = []
    for row in rows:
        label = cells.cell_at(row, 0)
        amount = cells.parse_amount(cells.cell_at(row, 1), currency_symbol=currency_symbol)
        if label.kind == cells.CellKind.Empty and not amount:
            continue
        data.append((priority_level(label), amount))

    if not data:
        return _empty_frame(PRIORITY_COLUMNS)
    return pd.DataFrame(data, columns=PRIORITY_COLUMNS).astype({'amount': 'float64'})


def sum_categories(frames: Iterable[pd.DataFrame]) -> pd.DataFrame:
    """Sum category frames by category and sub-category, in first-seen order."""
    frames = [f for f in frames if not f.empty]
    if not frames:
        return _empty_frame(CATEGORY_COLUMNS)

    df = pd.concat(frames, ignore_index=True)
    return (
        df.groupby(['category', 'sub_category'], sort=False, dropna=False)['amount']
        .sum()
        .reset_index()
    )


def sum_priorities(frames: Iterable[pd.DataFrame]) -> Dict[str, float]:
    """Sum priority frames by level."""
    frames = [f for f in frames if not f.empty]
    if not frames:
        return {}
    df = pd.concat(frames, ignore_index=True)
    return {k: float(v) for k, v in df.groupby('level', sort=False)['amount'].sum().items()}


def reconcile_income_categories(df: pd.DataFrame, master: List[str]) -> pd.DataFrame:
    """Merge summed income categories with the master category list.

    Every master category is present, with 0 when it has no activity. Categories
    only found in the data are kept. Names are matched case-insensitively using the
    master list's spelling, and the result is sorted by name, case-insensitively.
    """
    lookup: Dict[str, str] = {}
    for name in master:
        lookup.setdefault(name.casefold(), name)

    df = df.assign(category=df['category'].map(lambda n: lookup.get(n.casefold(), n)))

    # add missing categories
    missing = [name for name in lookup.values() if name not in df['category'].values]
    frames = [df]
    if missing:
        frames.append(pd.DataFrame({'category': missing, 'sub_category': [None] * len(missing), 'amount': 0.0}))

    df = sum_categories(frames)
    return (
        df.assign(_key=df['category'].str.casefold())
        .sort_values(by=['_key', 'category'], kind='stable')
        .drop(columns='_key')
        .reset_index(drop=True)
    )


def category_total(df: pd.DataFrame) -> float:
    return float(df['amount'].sum()) if not df.empty else 0.0


def percent_of_total(amount: float, total: float) -> int:
    """The truncated integer percentage of ``amount`` in ``total``; 0 when total is 0."""
    if not total:
        return 0
    return int(amount / total * 100)


def build_categories(df: pd.DataFrame, total: float) -> List[CategoryAggregate]:
    return [
        CategoryAggregate(
            category_name=category,
            sub_category_name=None if pd.isna(sub_category) else sub_category,
            amount=float(amount),
            percent_of_total=percent_of_total(amount, total),
        )
        for category, sub_category, amount in df[CATEGORY_COLUMNS].itertuples(index=False, name=None)
    ]


def top_category(categories: List[CategoryAggregate]) -> Optional[CategoryAggregate]:
    """Return the category with the largest positive amount, the first one on ties."""
    top = None
    for category in categories:
        if category.amount <= 0:
            continue
        if top is None or category.amount > top.amount:
            top = category
    return top


def resolve_total(direct_total: float, df: pd.DataFrame) -> float:
    """Use the direct total when it is set, the sum of the categories otherwise."""
    if direct_total:
        return direct_total
    return category_total(df)


def build_priority_distribution(acc: Dict[str, float], labels: Dict[str, str],
                                currency_symbol: Optional[str] = None) -> List[PriorityBucket]:
    """Return the priority buckets, high to low; 'other' only when it holds an amount."""
    buckets = []
    for level in PRIORITY_LEVELS:
        amount = acc.get(level, 0.0)
        if level == 'other' and not amount:
            continue
        buckets.append(PriorityBucket(
            level=level,
            label=labels[level],
            amount=amount,
            display=cells.format_amount(amount, False, currency_symbol=currency_symbol),
        ))
    return buckets


def build_report(period: Period, label: str, df: pd.DataFrame, direct_total: float,
                 day_divisor: int, is_income: bool,
                 priorities: Optional[Dict[str, float]] = None,
                 labels: Optional[Dict[str, str]] = None,
                 currency_symbol: Optional[str] = None) -> AnalysisReport:
    """Assemble the report of one flow direction.

    The total is the direct total when set. Percentages are always taken of the
    category sum, so they add up to at most 100 even when the sheet's total cell
    disagrees with its category rows.

    Args:
        period: The reporting period.
        label: The period's display label.
        df: Summed category frame, in output order.
        direct_total: The sheet's total cell, or 0 when not read.
        day_divisor: Number of days of the daily average.
        is_income: The flow direction, used for display signs and field names.
        priorities: Summed priority amounts; expense reports only.
        labels: The 'labels' config section.
        currency_symbol: Currency symbol of the display strings.

    Returns:
        AnalysisReport: The frozen report.
    """
    labels = labels if labels is not None else _labels()
    total = resolve_total(direct_total, df)
    categories = build_categories(df, category_total(df))
    top = top_category(categories)
    daily_average = total / max(day_divisor, 1)

    priority_distribution = ()
    if priorities is not None:
        priority_distribution = tuple(build_priority_distribution(priorities, labels, currency_symbol=currency_symbol))

    logging.debug(
        f'{"Income" if is_income else "Expense"} report: total={total}, '
        f'{len(categories)} categories, divisor={day_divisor}.'
    )
    return AnalysisReport(
        period=period,
        period_label=label,
        is_income=is_income,
        total_amount=total,
        total_display=cells.format_amount(total, is_income, currency_symbol=currency_symbol),
        categories=tuple(categories),
        top_category=top,
        top_category_display=cells.format_amount(top.amount if top else 0.0, is_income,
                                                 currency_symbol=currency_symbol),
        daily_average=daily_average,
        daily_average_display=cells.format_amount(daily_average, is_income, currency_symbol=currency_symbol),
        daily_average_label=labels['daily_average'],
        priority_distribution=priority_distribution,
    )
