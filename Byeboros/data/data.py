"""Report and write operations over the spreadsheet.

This module is the interface the HTTP layer calls: it validates the caller's input,
reads the configured ranges through a range reader and hands the rows to the
mapping, grouping and analysis functions.

Example:

    .. code-block:: python

        from Byeboros.data import data

        groups = data.list_transactions(spreadsheet_id, 'Februari', type_filter='expense')
        result = data.get_analysis(spreadsheet_id, 'Februari', '3 Months')

"""
import datetime
import logging
import math
import threading
from typing import Any, Dict, List, Optional, Union

import pandas as pd

from . import analysis
from . import budget as budget_
from . import cells
from . import mapper
from . import period as period_
from . import transactions
from ..core.clock import Clock
from ..core.service import SheetsRangeReader, a1
from ..settings import lib
from ..status import status

RECORD_TIMESTAMP_FORMAT = '%m/%d/%Y %H:%M:%S'


def _reader(reader) -> SheetsRangeReader:
    return reader if reader is not None else SheetsRangeReader()


def _spreadsheet_id(spreadsheet_id: Optional[str]) -> str:
    if spreadsheet_id:
        return spreadsheet_id
    return lib.settings.get_section('spreadsheet').get('id', '')


def _check_cancelled(cancel_event: Optional[threading.Event]) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise status.OperationCancelledException


def _parse_type_filter(type_filter: Optional[str]) -> Optional[mapper.Kind]:
    if type_filter is None or type_filter == '':
        return None
    if isinstance(type_filter, mapper.Kind):
        return type_filter
    if isinstance(type_filter, str):
        try:
            return mapper.Kind(type_filter.strip().lower())
        except ValueError:
            pass
    raise status.InvalidFilterException(
        f'Type filter "{type_filter}" must be one of {", ".join(k.value for k in mapper.Kind)}.'
    )


def list_transactions(spreadsheet_id: str, sheet_name: str,
                      date_filter: Union[str, datetime.date, None] = None,
                      category_filter: Optional[str] = None,
                      type_filter: Optional[str] = None,
                      reader=None, clock: Optional[Clock] = None) -> List[transactions.TransactionGroup]:
    """List the transactions of a month sheet, grouped by day.

    Args:
        spreadsheet_id: The spreadsheet id. Defaults to the configured id.
        sheet_name: The month sheet, e.g. 'Februari'.
        date_filter: Only list this day, as ``YYYY-MM-DD`` or a date.
        category_filter: Only list this category, case-insensitively.
        type_filter: 'expense' or 'income'. The other block is not read at all.
        reader: Range reader. Defaults to a :class:`SheetsRangeReader`.
        clock: Clock for the 'today'/'yesterday' labels.

    Returns:
        list[TransactionGroup]: The day groups.

    Raises:
        status.InvalidFilterException: If a filter is invalid. Raised before any read.
        status.ServiceUnavailableException: If the sheet cannot be read.
    """
    kind = _parse_type_filter(type_filter)
    date_filter = transactions.parse_date_filter(date_filter)
    if category_filter is not None and not isinstance(category_filter, str):
        raise status.InvalidFilterException(f'Category filter must be a string, got {type(category_filter)}.')

    layout = lib.settings.get_section('layout')
    ranges = {}
    if kind in (None, mapper.Kind.Expense):
        ranges[mapper.Kind.Expense] = a1(sheet_name, layout['expense_block'])
    if kind in (None, mapper.Kind.Income):
        ranges[mapper.Kind.Income] = a1(sheet_name, layout['income_block'])

    results = dict(_reader(reader).batch_get_ranges(_spreadsheet_id(spreadsheet_id), list(ranges.values())))
    expense_rows = results.get(ranges[mapper.Kind.Expense], []) if mapper.Kind.Expense in ranges else None
    income_rows = results.get(ranges[mapper.Kind.Income], []) if mapper.Kind.Income in ranges else None

    records = mapper.map_transactions(expense_rows, income_rows)
    return transactions.group_transactions(records, date_filter=date_filter, category_filter=category_filter,
                                           clock=clock)


def get_analysis(spreadsheet_id: str, sheet_name: str, period: Union[str, period_.Period],
                 reader=None, clock: Optional[Clock] = None,
                 cancel_event: Optional[threading.Event] = None) -> analysis.AnalysisResult:
    """Analyse expenses and income over a reporting period.

    Single-sheet periods read the sheet's total cells; when a total cell is empty or
    zero, and for multi-month periods, the total is the sum of the categories.
    Category percentages are always taken of the category sum. Month sheets that do
    not exist are skipped.

    Args:
        spreadsheet_id: The spreadsheet id. Defaults to the configured id.
        sheet_name: The current month's sheet.
        period: One of the :class:`Period` values.
        reader: Range reader. Defaults to a :class:`SheetsRangeReader`.
        clock: Clock of the period window and daily average.
        cancel_event: When set, the analysis stops before the next read.

    Returns:
        AnalysisResult: The expense and income reports.

    Raises:
        status.InvalidPeriodException: If the period is unknown. Raised before any read.
        status.ServiceUnavailableException: If a read fails. No partial result is returned.
        status.OperationCancelledException: If ``cancel_event`` was set.
    """
    period = period_.Period.parse(period)
    clock = clock or Clock()
    reader = _reader(reader)
    spreadsheet_id = _spreadsheet_id(spreadsheet_id)

    layout = lib.settings.get_section('layout')
    labels = lib.settings.get_section('labels')
    currency_symbol = lib.settings['currency_symbol']

    sheets = period_.resolve_sheets(sheet_name, period, clock)
    single_sheet = not period_.is_multi_sheet(period)
    logging.debug(f'Analysing "{period}" over sheets [{", ".join(sheets)}].')

    expense_frames: List[pd.DataFrame] = []
    income_frames: List[pd.DataFrame] = []
    priority_frames: List[pd.DataFrame] = []
    expense_total = 0.0
    income_total = 0.0

    for sheet in sheets:
        _check_cancelled(cancel_event)

        keys = ['expense_categories', 'expense_priorities', 'income_block']
        if single_sheet:
            keys += ['expense_total', 'income_total']
        ranges = [a1(sheet, layout[k]) for k in keys]
        rows = {k: r for k, (_, r) in zip(keys, reader.batch_get_ranges(spreadsheet_id, ranges))}

        if not any(rows.values()):
            logging.debug(f'Sheet "{sheet}" is missing or empty, skipped.')
            continue

        expense_frames.append(analysis.category_frame(
            rows['expense_categories'], with_sub_category=True,
            currency_symbol=currency_symbol, other_label=labels['other'],
        ))
        priority_frames.append(analysis.priority_frame(rows['expense_priorities'], currency_symbol=currency_symbol))
        income_records = mapper.map_rows(rows['income_block'], mapper.Kind.Income, currency_symbol=currency_symbol)
        income_frames.append(analysis.record_frame(income_records, other_label=labels['other']))

        if single_sheet:
            expense_total = _total_cell(rows['expense_total'], currency_symbol)
            income_total = _total_cell(rows['income_total'], currency_symbol)

    _check_cancelled(cancel_event)
    master = get_income_categories(spreadsheet_id, reader=reader)

    _check_cancelled(cancel_event)
    label = period_.period_label(period, sheet_name, clock)
    divisor = period_.resolve_day_divisor(period, clock)

    expense = analysis.build_report(
        period, label, analysis.sum_categories(expense_frames), expense_total, divisor, False,
        priorities=analysis.sum_priorities(priority_frames), labels=labels, currency_symbol=currency_symbol,
    )
    income_df = analysis.reconcile_income_categories(analysis.sum_categories(income_frames), master)
    income = analysis.build_report(
        period, label, income_df, income_total, divisor, True,
        labels=labels, currency_symbol=currency_symbol,
    )
    return analysis.AnalysisResult(expense=expense, income=income)


def _total_cell(rows: List[List[Any]], currency_symbol: Optional[str]) -> float:
    if not rows:
        return 0.0
    return abs(cells.parse_amount(cells.cell_at(rows[0], 0), currency_symbol=currency_symbol))


def get_income_categories(spreadsheet_id: Optional[str] = None, reader=None) -> List[str]:
    """Return the master income category list.

    Names are trimmed; blanks and duplicates are dropped and sheet order is kept.
    """
    spreadsheet = lib.settings.get_section('spreadsheet')
    layout = lib.settings.get_section('layout')
    range_ = a1(spreadsheet['master_sheet'], layout['income_master'])
    rows = _reader(reader).get_range(_spreadsheet_id(spreadsheet_id), range_)

    names: List[str] = []
    for row in rows:
        name = cells.cell_at(row, 0).text
        if name and name not in names:
            names.append(name)
    return names


def _record_amount(value: Any) -> float:
    if value is None or isinstance(value, bool):
        raise status.InvalidFieldsException('"amount" is required.')
    amount = cells.parse_amount(value) if isinstance(value, str) else value
    try:
        amount = abs(float(amount))
    except (TypeError, ValueError) as ex:
        raise status.InvalidFieldsException(f'"amount" must be a number, got {value!r}.') from ex
    if not math.isfinite(amount) or amount == 0:
        raise status.InvalidFieldsException(f'"amount" must be a non-zero number, got {value!r}.')
    return amount


def _record_timestamp(value: Any, clock: Optional[Clock]) -> str:
    if value is None or value == '':
        return (clock or Clock()).now().strftime(RECORD_TIMESTAMP_FORMAT)
    if isinstance(value, datetime.datetime):
        return value.strftime(RECORD_TIMESTAMP_FORMAT)
    ts = cells.parse_date(value)
    if pd.isna(ts):
        raise status.InvalidFieldsException(f'"transaction_at" could not be parsed: {value!r}.')
    return ts.strftime(RECORD_TIMESTAMP_FORMAT)


def record_transaction(spreadsheet_id: str, sheet_name: str, kind: Union[str, mapper.Kind],
                       fields: Dict[str, Any], author: str, reader=None,
                       clock: Optional[Clock] = None) -> List[Any]:
    """Append a transaction to the expense or income block of a month sheet.

    Args:
        spreadsheet_id: The spreadsheet id. Defaults to the configured id.
        sheet_name: The month sheet.
        kind: 'expense' or 'income'.
        fields: 'description', 'category' and 'amount' are required. 'priority'
            (expense only), 'notes' and 'transaction_at' are optional; the time
            defaults to the clock's current time.
        author: Name of the user recording the transaction.
        reader: Range reader. Defaults to a :class:`SheetsRangeReader`.
        clock: Clock of the default timestamp.

    Returns:
        list: The appended row.

    Raises:
        status.InvalidFieldsException: If a field is missing or invalid. Raised before any write.
        status.ServiceUnavailableException: If the append fails.
    """
    try:
        kind = mapper.Kind(str(kind).strip().lower())
    except ValueError as ex:
        raise status.InvalidFieldsException(f'Unknown transaction kind "{kind}".') from ex
    if not isinstance(fields, dict):
        raise status.InvalidFieldsException(f'Fields must be a mapping, got {type(fields)}.')

    description = cells.to_cell(fields.get('description')).text
    category = cells.to_cell(fields.get('category')).text
    if not description:
        raise status.InvalidFieldsException('"description" is required.')
    if not category:
        raise status.InvalidFieldsException('"category" is required.')
    if not sheet_name:
        raise status.InvalidFieldsException('A sheet name is required.')

    columns = mapper.BLOCK_COLUMNS[kind]
    row: List[Any] = [''] * columns.width
    row[columns.description] = description
    row[columns.category] = category
    row[columns.amount] = _record_amount(fields.get('amount'))
    row[columns.notes] = cells.to_cell(fields.get('notes')).text
    row[columns.timestamp] = _record_timestamp(fields.get('transaction_at'), clock)
    row[columns.author] = cells.to_cell(author).text
    if columns.priority is not None:
        row[columns.priority] = cells.to_cell(fields.get('priority')).text
    elif fields.get('priority'):
        logging.debug('Ignoring "priority" of an income transaction.')

    layout = lib.settings.get_section('layout')
    range_ = a1(sheet_name, layout[f'{kind.value}_block'])
    _reader(reader).append_row(_spreadsheet_id(spreadsheet_id), range_, row)
    logging.debug(f'Recorded {kind.value} "{description}" in "{sheet_name}".')
    return row


def _category_sheet(sheet_name: Optional[str]) -> str:
    return sheet_name or lib.settings.get_section('spreadsheet')['category_sheet']


def get_category_budget(spreadsheet_id: Optional[str] = None, sheet_name: Optional[str] = None,
                        reader=None) -> budget_.CategoryBudget:
    """Read the monthly, daily and per-category budgets from the category sheet."""
    sheet = _category_sheet(sheet_name)
    layout = lib.settings.get_section('layout')
    (_, budget_rows), (_, category_rows) = _reader(reader).batch_get_ranges(
        _spreadsheet_id(spreadsheet_id),
        [a1(sheet, layout['budget_cells']), a1(sheet, layout['budget_categories'])],
    )
    return budget_.parse_budget(budget_rows, category_rows, currency_symbol=lib.settings['currency_symbol'])


def save_category_budget(budget: Union[budget_.CategoryBudget, Dict[str, Any]],
                         spreadsheet_id: Optional[str] = None, sheet_name: Optional[str] = None,
                         reader=None) -> budget_.CategoryBudget:
    """Write the budget cells and replace the category budget rows of the category sheet.

    Raises:
        status.InvalidFieldsException: If the budget is invalid. Raised before any write.
        status.ServiceUnavailableException: If a write fails.
    """
    if not isinstance(budget, budget_.CategoryBudget):
        budget = budget_.CategoryBudget.from_dict(budget)

    sheet = _category_sheet(sheet_name)
    layout = lib.settings.get_section('layout')
    reader = _reader(reader)
    spreadsheet_id = _spreadsheet_id(spreadsheet_id)

    reader.update_range(spreadsheet_id, a1(sheet, layout['budget_cells']), budget_.budget_cell_rows(budget))
    categories_range = a1(sheet, layout['budget_categories'])
    reader.clear_range(spreadsheet_id, categories_range)
    rows = budget_.category_rows(budget)
    if rows:
        reader.update_range(spreadsheet_id, categories_range, rows)

    logging.debug(f'Saved budget with {len(rows)} categories to "{sheet}".')
    return budget
