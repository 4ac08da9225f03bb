"""Google Sheets API integration.

Builds the Sheets client and implements the range reader the reports consume:
single and batched range reads, and the append/update/clear writes. Every transport,
HTTP or authentication failure is raised as :class:`status.ServiceUnavailableException`.
No retries are performed here.
"""

import logging
import re
import socket
import ssl
import threading
from typing import Any, Dict, List, Optional, Sequence, Tuple

import google.auth.exceptions
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from .auth import auth_manager
from ..status import status

# Cached Sheets API client to avoid repeated discovery/auth costs
_cached_service: Any = None
_service_lock = threading.Lock()

Rows = List[List[Any]]


def clear_service() -> None:
    """
    Clears the cached Sheets API client.
    """
    global _cached_service

    with _service_lock:
        if _cached_service is not None:
            try:
                _cached_service.close()
            except Exception as ex:
                logging.debug(f'Failed closing cached Sheets service client: {ex}')
        _cached_service = None


def get_service() -> Any:
    """
    Builds (or returns cached) Google Sheets service client.

    Returns:
        The Sheets API Resource, reusing a single client per process.
    """
    global _cached_service

    creds: Any = auth_manager.get_valid_credentials()
    with _service_lock:
        if _cached_service is not None:
            return _cached_service
        try:
            service: Any = build('sheets', 'v4', credentials=creds, cache_discovery=False)
        except Exception as ex:
            raise status.ServiceUnavailableException(f'Could not build the Sheets client: {ex}') from ex
        logging.debug('Google Sheets service client created successfully.')
        _cached_service = service
        return service


def a1(sheet_name: str, range_: str) -> str:
    """Prefix a sheet-less A1 range with a sheet name, quoting the name when needed.

    Args:
        sheet_name: The worksheet title, e.g. 'Februari' or 'Kategori Pemasukan'.
        range_: The range, e.g. 'A2:G'.

    Returns:
        The full range expression, e.g. 'Februari!A2:G'.
    """
    if re.fullmatch(r'[A-Za-z0-9_]+', sheet_name):
        return f'{sheet_name}!{range_}'
    escaped = sheet_name.replace("'", "''")
    return f"'{escaped}'!{range_}"


def _http_status(ex: HttpError) -> Optional[int]:
    return ex.resp.status if ex.resp else None


def _unavailable(ex: Exception, description: str) -> status.ServiceUnavailableException:
    """Build the ServiceUnavailableException describing a failed request."""
    if isinstance(ex, HttpError):
        stat = _http_status(ex)
        if stat == 403:
            return status.ServiceUnavailableException(
                f'Access denied (HTTP 403) while {description}. '
                'Please share the sheet with the service account.'
            )
        if stat == 404:
            return status.ServiceUnavailableException(f'Spreadsheet not found (HTTP 404) while {description}.')
        return status.ServiceUnavailableException(f'Error while {description}: {ex}')
    if isinstance(ex, socket.timeout):
        return status.ServiceUnavailableException(f'Timeout error while {description}: {ex}')
    if isinstance(ex, ssl.SSLError):
        return status.ServiceUnavailableException(f'SSL error while {description}: {ex}')
    return status.ServiceUnavailableException(f'Connection error while {description}: {ex}')


def _execute(request: Any, description: str) -> Dict[str, Any]:
    """Execute a Sheets API request, converting failures to ServiceUnavailableException."""
    try:
        return request.execute() or {}
    except (HttpError, OSError, google.auth.exceptions.GoogleAuthError) as ex:
        raise _unavailable(ex, description) from ex


class SheetsRangeReader:
    """Reads and writes cell ranges of a Google spreadsheet.

    Rows are returned as lists of loosely-typed cell values exactly as the API
    returns them. Trailing empty cells are omitted by the API, so rows can be
    shorter than the range is wide.
    """

    def __init__(self, service: Any = None, value_render_option: Optional[str] = None) -> None:
        self._service = service
        if value_render_option is None:
            from ..settings import lib
            value_render_option = lib.settings['value_render_option'] or 'FORMATTED_VALUE'
        self.value_render_option = value_render_option

    @property
    def service(self) -> Any:
        if self._service is None:
            self._service = get_service()
        return self._service

    def get_range(self, spreadsheet_id: str, range_: str) -> Rows:
        """Read a single range.

        Args:
            spreadsheet_id: The spreadsheet id.
            range_: Full range expression, e.g. 'Februari!A2:G'.

        Returns:
            The rows of the range; an empty list when the range holds no values.
        """
        if not spreadsheet_id:
            raise status.SpreadsheetIdNotConfiguredException
        logging.debug(f'Fetching range "{range_}".')
        result = _execute(
            self.service.spreadsheets().values().get(
                spreadsheetId=spreadsheet_id,
                range=range_,
                valueRenderOption=self.value_render_option,
            ),
            f'reading "{range_}"'
        )
        rows: Rows = result.get('values', [])
        logging.debug(f'Fetched {len(rows)} rows from "{range_}".')
        return rows

    def batch_get_ranges(self, spreadsheet_id: str, ranges: Sequence[str]) -> List[Tuple[str, Rows]]:
        """Read several ranges in one request.

        A range whose sheet does not exist yields an empty row list instead of
        failing the whole batch.

        Args:
            spreadsheet_id: The spreadsheet id.
            ranges: Full range expressions.

        Returns:
            (range, rows) pairs in the order of ``ranges``.
        """
        if not spreadsheet_id:
            raise status.SpreadsheetIdNotConfiguredException
        ranges = list(ranges)
        if not ranges:
            return []

        logging.debug(f'Fetching {len(ranges)} ranges: [{", ".join(ranges)}].')
        request = self.service.spreadsheets().values().batchGet(
            spreadsheetId=spreadsheet_id,
            ranges=ranges,
            valueRenderOption=self.value_render_option,
            fields='valueRanges(values)'
        )
        try:
            result = request.execute() or {}
        except HttpError as ex:
            if _http_status(ex) != 400:
                raise _unavailable(ex, 'reading ranges') from ex
            # A range referencing a missing sheet fails the whole batch with HTTP 400
            logging.debug(f'Batch read rejected ({ex}); reading ranges one by one.')
            return [(r, self._get_range_or_empty(spreadsheet_id, r)) for r in ranges]
        except (OSError, google.auth.exceptions.GoogleAuthError) as ex:
            raise _unavailable(ex, 'reading ranges') from ex

        value_ranges = result.get('valueRanges', [])
        out: List[Tuple[str, Rows]] = []
        for i, range_ in enumerate(ranges):
            rows = value_ranges[i].get('values', []) if i < len(value_ranges) else []
            out.append((range_, rows))
        logging.debug(f'Fetched {sum(len(rows) for _, rows in out)} rows in total.')
        return out

    def _get_range_or_empty(self, spreadsheet_id: str, range_: str) -> Rows:
        try:
            return self.get_range(spreadsheet_id, range_)
        except status.ServiceUnavailableException as ex:
            cause = ex.__cause__
            if isinstance(cause, HttpError) and _http_status(cause) == 400:
                logging.warning(f'Range "{range_}" does not exist, treating it as empty.')
                return []
            raise

    def append_row(self, spreadsheet_id: str, range_: str, values: List[Any]) -> None:
        """Append a row after the last row of the table found in ``range_``.

        The row is written into the empty cells below the table. Whole sheet rows are
        not inserted, so blocks side by side with the table are not shifted.
        """
        if not spreadsheet_id:
            raise status.SpreadsheetIdNotConfiguredException
        logging.debug(f'Appending row to "{range_}".')
        _execute(
            self.service.spreadsheets().values().append(
                spreadsheetId=spreadsheet_id,
                range=range_,
                valueInputOption='USER_ENTERED',
                insertDataOption='OVERWRITE',
                body={'values': [values]},
            ),
            f'appending to "{range_}"'
        )

    def update_range(self, spreadsheet_id: str, range_: str, rows: Rows) -> None:
        """Overwrite the cells of ``range_`` with ``rows``."""
        if not spreadsheet_id:
            raise status.SpreadsheetIdNotConfiguredException
        logging.debug(f'Updating range "{range_}" with {len(rows)} rows.')
        _execute(
            self.service.spreadsheets().values().update(
                spreadsheetId=spreadsheet_id,
                range=range_,
                valueInputOption='USER_ENTERED',
                body={'values': rows},
            ),
            f'updating "{range_}"'
        )

    def clear_range(self, spreadsheet_id: str, range_: str) -> None:
        """Clear the values of ``range_``, keeping formatting."""
        if not spreadsheet_id:
            raise status.SpreadsheetIdNotConfiguredException
        logging.debug(f'Clearing range "{range_}".')
        _execute(
            self.service.spreadsheets().values().clear(
                spreadsheetId=spreadsheet_id, range=range_, body={}
            ),
            f'clearing "{range_}"'
        )
