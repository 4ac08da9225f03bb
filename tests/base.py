"""Unittest base class for creating a clean test environment."""
import datetime
import logging
import os
import shutil
import tempfile
import unittest
from typing import Any, Dict, List, Optional, Sequence, Tuple

from Byeboros.core import auth
from Byeboros.core import service
from Byeboros.core.clock import FixedClock
from Byeboros.settings import lib
from Byeboros.status import status

SPREADSHEET_ID = 'test-spreadsheet-id'

# Monday 16 February 2026, 10:00 in Jakarta
NOW = datetime.datetime(2026, 2, 16, 10, 0, 0)


class FakeRangeReader:
    """In-memory stand-in for :class:`Byeboros.core.service.SheetsRangeReader`.

    Ranges are looked up by their full expression, e.g. 'Februari!A2:G'. Unknown
    ranges read as empty, like a missing sheet does.
    """

    def __init__(self, ranges: Optional[Dict[str, List[List[Any]]]] = None, fail: bool = False) -> None:
        self.ranges: Dict[str, List[List[Any]]] = dict(ranges or {})
        self.fail = fail
        self.reads: List[str] = []
        self.batches: List[List[str]] = []
        self.appended: List[Tuple[str, List[Any]]] = []
        self.updated: List[Tuple[str, List[List[Any]]]] = []
        self.cleared: List[str] = []

    def _check(self, spreadsheet_id: str) -> None:
        if not spreadsheet_id:
            raise status.SpreadsheetIdNotConfiguredException
        if self.fail:
            raise status.ServiceUnavailableException('Connection error while reading.')

    def get_range(self, spreadsheet_id: str, range_: str) -> List[List[Any]]:
        self._check(spreadsheet_id)
        self.reads.append(range_)
        return [list(row) for row in self.ranges.get(range_, [])]

    def batch_get_ranges(self, spreadsheet_id: str, ranges: Sequence[str]) -> List[Tuple[str, List[List[Any]]]]:
        self._check(spreadsheet_id)
        self.batches.append(list(ranges))
        self.reads.extend(ranges)
        return [(r, [list(row) for row in self.ranges.get(r, [])]) for r in ranges]

    def append_row(self, spreadsheet_id: str, range_: str, values: List[Any]) -> None:
        self._check(spreadsheet_id)
        self.appended.append((range_, list(values)))

    def update_range(self, spreadsheet_id: str, range_: str, rows: List[List[Any]]) -> None:
        self._check(spreadsheet_id)
        self.updated.append((range_, [list(row) for row in rows]))

    def clear_range(self, spreadsheet_id: str, range_: str) -> None:
        self._check(spreadsheet_id)
        self.cleared.append(range_)


class BaseTestCase(unittest.TestCase):
    """Base test case that sets up and tears down a temporary config directory."""

    config_dir: str

    def setUp(self) -> None:
        """Point the config directory at a temporary directory and reinitialize all APIs."""
        self._env_backup = os.environ.get(lib.CONFIG_DIR_ENV_KEY)
        self.config_dir = tempfile.mkdtemp(prefix='byeboros_test_')
        os.environ[lib.CONFIG_DIR_ENV_KEY] = self.config_dir
        os.environ.pop(lib.SERVICE_ACCOUNT_ENV_KEY, None)
        logging.debug(f'Using temporary config directory {self.config_dir}')

        # Reinitialize settings API
        lib.settings = lib.SettingsAPI()

        auth.auth_manager.clear()
        service.clear_service()

        self.clock = FixedClock(NOW)

    def tearDown(self) -> None:
        """Remove the temporary config directory and restore the environment."""
        auth.auth_manager.clear()
        service.clear_service()

        if self._env_backup is None:
            os.environ.pop(lib.CONFIG_DIR_ENV_KEY, None)
        else:
            os.environ[lib.CONFIG_DIR_ENV_KEY] = self._env_backup

        shutil.rmtree(self.config_dir, ignore_errors=True)
