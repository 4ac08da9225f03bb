"""
Byeboros: personal-finance reporting backend over Google Sheets.

This package provides:

- :mod:`Byeboros.core` – Google credentials, the Sheets range reader and the injectable clock.
- :mod:`Byeboros.data` – Transaction listing, period analysis, budgets and transaction recording (:func:`Byeboros.data.data.list_transactions`, :func:`Byeboros.data.data.get_analysis`).
- :mod:`Byeboros.settings` – Ledger configuration with schema validation, and Babel locale helpers.
- :mod:`Byeboros.status` – Status codes and the exceptions raised by the package.
- :mod:`Byeboros.log` – Logging setup with an in-memory record tank.
"""

import sys

# Fail on Python < 3.11
if not (sys.version_info.major == 3 and sys.version_info.minor >= 11):
    raise RuntimeError('Byeboros requires Python 3.11 or higher.')

__version__ = '0.1.0'
__license__ = 'GPL-3.0'
__description__ = 'Byeboros: personal-finance reporting backend over Google Sheets.'

from .log import log

log.setup_logging()
