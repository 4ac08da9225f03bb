"""
Core package for Byeboros providing access to the spreadsheet and the wall clock.

This package includes:

- :mod:`Byeboros.core.auth` – Google credential loading and refresh (service account or authorized user).
- :mod:`Byeboros.core.service` – Google Sheets API client and the range reader used by the reports.
- :mod:`Byeboros.core.clock` – Injectable clock returning the current time in the configured timezone.
"""
