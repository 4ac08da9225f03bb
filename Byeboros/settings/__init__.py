"""
Settings package: configuration API and locale helpers.

This package provides:

- :mod:`Byeboros.settings.lib` – Core settings management and schema validation.
- :mod:`Byeboros.settings.locale` – Babel-backed formatting of amounts, dates and month names.
"""
