"""
Byeboros data package: transaction listing, analysis and budgets.

This package provides:

- :mod:`Byeboros.data.data` – The operations called by the HTTP layer (:func:`Byeboros.data.data.list_transactions`, :func:`Byeboros.data.data.get_analysis`, :func:`Byeboros.data.data.record_transaction` and the budget and income category operations).
- :mod:`Byeboros.data.cells` – Cell value normalization: amounts, timestamps and display formatting.
- :mod:`Byeboros.data.mapper` – Maps the expense and income column blocks to transaction records.
- :mod:`Byeboros.data.transactions` – Filters transactions and groups them by day.
- :mod:`Byeboros.data.period` – Resolves reporting periods to month sheets, day divisors and labels.
- :mod:`Byeboros.data.analysis` – Category, priority and total aggregation.
- :mod:`Byeboros.data.budget` – Category budget values.
"""
