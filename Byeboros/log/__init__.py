"""
Logging subsystem for Byeboros.

Modules:

- :mod:`Byeboros.log.log` – Root logger setup and an in-memory handler for browsing recent records.
"""
