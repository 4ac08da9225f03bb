"""Byeboros test suite.

The config directory is pointed at a temporary directory before the package is
imported, so importing :mod:`Byeboros.settings.lib` never touches ``~/.byeboros``.
"""
import os
import tempfile

os.environ['BYEBOROS_CONFIG_DIR'] = tempfile.mkdtemp(prefix='byeboros_tests_')
os.environ.pop('GOOGLE_SERVICE_ACCOUNT_FILE', None)
