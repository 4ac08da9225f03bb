"""
Google credential loading and refresh.

The service reads and writes spreadsheets with either a service account key
(preferred, set with ``GOOGLE_SERVICE_ACCOUNT_FILE``) or an authorized-user token
file saved in the config directory. Interactive sign-in is handled outside this package.
"""

import json
import logging
import threading
from typing import Optional, Union

import google.auth.exceptions
import google.auth.transport.requests
import google.oauth2.credentials
import google.oauth2.service_account

from ..status import status

DEFAULT_SCOPES = [
    'https://www.googleapis.com/auth/spreadsheets',
    'https://www.googleapis.com/auth/drive',
]

Credentials = Union[google.oauth2.credentials.Credentials, google.oauth2.service_account.Credentials]


class AuthManager:
    """Manages Google credentials with thread-safe refresh."""

    def __init__(self):
        self._lock = threading.Lock()
        self._creds: Optional[Credentials] = None

    def get_valid_credentials(self) -> Credentials:
        """
        Return valid credentials, loading and refreshing them as needed.

        Raises:
            status.CredsNotFoundException: if neither credential file exists.
            status.CredsInvalidException: if the stored credentials are corrupt.
            status.AuthenticationException: if a refresh fails.
        """
        with self._lock:
            if self._creds is None:
                self._creds = load_creds()

            if not self._creds.valid:
                refreshable = isinstance(self._creds, google.oauth2.service_account.Credentials) or \
                              getattr(self._creds, 'refresh_token', None)
                if not refreshable:
                    raise status.AuthenticationException('Credentials expired and cannot be refreshed.')
                try:
                    self._creds.refresh(google.auth.transport.requests.Request())
                    logging.debug('Credentials refreshed.')
                except google.auth.exceptions.RefreshError as ex:
                    raise status.AuthenticationException(f'Failed to refresh credentials: {ex}') from ex
                if isinstance(self._creds, google.oauth2.credentials.Credentials):
                    save_creds(self._creds)

            return self._creds

    def clear(self) -> None:
        """Forget the cached credentials so the next call reloads them from disk."""
        with self._lock:
            self._creds = None


auth_manager = AuthManager()


def load_creds() -> Credentials:
    """
    Load credentials from the service account key, or from the authorized-user token file.

    Returns:
        The loaded (not necessarily valid) credentials.

    Raises:
        status.CredsNotFoundException: If no credentials file is found.
        status.CredsInvalidException: If the file cannot be parsed.
    """
    from ..settings import lib

    if lib.settings.service_account_path.exists():
        logging.debug(f'Loading service account from {lib.settings.service_account_path}...')
        try:
            return google.oauth2.service_account.Credentials.from_service_account_file(
                str(lib.settings.service_account_path), scopes=DEFAULT_SCOPES)
        except (ValueError, json.JSONDecodeError) as ex:
            raise status.CredsInvalidException(f'Failed to load service account: {ex}') from ex

    if lib.settings.creds_path.exists():
        logging.debug(f'Loading credentials from {lib.settings.creds_path}...')
        try:
            creds = google.oauth2.credentials.Credentials.from_authorized_user_file(
                str(lib.settings.creds_path), scopes=DEFAULT_SCOPES)
        except (ValueError, json.JSONDecodeError) as ex:
            raise status.CredsInvalidException(f'Failed to load credentials: {ex}') from ex
        logging.debug(f'Credentials loaded successfully. Scopes={creds.scopes}')
        return creds

    raise status.CredsNotFoundException(
        f'Looked for {lib.settings.service_account_path} and {lib.settings.creds_path}.')


def save_creds(creds: google.oauth2.credentials.Credentials) -> None:
    """
    Save authorized-user credentials to the configured token file.

    Args:
        creds (google.oauth2.credentials.Credentials): Credentials to save.
    """
    from ..settings import lib
    with open(lib.settings.creds_path, 'w', encoding='utf-8') as token_file:
        token_file.write(creds.to_json())

    logging.debug(f'Credentials saved to {lib.settings.creds_path}.')
