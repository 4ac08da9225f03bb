"""Status definitions and exceptions for Byeboros.

This module provides:
    - Status: enumeration of possible service states
    - STATUS_MESSAGE: user-facing messages for each status
    - get_message: retrieve the message for a status
    - BaseStatusException: base exception carrying a Status
    - Specific exceptions (e.g., ServiceUnavailableException) for error handling in services
"""
import enum
import logging
from typing import Dict


class Status(enum.StrEnum):
    """Enumeration of service status codes."""
    UnknownStatus = enum.auto()
    Okay = enum.auto()

    # Config status
    LedgerConfigNotFound = enum.auto()
    LedgerConfigInvalid = enum.auto()

    # Authentication status
    CredsNotFound = enum.auto()
    CredsInvalid = enum.auto()
    NotAuthenticated = enum.auto()

    # Spreadsheet access status
    SpreadsheetIdNotConfigured = enum.auto()

    # Service status
    ServiceUnavailable = enum.auto()
    OperationCancelled = enum.auto()

    # Caller input status
    InvalidPeriod = enum.auto()
    InvalidFilter = enum.auto()
    InvalidFields = enum.auto()


STATUS_MESSAGE: Dict[Status, str] = {
    Status.UnknownStatus: 'Unknown status. Please check the settings.',
    Status.Okay: 'Everything is okay.',

    Status.LedgerConfigNotFound: 'Could not find the ledger config.',
    Status.LedgerConfigInvalid: 'The ledger config seems to be incomplete, or contains invalid values.',

    Status.CredsNotFound: 'Could not find the Google credentials. Have you set up a service account or token file?',
    Status.CredsInvalid: 'Could not verify the Google credentials.',
    Status.NotAuthenticated: 'Authentication error. Could not obtain valid Google credentials.',

    Status.SpreadsheetIdNotConfigured: 'No spreadsheet id was given.',

    Status.ServiceUnavailable: 'Google Sheets service is unavailable. Please try again later.',
    Status.OperationCancelled: 'The operation was cancelled.',

    Status.InvalidPeriod: 'Invalid period. Use one of: Day, Month, 3 Months, 6 Months, Year.',
    Status.InvalidFilter: 'Invalid filter value.',
    Status.InvalidFields: 'The transaction fields are incomplete, or contain invalid values.',
}


def get_message(status: Status) -> str:
    """
    Get the message for a given status.

    Args:
        status (Status): The status enum.

    Returns:
        str: The message associated with the status.
    """
    return STATUS_MESSAGE.get(status, 'Unknown status')


class BaseStatusException(Exception):
    """Base exception for status-based errors in Byeboros.

    Attributes:
        status (Status): Status code associated with this error.
        status_message (str): User-facing message for the status.
        detail (str): The additional context passed by the raiser, if any.

    Args:
        message (str): Optional additional context for the error.
    """
    status = Status.UnknownStatus

    def __init__(self, message: str = None):
        self.status_message = get_message(self.status)
        self.detail = message or ''
        exception_message = f'{self.status_message} {message}' if message else self.status_message
        super().__init__(exception_message)

        logging.error(exception_message)


class LedgerConfigNotFoundException(BaseStatusException):
    """Exception raised when the ledger configuration file cannot be found."""
    status = Status.LedgerConfigNotFound


class LedgerConfigInvalidException(BaseStatusException):
    """Exception raised when the ledger configuration is invalid or malformed."""
    status = Status.LedgerConfigInvalid


class CredsNotFoundException(BaseStatusException):
    """Exception raised when no Google credentials file can be found."""
    status = Status.CredsNotFound


class CredsInvalidException(BaseStatusException):
    """Exception raised when stored Google credentials are invalid or corrupt."""
    status = Status.CredsInvalid


class AuthenticationException(BaseStatusException):
    """Exception raised when credentials cannot be refreshed."""
    status = Status.NotAuthenticated


class SpreadsheetIdNotConfiguredException(BaseStatusException):
    """Exception raised when no spreadsheet id is supplied."""
    status = Status.SpreadsheetIdNotConfigured


class ServiceUnavailableException(BaseStatusException):
    """Exception raised when a read or write against Google Sheets fails."""
    status = Status.ServiceUnavailable


class OperationCancelledException(BaseStatusException):
    """Exception raised when the caller cancels a report while it is being built."""
    status = Status.OperationCancelled


class InvalidPeriodException(BaseStatusException):
    """Exception raised when a reporting period is not recognised."""
    status = Status.InvalidPeriod


class InvalidFilterException(BaseStatusException):
    """Exception raised when a transaction filter cannot be interpreted."""
    status = Status.InvalidFilter


class InvalidFieldsException(BaseStatusException):
    """Exception raised when a transaction to record is missing required fields."""
    status = Status.InvalidFields
