"""
Bank Import Exceptions

Errors raised outside of row processing. Row-level failures are never raised
out of the importer; they are collected as error strings instead.
"""


class BankImportError(Exception):
    """Base class for bank import errors."""


class ConfigurationError(BankImportError):
    """Raised when the import configuration is invalid."""


class TransportError(BankImportError):
    """Raised when a remote file operation fails."""


class PersistenceError(BankImportError):
    """Raised when the account store cannot persist a transfer."""


class BatchDocumentError(BankImportError):
    """Raised when a settlement batch cannot be written."""
