"""Custom exceptions for mates."""


class MatesError(Exception):
    """Base exception for all mates errors."""


class ConfigurationError(MatesError):
    """Exception raised for missing or invalid settings."""


class StorageError(MatesError):
    """Exception raised when a contact or index file cannot be read or written."""


class ContactExistsError(StorageError):
    """Exception raised when an exclusive create finds the target already present."""


class ContactParseError(MatesError):
    """Exception raised when a contact file is not a valid vCard."""


class NoSenderError(MatesError):
    """Exception raised when an email has no From header."""


class ContactIndexError(MatesError):
    """Exception raised when a contact cannot be turned into index rows."""


class FilterError(MatesError):
    """Exception raised when the external filter process fails."""


class FilterSpawnError(FilterError):
    """Exception raised when the filter process cannot be started."""


class FilterStreamError(FilterError):
    """Exception raised when talking to a running filter process fails."""


class AmbiguityError(MatesError):
    """Exception raised when a query does not resolve to exactly one contact."""


class ContactNotFoundError(AmbiguityError):
    """Exception raised when a query matches no contact."""


class AmbiguousQueryError(AmbiguityError):
    """Exception raised when a query matches more than one contact."""


class EditorError(MatesError):
    """Exception raised when the editor cannot be run or fails."""
