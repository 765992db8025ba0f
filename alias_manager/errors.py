"""Custom exceptions for the alias manager."""


class AliasError(RuntimeError):
    """Base class for alias related errors."""


class PersistenceError(AliasError):
    """Raised when the alias file cannot be read or written."""
