"""Custom exception classes for Storymind."""

from typing import Optional


class StorymindError(RuntimeError):
    """Base class for Storymind errors."""


class StorageError(StorymindError):
    """Raised when the backing key-value storage cannot be read or written.

    Attributes:
        key: Storage key involved in the failed operation
    """

    def __init__(self, message: str, key: Optional[str] = None):
        super().__init__(message)
        self.key = key


class ImportPayloadError(StorymindError):
    """Raised when an import payload is not a JSON object or fails validation."""
