"""Custom exceptions for the clipboard queue."""

from typing import Optional


class CbqError(Exception):
    """Base exception for all clipboard queue errors."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        super().__init__(message)
        self.original_error = original_error

    def __str__(self):
        base_msg = super().__str__()
        if self.original_error:
            return f"{base_msg} (Caused by: {type(self.original_error).__name__}: {self.original_error})"
        return base_msg


class StorageError(CbqError):
    """Reading or writing the persisted queue state failed."""
    pass


class EmptyQueueError(CbqError):
    """Pop was requested on an empty queue."""

    def __init__(self, message: str = "Queue is empty"):
        super().__init__(message)


class ClipboardError(CbqError):
    """Platform clipboard read or write failed."""
    pass


class ConfigurationError(CbqError):
    """Invalid application configuration."""
    pass
