"""Error handling module for the roster."""

from .handlers import (
    BaseCommunalError,
    ErrorCategory,
    ErrorContext,
    ErrorSeverity,
    RecordNotFoundError,
    StorageError,
    ValidationError,
)

__all__ = [
    "BaseCommunalError",
    "ErrorCategory",
    "ErrorContext",
    "ErrorSeverity",
    "RecordNotFoundError",
    "StorageError",
    "ValidationError",
]
