"""Standardized error handling utilities.

Provides the storage error taxonomy and consistent logging helpers.
"""

from .errors import (
    StorageError,
    ValidationError,
    NotFoundError,
    TransportError,
    CascadeFailure,
    MigrationError,
)
from .handlers import (
    ErrorContext,
    log_error_with_context,
    create_error_response,
)

__all__ = [
    "StorageError",
    "ValidationError",
    "NotFoundError",
    "TransportError",
    "CascadeFailure",
    "MigrationError",
    "ErrorContext",
    "log_error_with_context",
    "create_error_response",
]
