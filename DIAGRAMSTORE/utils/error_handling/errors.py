"""Error taxonomy for the storage layer.

Every backend raises the same exception types for the same failure, so
callers never need to know which adapter is active.
"""

from typing import Dict, Optional


class StorageError(Exception):
    """Base class for all storage-layer failures."""


class ValidationError(StorageError):
    """Missing required field or malformed input. Caller-correctable."""


class NotFoundError(StorageError):
    """Direct lookup of an entity that does not exist."""


class TransportError(StorageError):
    """The underlying store or network could not be reached."""

    def __init__(
        self,
        message: str,
        method: Optional[str] = None,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        self.method = method
        self.url = url
        self.status_code = status_code
        super().__init__(message)

    def __str__(self) -> str:
        base = super().__str__()
        if self.url:
            return f"{base} ({self.method or 'GET'} {self.url})"
        return base


class CascadeFailure(StorageError):
    """One or more steps of a rename/delete fan-out failed.

    Steps that already succeeded are not undone.
    """

    def __init__(self, operation: str, diagram_id: str, failures: Dict[str, BaseException]):
        self.operation = operation
        self.diagram_id = diagram_id
        self.failures = failures
        failed = ", ".join(sorted(failures))
        super().__init__(
            f"Cascade {operation} of diagram {diagram_id!r} failed for: {failed}"
        )


class MigrationError(StorageError):
    """A migration step failed; the store stays at the previous version."""

    def __init__(self, version: int, description: str, cause: BaseException):
        self.version = version
        self.description = description
        self.cause = cause
        super().__init__(f"Migration to version {version} ({description}) failed: {cause}")
