"""Exceptions raised by pyremsync."""

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .sync.planner import SyncOperation


class RemsyncError(Exception):
    """Base exception for all pyremsync errors."""


class RemsyncConfigError(RemsyncError):
    """Configuration is missing or invalid."""


class RemsyncInvalidInputError(RemsyncError):
    """Local directory or remote target string is invalid.

    Raised before any remote call is made.
    """


class RemsyncTransportError(RemsyncError):
    """A remote backend call failed."""


class RemsyncRemoteNotFoundError(RemsyncTransportError):
    """The remote prefix or directory does not exist."""


class RemsyncListingError(RemsyncError):
    """The remote listing could not be completed."""


class RemsyncOperationError(RemsyncError):
    """A single upload, overwrite or delete operation failed.

    Attributes:
        operation: The operation that failed
        cause: The underlying exception
    """

    def __init__(
        self, operation: "SyncOperation", cause: Optional[BaseException] = None
    ):
        self.operation = operation
        self.cause = cause
        message = f"{operation.action.value} failed for {operation.remote_key}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)
