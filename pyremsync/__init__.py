"""pyremsync - mirror a local directory to an S3 bucket or an SFTP server."""

__version__ = "0.1.0"

from .cache import TransportCache  # noqa: E402
from .exceptions import (  # noqa: E402
    RemsyncConfigError,
    RemsyncError,
    RemsyncInvalidInputError,
    RemsyncListingError,
    RemsyncOperationError,
    RemsyncRemoteNotFoundError,
    RemsyncTransportError,
)
from .sync import SyncEngine, SyncPlan, plan_sync  # noqa: E402
from .transports import (  # noqa: E402
    RemoteTransport,
    S3Transport,
    SftpTransport,
    create_transport,
)

__all__ = [
    "__version__",
    "TransportCache",
    "SyncEngine",
    "SyncPlan",
    "plan_sync",
    "RemoteTransport",
    "S3Transport",
    "SftpTransport",
    "create_transport",
    "RemsyncError",
    "RemsyncConfigError",
    "RemsyncInvalidInputError",
    "RemsyncListingError",
    "RemsyncOperationError",
    "RemsyncRemoteNotFoundError",
    "RemsyncTransportError",
]
