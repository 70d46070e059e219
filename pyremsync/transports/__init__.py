"""Remote transports for pyremsync."""

from ..config import RemoteConfig, S3RemoteConfig, SftpRemoteConfig
from ..exceptions import RemsyncConfigError
from .base import DirectoryTransport, PaginatedTransport, RemoteTransport
from .s3 import S3Transport
from .sftp import SftpTransport


def create_transport(remote: RemoteConfig) -> RemoteTransport:
    """Create the transport matching a remote configuration.

    Args:
        remote: S3 or SFTP remote configuration

    Returns:
        A new, unconnected transport

    Raises:
        RemsyncConfigError: If the remote type is not supported
    """
    if isinstance(remote, S3RemoteConfig):
        return S3Transport.from_config(remote)
    if isinstance(remote, SftpRemoteConfig):
        return SftpTransport.from_config(remote)
    raise RemsyncConfigError(f"Unsupported remote type: {type(remote).__name__}")


__all__ = [
    "RemoteTransport",
    "PaginatedTransport",
    "DirectoryTransport",
    "S3Transport",
    "SftpTransport",
    "create_transport",
]
