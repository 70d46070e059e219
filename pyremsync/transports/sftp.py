"""SFTP transport over an SSH session (paramiko)."""

import errno
import logging
import posixpath
import stat
from pathlib import Path
from typing import Any, Optional

import paramiko

from ..config import SftpRemoteConfig
from ..exceptions import RemsyncRemoteNotFoundError, RemsyncTransportError
from ..sync.models import RemoteDirEntry
from ..utils import DEFAULT_SFTP_PORT
from .base import DirectoryTransport

logger = logging.getLogger(__name__)


class SftpTransport(DirectoryTransport):
    """Transport writing files into a directory on an SFTP server.

    The SSH connection is opened lazily on first use and kept until close().
    """

    kind = "sftp"

    def __init__(
        self,
        host: str,
        user: str,
        port: int = DEFAULT_SFTP_PORT,
        password: Optional[str] = None,
        key_file: Optional[str] = None,
        timeout: float = 30.0,
        sftp_client: Any = None,
    ):
        """Initialize SFTP transport.

        Args:
            host: Server host name
            user: Login user
            port: SSH port (default: 22)
            password: Password (uses keys/agent if omitted)
            key_file: Private key file
            timeout: Connection timeout in seconds
            sftp_client: Pre-opened paramiko SFTPClient (mainly for tests)
        """
        self.host = host
        self.user = user
        self.port = port
        self.password = password
        self.key_file = key_file
        self.timeout = timeout

        self._ssh: Optional[paramiko.SSHClient] = None
        self._sftp = sftp_client
        self._known_dirs: set[str] = set()

    @classmethod
    def from_config(cls, remote: SftpRemoteConfig) -> "SftpTransport":
        return cls(
            host=remote.host,
            user=remote.user,
            port=remote.port,
            password=remote.password,
            key_file=remote.key_file,
        )

    def _get_sftp(self) -> Any:
        """Get or open the SFTP session."""
        if self._sftp is not None:
            return self._sftp

        logger.debug(f"Connecting to {self.user}@{self.host}:{self.port}")
        ssh = paramiko.SSHClient()
        ssh.load_system_host_keys()
        ssh.set_missing_host_key_policy(paramiko.AutoAddPolicy())
        try:
            ssh.connect(
                hostname=self.host,
                port=self.port,
                username=self.user,
                password=self.password,
                key_filename=self.key_file,
                allow_agent=self.password is None,
                look_for_keys=self.password is None and self.key_file is None,
                timeout=self.timeout,
            )
            sftp = ssh.open_sftp()
        except paramiko.AuthenticationException as e:
            ssh.close()
            raise RemsyncTransportError(
                f"SSH authentication failed: {self.user}@{self.host}"
            ) from e
        except (paramiko.SSHException, OSError) as e:
            ssh.close()
            raise RemsyncTransportError(
                f"Cannot open SFTP session to {self.host}:{self.port}: {e}"
            ) from e

        self._ssh = ssh
        self._sftp = sftp
        return sftp

    def read_dir(self, path: str) -> list[RemoteDirEntry]:
        sftp = self._get_sftp()
        try:
            attrs = sftp.listdir_attr(path)
        except OSError as e:
            if isinstance(e, FileNotFoundError) or e.errno == errno.ENOENT:
                raise RemsyncRemoteNotFoundError(
                    f"Remote directory not found: {path}"
                ) from e
            raise RemsyncTransportError(
                f"Failed to read remote directory {path}: {e}"
            ) from e
        except paramiko.SSHException as e:
            raise RemsyncTransportError(
                f"Failed to read remote directory {path}: {e}"
            ) from e

        entries = []
        for attr in attrs:
            mode = attr.st_mode or 0
            entries.append(
                RemoteDirEntry(
                    name=attr.filename,
                    is_dir=stat.S_ISDIR(mode),
                    is_file=stat.S_ISREG(mode),
                    size=attr.st_size,
                    mtime=float(attr.st_mtime) if attr.st_mtime is not None else None,
                )
            )
        return entries

    def ensure_directory(self, path: str) -> None:
        """Create ``path`` and any missing parents (like ``mkdir -p``)."""
        path = posixpath.normpath(path) if path else ""
        if path in ("", ".", "/") or path in self._known_dirs:
            return

        sftp = self._get_sftp()
        is_abs = path.startswith("/")
        current = "/" if is_abs else ""

        for part in [p for p in path.split("/") if p]:
            current = posixpath.join(current, part) if current else part
            if current in self._known_dirs:
                continue
            try:
                sftp.stat(current)
            except FileNotFoundError:
                try:
                    sftp.mkdir(current)
                    logger.debug(f"Created remote directory {current}")
                except OSError as e:
                    # Another client may have created it in the meantime
                    try:
                        sftp.stat(current)
                    except OSError:
                        raise RemsyncTransportError(
                            f"Failed to create remote directory {current}: {e}"
                        ) from e
            except (OSError, paramiko.SSHException) as e:
                raise RemsyncTransportError(
                    f"Failed to check remote directory {current}: {e}"
                ) from e
            self._known_dirs.add(current)

    def put(
        self,
        local_path: Path,
        remote_key: str,
        content_type: Optional[str] = None,
    ) -> None:
        parent = posixpath.dirname(remote_key)
        if parent:
            self.ensure_directory(parent)

        sftp = self._get_sftp()
        file_size = Path(local_path).stat().st_size
        try:
            with open(local_path, "rb") as fl:
                # confirm=True stats the remote file and fails on a size mismatch
                sftp.putfo(fl, remote_key, file_size=file_size, confirm=True)
        except (OSError, paramiko.SSHException) as e:
            raise RemsyncTransportError(
                f"Failed to upload {local_path} to {self.host}:{remote_key}: {e}"
            ) from e

    def delete(self, remote_key: str) -> None:
        sftp = self._get_sftp()
        try:
            sftp.remove(remote_key)
        except FileNotFoundError:
            logger.debug(f"Remote file already gone: {remote_key}")
        except (OSError, paramiko.SSHException) as e:
            raise RemsyncTransportError(
                f"Failed to delete {self.host}:{remote_key}: {e}"
            ) from e

    def close(self) -> None:
        if self._sftp is not None:
            self._sftp.close()
            self._sftp = None
        if self._ssh is not None:
            self._ssh.close()
            self._ssh = None
        self._known_dirs.clear()

    def __repr__(self) -> str:
        return f"SftpTransport({self.user}@{self.host}:{self.port})"
