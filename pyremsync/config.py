"""Configuration management for pyremsync.

Named remotes are stored as JSON in ``~/.config/pyremsync/config.json``
(the directory can be overridden with ``PYREMSYNC_CONFIG_DIR``)::

    {
      "remotes": {
        "site": {"type": "s3", "bucket": "www", "region": "us-east-1"},
        "box": {"type": "sftp", "host": "example.com", "user": "deploy"}
      }
    }
"""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Union

from .exceptions import RemsyncConfigError
from .utils import DEFAULT_SFTP_PORT

logger = logging.getLogger(__name__)

CONFIG_DIR_ENV = "PYREMSYNC_CONFIG_DIR"
CONFIG_FILE_NAME = "config.json"

_MASK = "********"


@dataclass
class S3RemoteConfig:
    """Connection settings for an S3-compatible object store."""

    bucket: str
    region: Optional[str] = None
    access_key_id: Optional[str] = None
    secret_access_key: Optional[str] = None
    endpoint_url: Optional[str] = None

    type = "s3"

    def __post_init__(self) -> None:
        if not self.bucket:
            raise RemsyncConfigError("S3 remote requires a bucket")

    @property
    def cache_key(self) -> str:
        return f"s3:{self.endpoint_url or ''}:{self.bucket}:{self.access_key_id or ''}"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "S3RemoteConfig":
        return cls(
            bucket=data.get("bucket", ""),
            region=data.get("region"),
            access_key_id=data.get("accessKeyId"),
            secret_access_key=data.get("secretAccessKey"),
            endpoint_url=data.get("endpointUrl"),
        )

    def to_dict(self, mask_secrets: bool = False) -> dict[str, Any]:
        data: dict[str, Any] = {"type": self.type, "bucket": self.bucket}
        if self.region:
            data["region"] = self.region
        if self.access_key_id:
            data["accessKeyId"] = self.access_key_id
        if self.secret_access_key:
            data["secretAccessKey"] = (
                _MASK if mask_secrets else self.secret_access_key
            )
        if self.endpoint_url:
            data["endpointUrl"] = self.endpoint_url
        return data


@dataclass
class SftpRemoteConfig:
    """Connection settings for an SFTP server."""

    host: str
    user: str
    port: int = DEFAULT_SFTP_PORT
    password: Optional[str] = None
    key_file: Optional[str] = None

    type = "sftp"

    def __post_init__(self) -> None:
        if not self.host:
            raise RemsyncConfigError("SFTP remote requires a host")
        if not self.user:
            raise RemsyncConfigError("SFTP remote requires a user")
        try:
            self.port = int(self.port)
        except (TypeError, ValueError) as e:
            raise RemsyncConfigError(f"Invalid SFTP port: {self.port!r}") from e

    @property
    def cache_key(self) -> str:
        return f"sftp:{self.user}@{self.host}:{self.port}"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SftpRemoteConfig":
        return cls(
            host=data.get("host", ""),
            user=data.get("user", ""),
            port=data.get("port", DEFAULT_SFTP_PORT),
            password=data.get("password"),
            key_file=data.get("keyFile"),
        )

    def to_dict(self, mask_secrets: bool = False) -> dict[str, Any]:
        data: dict[str, Any] = {
            "type": self.type,
            "host": self.host,
            "port": self.port,
            "user": self.user,
        }
        if self.password:
            data["password"] = _MASK if mask_secrets else self.password
        if self.key_file:
            data["keyFile"] = self.key_file
        return data


RemoteConfig = Union[S3RemoteConfig, SftpRemoteConfig]

_REMOTE_TYPES: dict[str, Any] = {
    "s3": S3RemoteConfig,
    "sftp": SftpRemoteConfig,
}


def remote_config_from_dict(data: dict[str, Any]) -> RemoteConfig:
    """Build a remote configuration from its JSON form.

    Args:
        data: Dictionary with a ``type`` key of ``s3`` or ``sftp``

    Returns:
        S3RemoteConfig or SftpRemoteConfig

    Raises:
        RemsyncConfigError: If the type is unknown or required fields are missing
    """
    if not isinstance(data, dict):
        raise RemsyncConfigError("Remote definition must be a JSON object")
    remote_type = data.get("type")
    remote_cls = _REMOTE_TYPES.get(str(remote_type).lower())
    if remote_cls is None:
        raise RemsyncConfigError(
            f"Unknown remote type: {remote_type!r} (expected 's3' or 'sftp')"
        )
    return remote_cls.from_dict(data)


class Config:
    """Reads and writes the pyremsync configuration file."""

    def __init__(self, config_dir: Optional[Path] = None):
        """Initialize configuration.

        Args:
            config_dir: Configuration directory. Defaults to
                ``$PYREMSYNC_CONFIG_DIR`` or ``~/.config/pyremsync``
        """
        if config_dir is None:
            env_dir = os.environ.get(CONFIG_DIR_ENV)
            if env_dir:
                config_dir = Path(env_dir)
            else:
                config_dir = Path.home() / ".config" / "pyremsync"
        self.config_dir = config_dir

    @property
    def config_file(self) -> Path:
        return self.config_dir / CONFIG_FILE_NAME

    def _read(self) -> dict[str, Any]:
        if not self.config_file.exists():
            return {}
        try:
            with open(self.config_file, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise RemsyncConfigError(
                f"Failed to read config file {self.config_file}: {e}"
            ) from e
        if not isinstance(data, dict):
            raise RemsyncConfigError(
                f"Config file {self.config_file} must contain a JSON object"
            )
        return data

    def _write(self, data: dict[str, Any]) -> None:
        self.config_dir.mkdir(parents=True, exist_ok=True)
        with open(self.config_file, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
        # Secrets live in this file
        try:
            self.config_file.chmod(0o600)
        except OSError as e:
            logger.debug(f"Could not restrict config file permissions: {e}")

    def load_remotes(self) -> dict[str, RemoteConfig]:
        """Load all named remotes.

        Returns:
            Mapping of remote name to remote configuration
        """
        raw_remotes = self._read().get("remotes", {})
        if not isinstance(raw_remotes, dict):
            raise RemsyncConfigError("'remotes' must be a JSON object")

        remotes: dict[str, RemoteConfig] = {}
        for name, data in raw_remotes.items():
            try:
                remotes[name] = remote_config_from_dict(data)
            except RemsyncConfigError as e:
                raise RemsyncConfigError(f"Remote '{name}': {e}") from e
        logger.debug(f"Loaded {len(remotes)} remote(s) from {self.config_file}")
        return remotes

    def list_remote_names(self) -> list[str]:
        return sorted(self.load_remotes())

    def get_remote(self, name: str) -> RemoteConfig:
        """Get a named remote.

        Raises:
            RemsyncConfigError: If no remote with that name is configured
        """
        remotes = self.load_remotes()
        if name not in remotes:
            raise RemsyncConfigError(
                f"Remote '{name}' is not configured. "
                "Add it with 'pyremsync remote add'."
            )
        return remotes[name]

    def save_remote(self, name: str, remote: RemoteConfig) -> None:
        """Add or replace a named remote."""
        if not name or ":" in name:
            raise RemsyncConfigError(f"Invalid remote name: {name!r}")
        data = self._read()
        data.setdefault("remotes", {})[name] = remote.to_dict()
        self._write(data)
        logger.debug(f"Saved remote '{name}' to {self.config_file}")

    def remove_remote(self, name: str) -> bool:
        """Remove a named remote.

        Returns:
            True if the remote existed, False otherwise
        """
        data = self._read()
        remotes = data.get("remotes", {})
        if name not in remotes:
            return False
        del remotes[name]
        self._write(data)
        return True


config = Config()
