"""Remote transport interface shared by all backends."""

from abc import ABC, abstractmethod
from collections.abc import Iterator
from pathlib import Path
from typing import Optional

from ..sync.lister import iter_paginated_files, walk_directory_tree
from ..sync.models import ListPage, RemoteDirEntry, RemoteFile
from ..utils import normalize_remote_prefix


class RemoteTransport(ABC):
    """Capability interface for a remote backend.

    The sync engine only talks to this interface: list files under a root,
    put a local file at a key, delete a key, and ensure a directory exists.
    """

    kind: str = ""
    """Short backend name (e.g. "s3", "sftp")"""

    absolute_paths: bool = False
    """Whether remote roots may be absolute paths (filesystem-style remotes)"""

    supports_content_type: bool = False
    """Whether put() stores the content-type hint"""

    def normalize_root(self, root: str) -> str:
        """Normalize a caller supplied remote root into a key prefix."""
        return normalize_remote_prefix(root, keep_leading_slash=self.absolute_paths)

    @abstractmethod
    def iter_files(self, prefix: str) -> Iterator[RemoteFile]:
        """Iterate every file under a normalized prefix."""

    def list(self, prefix: str) -> Iterator[str]:
        """Iterate the relative keys of every file under a normalized prefix."""
        for remote_file in self.iter_files(prefix):
            yield remote_file.relative_path

    @abstractmethod
    def put(
        self,
        local_path: Path,
        remote_key: str,
        content_type: Optional[str] = None,
    ) -> None:
        """Upload a local file to ``remote_key``, replacing any existing file."""

    @abstractmethod
    def delete(self, remote_key: str) -> None:
        """Delete the file at ``remote_key``."""

    def ensure_directory(self, path: str) -> None:
        """Make sure a remote directory exists. No-op for flat key namespaces."""

    def close(self) -> None:
        """Release connections held by this transport."""

    def __enter__(self) -> "RemoteTransport":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


class PaginatedTransport(RemoteTransport):
    """Object store backend listed page by page with continuation tokens."""

    @abstractmethod
    def list_page(
        self, prefix: str, continuation_token: Optional[str] = None
    ) -> ListPage:
        """Fetch one page of objects whose keys start with ``prefix``."""

    def iter_files(self, prefix: str) -> Iterator[RemoteFile]:
        return iter_paginated_files(self.list_page, prefix)


class DirectoryTransport(RemoteTransport):
    """Filesystem-style backend listed one directory level at a time."""

    absolute_paths = True

    @abstractmethod
    def read_dir(self, path: str) -> list[RemoteDirEntry]:
        """Read one remote directory.

        Raises:
            RemsyncRemoteNotFoundError: If the directory does not exist
        """

    def iter_files(self, prefix: str) -> Iterator[RemoteFile]:
        return walk_directory_tree(self.read_dir, prefix)
