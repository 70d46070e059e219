"""Data types shared by the scanner, lister and transports."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional


@dataclass
class LocalFile:
    """Represents a local file with metadata."""

    path: Path
    """Absolute path to the file"""

    relative_path: str
    """Relative path (using forward slashes for cross-platform compatibility)"""

    size: int = 0
    """File size in bytes"""

    mtime: float = 0.0
    """Last modification time (Unix timestamp)"""


@dataclass
class RemoteFile:
    """Represents a remote file found by the lister.

    Size and modification time are informational only; they are never
    used to decide what to transfer.
    """

    relative_path: str
    """Relative path under the remote prefix"""

    size: Optional[int] = None
    """File size in bytes, if the backend reported it"""

    mtime: Optional[float] = None
    """Last modification time (Unix timestamp), if reported"""


@dataclass
class ObjectSummary:
    """A single object returned by an object store listing page."""

    key: str
    size: Optional[int] = None
    mtime: Optional[float] = None


@dataclass
class ListPage:
    """One page of an object store listing."""

    objects: list[ObjectSummary] = field(default_factory=list)
    """Objects on this page (full keys, not stripped of the prefix)"""

    next_token: Optional[str] = None
    """Continuation token for the next page, None if this is the last page"""


@dataclass
class RemoteDirEntry:
    """A single entry of a remote directory listing."""

    name: str
    is_dir: bool = False
    is_file: bool = False
    size: Optional[int] = None
    mtime: Optional[float] = None
