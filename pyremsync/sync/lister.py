"""Remote listing: paginated object store listings and directory tree walks."""

import logging
import time
from collections.abc import Iterator
from typing import TYPE_CHECKING, Callable, Optional

from ..exceptions import (
    RemsyncListingError,
    RemsyncRemoteNotFoundError,
    RemsyncTransportError,
)
from ..utils import strip_remote_prefix
from .models import ListPage, RemoteDirEntry, RemoteFile

if TYPE_CHECKING:
    from ..transports.base import RemoteTransport

logger = logging.getLogger(__name__)

FetchPage = Callable[[str, Optional[str]], ListPage]
ReadDir = Callable[[str], list[RemoteDirEntry]]


def iter_paginated_files(fetch_page: FetchPage, prefix: str) -> Iterator[RemoteFile]:
    """Iterate all files under a prefix of a paginated object listing.

    Pages are requested until a page reports no continuation token. Keys
    are returned relative to ``prefix``; the prefix placeholder itself and
    directory marker keys (ending in ``/``) are skipped.

    Args:
        fetch_page: Callable ``(prefix, continuation_token) -> ListPage``
        prefix: Normalized remote prefix

    Yields:
        RemoteFile for every object under the prefix
    """
    token: Optional[str] = None
    page_num = 0

    while True:
        page = fetch_page(prefix, token)
        page_num += 1
        logger.debug(
            f"Listing page {page_num} for '{prefix}': {len(page.objects)} object(s)"
        )

        for obj in page.objects:
            relative_path = strip_remote_prefix(obj.key, prefix)
            if not relative_path or relative_path.endswith("/"):
                continue
            yield RemoteFile(
                relative_path=relative_path,
                size=obj.size,
                mtime=obj.mtime,
            )

        if page.next_token is None:
            break
        token = page.next_token


def walk_directory_tree(read_dir: ReadDir, root: str) -> Iterator[RemoteFile]:
    """Walk a remote directory tree depth-first without recursion.

    Directories are read one level at a time from an explicit stack.
    A missing root yields nothing; a subdirectory that disappears while
    walking is skipped.

    Args:
        read_dir: Callable returning the entries of one remote directory,
            raising RemsyncRemoteNotFoundError if it does not exist
        root: Normalized remote directory (empty or ending in ``/``)

    Yields:
        RemoteFile for every regular file below ``root``
    """
    stack: list[str] = [""]

    while stack:
        relative_dir = stack.pop()
        current = f"{root}{relative_dir}" if relative_dir else (root or ".")

        try:
            entries = read_dir(current)
        except RemsyncRemoteNotFoundError:
            if not relative_dir:
                logger.debug(f"Remote directory {root!r} does not exist")
                return
            logger.debug(f"Remote directory {current!r} vanished during walk")
            continue

        for entry in entries:
            if entry.name in (".", ".."):
                continue
            relative_path = (
                f"{relative_dir}/{entry.name}" if relative_dir else entry.name
            )
            if entry.is_dir:
                stack.append(relative_path)
            elif entry.is_file:
                yield RemoteFile(
                    relative_path=relative_path,
                    size=entry.size,
                    mtime=entry.mtime,
                )


class RemoteLister:
    """Builds the complete set of remote files under a prefix."""

    def __init__(self, transport: "RemoteTransport"):
        """Initialize remote lister.

        Args:
            transport: Remote transport to list through
        """
        self.transport = transport

    def list_files(self, prefix: str) -> dict[str, RemoteFile]:
        """List every remote file under ``prefix``.

        Args:
            prefix: Normalized remote prefix or directory

        Returns:
            Dictionary mapping relative_path to RemoteFile. A prefix that does
            not exist yields an empty dictionary.

        Raises:
            RemsyncListingError: If the listing could not be completed
        """
        start = time.time()
        files: dict[str, RemoteFile] = {}

        try:
            for remote_file in self.transport.iter_files(prefix):
                files[remote_file.relative_path] = remote_file
        except RemsyncRemoteNotFoundError:
            logger.debug(f"Remote prefix {prefix!r} not found, treating as empty")
            return {}
        except (RemsyncTransportError, OSError) as e:
            raise RemsyncListingError(
                f"Failed to list remote files under '{prefix}': {e}"
            ) from e

        logger.debug(
            f"Remote listing of '{prefix}' took {time.time() - start:.2f}s "
            f"for {len(files)} file(s)"
        )
        return files
