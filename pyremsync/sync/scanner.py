"""Local directory scanning for sync operations."""

import fnmatch
import logging
import time
from pathlib import Path
from typing import Callable, Optional

from ..exceptions import RemsyncInvalidInputError
from ..utils import normalize_relative_path
from .models import LocalFile

logger = logging.getLogger(__name__)


class DirectoryScanner:
    """Scans a local directory tree and builds the file map.

    Hidden files are included unless ``exclude_dot_files`` is set. Any other
    filtering is done through glob patterns or a caller-supplied predicate.

    Examples:
        >>> scanner = DirectoryScanner()
        >>> files = scanner.scan(Path("/srv/site"))
        >>> files["css/main.css"].path
        PosixPath('/srv/site/css/main.css')

        >>> # With patterns
        >>> scanner = DirectoryScanner(ignore_patterns=["*.tmp", "cache/*"])
    """

    def __init__(
        self,
        ignore_patterns: Optional[list[str]] = None,
        exclude_dot_files: bool = False,
        include: Optional[Callable[[str], bool]] = None,
    ):
        """Initialize directory scanner.

        Args:
            ignore_patterns: Glob patterns to skip (e.g., ["*.log", "temp/*"]),
                matched against the relative path and against each path component
            exclude_dot_files: Whether to skip files/folders starting with a dot
            include: Optional predicate on the relative path; files for which
                it returns False are skipped
        """
        self.ignore_patterns = ignore_patterns or []
        self.exclude_dot_files = exclude_dot_files
        self.include = include

    def should_ignore(self, relative_path: str, is_dir: bool = False) -> bool:
        """Check if a path should be skipped.

        Args:
            relative_path: Normalized relative path
            is_dir: Whether the path is a directory

        Returns:
            True if the path should be skipped
        """
        name = relative_path.rsplit("/", 1)[-1]
        if self.exclude_dot_files and name.startswith("."):
            return True

        for pattern in self.ignore_patterns:
            if fnmatch.fnmatchcase(relative_path, pattern) or fnmatch.fnmatchcase(
                name, pattern
            ):
                logger.debug(f"Ignoring (pattern {pattern!r}): {relative_path}")
                return True

        if not is_dir and self.include is not None and not self.include(relative_path):
            logger.debug(f"Ignoring (predicate): {relative_path}")
            return True

        return False

    def scan(self, directory: Path) -> dict[str, LocalFile]:
        """Recursively scan a local directory.

        Args:
            directory: Root directory of the sync

        Returns:
            Dictionary mapping relative_path to LocalFile

        Raises:
            RemsyncInvalidInputError: If the root is missing, is not a directory,
                or a directory below it cannot be read
        """
        directory = Path(directory)
        if not directory.exists():
            raise RemsyncInvalidInputError(
                f"Local directory does not exist: {directory}"
            )
        if not directory.is_dir():
            raise RemsyncInvalidInputError(
                f"Local path is not a directory: {directory}"
            )

        start = time.time()
        root = directory.absolute()
        files: dict[str, LocalFile] = {}
        self._scan_directory(root, root, files, ancestors=frozenset())
        logger.debug(
            f"Local scan of {root} took {time.time() - start:.2f}s "
            f"for {len(files)} file(s)"
        )
        return files

    def _scan_directory(
        self,
        directory: Path,
        base_path: Path,
        files: dict[str, LocalFile],
        ancestors: frozenset[Path],
    ) -> None:
        # Symlinked directories are followed; a loop back to an ancestor is not
        real_dir = directory.resolve()
        if real_dir in ancestors:
            logger.debug(f"Skipping symlink loop: {directory} -> {real_dir}")
            return
        ancestors = ancestors | {real_dir}

        try:
            items = sorted(directory.iterdir())
        except OSError as e:
            # Skipping an unreadable directory would plan deletes for its files
            raise RemsyncInvalidInputError(
                f"Cannot read local directory {directory}: {e}"
            ) from e

        for item in items:
            relative_path = normalize_relative_path(
                item.relative_to(base_path).as_posix()
            )
            is_dir = item.is_dir()
            if self.should_ignore(relative_path, is_dir=is_dir):
                continue

            if is_dir:
                self._scan_directory(item, base_path, files, ancestors)
            elif item.is_file():
                try:
                    stat = item.stat()
                except OSError as e:
                    raise RemsyncInvalidInputError(
                        f"Cannot read local file {item}: {e}"
                    ) from e
                files[relative_path] = LocalFile(
                    path=item,
                    relative_path=relative_path,
                    size=stat.st_size,
                    mtime=stat.st_mtime,
                )
