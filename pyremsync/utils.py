"""Utility functions for pyremsync."""

import mimetypes
from pathlib import Path
from typing import Union

from .exceptions import RemsyncInvalidInputError

# =============================================================================
# Constants
# =============================================================================

# Transport cache defaults
DEFAULT_CACHE_TTL: float = 60.0  # seconds
DEFAULT_CACHE_MAX_SIZE: int = 50

DEFAULT_SFTP_PORT: int = 22

DEFAULT_CONTENT_TYPE: str = "application/octet-stream"


# =============================================================================
# Path normalization utilities
# =============================================================================


def normalize_relative_path(path: str) -> str:
    """Normalize a path relative to a sync root.

    Backslashes are converted to forward slashes, leading separators and
    empty or ``.`` segments are dropped.

    Args:
        path: Relative path using any separator

    Returns:
        Normalized relative path (e.g., "a/b/c.txt")

    Raises:
        RemsyncInvalidInputError: If the path is empty or contains ``..``

    Examples:
        >>> normalize_relative_path("a\\\\b\\\\c.txt")
        'a/b/c.txt'
    """
    segments = [s for s in path.replace("\\", "/").split("/") if s not in ("", ".")]
    if not segments:
        raise RemsyncInvalidInputError(f"Empty relative path: {path!r}")
    if ".." in segments:
        raise RemsyncInvalidInputError(f"Relative path escapes its root: {path!r}")
    return "/".join(segments)


def normalize_remote_prefix(prefix: str, keep_leading_slash: bool = False) -> str:
    """Normalize a remote prefix so that prefix + relative path is a remote key.

    The result is either empty or ends with exactly one ``/``. Object store
    prefixes drop any leading slash; directory paths on a file server keep it.

    Args:
        prefix: Caller supplied remote prefix or directory
        keep_leading_slash: Keep an absolute path absolute

    Returns:
        Normalized prefix

    Raises:
        RemsyncInvalidInputError: If the prefix contains ``..`` segments

    Examples:
        >>> normalize_remote_prefix("/site//assets/")
        'site/assets/'
        >>> normalize_remote_prefix("/srv/www", keep_leading_slash=True)
        '/srv/www/'
    """
    absolute = keep_leading_slash and prefix.startswith("/")
    segments = [s for s in prefix.split("/") if s not in ("", ".")]
    if ".." in segments:
        raise RemsyncInvalidInputError(f"Remote prefix escapes its root: {prefix!r}")
    body = "/".join(segments)
    if absolute:
        return f"/{body}/" if body else "/"
    return f"{body}/" if body else ""


def strip_remote_prefix(key: str, prefix: str) -> str:
    """Turn a remote key into a path relative to ``prefix``.

    Extra slashes after the prefix are kept, so ``prefix + result`` is always
    the original key.

    Args:
        key: Full remote key
        prefix: Normalized remote prefix

    Returns:
        Relative path, or an empty string if ``key`` is not under ``prefix``
    """
    if prefix and not key.startswith(prefix):
        return ""
    return key[len(prefix) :]


def guess_content_type(path: Union[str, Path]) -> str:
    """Guess a content type from a file extension.

    Args:
        path: File path or name

    Returns:
        MIME type string (defaults to 'application/octet-stream')
    """
    mime_type, _ = mimetypes.guess_type(str(path))
    return mime_type or DEFAULT_CONTENT_TYPE


# =============================================================================
# Size formatting utilities
# =============================================================================


def format_size(size_bytes: int) -> str:
    """Format file size in human-readable format.

    Args:
        size_bytes: Size in bytes

    Returns:
        Formatted size string (e.g., "1.5 MB", "256 B")
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    elif size_bytes < 1024 * 1024 * 1024:
        return f"{size_bytes / 1024 / 1024:.1f} MB"
    else:
        return f"{size_bytes / 1024 / 1024 / 1024:.1f} GB"
