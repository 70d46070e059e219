"""Remote targets and sync job definitions."""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from ..exceptions import RemsyncConfigError, RemsyncInvalidInputError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RemoteTarget:
    """A named remote plus a root path on it, written as ``remote:path``."""

    remote: str
    """Name of a remote defined in the config file"""

    path: str = ""
    """Root path on the remote (bucket prefix or SFTP directory)"""

    @classmethod
    def parse(cls, value: str) -> "RemoteTarget":
        """Parse a ``remote:path`` literal.

        Args:
            value: Target string, e.g. "mybucket:site/" or "web:/var/www"

        Returns:
            RemoteTarget

        Raises:
            RemsyncInvalidInputError: If the remote name is missing

        Examples:
            >>> RemoteTarget.parse("web:/var/www")
            RemoteTarget(remote='web', path='/var/www')
            >>> RemoteTarget.parse("assets")
            RemoteTarget(remote='assets', path='')
        """
        remote, _, path = value.partition(":")
        remote = remote.strip()
        if not remote:
            raise RemsyncInvalidInputError(
                f"Invalid target {value!r}: expected 'remote:path'"
            )
        return cls(remote=remote, path=path.strip())

    def __str__(self) -> str:
        return f"{self.remote}:{self.path}"


@dataclass
class SyncJob:
    """One local directory mirrored to one remote target."""

    local: Path
    target: RemoteTarget
    exclude: list[str] = field(default_factory=list)
    """Glob patterns of local files to leave out of the sync"""

    exclude_dot_files: bool = False
    alias: Optional[str] = None

    @property
    def name(self) -> str:
        return self.alias or f"{self.local} -> {self.target}"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SyncJob":
        """Create a SyncJob from a JSON object.

        Expected keys: "local", "target", and optionally "exclude",
        "excludeDotFiles" and "alias".

        Raises:
            RemsyncConfigError: If required keys are missing or malformed
        """
        if not isinstance(data, dict):
            raise RemsyncConfigError(f"Sync job must be an object, got: {data!r}")

        local = data.get("local")
        target = data.get("target")
        if not local:
            raise RemsyncConfigError("Sync job is missing 'local'")
        if not target:
            raise RemsyncConfigError("Sync job is missing 'target'")

        exclude = data.get("exclude", [])
        if isinstance(exclude, str):
            exclude = [exclude]
        if not isinstance(exclude, list):
            raise RemsyncConfigError("'exclude' must be a list of glob patterns")

        try:
            parsed_target = RemoteTarget.parse(str(target))
        except RemsyncInvalidInputError as e:
            raise RemsyncConfigError(str(e)) from e

        return cls(
            local=Path(local).expanduser(),
            target=parsed_target,
            exclude=[str(p) for p in exclude],
            exclude_dot_files=bool(data.get("excludeDotFiles", False)),
            alias=data.get("alias"),
        )


def load_sync_jobs_from_json(path: Path) -> list[SyncJob]:
    """Load sync jobs from a JSON file.

    The file holds either a list of job objects or an object with a
    "jobs" list.

    Args:
        path: Path to the JSON file

    Returns:
        List of SyncJob in file order

    Raises:
        RemsyncConfigError: If the file cannot be read or is malformed
    """
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise RemsyncConfigError(f"Cannot read jobs file {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise RemsyncConfigError(f"Invalid JSON in jobs file {path}: {e}") from e

    if isinstance(data, dict):
        data = data.get("jobs")
    if not isinstance(data, list):
        raise RemsyncConfigError(
            f"Jobs file {path} must contain a list of jobs or a 'jobs' list"
        )

    jobs = [SyncJob.from_dict(item) for item in data]
    logger.debug(f"Loaded {len(jobs)} sync job(s) from {path}")
    return jobs
