"""Diff planning: decide which remote operations reconcile a remote with a local tree."""

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Optional


class SyncAction(str, Enum):
    """Actions that can be taken against the remote."""

    UPLOAD = "upload"
    """Upload a local-only file"""

    OVERWRITE = "overwrite"
    """Upload a file that already exists remotely"""

    DELETE = "delete"
    """Delete a remote-only file"""

    @property
    def is_transfer(self) -> bool:
        return self in (SyncAction.UPLOAD, SyncAction.OVERWRITE)

    @property
    def progress_verb(self) -> str:
        return {
            SyncAction.UPLOAD: "uploading",
            SyncAction.OVERWRITE: "overwriting",
            SyncAction.DELETE: "deleting",
        }[self]


@dataclass(frozen=True)
class SyncOperation:
    """A single remote operation of a plan."""

    action: SyncAction
    """Action to take"""

    relative_path: str
    """Relative path of the file under both roots"""

    remote_key: str
    """Full remote key (remote prefix + relative path)"""

    local_path: Optional[Path] = None
    """Absolute local path (Upload and Overwrite only)"""

    def __str__(self) -> str:
        return f"{self.action.value}: {self.remote_key}"


@dataclass
class SyncPlan:
    """Ordered list of operations; all transfers come before all deletes."""

    operations: list[SyncOperation] = field(default_factory=list)
    remote_prefix: str = ""

    def __len__(self) -> int:
        return len(self.operations)

    def __iter__(self) -> Iterator[SyncOperation]:
        return iter(self.operations)

    @property
    def is_empty(self) -> bool:
        return not self.operations

    def count(self, action: SyncAction) -> int:
        return sum(1 for op in self.operations if op.action == action)

    def stats(self) -> dict:
        """Count operations per action.

        Returns:
            Dictionary with "uploads", "overwrites", "deletes" and "total"
        """
        return {
            "uploads": self.count(SyncAction.UPLOAD),
            "overwrites": self.count(SyncAction.OVERWRITE),
            "deletes": self.count(SyncAction.DELETE),
            "total": len(self.operations),
        }


def plan_sync(
    local_files: Mapping[str, Any],
    remote_paths: Iterable[str],
    remote_prefix: str = "",
) -> SyncPlan:
    """Compute the operations that make the remote match the local tree.

    Every local path yields an Overwrite when it also exists remotely and an
    Upload otherwise; every remote-only path yields a Delete. File contents
    are not compared, so common paths are always re-uploaded. Deletes are
    ordered after every transfer, and each group is sorted by relative path.

    Args:
        local_files: Mapping of relative path to absolute local path
            (or to an object with a ``path`` attribute, such as LocalFile)
        remote_paths: Relative paths present under the remote prefix
        remote_prefix: Normalized remote prefix (empty or ending in "/")

    Returns:
        SyncPlan

    Examples:
        >>> plan = plan_sync({"a.txt": Path("/l/a.txt"), "b.txt": Path("/l/b.txt")},
        ...                  {"b.txt", "c.txt"})
        >>> [str(op) for op in plan]
        ['upload: a.txt', 'overwrite: b.txt', 'delete: c.txt']
    """
    remote_set = set(remote_paths)
    transfers: list[SyncOperation] = []
    deletes: list[SyncOperation] = []

    for relative_path in sorted(local_files):
        entry = local_files[relative_path]
        local_path = entry if isinstance(entry, Path) else entry.path
        action = (
            SyncAction.OVERWRITE if relative_path in remote_set else SyncAction.UPLOAD
        )
        transfers.append(
            SyncOperation(
                action=action,
                relative_path=relative_path,
                remote_key=f"{remote_prefix}{relative_path}",
                local_path=local_path,
            )
        )

    for relative_path in sorted(remote_set.difference(local_files)):
        deletes.append(
            SyncOperation(
                action=SyncAction.DELETE,
                relative_path=relative_path,
                remote_key=f"{remote_prefix}{relative_path}",
            )
        )

    return SyncPlan(operations=transfers + deletes, remote_prefix=remote_prefix)
