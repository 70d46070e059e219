"""Progress reporting for sync runs.

Progress is a best-effort side channel: a failing callback is logged and
ignored, it never changes the outcome of a sync.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Callable, Optional

if TYPE_CHECKING:
    from .planner import SyncAction

logger = logging.getLogger(__name__)


class SyncProgressEvent(str, Enum):
    """Kinds of progress events emitted during a sync."""

    SCAN_LOCAL = "scan_local"
    LIST_REMOTE = "list_remote"
    PLAN_READY = "plan_ready"
    OPERATION_START = "operation_start"
    SYNC_COMPLETE = "sync_complete"
    ALREADY_IN_SYNC = "already_in_sync"


@dataclass
class SyncProgressInfo:
    """A single progress notification."""

    event: SyncProgressEvent
    message: str
    """Human-readable description, e.g. "uploading: site/index.html" """

    remote_key: Optional[str] = None
    action: Optional[str] = None
    index: int = 0
    """1-based position of the operation in the plan"""

    total: int = 0
    """Number of operations in the plan"""


class SyncProgressTracker:
    """Builds progress notifications and hands them to a callback."""

    def __init__(self, callback: Optional[Callable[[SyncProgressInfo], None]] = None):
        """Initialize tracker.

        Args:
            callback: Receives every SyncProgressInfo; may be None
        """
        self.callback = callback

    def emit(self, info: SyncProgressInfo) -> None:
        """Deliver a notification, swallowing delivery failures."""
        logger.debug(info.message)
        if self.callback is None:
            return
        try:
            self.callback(info)
        except Exception as e:
            logger.debug(f"Progress callback failed for {info.event.value}: {e}")

    def scanning_local(self) -> None:
        self.emit(SyncProgressInfo(SyncProgressEvent.SCAN_LOCAL, "scanning local files"))

    def listing_remote(self) -> None:
        self.emit(
            SyncProgressInfo(SyncProgressEvent.LIST_REMOTE, "listing remote files")
        )

    def plan_ready(self, total: int) -> None:
        self.emit(
            SyncProgressInfo(
                SyncProgressEvent.PLAN_READY,
                f"{total} operations planned",
                total=total,
            )
        )

    def operation_start(
        self, action: "SyncAction", remote_key: str, index: int, total: int
    ) -> None:
        """Announce an operation right before it is attempted.

        Args:
            action: SyncAction of the operation
            remote_key: Remote key the operation acts on
            index: 1-based position in the plan
            total: Number of operations in the plan
        """
        self.emit(
            SyncProgressInfo(
                SyncProgressEvent.OPERATION_START,
                f"{action.progress_verb}: {remote_key}",
                remote_key=remote_key,
                action=action.value,
                index=index,
                total=total,
            )
        )

    def sync_complete(self, total: int) -> None:
        self.emit(
            SyncProgressInfo(
                SyncProgressEvent.SYNC_COMPLETE, "sync complete", total=total
            )
        )

    def already_in_sync(self) -> None:
        self.emit(
            SyncProgressInfo(SyncProgressEvent.ALREADY_IN_SYNC, "already in sync")
        )
