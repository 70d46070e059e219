"""Sequential, fail-fast execution of a sync plan."""

import logging
import time
from typing import TYPE_CHECKING, Optional

from ..exceptions import RemsyncOperationError
from ..utils import guess_content_type
from .planner import SyncAction, SyncOperation, SyncPlan
from .progress import SyncProgressTracker

if TYPE_CHECKING:
    from ..transports.base import RemoteTransport

logger = logging.getLogger(__name__)


class OperationExecutor:
    """Applies plan operations one at a time through a transport."""

    def __init__(
        self,
        transport: "RemoteTransport",
        progress: Optional[SyncProgressTracker] = None,
    ):
        """Initialize executor.

        Args:
            transport: Remote transport to write through
            progress: Progress tracker notified before each operation
        """
        self.transport = transport
        self.progress = progress or SyncProgressTracker()

    def execute(self, plan: SyncPlan) -> dict:
        """Execute every operation of a plan in order.

        The first failing operation aborts the run: operations before it stay
        applied, operations after it are never attempted.

        Args:
            plan: Plan to execute

        Returns:
            Dictionary with counts of applied "uploads", "overwrites", "deletes"

        Raises:
            RemsyncOperationError: Identifying the failed operation and its cause
        """
        stats = {"uploads": 0, "overwrites": 0, "deletes": 0}
        total = len(plan)

        for index, operation in enumerate(plan, start=1):
            self.progress.operation_start(
                operation.action, operation.remote_key, index, total
            )
            action_start = time.time()
            try:
                self.execute_operation(operation)
            except Exception as e:
                logger.debug(
                    f"Operation {index}/{total} failed ({operation}), "
                    f"skipping {total - index} remaining"
                )
                raise RemsyncOperationError(operation, e) from e

            logger.debug(f"{operation} took {time.time() - action_start:.2f}s")
            if operation.action == SyncAction.UPLOAD:
                stats["uploads"] += 1
            elif operation.action == SyncAction.OVERWRITE:
                stats["overwrites"] += 1
            elif operation.action == SyncAction.DELETE:
                stats["deletes"] += 1

        return stats

    def execute_operation(self, operation: SyncOperation) -> None:
        """Execute a single operation.

        Upload and Overwrite use the same put primitive; only the progress
        label differs.
        """
        if operation.action.is_transfer:
            if operation.local_path is None:
                raise ValueError(f"No local file for {operation}")
            content_type = None
            if self.transport.supports_content_type:
                content_type = guess_content_type(operation.local_path)
            self.transport.put(
                operation.local_path, operation.remote_key, content_type=content_type
            )
        elif operation.action == SyncAction.DELETE:
            self.transport.delete(operation.remote_key)
