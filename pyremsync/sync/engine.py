"""Core sync engine: scan, list, plan and execute."""

import logging
import time
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Optional

from rich.progress import Progress, SpinnerColumn, TextColumn

from ..exceptions import RemsyncInvalidInputError
from ..output import OutputFormatter
from .executor import OperationExecutor
from .lister import RemoteLister
from .planner import SyncAction, SyncPlan, plan_sync
from .progress import SyncProgressTracker
from .scanner import DirectoryScanner

if TYPE_CHECKING:
    from ..transports.base import RemoteTransport

logger = logging.getLogger(__name__)


class SyncEngine:
    """Makes a remote directory mirror a local directory.

    One engine drives one transport; operations are applied one at a time.
    """

    def __init__(
        self,
        transport: "RemoteTransport",
        output: Optional[OutputFormatter] = None,
        progress: Optional[SyncProgressTracker] = None,
        show_spinner: bool = True,
    ):
        """Initialize sync engine.

        Args:
            transport: Remote transport for the target
            output: Output formatter for displaying plan/summary
            progress: Progress tracker receiving sync events
            show_spinner: Show a spinner while scanning and listing
        """
        self.transport = transport
        self.output = output or OutputFormatter(quiet=True)
        self.progress = progress or SyncProgressTracker()
        self.show_spinner = show_spinner

    def plan(
        self,
        local_dir: Path,
        remote_root: str = "",
        ignore_patterns: Optional[list[str]] = None,
        exclude_dot_files: bool = False,
        include: Optional[Callable[[str], bool]] = None,
    ) -> SyncPlan:
        """Scan both sides and compute the operations of a sync.

        Args:
            local_dir: Local directory to mirror
            remote_root: Root path on the remote
            ignore_patterns: Glob patterns of local files to skip
            exclude_dot_files: Skip local files/folders starting with a dot
            include: Optional predicate on local relative paths

        Returns:
            SyncPlan

        Raises:
            RemsyncInvalidInputError: If the local directory or remote root is
                invalid; raised before any remote call
            RemsyncListingError: If the remote listing fails
        """
        local_dir = Path(local_dir)
        if not local_dir.exists():
            raise RemsyncInvalidInputError(
                f"Local directory does not exist: {local_dir}"
            )
        if not local_dir.is_dir():
            raise RemsyncInvalidInputError(
                f"Local path is not a directory: {local_dir}"
            )
        prefix = self.transport.normalize_root(remote_root)

        scanner = DirectoryScanner(
            ignore_patterns=ignore_patterns,
            exclude_dot_files=exclude_dot_files,
            include=include,
        )
        lister = RemoteLister(self.transport)

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=self.output.console,
            transient=True,
            disable=not self._spinner_enabled,
        ) as spinner:
            self.progress.scanning_local()
            task = spinner.add_task("Scanning local directory...", total=None)
            local_files = scanner.scan(local_dir)
            spinner.update(task, description=f"Found {len(local_files)} local file(s)")

            self.progress.listing_remote()
            task = spinner.add_task("Listing remote files...", total=None)
            remote_files = lister.list_files(prefix)
            spinner.update(
                task, description=f"Found {len(remote_files)} remote file(s)"
            )

        plan = plan_sync(local_files, remote_files, remote_prefix=prefix)
        logger.debug(
            f"Planned {len(plan)} operation(s) for "
            f"{len(local_files)} local and {len(remote_files)} remote file(s)"
        )
        self.progress.plan_ready(len(plan))
        return plan

    def sync(
        self,
        local_dir: Path,
        remote_root: str = "",
        dry_run: bool = False,
        ignore_patterns: Optional[list[str]] = None,
        exclude_dot_files: bool = False,
        include: Optional[Callable[[str], bool]] = None,
    ) -> dict:
        """Make the remote root mirror the local directory.

        Args:
            local_dir: Local directory to mirror
            remote_root: Root path on the remote
            dry_run: If True, only show what would be done
            ignore_patterns: Glob patterns of local files to skip
            exclude_dot_files: Skip local files/folders starting with a dot
            include: Optional predicate on local relative paths

        Returns:
            Dictionary with "uploads", "overwrites", "deletes" and "total"

        Raises:
            RemsyncInvalidInputError: If the inputs are invalid
            RemsyncListingError: If the remote listing fails
            RemsyncOperationError: If an operation fails; earlier operations
                stay applied and later ones are not attempted

        Examples:
            >>> engine = SyncEngine(S3Transport("my-bucket"))
            >>> stats = engine.sync(Path("./public"), "site/", dry_run=True)
            >>> print(f"Would upload {stats['uploads']} files")
        """
        start = time.time()

        if not self.output.quiet:
            self.output.info(f"Syncing: {local_dir} -> {self.transport}:{remote_root}")
            if dry_run:
                self.output.info("Dry run: No changes will be made")
            self.output.print("")

        plan = self.plan(
            local_dir,
            remote_root,
            ignore_patterns=ignore_patterns,
            exclude_dot_files=exclude_dot_files,
            include=include,
        )
        stats = plan.stats()

        if plan.is_empty:
            self.progress.already_in_sync()
            self._display_summary(stats, dry_run)
            return stats

        self._display_sync_plan(plan, dry_run)
        if dry_run:
            self._display_summary(stats, dry_run)
            return stats

        if self.transport.absolute_paths and plan.remote_prefix:
            self.transport.ensure_directory(plan.remote_prefix)

        executed = OperationExecutor(self.transport, self.progress).execute(plan)
        stats.update(executed)
        self.progress.sync_complete(len(plan))

        logger.debug(f"Sync finished in {time.time() - start:.2f}s")
        self._display_summary(stats, dry_run)
        return stats

    @property
    def _spinner_enabled(self) -> bool:
        return (
            self.show_spinner and not self.output.quiet and not self.output.json_output
        )

    def _display_sync_plan(self, plan: SyncPlan, dry_run: bool) -> None:
        """Display the sync plan.

        Args:
            plan: Computed plan
            dry_run: Whether this is a dry run
        """
        if self.output.quiet:
            return

        stats = plan.stats()
        self.output.info("Sync plan:")
        if stats["uploads"] > 0:
            self.output.info(f"  ↑ Upload: {stats['uploads']} file(s)")
        if stats["overwrites"] > 0:
            self.output.info(f"  ↻ Overwrite: {stats['overwrites']} file(s)")
        if stats["deletes"] > 0:
            self.output.info(f"  ✗ Delete remote: {stats['deletes']} file(s)")

        if dry_run:
            self.output.print("")
            symbols = {
                SyncAction.UPLOAD: "↑",
                SyncAction.OVERWRITE: "↻",
                SyncAction.DELETE: "✗",
            }
            for operation in plan:
                self.output.info(f"  {symbols[operation.action]} {operation.remote_key}")

        self.output.print("")

    def _display_summary(self, stats: dict, dry_run: bool) -> None:
        """Display sync summary.

        Args:
            stats: Statistics dictionary
            dry_run: Whether this was a dry run
        """
        if self.output.quiet:
            return

        if stats["total"] == 0:
            self.output.info("No changes needed - everything is in sync!")
            return

        if dry_run:
            self.output.success("Dry run complete!")
        else:
            self.output.success("Sync complete!")

        self.output.info(f"Total actions: {stats['total']}")
        if stats["uploads"] > 0:
            self.output.info(f"  Uploaded: {stats['uploads']}")
        if stats["overwrites"] > 0:
            self.output.info(f"  Overwritten: {stats['overwrites']}")
        if stats["deletes"] > 0:
            self.output.info(f"  Deleted remotely: {stats['deletes']}")
