"""CLI progress display for sync operations.

This module provides a Rich-based progress display that works with
the SyncProgressTracker from the sync engine.
"""

from typing import Optional

from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)

from .sync.engine import SyncEngine
from .sync.progress import SyncProgressEvent, SyncProgressInfo, SyncProgressTracker


class SyncProgressDisplay:
    """Rich-based progress display for sync operations.

    Shows a spinner while scanning and listing, then a bar counting the
    operations of the plan with the current operation as description.
    """

    def __init__(self, console: Optional[Console] = None) -> None:
        """Initialize the progress display.

        Args:
            console: Console to render on; share it with other output
        """
        self.console = console
        self._progress: Optional[Progress] = None
        self._task: Optional[TaskID] = None

    def create_tracker(self) -> SyncProgressTracker:
        """Create a SyncProgressTracker that updates this display.

        Returns:
            A configured SyncProgressTracker
        """
        return SyncProgressTracker(callback=self._handle_event)

    def _handle_event(self, info: SyncProgressInfo) -> None:
        """Handle a progress event from the tracker.

        Args:
            info: Progress information
        """
        if self._progress is None or self._task is None:
            return

        if info.event in (SyncProgressEvent.SCAN_LOCAL, SyncProgressEvent.LIST_REMOTE):
            self._progress.update(self._task, description=info.message.capitalize())

        elif info.event == SyncProgressEvent.PLAN_READY:
            self._progress.update(
                self._task,
                description=info.message.capitalize(),
                total=info.total,
                completed=0,
            )

        elif info.event == SyncProgressEvent.OPERATION_START:
            # Operations before this one have finished
            self._progress.update(
                self._task,
                description=info.message.capitalize(),
                completed=info.index - 1,
            )

        elif info.event == SyncProgressEvent.SYNC_COMPLETE:
            self._progress.update(
                self._task, description="Sync complete", completed=info.total
            )

        elif info.event == SyncProgressEvent.ALREADY_IN_SYNC:
            self._progress.update(
                self._task, description="Already in sync", total=1, completed=1
            )

    def __enter__(self) -> "SyncProgressDisplay":
        """Enter context manager - start progress display."""
        self._progress = Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            console=self.console,
            refresh_per_second=4,
            transient=True,
        )
        self._progress.__enter__()
        self._task = self._progress.add_task("Preparing sync...", total=None)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit context manager - stop progress display."""
        if self._progress is not None:
            self._progress.__exit__(exc_type, exc_val, exc_tb)
            self._progress = None
            self._task = None


def run_sync_with_progress(engine: SyncEngine, sync_kwargs: dict) -> dict:
    """Run a sync with a Rich progress display.

    The engine's own spinner is turned off while the display is active,
    since Rich allows one live display at a time.

    Args:
        engine: SyncEngine instance
        sync_kwargs: Keyword arguments for SyncEngine.sync

    Returns:
        Dictionary with sync statistics
    """
    # For dry-run, don't show progress bar (just text output)
    if sync_kwargs.get("dry_run"):
        return engine.sync(**sync_kwargs)

    with SyncProgressDisplay(console=engine.output.console) as display:
        engine.progress = display.create_tracker()
        engine.show_spinner = False
        return engine.sync(**sync_kwargs)
