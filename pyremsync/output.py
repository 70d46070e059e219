"""Output formatting for the pyremsync CLI."""

import json
import sys
from typing import Any, Optional

from rich.console import Console
from rich.table import Table


class OutputFormatter:
    """Prints human-readable or JSON output through rich consoles."""

    def __init__(self, json_output: bool = False, quiet: bool = False):
        """Initialize output formatter.

        Args:
            json_output: Emit machine-readable JSON instead of text
            quiet: Suppress non-essential output
        """
        self.json_output = json_output
        self.quiet = quiet
        self.console = Console()
        self.err_console = Console(stderr=True)

    def print(self, message: str = "") -> None:
        """Print a plain line."""
        if self.quiet or self.json_output:
            return
        self.console.print(message, highlight=False)

    def info(self, message: str) -> None:
        """Print an informational message."""
        if self.quiet or self.json_output:
            return
        self.console.print(message, highlight=False)

    def success(self, message: str) -> None:
        """Print a success message."""
        if self.quiet or self.json_output:
            return
        self.console.print(f"[green]{message}[/green]", highlight=False)

    def warning(self, message: str) -> None:
        """Print a warning to stderr."""
        if self.quiet:
            return
        self.err_console.print(f"[yellow]Warning:[/yellow] {message}", highlight=False)

    def error(self, message: str) -> None:
        """Print an error to stderr. Errors are shown even in quiet mode."""
        self.err_console.print(f"[red]Error:[/red] {message}", highlight=False)

    def output_json(self, data: Any) -> None:
        """Write data as JSON to stdout."""
        sys.stdout.write(json.dumps(data, indent=2, default=str))
        sys.stdout.write("\n")

    def output_table(
        self,
        rows: list[dict[str, Any]],
        columns: list[str],
        headers: Optional[dict[str, str]] = None,
    ) -> None:
        """Print rows as a table (or as JSON in JSON mode).

        Args:
            rows: Row dictionaries
            columns: Keys of each row to display, in order
            headers: Optional mapping of column key to header text
        """
        if self.json_output:
            self.output_json(rows)
            return
        if self.quiet:
            return

        headers = headers or {}
        table = Table(show_header=True, header_style="bold")
        for column in columns:
            table.add_column(headers.get(column, column))
        for row in rows:
            table.add_row(*(str(row.get(column, "")) for column in columns))
        self.console.print(table)
