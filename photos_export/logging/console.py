"""Rich-based console output and logging setup."""
from __future__ import annotations

import logging
import sys
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..core.models import ExportStats


def setup_logging(debug: bool = False, console: Optional[Console] = None) -> logging.Logger:
    """Route the package's module loggers to a Rich handler on stderr.

    Args:
        debug: Show DEBUG records instead of WARNING and above.
        console: Console to render into (default: a new stderr console).

    Returns:
        The ``photos_export`` package logger.
    """
    level = logging.DEBUG if debug else logging.WARNING
    pkg_logger = logging.getLogger("photos_export")
    pkg_logger.setLevel(level)
    pkg_logger.handlers.clear()

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_time=False,
        show_path=False,
        markup=False,
    )
    handler.setLevel(level)
    pkg_logger.addHandler(handler)
    pkg_logger.propagate = False
    return pkg_logger


class ConsoleReporter:
    """Reporter using Rich for terminal output.

    Implements the Reporter protocol.
    """

    def __init__(
        self,
        verbose: bool = False,
        quiet: bool = False,
        console: Optional[Console] = None,
    ):
        """Initialize the reporter.

        Args:
            verbose: Enable debug output.
            quiet: Suppress all non-essential output.
            console: Console to print to (default: stderr).
        """
        self._console = console or Console(stderr=True)
        self._verbose = verbose
        self._quiet = quiet

    @property
    def console(self) -> Console:
        return self._console

    # --- Logging Methods ---

    def info(self, message: str) -> None:
        if not self._quiet:
            self._console.print(f"[blue]ℹ[/blue] {message}", highlight=False)

    def success(self, message: str) -> None:
        if not self._quiet:
            self._console.print(f"[green]✓[/green] {message}", highlight=False)

    def warning(self, message: str) -> None:
        """Always shown, even in quiet mode."""
        self._console.print(f"[yellow]⚠[/yellow] Warning: {message}", highlight=False)

    def error(self, message: str) -> None:
        """Always shown, even in quiet mode."""
        self._console.print(f"[red]✗[/red] Error: {message}", style="red", highlight=False)

    def debug(self, message: str) -> None:
        if self._verbose:
            self._console.print(f"[dim]  {message}[/dim]", highlight=False)

    # --- Specialized Output ---

    def print_header(self, title: str) -> None:
        if self._quiet:
            return
        self._console.print(Panel(Text(title, style="bold cyan"), border_style="cyan"))

    def print_config(self, config_items: dict) -> None:
        """Print the effective export settings, one row per option."""
        if self._quiet:
            return

        table = Table(title="Export Settings", show_header=False, box=None, padding=(0, 2))
        table.add_column("Option", style="cyan", no_wrap=True)
        table.add_column("Value")
        for key, value in config_items.items():
            shown = ("yes" if value else "no") if isinstance(value, bool) else str(value)
            table.add_row(key, shown)

        self._console.print(table)

    def print_stats(self, stats: ExportStats) -> None:
        """Print export statistics."""
        if self._quiet:
            return

        table = Table(title="Export Complete", show_header=False)
        table.add_column("Metric", style="cyan")
        table.add_column("Count", style="green", justify="right")

        table.add_row("Assets Found", str(stats.total_assets))
        table.add_row("Assets Exported", str(stats.exported_assets))
        table.add_row("Assets Failed", str(stats.failed_assets))
        table.add_row("Files Written", str(stats.resources_written))
        table.add_row("Files Already Present", str(stats.resources_existing))

        if stats.removal_errors > 0:
            table.add_row("Removal Errors", str(stats.removal_errors))
        if stats.sidecars_written > 0:
            table.add_row("Sidecars Written", str(stats.sidecars_written))

        if stats.elapsed_seconds > 0:
            rate = stats.processed_assets / stats.elapsed_seconds
            table.add_row("", "")
            table.add_row("Time Elapsed", f"{stats.elapsed_seconds:.1f}s")
            table.add_row("Export Rate", f"{rate:.1f} assets/sec")

        self._console.print(table)


class QuietReporter:
    """Minimal reporter that only shows warnings and errors."""

    def info(self, message: str) -> None:
        pass

    def success(self, message: str) -> None:
        pass

    def warning(self, message: str) -> None:
        print(f"Warning: {message}", file=sys.stderr)

    def error(self, message: str) -> None:
        print(f"Error: {message}", file=sys.stderr)

    def debug(self, message: str) -> None:
        pass
