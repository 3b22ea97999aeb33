"""Progress reporting for treedigest runs.

This module provides the ProgressReporter class, a Rich-based display with
two counters: files discovered by the walk and files hashed by the workers.

The hashing bar cannot be sized until the walk is over, so the reporter has
two states. It starts Uninitialized, where only the discovery counter moves,
and becomes Ready once begin_hashing() is given the final file count.

Example:
    from treedigest.ui import ProgressReporter

    with ProgressReporter() as progress:
        for item in scanner.walk(root):
            ...                       # scanner calls progress.file_discovered()
        progress.begin_hashing(total=progress.discovered)
        ...                           # workers call progress.file_hashed()
"""

import threading
from enum import Enum
from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
    TimeRemainingColumn,
)
from rich.table import Table
from rich.text import Text

from treedigest.models import IndexSummary, ScanError


class ReporterState(Enum):
    """Lifecycle of the hashing counter."""
    UNINITIALIZED = "uninitialized"   # Walk still running, hashing total unknown
    READY = "ready"                   # Hashing total fixed, workers may report


class ProgressReporter:
    """Rich-based progress display with thread-safe counters.

    Counters are plain integers behind a lock; the Rich display mirrors them
    and can be disabled without affecting the counts.

    Args:
        console: Optional Rich Console for output. Defaults to a Console on
            stderr. Pass a custom Console for testing (e.g., with a StringIO
            file for output capture).
        enabled: Whether to render progress bars.
        lock: Lock guarding the counters. A new one is created if omitted.

    Attributes:
        console: The Rich Console used for bars, errors and the summary.
    """

    def __init__(
        self,
        console: Optional[Console] = None,
        enabled: bool = True,
        lock: Optional[threading.Lock] = None,
    ) -> None:
        """Initialize the reporter in the Uninitialized state."""
        self.console = console or Console(stderr=True)
        self._lock = lock if lock is not None else threading.Lock()
        self._state = ReporterState.UNINITIALIZED
        self._discovered = 0
        self._hashed = 0
        self._hash_total: Optional[int] = None
        self._hash_task: Optional[TaskID] = None

        self._progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            TaskProgressColumn(),
            TimeElapsedColumn(),
            TimeRemainingColumn(),
            console=self.console,
            disable=not enabled,
        )
        self._index_task = self._progress.add_task("Indexing files", total=None)

    def __enter__(self) -> "ProgressReporter":
        self._progress.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self._progress.stop()

    @property
    def state(self) -> ReporterState:
        """Current lifecycle state."""
        return self._state

    @property
    def discovered(self) -> int:
        """Number of files discovered so far."""
        with self._lock:
            return self._discovered

    @property
    def hashed(self) -> int:
        """Number of files that reached a terminal outcome."""
        with self._lock:
            return self._hashed

    @property
    def hash_total(self) -> Optional[int]:
        """Hashing capacity, or None while Uninitialized."""
        return self._hash_total

    def file_discovered(self) -> None:
        """Increment the discovery counter by one."""
        with self._lock:
            self._discovered += 1
            self._progress.advance(self._index_task)

    def begin_hashing(self, total: int) -> None:
        """Fix the hashing capacity and move to the Ready state.

        Also completes the discovery bar at the final discovered count.

        Args:
            total: Number of files queued for hashing.

        Raises:
            ValueError: If total is negative.
            RuntimeError: If the reporter is already Ready.
        """
        if total < 0:
            raise ValueError(f"Hashing total cannot be negative, got {total}")

        with self._lock:
            if self._state is ReporterState.READY:
                raise RuntimeError("Hashing progress was already initialized")

            self._progress.update(
                self._index_task, total=self._discovered, completed=self._discovered
            )
            self._hash_total = total
            self._hash_task = self._progress.add_task("Hashing files", total=total)
            self._state = ReporterState.READY

    def file_hashed(self) -> None:
        """Increment the hashing counter by one.

        Raises:
            RuntimeError: If begin_hashing() has not been called yet.
        """
        with self._lock:
            if self._state is not ReporterState.READY or self._hash_task is None:
                raise RuntimeError("file_hashed() called before begin_hashing()")
            self._hashed += 1
            self._progress.advance(self._hash_task)

    def report_error(self, error: ScanError) -> None:
        """Print one 'ERROR: <message>' line above the progress bars.

        Args:
            error: The error to display.
        """
        self.console.print(
            Text(f"ERROR: {error.message}"), markup=False, highlight=False, soft_wrap=True
        )

    def display_summary(self, summary: IndexSummary) -> None:
        """Display final statistics once the run is over.

        Args:
            summary: IndexSummary with the run's totals.
        """
        header_panel = Panel(
            Text(f"Root: {summary.root}\nOutput: {summary.output_path}"),
            title="Index Summary",
            border_style="green" if not summary.errors else "yellow",
        )
        self.console.print(header_panel)

        table = Table(show_header=True, header_style="bold")
        table.add_column("Metric", style="cyan")
        table.add_column("Value", justify="right")

        table.add_row("Files discovered", f"{summary.files_discovered:,}")
        table.add_row("Files hashed", f"{summary.files_hashed:,}")
        table.add_row("Files failed", f"{summary.files_failed:,}")
        table.add_row("Errors reported", f"{len(summary.errors):,}")
        table.add_row("Duration", self._format_duration(summary.duration_seconds))

        self.console.print(table)

    def _format_duration(self, seconds: float) -> str:
        """Convert seconds to human-readable duration.

        Args:
            seconds: Duration in seconds.

        Returns:
            Formatted duration string (e.g., "5m 23s").
        """
        if seconds < 0:
            seconds = 0
        minutes = int(seconds // 60)
        secs = int(seconds % 60)
        return f"{minutes}m {secs}s"
