"""IndexOrchestrator for coordinating the walk, hash and record pipeline.

This module provides the IndexOrchestrator class that runs one complete
indexing pass. It coordinates FolderScanner, WorkerPool, FileHasher,
ResultSink and ProgressReporter:

1. Walk - FolderScanner yields WorkItems, submitted to a paused WorkerPool
2. Size - The hashing progress bar is sized from the queued count
3. Hash - Workers are released; each digests a file and appends a record
4. Drain - stop_wait() blocks until every queued file is accounted for

Example:
    from treedigest.orchestration import IndexOrchestrator
    from treedigest.models import IndexSettings
    from pathlib import Path

    orchestrator = IndexOrchestrator(
        IndexSettings(root=Path("/data"), output_path=Path("files.csv"))
    )
    summary = orchestrator.run()
"""

import logging
import threading
import time
from typing import List, Optional

from rich.console import Console

from treedigest.exceptions import FileDigestError, OutputWriteError
from treedigest.models import IndexSettings, IndexSummary, ScanError, WorkItem
from treedigest.orchestration.result_sink import ResultSink
from treedigest.scanning import FileHasher, FolderScanner
from treedigest.scheduling import WorkerPool
from treedigest.ui import ProgressReporter, ReporterState

logger = logging.getLogger(__name__)


class IndexOrchestrator:
    """Runs the concurrent traversal-and-digest pipeline.

    Every WorkItem discovered by the walk ends in exactly one outcome: a
    record in the output log, or one reported error. File-level I/O errors
    are reported and skipped; errors opening the root or writing the output
    abort the run.

    Attributes:
        settings: The IndexSettings for this run.
        console: Rich Console used for progress, errors and the summary.
    """

    def __init__(self, settings: IndexSettings, console: Optional[Console] = None) -> None:
        """Initialize the IndexOrchestrator.

        Args:
            settings: Options for the run.
            console: Optional Rich Console. Defaults to a Console on stderr.

        Raises:
            ValueError: If workers is not positive or the algorithm is unknown.
        """
        if settings.workers is not None and settings.workers < 1:
            raise ValueError(f"workers must be at least 1, got {settings.workers}")

        self.settings = settings
        self.console = console or Console(stderr=True)

        self._hasher = FileHasher(algorithm=settings.algorithm)

        # Rebuilt by every run(); the hashing bar can only be sized once
        self._progress = ProgressReporter(console=self.console, enabled=settings.show_progress)
        self._scanner = FolderScanner(on_error=self._handle_error, progress=self._progress)

        # Error tracking shared by the walk and every worker
        self._errors_lock = threading.Lock()
        self._errors: List[ScanError] = []

        self._sink: Optional[ResultSink] = None

    def run(self) -> IndexSummary:
        """Walk the root, hash every file and write the result log.

        Returns:
            IndexSummary with counts, reported errors and duration.

        Raises:
            RootUnreadableError: If the root cannot be opened. The output file
                is not created in that case.
            OutputWriteError: If the result log cannot be opened or written.
        """
        start_time = time.time()
        with self._errors_lock:
            self._errors.clear()
        if self._progress.state is not ReporterState.UNINITIALIZED:
            self._progress = ProgressReporter(console=self.console, enabled=self.settings.show_progress)
            self._scanner = FolderScanner(on_error=self._handle_error, progress=self._progress)

        # Fails before anything is written if the root is unreadable
        items = self._scanner.walk(self.settings.root)

        with ResultSink(self.settings.output_path, append=self.settings.append) as sink:
            self._sink = sink
            sink.write_header()

            with self._progress:
                pool: WorkerPool[WorkItem] = WorkerPool(
                    handler=self._digest_and_record, size=self.settings.workers
                )
                try:
                    for item in items:
                        pool.submit(item)

                    queued = pool.waiting_queue_size()
                    logger.info(
                        "Walk finished: %d files queued, %d entry errors",
                        queued,
                        len(self._scanner.get_errors()),
                    )
                    self._progress.begin_hashing(queued)
                except BaseException:
                    # Abandoned mid-walk: workers are still parked
                    items.close()
                    pool.cancel()
                    raise

                pool.release()
                pool.stop_wait()

            files_hashed = sink.records_written
            self._sink = None

        summary = IndexSummary(
            root=self.settings.root,
            output_path=sink.get_output_path(),
            files_discovered=self._scanner.files_discovered,
            files_hashed=files_hashed,
            errors=self.get_errors(),
            duration_seconds=time.time() - start_time,
        )
        logger.info(
            "Indexed %d of %d files in %.1fs",
            summary.files_hashed,
            summary.files_discovered,
            summary.duration_seconds,
        )

        if self.settings.verbose:
            self._progress.display_summary(summary)

        return summary

    def _digest_and_record(self, item: WorkItem) -> None:
        """Worker handler: hash one file and append its record.

        FileDigestError is reported and the file skipped. OutputWriteError
        propagates and aborts the run.
        """
        try:
            record = self._hasher.digest(item.path)
        except FileDigestError as e:
            self._handle_error(ScanError(path=e.path, kind=e.kind, message=e.message))
            self._progress.file_hashed()
            return

        if self._sink is None:
            raise OutputWriteError(
                str(self.settings.output_path),
                f"Output file is not open: {self.settings.output_path}",
            )
        self._sink.append(record)
        self._progress.file_hashed()

    def _handle_error(self, error: ScanError) -> None:
        """Shared error hook for traversal and hashing errors."""
        with self._errors_lock:
            self._errors.append(error)
        logger.debug("Reported %s error for %s", error.kind.value, error.path)
        self._progress.report_error(error)

    @property
    def progress(self) -> ProgressReporter:
        """The ProgressReporter used by this orchestrator."""
        return self._progress

    def get_errors(self) -> List[ScanError]:
        """Get list of errors reported during the last run.

        Returns:
            List of ScanError entries, traversal and hashing alike.
        """
        with self._errors_lock:
            return self._errors.copy()
