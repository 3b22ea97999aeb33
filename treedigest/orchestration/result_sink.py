"""ResultSink for appending FileRecords to the output log.

This module provides the ResultSink class, the single serialization point for
the comma-separated result log. Every writer goes through one lock, so lines
from concurrent workers never interleave.

Output format:
    Path, Hash, Time
    /data/a.txt, 2cf24dba5fb0a30e..., 2021-04-27 22:33:47.982338 +0000 UTC
"""

import logging
import sys
import threading
from pathlib import Path
from typing import Optional, TextIO

from treedigest.exceptions import OutputWriteError
from treedigest.models import HEADER, FileRecord

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_NAME = "files.csv"


class ResultSink:
    """Append-only writer for the result log.

    Usage:
        with ResultSink(Path("files.csv")) as sink:
            sink.write_header()
            for record in records:
                sink.append(record)

    By default an existing file is truncated when the sink is opened. With
    append=True existing content is kept and the header is only written if
    the file is empty.

    Attributes:
        _lock: Mutual-exclusion lock guarding the file handle. Pass a shared
            lock to serialize with other users of the same handle.
        _records_written: Number of records appended so far.
    """

    def __init__(
        self,
        output_path: Optional[Path] = None,
        append: bool = False,
        lock: Optional[threading.Lock] = None,
    ) -> None:
        """Initialize the ResultSink.

        Args:
            output_path: Path of the result log. Defaults to files.csv in the
                current directory.
            append: Keep existing content instead of truncating.
            lock: Lock serializing writes. A new one is created if omitted.

        Raises:
            OutputWriteError: If the parent directory is missing or not a
                directory.
        """
        if output_path is None:
            self._output_path = Path.cwd() / DEFAULT_OUTPUT_NAME
        else:
            self._output_path = Path(output_path)

        self._append = append
        self._lock = lock if lock is not None else threading.Lock()
        self._file_handle: Optional[TextIO] = None
        self._header_written = False
        self._resumed = False
        self._records_written = 0

        self._validate_path()

    def _validate_path(self) -> None:
        """Validate that the output file can be created.

        Raises:
            OutputWriteError: If the parent directory doesn't exist or is not
                a directory.
        """
        parent = self._output_path.parent
        if not parent.exists():
            raise OutputWriteError(str(self._output_path), f"Parent directory does not exist: {parent}")
        if not parent.is_dir():
            raise OutputWriteError(str(self._output_path), f"Parent path is not a directory: {parent}")

    def __enter__(self) -> "ResultSink":
        """Enter the context manager, opening the output file.

        Returns:
            The ResultSink instance.

        Raises:
            OutputWriteError: If the file cannot be opened for writing.
        """
        mode = "a" if self._append else "w"
        try:
            self._file_handle = open(
                self._output_path, mode, encoding="utf-8", errors="surrogateescape"
            )
        except OSError as e:
            raise OutputWriteError(
                str(self._output_path), f"Cannot open output file for writing: {e}"
            ) from e

        if self._append and self._file_handle.tell() > 0:
            # Existing content stays; a header is already there
            self._resumed = True
            logger.debug("Resuming %s without a new header", self._output_path)

        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit the context manager, closing the output file.

        Ensures the file is closed even if an exception occurred.
        """
        with self._lock:
            if self._file_handle is not None:
                try:
                    self._file_handle.close()
                except OSError as e:
                    if exc_type is None:
                        # Buffered records were lost on the final flush
                        raise OutputWriteError(
                            str(self._output_path), f"Error closing {self._output_path}: {e}"
                        ) from e
                    print(f"Warning: Error closing output file: {e}", file=sys.stderr)
                finally:
                    self._file_handle = None

    def get_output_path(self) -> Path:
        """Get the path to the result log.

        Returns:
            The path to the result log.
        """
        return self._output_path

    @property
    def records_written(self) -> int:
        """Number of records appended since the sink was opened."""
        with self._lock:
            return self._records_written

    def write_header(self) -> None:
        """Write the header line. Must run once, before any record.

        Does nothing in append mode when the file already had content.

        Raises:
            RuntimeError: If a record or header was already written by this sink.
            OutputWriteError: If the write fails.
        """
        with self._lock:
            if self._records_written:
                raise RuntimeError("Header must be written before any record")
            if self._header_written:
                raise RuntimeError("Header already written")
            self._header_written = True
            if self._resumed:
                return
            self._write(HEADER + "\n")

    def append(self, record: FileRecord) -> None:
        """Format a record and append it as one line.

        Args:
            record: The FileRecord to write.

        Raises:
            OutputWriteError: If the write fails or the sink is not open.
        """
        line = record.format_line()
        with self._lock:
            self._write(line)
            self._records_written += 1

    def _write(self, text: str) -> None:
        """Write text to the open handle. Caller holds the lock.

        Raises:
            OutputWriteError: If the sink is closed or the write fails.
        """
        if self._file_handle is None:
            raise OutputWriteError(
                str(self._output_path), f"Output file is not open: {self._output_path}"
            )

        try:
            self._file_handle.write(text)
        except OSError as e:
            raise OutputWriteError(
                str(self._output_path), f"Error writing to {self._output_path}: {e}"
            ) from e
