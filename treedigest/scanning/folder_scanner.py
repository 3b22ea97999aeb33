"""Folder scanning utility for discovering files to hash.

This module provides the FolderScanner class, which walks a directory tree and
lazily yields one WorkItem for every non-directory entry below the root.

Example:
    >>> from treedigest.scanning import FolderScanner
    >>> scanner = FolderScanner()
    >>> for item in scanner.walk(Path("/data")):
    ...     print(item.path)
"""

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Iterator, List, Optional, Union

from treedigest.exceptions import RootUnreadableError
from treedigest.models import ErrorKind, ScanError, WorkItem

if TYPE_CHECKING:
    from treedigest.ui.progress_reporter import ProgressReporter

logger = logging.getLogger(__name__)


class FolderScanner:
    """Walks a folder tree and emits WorkItems for the files it contains.

    Directories are descended into and never emitted. Every other entry
    (regular files, symlinks, fifos, ...) produces exactly one WorkItem.
    Symlinks to directories are not followed; they are emitted like files.
    Sibling and depth order is unspecified.

    Entries that cannot be read are reported through the error hook and
    skipped together with their subtree; the walk itself keeps going.

    Attributes:
        _on_error: Optional callback receiving each ScanError as it happens.
        _progress: Optional ProgressReporter signalled once per WorkItem.
        _errors: List of errors encountered during scanning.
        _files_discovered: Number of WorkItems emitted so far.

    Example:
        >>> scanner = FolderScanner(on_error=print)
        >>> items = list(scanner.walk(Path("/data/backup")))
        >>> print(f"Found {scanner.files_discovered} files")
    """

    def __init__(
        self,
        on_error: Optional[Callable[[ScanError], None]] = None,
        progress: Optional["ProgressReporter"] = None,
    ) -> None:
        """Initialize the FolderScanner.

        Args:
            on_error: Optional hook called with a ScanError for every entry
                that cannot be read.
            progress: Optional ProgressReporter whose discovery counter is
                incremented for every emitted WorkItem.
        """
        self._on_error = on_error
        self._progress = progress
        self._errors: List[ScanError] = []
        self._files_discovered = 0

    def walk(self, root: Union[str, Path]) -> Iterator[WorkItem]:
        """Walk the tree below root.

        The root is checked eagerly so a bad root fails here rather than on
        the first iteration. Its listing is reopened, and everything below it
        enumerated, only once the iterator is consumed; no directory handle
        is held by an iterator that is never started.

        Args:
            root: Directory to walk. Relative paths are made absolute.

        Returns:
            Iterator of WorkItems carrying absolute paths.

        Raises:
            RootUnreadableError: If the root cannot be opened as a directory.
        """
        root_path = os.path.abspath(os.fspath(root))

        try:
            with os.scandir(root_path):
                pass
        except OSError as e:
            reason = e.strerror or str(e)
            raise RootUnreadableError(root_path, f"Cannot open root {root_path}: {reason}") from e

        logger.info("Walking %s", root_path)
        return self._iter_tree(root_path)

    def _iter_tree(self, root_path: str) -> Iterator[WorkItem]:
        """Depth-first descent keeping at most one directory handle open."""
        pending: List[str] = [root_path]

        while pending:
            dir_path = pending.pop()
            try:
                entries = os.scandir(dir_path)
            except OSError as e:
                self._report(dir_path, e)
                continue

            yield from self._scan_directory(dir_path, entries, pending)

    def _scan_directory(self, dir_path: str, entries, pending: List[str]) -> Iterator[WorkItem]:
        """Emit the files of one directory and queue its subdirectories.

        Args:
            dir_path: Path of the directory being listed.
            entries: Open os.scandir iterator for dir_path.
            pending: Stack receiving subdirectory paths to visit later.

        Yields:
            WorkItem for each non-directory entry.
        """
        with entries:
            while True:
                try:
                    entry = next(entries)
                except StopIteration:
                    break
                except OSError as e:
                    # Listing broke off; what was already emitted stands
                    self._report(dir_path, e)
                    break

                try:
                    is_dir = entry.is_dir(follow_symlinks=False)
                except OSError as e:
                    self._report(entry.path, e)
                    continue

                if is_dir:
                    pending.append(entry.path)
                    continue

                self._files_discovered += 1
                if self._progress is not None:
                    self._progress.file_discovered()

                yield WorkItem(path=entry.path)

    def _report(self, path: str, error: OSError) -> None:
        """Record an unreadable entry and pass it to the error hook."""
        if isinstance(error, PermissionError):
            message = f"Permission denied: {path}"
        else:
            message = f"Error accessing {path}: {error.strerror or error}"

        scan_error = ScanError(path=path, kind=ErrorKind.ENTRY_UNREADABLE, message=message)
        self._errors.append(scan_error)
        logger.warning(message)

        if self._on_error is not None:
            self._on_error(scan_error)

    @property
    def files_discovered(self) -> int:
        """Number of WorkItems emitted since the last clear_errors call."""
        return self._files_discovered

    def get_errors(self) -> List[ScanError]:
        """Get list of errors encountered during scanning operations.

        Returns:
            List of ScanError entries.
        """
        return self._errors.copy()

    def clear_errors(self) -> None:
        """Clear the list of accumulated errors and reset the discovery count."""
        self._errors.clear()
        self._files_discovered = 0
