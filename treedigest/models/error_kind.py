"""
ErrorKind enum for the failure classes of an indexing run.

The pipeline distinguishes four kinds of failure, in the order they can occur:
1. Root Unreadable (fatal) - The root path cannot be opened as a directory
2. Entry Unreadable (recoverable) - A file or directory met mid-walk cannot be read
3. File I/O (recoverable) - Open, read or stat failure on a file queued for hashing
4. Output Write (fatal) - The result log cannot be written
"""

from enum import Enum


class ErrorKind(Enum):
    """Encodes the failure categories reported during an indexing run."""
    ROOT_UNREADABLE = "root_unreadable"    # Fatal: the walk cannot start
    ENTRY_UNREADABLE = "entry_unreadable"  # Skipped: entry (and subtree) left out
    FILE_IO = "file_io"                    # Skipped: file produces no record
    OUTPUT_WRITE = "output_write"          # Fatal: the run aborts

    @property
    def is_fatal(self) -> bool:
        """Whether this kind of failure aborts the whole run."""
        return self in (ErrorKind.ROOT_UNREADABLE, ErrorKind.OUTPUT_WRITE)
