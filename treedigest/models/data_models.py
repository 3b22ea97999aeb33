"""
Core data models for the tree digest indexer.

This module contains the following dataclasses:
- WorkItem: One discovered file waiting to be hashed
- FileRecord: The digest and modification time of one hashed file
- ScanError: A non-fatal error reported during traversal or hashing
- IndexSettings: The options of one indexing run
- IndexSummary: Summary of the indexing run returned by IndexOrchestrator
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from .error_kind import ErrorKind

# Header line written once at the top of every output log
HEADER = "Path, Hash, Time"

# Field separator between path, digest and timestamp
FIELD_SEPARATOR = ", "


def format_timestamp(dt: datetime) -> str:
    """Format a timestamp as a UTC string for the output log.

    Naive datetimes are taken to be UTC already. The fractional part is
    printed without trailing zeros and dropped entirely when zero.

    Args:
        dt: The datetime to format.

    Returns:
        Timestamp like '2021-04-27 22:33:47.982338 +0000 UTC'.
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    else:
        dt = dt.astimezone(timezone.utc)

    text = dt.strftime("%Y-%m-%d %H:%M:%S")
    if dt.microsecond:
        text += "." + f"{dt.microsecond:06d}".rstrip("0")
    return f"{text} +0000 UTC"


@dataclass(frozen=True)
class WorkItem:
    """One file to be hashed, identified by its absolute path."""
    path: str                         # Absolute path of the file


@dataclass(frozen=True)
class FileRecord:
    """Result of hashing one file."""
    path: str                         # Absolute path of the file
    digest: bytes                     # Raw digest bytes (32 for sha256)
    modified_time: datetime           # Last modification time, UTC

    @property
    def hex_digest(self) -> str:
        """Hex-encoded digest."""
        return self.digest.hex()

    def format_line(self) -> str:
        """Serialize the record as one newline-terminated output line."""
        fields = (self.path, self.hex_digest, format_timestamp(self.modified_time))
        return FIELD_SEPARATOR.join(fields) + "\n"


@dataclass(frozen=True)
class ScanError:
    """A per-entry or per-file error reported without stopping the run."""
    path: str                         # Path the error refers to
    kind: ErrorKind                   # Failure category
    message: str                      # Human readable description

    def __str__(self) -> str:
        return self.message


@dataclass
class IndexSettings:
    """Options for a single indexing run."""
    root: Path                        # Directory to walk
    output_path: Path                 # Result log location
    workers: Optional[int] = None     # Worker threads (None = CPU count)
    algorithm: str = "sha256"         # hashlib algorithm name
    append: bool = False              # Keep existing output instead of truncating
    verbose: bool = False             # Extra console output
    show_progress: bool = True        # Render progress bars


@dataclass
class IndexSummary:
    """Summary of the indexing run returned by IndexOrchestrator."""
    root: Path                        # Walked directory
    output_path: Path                 # Result log location
    files_discovered: int = 0         # Work items emitted by the walk
    files_hashed: int = 0             # Records written to the log
    errors: List[ScanError] = field(default_factory=list)  # Reported errors
    duration_seconds: float = 0.0     # Total run duration

    @property
    def files_failed(self) -> int:
        """Number of discovered files that produced an error instead of a record."""
        return sum(1 for e in self.errors if e.kind is ErrorKind.FILE_IO)
