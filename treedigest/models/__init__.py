"""
Models package for the tree digest indexer.

This package provides convenient imports for all data models:
- ErrorKind: Enum for failure categories
- WorkItem: A discovered file waiting to be hashed
- FileRecord: A hashed file's digest and modification time
- ScanError: A non-fatal error reported during the run
- IndexSettings: Options of an indexing run
- IndexSummary: Indexing run summary
"""

from .error_kind import ErrorKind
from .data_models import (
    HEADER,
    FileRecord,
    IndexSettings,
    IndexSummary,
    ScanError,
    WorkItem,
    format_timestamp,
)

__all__ = [
    "HEADER",
    "ErrorKind",
    "WorkItem",
    "FileRecord",
    "ScanError",
    "IndexSettings",
    "IndexSummary",
    "format_timestamp",
]
