"""Exceptions raised by the indexing pipeline.

Each exception carries the path it refers to and its ErrorKind. All of them
are OSError subclasses so callers handling plain filesystem errors still
catch them.
"""

from typing import Optional

from treedigest.models import ErrorKind


class TreeDigestError(Exception):
    """Base class for indexing errors."""

    kind: Optional[ErrorKind] = None

    def __init__(self, path: str, message: str) -> None:
        super().__init__(message)
        self.path = path
        self.message = message

    def __str__(self) -> str:
        return self.message


class RootUnreadableError(TreeDigestError, OSError):
    """The root path cannot be opened as a directory."""

    kind = ErrorKind.ROOT_UNREADABLE


class FileDigestError(TreeDigestError, OSError):
    """A queued file could not be opened, read or stat'd."""

    kind = ErrorKind.FILE_IO


class OutputWriteError(TreeDigestError, OSError):
    """The result log could not be written."""

    kind = ErrorKind.OUTPUT_WRITE
