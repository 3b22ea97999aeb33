"""File scanning package for treedigest.

This package provides utilities for walking folders and computing file digests.
It contains two main classes:

- FileHasher: Streams a file through a hashlib algorithm and returns a
  FileRecord with the digest and UTC modification time.
- FolderScanner: Walks a directory tree and lazily yields a WorkItem for
  every file below the root.

Example:
    >>> from treedigest.scanning import FileHasher, FolderScanner
    >>> from pathlib import Path
    >>>
    >>> scanner = FolderScanner()
    >>> hasher = FileHasher()
    >>> for item in scanner.walk(Path("/data")):
    ...     print(hasher.digest(item.path).hex_digest)
"""

from .file_hasher import FileHasher
from .folder_scanner import FolderScanner

__all__ = ["FileHasher", "FolderScanner"]
