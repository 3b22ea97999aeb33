"""File hashing utility producing FileRecords.

This module provides the FileHasher class for computing the content digest
and UTC modification time of a single file. Files are streamed through the
hash in fixed-size chunks so memory use does not depend on file size.

Example:
    >>> from treedigest.scanning import FileHasher
    >>> hasher = FileHasher()
    >>> record = hasher.digest("/path/to/file.txt")
    >>> print(f"{record.path}: {record.hex_digest}")
"""

import hashlib
import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Union

from treedigest.exceptions import FileDigestError
from treedigest.models import FileRecord

logger = logging.getLogger(__name__)

# Buffer size for chunked file reading (64KB)
CHUNK_SIZE = 64 * 1024

DEFAULT_ALGORITHM = "sha256"


class FileHasher:
    """Computes content digests of files.

    The hasher holds no per-file state, so one instance can be shared by every
    worker thread of a WorkerPool.

    Attributes:
        algorithm: Name of the hashlib algorithm in use.
        chunk_size: Number of bytes read per chunk.

    Example:
        >>> hasher = FileHasher(algorithm="sha256")
        >>> record = hasher.digest(Path("file.txt"))
        >>> len(record.digest)
        32
    """

    def __init__(self, algorithm: str = DEFAULT_ALGORITHM, chunk_size: int = CHUNK_SIZE) -> None:
        """Initialize the FileHasher.

        Args:
            algorithm: Any algorithm name accepted by hashlib.new.
            chunk_size: Bytes per read; must be positive.

        Raises:
            ValueError: If the algorithm is unknown, needs a digest length
                (shake_*), or chunk_size is not positive.
        """
        try:
            probe = hashlib.new(algorithm)
        except (ValueError, TypeError) as e:
            raise ValueError(f"Unsupported hash algorithm: {algorithm}") from e
        if probe.digest_size == 0:
            raise ValueError(f"Unsupported hash algorithm: {algorithm}")
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")

        self.algorithm = algorithm
        self.chunk_size = chunk_size
        self.digest_size = probe.digest_size

    def digest(self, file_path: Union[str, Path]) -> FileRecord:
        """Hash a file and collect its modification time.

        The modification time is taken from the open handle after the content
        has been read.

        Args:
            file_path: Path to the file to hash.

        Returns:
            FileRecord with the raw digest and the UTC modification time.

        Raises:
            FileDigestError: If the file cannot be opened, read or stat'd.
        """
        path = os.fspath(file_path)
        hasher = hashlib.new(self.algorithm)

        try:
            with open(path, "rb") as f:
                while True:
                    chunk = f.read(self.chunk_size)
                    if not chunk:
                        break
                    hasher.update(chunk)

                stat_result = os.fstat(f.fileno())
        except PermissionError as e:
            raise FileDigestError(path, f"Permission denied: {path}") from e
        except FileNotFoundError as e:
            raise FileDigestError(path, f"File not found: {path}") from e
        except IsADirectoryError as e:
            raise FileDigestError(path, f"Not a file: {path}") from e
        except OSError as e:
            raise FileDigestError(path, f"Error reading {path}: {e}") from e

        modified_time = datetime.fromtimestamp(stat_result.st_mtime, tz=timezone.utc)
        logger.debug("Hashed %s", path)

        return FileRecord(
            path=path,
            digest=hasher.digest(),
            modified_time=modified_time,
        )
