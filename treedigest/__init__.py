"""treedigest - Directory Tree Content Fingerprinting.

A Python application that recursively hashes every file under a directory
with a pool of worker threads and records each file's path, digest and UTC
modification time in a comma-separated log.
"""

__version__ = "1.0.0"

from .models import (
    ErrorKind,
    FileRecord,
    IndexSettings,
    IndexSummary,
    ScanError,
    WorkItem,
)

__all__ = [
    "__version__",
    "ErrorKind",
    "WorkItem",
    "FileRecord",
    "ScanError",
    "IndexSettings",
    "IndexSummary",
]


def main() -> None:
    """Entry point for the treedigest CLI application.

    This function is called when the `treedigest` command is invoked after
    package installation via pip. It imports and runs the Typer app
    from the treedigest.cli module.
    """
    from treedigest.cli import app
    app()
