"""Pytest fixtures for treedigest tests."""

import hashlib
import io
import os
import platform
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Generator, List, Optional

import pytest
from rich.console import Console

from treedigest.models import HEADER, FileRecord, IndexSettings
from treedigest.ui import ProgressReporter


# Known content for the three-file scenario
KNOWN_CONTENT: Dict[str, bytes] = {
    "alpha.txt": b"alpha content\n",
    "docs/beta.md": b"# beta\n",
    "docs/deep/gamma.bin": bytes(range(256)) * 16,
}


def running_as_root() -> bool:
    """Whether permission bits are ignored for the current user."""
    return hasattr(os, "geteuid") and os.geteuid() == 0


def parse_output(path: Path) -> List[List[str]]:
    """Read an output log and split every line into its fields.

    Args:
        path: Output log to read.

    Returns:
        One list of fields per line, header included.
    """
    lines = path.read_text(encoding="utf-8").splitlines()
    return [line.split(", ") for line in lines]


def records_by_path(path: Path) -> Dict[str, List[str]]:
    """Map each recorded path to its [digest, time] fields, skipping the header."""
    rows = parse_output(path)
    assert rows[0] == HEADER.split(", ")
    return {row[0]: row[1:] for row in rows[1:]}


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for isolated test environments.

    Yields:
        Path to the temporary directory.
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def output_dir() -> Generator[Path, None, None]:
    """Separate directory for output logs so they are not part of the walked tree."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def known_tree(temp_dir: Path) -> Path:
    """Create a tree holding three files of known content.

    Creates:
        temp_dir/
        ├── alpha.txt
        ├── empty-dir/
        └── docs/
            ├── beta.md
            └── deep/
                └── gamma.bin

    Args:
        temp_dir: Temporary directory fixture.

    Returns:
        Path to the root of the tree.
    """
    for relative, content in KNOWN_CONTENT.items():
        file_path = temp_dir / relative
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_bytes(content)

    (temp_dir / "empty-dir").mkdir()
    return temp_dir


@pytest.fixture
def expected_digests(known_tree: Path) -> Dict[str, str]:
    """Reference sha256 hex digests keyed by absolute path for known_tree."""
    return {
        str(known_tree / relative): hashlib.sha256(content).hexdigest()
        for relative, content in KNOWN_CONTENT.items()
    }


@pytest.fixture
def wide_tree(temp_dir: Path) -> Path:
    """Create 20 directories with 10 small files each (200 files)."""
    for i in range(20):
        folder = temp_dir / f"dir-{i:02d}"
        folder.mkdir()
        for j in range(10):
            (folder / f"file-{j}.txt").write_bytes(f"file {i}/{j}".encode() * (j + 1))
    return temp_dir


@pytest.fixture
def restricted_file(temp_dir: Path) -> Generator[Optional[Path], None, None]:
    """Create a file with no read permissions.

    Note: This fixture is platform-specific. On Windows, or when running as
    root, permission bits do not stop reads, so None is yielded.

    Args:
        temp_dir: Temporary directory fixture.

    Yields:
        Path to the restricted file, or None if permissions cannot be enforced.
    """
    if platform.system() == "Windows" or running_as_root():
        yield None
        return

    restricted = temp_dir / "restricted.txt"
    restricted.write_text("secret content")

    original_mode = restricted.stat().st_mode
    os.chmod(restricted, 0o000)

    try:
        yield restricted
    finally:
        # Restore permissions for cleanup
        os.chmod(restricted, original_mode)


@pytest.fixture
def broken_symlink(temp_dir: Path) -> Optional[Path]:
    """Create a symlink whose target does not exist.

    The walk emits it like a file; hashing it fails with FileNotFoundError
    regardless of the user's privileges.

    Returns:
        Path to the broken symlink, or None if symlinks are not supported.
    """
    link = temp_dir / "dangling.lnk"
    try:
        link.symlink_to(temp_dir / "missing-target")
    except (OSError, NotImplementedError):
        return None
    return link


@pytest.fixture
def sample_record() -> FileRecord:
    """A FileRecord with fixed values."""
    return FileRecord(
        path="/data/report.txt",
        digest=hashlib.sha256(b"report").digest(),
        modified_time=datetime(2021, 4, 27, 22, 33, 47, 982338, tzinfo=timezone.utc),
    )


@pytest.fixture
def captured_console() -> Console:
    """Console writing to StringIO. Read output via console.file.getvalue()."""
    output = io.StringIO()
    return Console(file=output, force_terminal=False, width=200)


@pytest.fixture
def quiet_reporter(captured_console: Console) -> ProgressReporter:
    """ProgressReporter with bars disabled and output captured."""
    return ProgressReporter(console=captured_console, enabled=False)


@pytest.fixture
def make_settings(output_dir: Path):
    """Factory building IndexSettings that write into output_dir without bars."""

    def _make(root: Path, **overrides) -> IndexSettings:
        values = {
            "root": root,
            "output_path": output_dir / "files.csv",
            "workers": 4,
            "show_progress": False,
        }
        values.update(overrides)
        return IndexSettings(**values)

    return _make


def pytest_configure(config) -> None:
    """Register the markers used by the unit and integration suites."""
    config.addinivalue_line("markers", "unit: fast tests of a single model or helper")
    config.addinivalue_line("markers", "integration: end-to-end runs against real trees")
