"""End-to-end tests for the treedigest CLI.

This module tests the CLI interface using Typer's CliRunner. Console output
goes to stderr, which the runner folds into result.output.
"""

from pathlib import Path
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from treedigest import __version__
from treedigest.cli import app, default_root
from treedigest.models import HEADER

from conftest import records_by_path


@pytest.fixture
def cli_runner() -> CliRunner:
    """Return a CliRunner instance for testing."""
    return CliRunner()


class TestVersionFlag:
    """Tests for --version flag."""

    def test_version_flag_short(self, cli_runner: CliRunner) -> None:
        """Test -v flag displays version."""
        result = cli_runner.invoke(app, ["-v"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_version_flag_long(self, cli_runner: CliRunner) -> None:
        """Test --version flag displays version."""
        result = cli_runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output


class TestHelpFlag:
    """Tests for --help."""

    def test_help(self, cli_runner: CliRunner) -> None:
        """Test --help lists the options."""
        result = cli_runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "--output" in result.output
        assert "--workers" in result.output
        assert "--algorithm" in result.output
        assert "--append" in result.output
        assert "--no-progress" in result.output


class TestIndexCommand:
    """Tests for successful runs."""

    def test_index_known_tree(
        self, cli_runner: CliRunner, known_tree: Path, expected_digests, output_dir: Path
    ) -> None:
        """Test indexing a tree writes every file and reports the totals."""
        output = output_dir / "out.csv"

        result = cli_runner.invoke(
            app, [str(known_tree), "--output", str(output), "--no-progress"]
        )

        assert result.exit_code == 0
        assert "Indexed 3 of 3 file(s)." in result.output
        assert str(output) in result.output
        records = records_by_path(output)
        assert {path: fields[0] for path, fields in records.items()} == expected_digests

    def test_output_from_environment(
        self, cli_runner: CliRunner, known_tree: Path, output_dir: Path
    ) -> None:
        """Test TREEDIGEST_OUTPUT sets the output path."""
        output = output_dir / "env.csv"

        result = cli_runner.invoke(
            app, [str(known_tree), "--no-progress"], env={"TREEDIGEST_OUTPUT": str(output)}
        )

        assert result.exit_code == 0
        assert output.exists()

    def test_default_output_in_cwd(self, cli_runner: CliRunner, known_tree: Path, output_dir: Path, monkeypatch) -> None:
        """Test the default output is files.csv in the current directory."""
        monkeypatch.chdir(output_dir)

        result = cli_runner.invoke(app, [str(known_tree), "--no-progress", "-w", "2"])

        assert result.exit_code == 0
        assert (output_dir / "files.csv").read_text(encoding="utf-8").startswith(HEADER + "\n")

    def test_progress_enabled(self, cli_runner: CliRunner, known_tree: Path, output_dir: Path) -> None:
        """Test a run with progress bars enabled still completes."""
        output = output_dir / "out.csv"

        result = cli_runner.invoke(app, [str(known_tree), "-o", str(output)])

        assert result.exit_code == 0
        assert len(records_by_path(output)) == 3

    def test_alternate_algorithm(self, cli_runner: CliRunner, known_tree: Path, output_dir: Path) -> None:
        """Test --algorithm changes the digest length."""
        output = output_dir / "out.csv"

        result = cli_runner.invoke(
            app, [str(known_tree), "-o", str(output), "-a", "sha1", "--no-progress"]
        )

        assert result.exit_code == 0
        assert all(len(fields[0]) == 40 for fields in records_by_path(output).values())

    def test_append_warns(self, cli_runner: CliRunner, known_tree: Path, output_dir: Path) -> None:
        """Test --append on a non-empty log warns and keeps the earlier lines."""
        output = output_dir / "out.csv"
        cli_runner.invoke(app, [str(known_tree), "-o", str(output), "--no-progress"])

        result = cli_runner.invoke(
            app, [str(known_tree), "-o", str(output), "--append", "--no-progress"]
        )

        assert result.exit_code == 0
        assert "Appending to existing output" in result.output
        assert len(output.read_text(encoding="utf-8").splitlines()) == 7

    def test_verbose_summary(self, cli_runner: CliRunner, known_tree: Path, output_dir: Path) -> None:
        """Test --verbose prints the summary table."""
        result = cli_runner.invoke(
            app, [str(known_tree), "-o", str(output_dir / "out.csv"), "--no-progress", "-V"]
        )

        assert result.exit_code == 0
        assert "Index Summary" in result.output

    def test_error_lines(
        self, cli_runner: CliRunner, known_tree: Path, broken_symlink, output_dir: Path
    ) -> None:
        """Test per-file errors print ERROR lines and still exit 0."""
        if broken_symlink is None:
            pytest.skip("Symlinks not supported")

        result = cli_runner.invoke(
            app, [str(known_tree), "-o", str(output_dir / "out.csv"), "--no-progress"]
        )

        assert result.exit_code == 0
        assert "ERROR: File not found:" in result.output
        assert "Completed with 1 error(s)." in result.output
        assert "Indexed 3 of 4 file(s)." in result.output

    def test_default_root(self, cli_runner: CliRunner, known_tree: Path, output_dir: Path) -> None:
        """Test omitting ROOT walks the filesystem root."""
        output = output_dir / "out.csv"

        with patch("treedigest.cli.default_root", return_value=known_tree):
            result = cli_runner.invoke(app, ["-o", str(output), "--no-progress"])

        assert result.exit_code == 0
        assert len(records_by_path(output)) == 3

    def test_default_root_is_anchor(self) -> None:
        """Test the default root is the anchor of the current directory."""
        root = default_root()
        assert root == Path(root.anchor)
        assert root.is_dir()


class TestIndexFailures:
    """Tests for fatal errors and exit codes."""

    def test_missing_root(self, cli_runner: CliRunner, temp_dir: Path, output_dir: Path) -> None:
        """Test a missing root exits 1 without creating the output file."""
        output = output_dir / "out.csv"

        result = cli_runner.invoke(
            app, [str(temp_dir / "missing"), "-o", str(output), "--no-progress"]
        )

        assert result.exit_code == 1
        assert "Error" in result.output
        assert "Cannot open root" in result.output
        assert not output.exists()

    def test_output_dir_missing(self, cli_runner: CliRunner, known_tree: Path, output_dir: Path) -> None:
        """Test an unwritable output location exits 1."""
        result = cli_runner.invoke(
            app, [str(known_tree), "-o", str(output_dir / "nope" / "out.csv"), "--no-progress"]
        )

        assert result.exit_code == 1
        assert "Output failed" in result.output

    def test_invalid_workers(self, cli_runner: CliRunner, known_tree: Path) -> None:
        """Test --workers 0 is rejected as a usage error."""
        result = cli_runner.invoke(app, [str(known_tree), "--workers", "0"])

        assert result.exit_code == 2

    def test_unknown_algorithm(self, cli_runner: CliRunner, known_tree: Path, output_dir: Path) -> None:
        """Test an unknown algorithm exits 1."""
        result = cli_runner.invoke(
            app, [str(known_tree), "-o", str(output_dir / "out.csv"), "-a", "nope", "--no-progress"]
        )

        assert result.exit_code == 1
        assert "Unsupported hash algorithm" in result.output

    def test_keyboard_interrupt(self, cli_runner: CliRunner, known_tree: Path, output_dir: Path) -> None:
        """Test Ctrl+C exits with code 130."""
        with patch(
            "treedigest.cli.IndexOrchestrator.run", side_effect=KeyboardInterrupt
        ):
            result = cli_runner.invoke(
                app, [str(known_tree), "-o", str(output_dir / "out.csv"), "--no-progress"]
            )

        assert result.exit_code == 130
        assert "interrupted" in result.output


class TestAppendWarning:
    """Tests for the append-mode warning."""

    def test_warned_once_when_verbose(
        self, cli_runner: CliRunner, known_tree: Path, output_dir: Path
    ) -> None:
        """Test appending with --verbose prints the warning a single time."""
        output = output_dir / "out.csv"
        cli_runner.invoke(app, [str(known_tree), "-o", str(output), "--no-progress"])

        result = cli_runner.invoke(
            app, [str(known_tree), "-o", str(output), "--append", "--no-progress", "-V"]
        )

        assert result.exit_code == 0
        assert result.output.count("Appending to existing output") == 1

    def test_no_warning_for_new_file(
        self, cli_runner: CliRunner, known_tree: Path, output_dir: Path
    ) -> None:
        """Test --append on a missing log prints no warning."""
        result = cli_runner.invoke(
            app, [str(known_tree), "-o", str(output_dir / "new.csv"), "--append", "--no-progress"]
        )

        assert result.exit_code == 0
        assert "Appending to existing output" not in result.output


class TestVersionSource:
    """Tests for the version string."""

    def test_cli_uses_package_version(self) -> None:
        """Test the CLI reports the version defined by the package."""
        import treedigest
        import treedigest.cli

        assert treedigest.cli.__version__ is treedigest.__version__

    def test_setup_reads_package_version(self) -> None:
        """Test setup.py's version source holds the package version."""
        init_path = Path(__file__).resolve().parent.parent / "treedigest" / "__init__.py"
        assert f'__version__ = "{__version__}"' in init_path.read_text(encoding="utf-8")
