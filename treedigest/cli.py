"""
treedigest - CLI Interface.

A command-line interface for fingerprinting a directory tree. Every file below
the root is hashed by a pool of worker threads and recorded with its path,
digest and UTC modification time in a comma-separated output log.

Usage Examples:
    # Index the whole filesystem into ./files.csv
    treedigest

    # Index one directory
    python -m treedigest /path/to/data

    # Custom output, worker count and algorithm
    treedigest /path/to/data --output data.csv --workers 8 --algorithm blake2b

    # Keep an existing output file instead of truncating it
    treedigest /path/to/data --append --verbose
"""

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from treedigest import __version__
from treedigest.exceptions import OutputWriteError, RootUnreadableError
from treedigest.models import IndexSettings
from treedigest.orchestration import IndexOrchestrator
from treedigest.orchestration.result_sink import DEFAULT_OUTPUT_NAME
from treedigest.scanning.file_hasher import DEFAULT_ALGORITHM

# Initialize Typer app
app = typer.Typer(
    name="treedigest",
    help="Recursively hash every file under a directory and record path, digest and modification time.",
    add_completion=False,
)

# Rich console on stderr so it interleaves with progress bars and ERROR lines
console = Console(stderr=True)


def default_root() -> Path:
    """Filesystem root of the host: '/' on POSIX, the current drive on Windows."""
    return Path(Path.cwd().anchor)


def configure_logging(verbose: bool) -> None:
    """Route package logging through Rich on stderr.

    Args:
        verbose: Log at DEBUG instead of ERROR.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.ERROR,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def version_callback(value: bool) -> None:
    """Display version information and exit."""
    if value:
        console.print(f"treedigest v{__version__}")
        raise typer.Exit()


def validate_workers(value: Optional[int]) -> Optional[int]:
    """
    Validate the worker count.

    Args:
        value: Worker count, or None for the CPU count.

    Returns:
        Validated worker count.

    Raises:
        typer.BadParameter: If value is less than 1.
    """
    if value is not None and value < 1:
        raise typer.BadParameter("Workers must be at least 1")
    return value


@app.command()
def index(
    root: Optional[Path] = typer.Argument(
        None,
        help="Directory to index. Defaults to the filesystem root.",
        show_default=False,
    ),
    output: Path = typer.Option(
        Path(DEFAULT_OUTPUT_NAME),
        "--output",
        "-o",
        envvar="TREEDIGEST_OUTPUT",
        help="Path of the CSV output log.",
    ),
    workers: Optional[int] = typer.Option(
        None,
        "--workers",
        "-w",
        help="Number of hashing threads. Defaults to the logical CPU count.",
        callback=validate_workers,
    ),
    algorithm: str = typer.Option(
        DEFAULT_ALGORITHM,
        "--algorithm",
        "-a",
        help="hashlib algorithm used for file digests.",
    ),
    append: bool = typer.Option(
        False,
        "--append",
        help="Append to an existing output log instead of truncating it.",
    ),
    no_progress: bool = typer.Option(
        False,
        "--no-progress",
        help="Do not render progress bars.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-V",
        help="Enable verbose output.",
    ),
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """
    Hash every file under ROOT and write path, digest and time to a CSV log.

    Files are discovered first, then hashed by a pool of worker threads.
    Unreadable entries are reported as ERROR lines on stderr and skipped.
    """
    configure_logging(verbose)

    if root is None:
        root = default_root()

    if append and output.exists() and output.stat().st_size > 0:
        console.print(
            f"[yellow]Warning:[/yellow] Appending to existing output: {output}. "
            "Earlier records are kept."
        )

    settings = IndexSettings(
        root=root,
        output_path=output,
        workers=workers,
        algorithm=algorithm,
        append=append,
        verbose=verbose,
        show_progress=not no_progress,
    )

    try:
        orchestrator = IndexOrchestrator(settings, console=console)
        summary = orchestrator.run()

        if summary.errors:
            console.print(
                f"\n[yellow]Completed with {len(summary.errors)} error(s).[/yellow]"
            )

        console.print(
            f"[green]Indexed {summary.files_hashed:,} of {summary.files_discovered:,} "
            f"file(s).[/green]"
        )
        console.print(f"[dim]Output written to: {summary.output_path}[/dim]", soft_wrap=True)

    except KeyboardInterrupt:
        console.print("\n[yellow]Indexing interrupted by user.[/yellow]")
        raise typer.Exit(130)

    except RootUnreadableError as e:
        console.print(f"[red]Error:[/red] {e}", soft_wrap=True)
        raise typer.Exit(1)

    except OutputWriteError as e:
        console.print(f"[red]Error:[/red] Output failed - {e}", soft_wrap=True)
        raise typer.Exit(1)

    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    except OSError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
