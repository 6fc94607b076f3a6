"""
versync CLI Entry Point.

This module implements the command-line interface for versync, a tool that
finds every place a project records its version and checks that they agree.

Commands:

1.  **discover**: Scans a project tree for `.version` markers and known
    manifests (package.json, Cargo.toml, pyproject.toml, Chart.yaml, ...),
    reports the project layout (none, single module, monorepo), lists every
    version source and flags those that disagree with the primary version.
    In an interactive terminal it then offers to fix what it found.
2.  **read**: Prints the version stored in one file.
3.  **write**: Replaces the version stored in one file, preserving the rest
    of the content as far as the format allows.

Usage:
    $ versync discover --path /path/to/repo --format table
    $ versync read package.json --format json --field version
    $ versync write Chart.yaml 1.4.0 --format yaml --field appVersion

Dependencies:
    - Typer: CLI argument parsing and app structure.
    - Rich: Terminal UI, colors and tables.
    - Inquirer: Interactive terminal user prompts.
    - structlog: Diagnostic logging on stderr.
"""

from contextlib import contextmanager
from pathlib import Path
import signal
import sys
from typing import Annotated, Iterator, Optional

from rich import print as pr
from rich.markup import escape
import typer

from constants import CONFIG_FILENAME
from core.cancellation import CancellationToken
from core.config import load_config
from core.discovery import DiscoveryService
from core.exceptions import (
    ConfigLoadError,
    ContentError,
    DiscoveryCancelledError,
    FileIOError,
    VersyncError,
)
from core.file_io import OSFileSystem
from core.parser import FileConfig, VersionReader, VersionWriter
from models import FileFormat
from ui.output import DiscoveryFormatter, OutputFormat, quiet_summary
from ui.prompts import InquirerPrompter
from ui.workflow import SyncWorkflow
from utils import console, setup_logging

app = typer.Typer(help="Discover, read and synchronize project version numbers.")


@app.callback()
def init() -> None:
    setup_logging()


@app.command()
def discover(
    path: Annotated[
        Path,
        typer.Option(
            exists=True,
            file_okay=False,
            dir_okay=True,
            resolve_path=True,
            help="Project root to scan",
        ),
    ] = Path.cwd(),
    output_format: Annotated[
        str,
        typer.Option(
            "--format",
            "-f",
            help=f"Output format: {', '.join(list(OutputFormat))}",
        ),
    ] = OutputFormat.TEXT.value,
    quiet: Annotated[
        bool,
        typer.Option("--quiet", "-q", help="Print a single summary line."),
    ] = False,
    no_interactive: Annotated[
        bool,
        typer.Option("--no-interactive", help="Never prompt to fix what was found."),
    ] = False,
    max_depth: Annotated[
        Optional[int],
        typer.Option(
            "--max-depth",
            min=0,
            help="Depth limit for the manifest scan (default: 3 or configured value).",
        ),
    ] = None,
):
    """
    Scan a project for version sources and report mismatches.

    Loads `.versync.json` from the project root if present, runs discovery
    and prints the result. When output is text, stdin is a terminal and
    neither --quiet nor --no-interactive is given, the user is then offered
    to create a missing `.version` file and to sync mismatched files.

    Raises:
        typer.Exit: With code 1 if configuration cannot be loaded, discovery
            is cancelled or an unexpected error occurs.
    """
    fs = OSFileSystem()
    fmt = OutputFormat.parse(output_format)

    try:
        config = load_config(fs, path / CONFIG_FILENAME)
    except VersyncError as e:
        print_versync_err(e)
        return

    token = CancellationToken()
    try:
        with cancel_on_interrupt(token):
            result = DiscoveryService(fs, config).discover(path, token, max_depth)
    except DiscoveryCancelledError as e:
        pr("\n[yellow]Discovery cancelled.[/yellow]")
        raise typer.Exit(code=1) from e
    except Exception as e:  # noqa: BLE001
        print_unexpected_err(e)
        return

    if quiet:
        console.print(quiet_summary(result), markup=False, highlight=False)
        return

    DiscoveryFormatter(fmt).print_result(result, console)

    interactive = not no_interactive and fmt is OutputFormat.TEXT and sys.stdin.isatty()
    if not interactive:
        return

    try:
        written = SyncWorkflow(
            InquirerPrompter(), result, VersionWriter(fs), path
        ).run()
    except typer.Exit:
        raise
    except Exception as e:  # noqa: BLE001
        print_unexpected_err(e)
        return

    if written:
        pr(f"\n[green]{len(written)} file(s) updated.[/green]")


@app.command()
def read(
    file: Annotated[Path, typer.Argument(help="File to read the version from")],
    file_format: Annotated[
        str,
        typer.Option("--format", "-f", help=f"File format: {', '.join(list(FileFormat))}"),
    ],
    field: Annotated[
        str, typer.Option(help="Dot-notation path to the version field")
    ] = "",
    pattern: Annotated[
        str,
        typer.Option(
            help="Regex with one capturing group for the version; ^ and $ match per line"
        ),
    ] = "",
):
    """Print the version stored in FILE."""
    cfg = FileConfig(path=str(file), format=file_format, field=field, pattern=pattern)  # type: ignore[arg-type]
    try:
        version = VersionReader(OSFileSystem()).read_version(cfg)
    except VersyncError as e:
        print_versync_err(e)
        return

    console.print(version, markup=False, highlight=False)


@app.command()
def write(
    file: Annotated[Path, typer.Argument(help="File to update")],
    version: Annotated[str, typer.Argument(help="Version to write")],
    file_format: Annotated[
        str,
        typer.Option("--format", "-f", help=f"File format: {', '.join(list(FileFormat))}"),
    ],
    field: Annotated[
        str, typer.Option(help="Dot-notation path to the version field")
    ] = "",
    pattern: Annotated[
        str,
        typer.Option(
            help="Regex with one capturing group for the version; ^ and $ match per line"
        ),
    ] = "",
):
    """Replace the version stored in FILE with VERSION."""
    cfg = FileConfig(path=str(file), format=file_format, field=field, pattern=pattern)  # type: ignore[arg-type]
    try:
        VersionWriter(OSFileSystem()).write(cfg, version)
    except VersyncError as e:
        print_versync_err(e)
        return

    pr(f"[green]✓[/green] Updated {escape(str(file))} to [bold]{escape(version)}[/bold]")


@contextmanager
def cancel_on_interrupt(token: CancellationToken) -> Iterator[None]:
    """
    Route Ctrl+C to token.cancel() for the duration of the block.

    The previous SIGINT handler is restored on exit, so later prompts keep
    their usual Ctrl+C behaviour.
    """
    previous = signal.signal(signal.SIGINT, lambda *_: token.cancel())
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous)


def print_versync_err(e: VersyncError) -> None:
    """
    Displays a user-friendly error message for a versync failure.

    The heading depends on the error family (configuration, content or
    storage); the file path is shown when the error carries one.

    Args:
        e (VersyncError): The exception that was raised.

    Raises:
        typer.Exit: Always raises with exit code 1 to terminate the application.
    """
    if isinstance(e, FileIOError):
        heading = "File I/O Error"
        hint = "Check that the file exists and that you have permission to access it."
    elif isinstance(e, ContentError):
        heading = "Content Error"
        hint = "Check the file format, field path or pattern."
    elif isinstance(e, ConfigLoadError):
        heading = "Configuration Error"
        hint = f"Fix or remove {CONFIG_FILENAME}."
    else:
        heading = "Invalid Arguments"
        hint = "Check --format, --field and --pattern."

    pr(f"❌ [bold red]{heading}[/bold red]")
    pr(escape(e.message))
    if e.file_path:
        pr(f"File path: [yellow]{escape(e.file_path)}[/yellow]")

    pr(f"\n[yellow]Quick Fix:[/yellow] {hint}")
    if e.original_exception:
        pr(f"\nTechnical details: {escape(str(e.original_exception))}")

    raise typer.Exit(code=1) from e


def print_unexpected_err(e: Exception) -> None:
    """
    Displays a user-friendly error message for unexpected errors.

    Args:
        e (Exception): The unexpected exception that was raised.

    Raises:
        typer.Exit: Always raises with exit code 1 to terminate the application.
    """
    pr("❌ [bold red]Unexpected Error[/bold red]")
    pr("An unexpected error occurred while processing your request.")
    pr(f"\n[yellow]Error Type:[/yellow] {type(e).__name__}")
    pr(f"[yellow]Error Message:[/yellow] {escape(str(e))}")

    pr("\n--- PLEASE REPORT THIS ---")
    pr(f"Error Type: {type(e).__name__}")
    pr(f"Error Message: {escape(str(e))}")
    if e.__cause__:
        pr(f"Caused by: {escape(str(e.__cause__))}")

    raise typer.Exit(code=1) from e


if __name__ == "__main__":
    app()
