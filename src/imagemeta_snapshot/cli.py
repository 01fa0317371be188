"""CLI for imagemeta-snapshot."""

import logging
from pathlib import Path
from typing import Optional

import portalocker
import typer
from rich.console import Console

from .config import SnapshotConfig, load_config
from .constants import STORE_ROOT_ENV
from .display import (
    display_comparison,
    display_file_details,
    display_file_list,
    display_search_results,
    display_snapshot_info,
    display_stats,
    printable,
)
from .errors import ConfigError, IntegrityViolationError
from .scanner import describe_file, enumerate_files
from .search import search_files
from .stats import compute_stats
from .store import SnapshotStore
from .utils import normalize_path


app = typer.Typer(help="""\
List, search, summarize and snapshot image directories. Save a snapshot of a
directory, then compare it later to see which images were added, modified
or deleted.""")

snapshot_app = typer.Typer(help="Save and compare directory snapshots")
app.add_typer(snapshot_app, name="snapshot")

console = Console()

# Exit code reserved for a snapshot that failed verification
EXIT_TAMPERED = 2


@app.callback()
def main_callback(
    ctx: typer.Context,
    store_root: Optional[Path] = typer.Option(
        None, "--store-root",
        envvar=STORE_ROOT_ENV,
        help="Directory holding snapshots/ and snapshot_metadata/ (default: current directory)",
    ),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Enable debug logging"),
):
    """Shared options for all commands."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = {"store_root": store_root or Path.cwd()}


def _load_config(ctx: typer.Context) -> SnapshotConfig:
    try:
        return load_config(ctx.obj["store_root"])
    except ConfigError as e:
        console.print(f"[red]✗[/red] Invalid configuration: {printable(str(e))}")
        raise typer.Exit(1)


def _require_directory(directory: Path) -> Path:
    if not directory.is_dir():
        console.print(f"[red]✗[/red] Not a directory: {printable(str(directory))}")
        raise typer.Exit(1)
    return directory


def _open_store(ctx: typer.Context, config: SnapshotConfig) -> SnapshotStore:
    try:
        return SnapshotStore(ctx.obj["store_root"], config)
    except OSError as e:
        console.print(f"[red]✗[/red] Cannot prepare snapshot storage: {printable(str(e))}")
        raise typer.Exit(1)


@app.command(name="list")
def list_files(
    ctx: typer.Context,
    directory: Path = typer.Argument(..., help="Directory to scan"),
):
    """List supported image files under DIRECTORY (recursively)."""
    _require_directory(directory)
    config = _load_config(ctx)
    display_file_list(enumerate_files(directory, config), console)


@app.command()
def stats(
    ctx: typer.Context,
    directory: Path = typer.Argument(..., help="Directory to analyze"),
):
    """Show file counts, sizes and types for DIRECTORY."""
    _require_directory(directory)
    config = _load_config(ctx)
    display_stats(compute_stats(directory, config), console)


@app.command()
def search(
    ctx: typer.Context,
    directory: Path = typer.Argument(..., help="Directory to search"),
    name: Optional[str] = typer.Option(None, "--name", help="Text contained in the file name (case-insensitive)"),
    year: Optional[int] = typer.Option(None, "--year", help="Year of last modification"),
):
    """Find image files under DIRECTORY by name and modification year.

    Examples:
        imagemeta search ~/Pictures --name beach
        imagemeta search ~/Pictures --name img_ --year 2023
    """
    _require_directory(directory)
    config = _load_config(ctx)
    results = search_files(directory, name=name, year=year, config=config)
    display_search_results(results, console, root=normalize_path(directory))


@app.command(name="file-stats")
def file_stats(
    file: Path = typer.Argument(..., help="File to describe"),
):
    """Show size, detected format and timestamps of a single FILE."""
    if not file.is_file():
        console.print(f"[red]✗[/red] Not a file: {printable(str(file))}")
        raise typer.Exit(1)

    try:
        details = describe_file(file)
    except OSError as e:
        console.print(f"[red]✗[/red] Cannot read file: {printable(str(e))}")
        raise typer.Exit(1)

    display_file_details(details, console)


@snapshot_app.command(name="save")
def snapshot_save(
    ctx: typer.Context,
    directory: Path = typer.Argument(..., help="Directory to snapshot"),
):
    """Save a snapshot of DIRECTORY, replacing any earlier one.

    Examples:
        imagemeta snapshot save ~/Pictures/2024
        imagemeta --store-root /var/lib/imagemeta snapshot save photos
    """
    _require_directory(directory)
    config = _load_config(ctx)
    store = _open_store(ctx, config)
    key = store.target_key(directory)

    try:
        records = enumerate_files(directory, config)
        store.save(key, records)
    except (OSError, portalocker.LockException) as e:
        console.print(f"[red]✗[/red] Failed to save snapshot: {printable(str(e))}")
        raise typer.Exit(1)

    console.print(f"[green]✓[/green] Snapshot saved for: {printable(key)}")
    console.print(f"[dim]Files captured: {len(records)}[/dim]")


@snapshot_app.command(name="compare")
def snapshot_compare(
    ctx: typer.Context,
    directory: Path = typer.Argument(..., help="Directory to compare with its snapshot"),
):
    """Compare DIRECTORY with its latest snapshot.

    Exits with code 2 if the snapshot fails its integrity check.
    """
    _require_directory(directory)
    config = _load_config(ctx)
    store = _open_store(ctx, config)
    key = store.target_key(directory)

    try:
        records = enumerate_files(directory, config)
        result = store.compare(key, records)
    except IntegrityViolationError as e:
        console.print("[bold red]⚠ SNAPSHOT INTEGRITY CHECK FAILED[/bold red]")
        console.print(f"   {printable(str(e))}")
        console.print()
        console.print("[dim]Save a new snapshot only if you trust the current directory contents:[/dim]")
        console.print(f"  [cyan]imagemeta snapshot save {printable(str(directory))}[/cyan]")
        raise typer.Exit(EXIT_TAMPERED)
    except (OSError, portalocker.LockException) as e:
        console.print(f"[red]✗[/red] Comparison failed: {printable(str(e))}")
        raise typer.Exit(1)

    if result is None:
        console.print("[yellow]No snapshot found to compare.[/yellow]")
        console.print("To create one, run:")
        console.print(f"  [cyan]imagemeta snapshot save {printable(str(directory))}[/cyan]")
        return

    display_comparison(result, console, root=normalize_path(directory))


@snapshot_app.command(name="show")
def snapshot_show(
    ctx: typer.Context,
    directory: Path = typer.Argument(..., help="Directory whose snapshot to describe"),
):
    """Show metadata of the latest snapshot of DIRECTORY."""
    config = _load_config(ctx)
    store = _open_store(ctx, config)
    key = store.target_key(directory)

    try:
        info = store.info(key)
    except (OSError, portalocker.LockException) as e:
        console.print(f"[red]✗[/red] Cannot read snapshot: {printable(str(e))}")
        raise typer.Exit(1)

    if info is None:
        console.print(f"[yellow]No snapshot saved for {printable(key)}.[/yellow]")
        return

    display_snapshot_info(info, console)
    if not info.verified:
        raise typer.Exit(EXIT_TAMPERED)


def main():
    """Entry point for CLI."""
    app()


if __name__ == "__main__":
    main()
