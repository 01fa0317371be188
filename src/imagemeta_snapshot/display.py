"""Display logic for snapshot, search and statistics commands."""

import os
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .core import ComparisonResult, DirectoryStats, FileDetails, FileRecord, SnapshotInfo
from .utils import format_mtime, format_snapshot_timestamp, humanize_size


def printable(text: str) -> str:
    """Make a path safe to print.

    Undecodable file name bytes (kept as surrogate escapes) become U+FFFD
    and rich markup characters are escaped.
    """
    return escape(text.encode("utf-8", "surrogateescape").decode("utf-8", "replace"))


def _relative(path: str, root: Optional[str]) -> str:
    """Path relative to root when it lies under root, else the base name."""
    if root is not None:
        prefix = root.rstrip(os.sep) + os.sep
        if path.startswith(prefix):
            return printable(path[len(prefix):])
    return printable(Path(path).name)


def _file_label(record: Optional[FileRecord], with_size: bool = True) -> str:
    if record is None:
        return "[dim]-[/dim]"
    label = printable(record.name)
    if with_size:
        label += f" ({humanize_size(record.size)})"
    return label


def display_file_list(records: List[FileRecord], console: Console) -> None:
    """Display enumerated image files."""
    if not records:
        console.print("[yellow]No image files found.[/yellow]")
        return

    table = Table(title=f"Image files ({len(records)})")
    table.add_column("Path", style="cyan")
    table.add_column("Size", justify="right")
    table.add_column("Modified", style="dim")
    for record in records:
        table.add_row(
            printable(record.path),
            humanize_size(record.size),
            format_mtime(record.mtime) if record.mtime is not None else "",
        )
    console.print(table)


def display_search_results(
    records: List[FileRecord],
    console: Console,
    root: Optional[str] = None,
) -> None:
    """Display files matching a search, relative to the searched directory."""
    if not records:
        console.print("[yellow]No files match the criteria.[/yellow]")
        return

    console.print(f"[green]✓[/green] Found {len(records)} matching files:")
    for record in records:
        console.print(f"  {_relative(record.path, root)}")


def display_stats(stats: DirectoryStats, console: Console) -> None:
    """Display directory statistics as a two-column table."""
    table = Table(title=f"Directory Statistics: {printable(stats.root)}", show_header=False)
    table.add_column("Statistic", style="bold")
    table.add_column("Value")

    table.add_row("Total files", str(stats.total_files))
    table.add_row("Image files", str(stats.image_files))
    table.add_row("Total size", humanize_size(stats.total_size))
    table.add_row("Average size", humanize_size(stats.average_size))
    table.add_row("Largest file", _file_label(stats.largest_file))
    table.add_row("Smallest file", _file_label(stats.smallest_file))
    table.add_row("Most common type", stats.most_common_type)
    table.add_row("Subdirectories", str(stats.subdirectory_count))
    table.add_row("Empty files", str(stats.empty_files))
    table.add_row("Newest file", _file_label(stats.newest_file, with_size=False))
    table.add_row("Oldest file", _file_label(stats.oldest_file, with_size=False))
    table.add_row("File types", ", ".join(stats.extensions) or "[dim]none[/dim]")
    console.print(table)


def display_file_details(details: FileDetails, console: Console) -> None:
    """Display statistics of a single file."""
    table = Table(title="File Statistics", show_header=False)
    table.add_column("Statistic", style="bold")
    table.add_column("Value")

    table.add_row("File name", printable(details.name))
    table.add_row("Size", f"{humanize_size(details.size)} ({details.size} bytes)")
    table.add_row("MIME type", details.mime_type or "[dim]unknown[/dim]")
    table.add_row("Format", details.format or "[dim]not an image[/dim]")
    table.add_row("Extension", details.extension or "[dim]none[/dim]")
    table.add_row("Last modified", format_mtime(details.modified.timestamp()))
    table.add_row("Created", format_mtime(details.created.timestamp()))
    console.print(table)


def display_comparison(
    result: ComparisonResult,
    console: Console,
    root: Optional[str] = None,
) -> None:
    """Display a snapshot comparison grouped by change category.

    Paths under root are shown relative to it so same-named files in
    different subdirectories stay distinguishable.
    """
    console.print("[green]✓[/green] Snapshot Comparison:")

    if not result.has_changes:
        console.print("[dim]No changes detected.[/dim]")
        return

    renamed_from = {new: old for old, new in result.renames.items()}

    if result.new:
        console.print(f"\n[green]● New files ({len(result.new)}):[/green]")
        for path in sorted(result.new):
            console.print(f"  [green]+[/green] {_relative(path, root)}")

    if result.modified:
        console.print(f"\n[yellow]● Modified files ({len(result.modified)}):[/yellow]")
        for path in sorted(result.modified):
            if path in renamed_from:
                console.print(
                    f"  [yellow]~[/yellow] {_relative(path, root)} "
                    f"[dim](renamed from {_relative(renamed_from[path], root)})[/dim]"
                )
            else:
                console.print(f"  [yellow]~[/yellow] {_relative(path, root)}")

    if result.deleted:
        console.print(f"\n[red]● Deleted files ({len(result.deleted)}):[/red]")
        for path in sorted(result.deleted):
            console.print(f"  [red]-[/red] {_relative(path, root)}")

    console.print(f"\n[dim]{result.summary()}[/dim]")


def display_snapshot_info(info: SnapshotInfo, console: Console) -> None:
    """Display metadata of the latest snapshot."""
    console.print(f"[bold]Snapshot:[/bold] {printable(info.snapshot_path)}")
    if not info.verified:
        console.print(f"[red]✗ Integrity check failed: {info.problem}[/red]")
        console.print("[red]The snapshot may have been tampered with.[/red]")
        return

    metadata = info.metadata
    console.print("[green]✓ Integrity verified[/green]")
    console.print(f"[bold]Taken:[/bold] {format_snapshot_timestamp(metadata.timestamp)}")
    if metadata.file_count is not None:
        console.print(f"[bold]Files:[/bold] {metadata.file_count}")
    console.print(f"[bold]Snapshot size:[/bold] {humanize_size(metadata.file_size)}")
    console.print(f"[dim]Hash: {metadata.hash}[/dim]")
