"""``pinport show`` — display a pin file.

Loads the pin, prints its fields and cache key, and reports whether a
verified entry for it is already cached.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from pinport.config import settings
from pinport.core.archive_fetcher import ArchiveFetcher
from pinport.core.errors import PinportError
from pinport.core.pin_reader import PinReader

console = Console()


def show_cmd(
    pin_file: Path = typer.Argument(..., help="Path to the pin file (TOML or JSON)."),
    cache_dir: Path = typer.Option(
        None, "--cache-dir", "-c", help="Archive cache directory."
    ),
) -> None:
    """Show the fields of a pin file and its cache status."""
    try:
        record = PinReader().load(pin_file)
    except PinportError as exc:
        console.print(f"[red]{type(exc).__name__}:[/red] {escape(str(exc))}")
        raise typer.Exit(code=1)

    fetcher = ArchiveFetcher(cache_dir or settings.cache_dir)
    cached = fetcher.lookup(record)

    table = Table(title=f"Pin: {pin_file}", show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Name", record.name or "[dim]-[/dim]")
    table.add_row("Source URL", record.source_url)
    table.add_row("Revision", record.revision)
    table.add_row("Integrity", record.integrity_hash or "[yellow]not pinned[/yellow]")
    table.add_row("Cache key", fetcher.cache_key(record))
    table.add_row(
        "Cached",
        f"[green]Yes[/green] ({cached.path})" if cached else "[dim]No[/dim]",
    )
    console.print(table)
