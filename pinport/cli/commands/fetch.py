"""``pinport fetch`` — fetch a pinned archive into the local cache.

Prints a summary panel and then the artifact path on its own line so the
command can be used from scripts.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from pinport.config import settings
from pinport.core.archive_fetcher import ArchiveFetcher
from pinport.core.errors import PinportError
from pinport.core.pin_reader import PinReader

console = Console()


def fetch_cmd(
    pin_file: Path = typer.Argument(..., help="Path to the pin file (TOML or JSON)."),
    cache_dir: Path = typer.Option(
        None, "--cache-dir", "-c", help="Archive cache directory."
    ),
    timeout: float = typer.Option(
        None, "--timeout", "-t", help="Fetch timeout in seconds."
    ),
) -> None:
    """Fetch, verify, and extract the archive a pin file names."""
    overrides: dict[str, object] = {}
    if cache_dir is not None:
        overrides["cache_dir"] = cache_dir
    if timeout is not None:
        overrides["timeout"] = timeout

    try:
        record = PinReader().load(pin_file)
        artifact = ArchiveFetcher.from_settings(settings, **overrides).fetch(record)
    except PinportError as exc:
        console.print(f"[red]{type(exc).__name__}:[/red] {escape(str(exc))}")
        raise typer.Exit(code=1)

    console.print(
        Panel(
            "\n".join([
                f"[bold]Source:[/bold]    {artifact.source_url}",
                f"[bold]Revision:[/bold]  {artifact.revision}",
                f"[bold]Digest:[/bold]    {artifact.content_address}",
                f"[bold]Cache key:[/bold] {artifact.cache_key}",
            ]),
            title="[bold]Pinport[/bold]",
            border_style="green",
            padding=(1, 2),
        )
    )
    # Print the path plainly for scripting
    console.print(str(artifact.path), markup=False, highlight=False, soft_wrap=True)
