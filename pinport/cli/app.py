"""Main Typer application — registers all CLI commands.

Entry point: ``pinport`` (configured via pyproject.toml scripts).
"""

from __future__ import annotations

import logging

import typer
from rich.logging import RichHandler

from pinport.cli.commands.fetch import fetch_cmd
from pinport.cli.commands.show import show_cmd
from pinport.config import settings

app = typer.Typer(
    name="pinport",
    help="Pinport: fetch, verify, and compose pinned remote archives.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

app.command(name="show", help="Show a pin file and its cache key.")(show_cmd)
app.command(name="fetch", help="Fetch a pinned archive into the cache.")(fetch_cmd)


@app.callback()
def main_callback(
    log_level: str = typer.Option(
        None, "--log-level", help="Logging level (defaults to PINPORT_LOG_LEVEL)."
    ),
) -> None:
    """Configure logging for every subcommand."""
    logging.basicConfig(
        level=(log_level or settings.log_level).upper(),
        format="%(message)s",
        handlers=[RichHandler(show_path=False)],
    )


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
