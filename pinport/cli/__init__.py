"""Pinport CLI — Typer-based command-line interface.

Provides the ``pinport`` command with subcommands for inspecting pin files
and fetching pinned archives into the local cache.

All output uses Rich for formatted terminal display.
"""
