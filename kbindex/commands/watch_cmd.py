"""Watch command - rebuild the catalog whenever the content tree changes."""

from __future__ import annotations

import asyncio
from datetime import datetime
from pathlib import Path

from rich.console import Console

from ..catalog.session import CatalogSession
from ..config import Settings
from ..watcher import run_watch_loop
from .catalog_cmd import print_catalog_summary


def rebuild(session: CatalogSession, console: Console, changed: list[str] | None = None) -> None:
    """Invalidate the session, rebuild, and print the summary."""
    if changed:
        timestamp = datetime.now().strftime("%H:%M:%S")
        console.print(f"[dim]{timestamp}[/dim] {len(changed)} changed file(s), rebuilding")
    session.invalidate()
    catalog = asyncio.run(session.load_content())
    print_catalog_summary(catalog, console, session.settings)


def run_watch(site_dir: Path, settings: Settings) -> None:
    """
    Watch a local site directory and print a fresh catalog summary after
    every settled batch of changes.

    This is a blocking command that runs until interrupted (Ctrl+C).
    """
    console = Console(stderr=True)
    session = CatalogSession.from_directory(site_dir, settings)

    console.print(f"[bold]Watching[/bold] {site_dir}")
    console.print("[dim]Press Ctrl+C to stop watching[/dim]")
    console.print()

    rebuild(session, console)
    rebuild_count = 0

    def on_change(changed: list[str]) -> None:
        nonlocal rebuild_count
        rebuild_count += 1
        rebuild(session, console, changed)

    run_watch_loop(site_dir, on_change)
    console.print()
    console.print(f"[bold]Stopped.[/bold] Rebuilt {rebuild_count} time(s).")
