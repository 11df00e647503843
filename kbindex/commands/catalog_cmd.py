"""Catalog inspection commands: catalog, deps, cycles, show."""

from __future__ import annotations

import asyncio
import json
from dataclasses import replace
from pathlib import Path

from rich.console import Console
from rich.table import Table

from ..catalog.paths import scan_tree
from ..catalog.session import CatalogSession
from ..config import Settings
from ..models import Catalog
from ..retrieval.fetch import HttpFetcher, RetrievalError
from ..retrieval.frontmatter import strip_frontmatter


def open_session(site_dir: Path, settings: Settings, http_base_url: str | None = None) -> CatalogSession:
    """Session listing `site_dir`, reading from disk or from an HTTP server."""
    if not http_base_url:
        return CatalogSession.from_directory(site_dir, settings)

    base_url = http_base_url if http_base_url.endswith("/") else f"{http_base_url}/"
    settings = replace(settings, base_url=base_url)
    return CatalogSession(
        listing=lambda: scan_tree(site_dir),
        fetcher=HttpFetcher(base_url, timeout_s=settings.http_timeout_s),
        settings=settings,
    )


async def _load(session: CatalogSession) -> Catalog:
    try:
        return await session.load_content()
    finally:
        await session.aclose()


def print_catalog_summary(catalog: Catalog, console: Console, settings: Settings, project: str | None = None) -> None:
    table = Table(title="Catalog")
    table.add_column("Project", style="bold")
    table.add_column("Name")
    table.add_column("Versions")
    table.add_column("Native", justify="right")
    table.add_column("Inherited", justify="right")
    table.add_column("Thumbnails", justify="right")

    for p in catalog.projects:
        if project and p.id != project:
            continue
        docs = catalog.documents_for(p.id)
        inherited = sum(1 for d in docs if d.is_inherited)
        thumbs = sum(1 for d in docs if d.thumbnail_url)
        versions = ", ".join(catalog.versions_for(p.id, settings.latest_version))
        table.add_row(p.id, p.display_name, versions, str(len(docs) - inherited), str(inherited), str(thumbs))

    console.print(table)


def run_catalog(
    site_dir: Path,
    settings: Settings,
    *,
    http_base_url: str | None = None,
    output_json: bool = False,
    project: str | None = None,
) -> int:
    """Build the catalog and print it.

    Returns:
        Exit code (0 = success, 1 = requested project not in catalog)
    """
    console = Console(stderr=True)
    session = open_session(site_dir, settings, http_base_url)
    catalog = asyncio.run(_load(session))

    if project and catalog.get_project(project) is None:
        console.print(f"Error: project '{project}' not found in catalog", style="bold red")
        return 1

    if output_json:
        data = catalog.to_dict()
        if project:
            data["projects"] = [p for p in data["projects"] if p["id"] == project]
            data["documents"] = [d for d in data["documents"] if d["project"] == project]
        print(json.dumps(data, indent=2, default=str))
        return 0

    print_catalog_summary(catalog, console, session.settings, project)

    if project:
        for doc in catalog.documents_for(project):
            source = f" [dim](from {doc.source_project})[/dim]" if doc.source_project else ""
            console.print(f"  {doc.version}/{doc.file_path}{source}")
    return 0


def run_deps(site_dir: Path, settings: Settings, project: str, *, http_base_url: str | None = None) -> int:
    """Print a project's dependency closure, highest priority last."""
    session = open_session(site_dir, settings, http_base_url)

    async def resolve() -> list[str]:
        try:
            return await session.resolve_dependencies(project)
        finally:
            await session.aclose()

    closure = asyncio.run(resolve())
    console = Console()
    if not closure:
        console.print(f"[dim]{project} has no resolved dependencies.[/dim]")
        return 0

    for position, dep in enumerate(closure, start=1):
        console.print(f"{position:>3}. {dep}")
    return 0


def run_cycles(site_dir: Path, settings: Settings, *, http_base_url: str | None = None) -> int:
    """List declared dependency cycles.

    Returns:
        Exit code (0 = no cycles, 1 = cycles found)
    """
    session = open_session(site_dir, settings, http_base_url)

    async def find() -> list[list[str]]:
        try:
            return await session.find_cycles()
        finally:
            await session.aclose()

    cycles = asyncio.run(find())
    console = Console()
    if not cycles:
        console.print("[green]No dependency cycles.[/green]")
        return 0

    for cycle in cycles:
        console.print(f"[yellow]cycle:[/yellow] {' -> '.join(cycle + cycle[:1])}")
    return 1


def run_show(
    site_dir: Path,
    settings: Settings,
    project: str,
    file_path: str,
    *,
    version: str | None = None,
    show_frontmatter: bool = False,
    http_base_url: str | None = None,
) -> int:
    """Print one catalog document's body or front matter.

    Returns:
        Exit code (0 = success, 1 = document not found or unreadable)
    """
    console = Console(stderr=True)
    session = open_session(site_dir, settings, http_base_url)
    version = version or session.settings.latest_version

    async def read() -> tuple[bool, str | dict | None]:
        try:
            catalog = await session.load_content()
            doc = catalog.find_document(project, version, file_path)
            if doc is None:
                return False, None
            if show_frontmatter:
                return True, await session.get_document_frontmatter(doc)
            return True, strip_frontmatter(await session.get_document_content(doc))
        finally:
            await session.aclose()

    try:
        found, payload = asyncio.run(read())
    except RetrievalError as e:
        console.print(f"Error: {e}", style="bold red")
        return 1

    if not found:
        console.print(f"Error: document '{project}/{version}/{file_path}' not found", style="bold red")
        return 1

    if show_frontmatter:
        print(json.dumps(payload, indent=2, default=str))
    else:
        print(payload)
    return 0
