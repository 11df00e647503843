"""
Catalog session: the public entry point for building and reading the catalog.

A session owns every cache (project metadata, document text, parsed front
matter, and the built catalog). Caches live as long as the session and are
dropped together by `invalidate()`; separate sessions never share state.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import replace
from pathlib import Path

from ..config import Settings
from ..models import Catalog, Document, ProjectMetadata
from ..retrieval.cache import RequestCache
from ..retrieval.fetch import Fetcher, LocalFetcher
from ..retrieval.frontmatter import parse_frontmatter
from .assets import build_asset_index
from .graph import ProjectGraph, resolve_closure
from .merge import build_catalog, discover_projects
from .metadata import ProjectMetadataStore
from .paths import classify_paths, scan_tree

logger = logging.getLogger(__name__)

Listing = Callable[[], Iterable[str]]

_CATALOG_KEY = "catalog"


class CatalogSession:
    """Builds catalogs and serves cached document reads."""

    def __init__(self, listing: Listing, fetcher: Fetcher, settings: Settings | None = None):
        """
        Args:
            listing: Returns the raw path listing; called once per catalog build
            fetcher: Retrieves resource text by URL
            settings: Layout settings (defaults if omitted)
        """
        self.listing = listing
        self.fetcher = fetcher
        self.settings = settings or Settings()

        self.metadata_cache: RequestCache[ProjectMetadata | None] = RequestCache("metadata")
        self.content_cache: RequestCache[str] = RequestCache("content")
        self.frontmatter_cache: RequestCache[dict] = RequestCache("frontmatter")
        self._catalog_cache: RequestCache[Catalog] = RequestCache("catalog")

    @classmethod
    def from_directory(cls, site_dir: Path, settings: Settings | None = None) -> "CatalogSession":
        """Session over a local site directory (the parent of the root segment)."""
        settings = settings or Settings()
        return cls(
            listing=lambda: scan_tree(site_dir),
            fetcher=LocalFetcher(site_dir, settings.base_url),
            settings=settings,
        )

    def _metadata_store(self) -> ProjectMetadataStore:
        return ProjectMetadataStore(self.metadata_cache, self.fetcher, self.settings)

    async def load_content(self, refresh: bool = False) -> Catalog:
        """
        Build the catalog, or return the one already built by this session.

        Concurrent callers share a single in-flight build.
        """
        if refresh and _CATALOG_KEY in self._catalog_cache:
            logger.debug("Discarding memoized catalog")
            self._catalog_cache.discard(_CATALOG_KEY)
        return await self._catalog_cache.get(_CATALOG_KEY, self._build)

    async def _build(self) -> Catalog:
        paths = list(self.listing())
        entries = classify_paths(paths, self.settings)
        known_assets = build_asset_index(paths, self.settings)
        logger.debug("Classified %d of %d paths, %d assets", len(entries), len(paths), len(known_assets))

        store = self._metadata_store()
        await store.prefetch(discover_projects(entries))
        catalog = build_catalog(entries, store.lookup, known_assets, self.settings)
        logger.debug(
            "Built catalog: %d projects, %d documents (%d metadata records cached, %d requested)",
            len(catalog.projects),
            len(catalog.documents),
            len(self.metadata_cache),
            self.metadata_cache.loads_started,
        )
        return catalog

    async def resolve_dependencies(self, project_id: str) -> list[str]:
        """Dependency closure of one project, lowest priority first."""
        store = self._metadata_store()
        await store.prefetch([project_id])
        return resolve_closure(project_id, store.lookup)

    async def find_cycles(self) -> list[list[str]]:
        """Declared dependency cycles among projects in the listing."""
        entries = classify_paths(self.listing(), self.settings)
        project_ids = discover_projects(entries)
        store = self._metadata_store()
        await store.prefetch(project_ids)
        return ProjectGraph.from_lookup(project_ids, store.lookup).find_cycles()

    async def get_document_content(self, document: Document) -> str:
        """Raw text of a document. Retrieval errors propagate to the caller."""
        url = document.content_url
        return await self.content_cache.get(url, lambda: self.fetcher.fetch_text(url))

    async def get_document_frontmatter(self, document: Document) -> dict:
        """Front matter of a document; empty when absent or malformed."""

        async def load() -> dict:
            return parse_frontmatter(await self.get_document_content(document))

        metadata = await self.frontmatter_cache.get(document.content_url, load)
        return dict(metadata)

    async def resolve_title(self, document: Document) -> Document:
        """Copy of the document titled from its front matter, when it has one."""
        title = (await self.get_document_frontmatter(document)).get("title")
        if isinstance(title, str) and title.strip():
            return replace(document, title=title.strip())
        return document

    def invalidate(self) -> None:
        """Drop every cached result; the next build starts from scratch."""
        if self._catalog_cache.is_pending(_CATALOG_KEY):
            logger.debug("Invalidated while a catalog build is in flight; that build still completes")
        self._catalog_cache.clear()
        self.metadata_cache.clear()
        self.content_cache.clear()
        self.frontmatter_cache.clear()

    async def aclose(self) -> None:
        close = getattr(self.fetcher, "aclose", None)
        if close is not None:
            await close()
