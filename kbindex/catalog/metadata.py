"""Per-project metadata retrieval (index.json records)."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Iterable
from typing import Any

from ..config import Settings
from ..models import ProjectMetadata
from ..retrieval.cache import RequestCache
from ..retrieval.fetch import Fetcher, ResourceNotFound, RetrievalError
from .paths import metadata_url

logger = logging.getLogger(__name__)


def _string_list(value: Any, field_name: str, project_id: str) -> tuple[str, ...] | None:
    """Coerce a JSON list of strings; None when absent or not a list."""
    if value is None:
        return None
    if not isinstance(value, list):
        logger.warning("Ignoring non-list %r in index.json for project %s", field_name, project_id)
        return None
    items = []
    for item in value:
        if isinstance(item, str) and item.strip():
            items.append(item.strip())
        else:
            logger.warning("Ignoring invalid %r entry %r for project %s", field_name, item, project_id)
    return tuple(items)


def parse_metadata(data: Any, project_id: str) -> ProjectMetadata | None:
    """
    Validate a decoded index.json record.

    Fields:
        name: display name, required for the project to be browsable
        dependency: ordered list of project ids (default empty)
        player: document names treated as featured assets (optional)

    Returns:
        ProjectMetadata, or None if the record is not a JSON object.
    """
    if not isinstance(data, dict):
        logger.warning("Malformed index.json for project %s: expected an object", project_id)
        return None

    name = data.get("name")
    display_name = name.strip() if isinstance(name, str) and name.strip() else None

    dependencies = _string_list(data.get("dependency"), "dependency", project_id) or ()
    asset_owners = _string_list(data.get("player"), "player", project_id)

    return ProjectMetadata(
        display_name=display_name,
        dependencies=dependencies,
        asset_owners=asset_owners,
    )


class ProjectMetadataStore:
    """
    Memoized metadata lookups for one catalog build.

    Network reads go through a session-wide RequestCache, so concurrent
    builds share in-flight requests. Missing or malformed records are cached
    as absent. Other retrieval failures make the project absent for this
    build only; the session cache stays clean so the next build retries.
    """

    def __init__(
        self,
        cache: RequestCache[ProjectMetadata | None],
        fetcher: Fetcher,
        settings: Settings,
    ):
        self.cache = cache
        self.fetcher = fetcher
        self.settings = settings
        self._resolved: dict[str, ProjectMetadata | None] = {}

    async def get_metadata(self, project_id: str) -> ProjectMetadata | None:
        if project_id in self._resolved:
            return self._resolved[project_id]

        url = metadata_url(self.settings, project_id)
        try:
            metadata = await self.cache.get(url, lambda: self._load(url, project_id))
        except RetrievalError as e:
            logger.warning("Failed to load index.json for project %s: %s", project_id, e.reason)
            metadata = None

        # First settled result wins for the rest of the build
        return self._resolved.setdefault(project_id, metadata)

    async def _load(self, url: str, project_id: str) -> ProjectMetadata | None:
        try:
            text = await self.fetcher.fetch_text(url)
        except ResourceNotFound:
            logger.debug("No index.json for project %s", project_id)
            return None

        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            logger.warning("Malformed index.json for project %s: %s", project_id, e)
            return None
        return parse_metadata(data, project_id)

    async def prefetch(self, project_ids: Iterable[str]) -> None:
        """Fetch metadata for the given projects and everything they depend on.

        Requests go out concurrently, one wave per dependency depth.
        """
        wave = list(dict.fromkeys(pid for pid in project_ids if pid not in self._resolved))
        while wave:
            results = await asyncio.gather(*(self.get_metadata(pid) for pid in wave))
            next_wave: dict[str, None] = {}
            for metadata in results:
                if metadata is None:
                    continue
                for dep in metadata.dependencies:
                    if dep not in self._resolved:
                        next_wave[dep] = None
            wave = list(next_wave)

    def lookup(self, project_id: str) -> ProjectMetadata | None:
        """Resolved metadata for a project; None if absent or not fetched."""
        return self._resolved.get(project_id)
