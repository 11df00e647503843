"""Thumbnail lookup across versions and dependency projects."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence

from ..config import Settings
from ..models import Document
from .paths import document_relative_parts, resource_url, root_relative_parts

AssetIndex = Mapping[str, str]


def _asset_key(parts: Sequence[str]) -> str:
    path = "/".join(parts)
    stem, dot, suffix = path.rpartition(".")
    if not dot or "/" in suffix:
        return path
    return f"{stem}.{suffix.lower()}"


def build_asset_index(paths: Iterable[str], settings: Settings) -> dict[str, str]:
    """Index every thumbnail-like file in a listing by its root-relative path.

    Keys carry a lower-cased extension ("Alpha/KB/latest/intro.png"); values
    are the path as listed ("Alpha/KB/latest/intro.PNG").
    """
    index: dict[str, str] = {}
    for raw in paths:
        rest = root_relative_parts(raw, settings)
        if rest is None:
            continue
        key = _asset_key(rest)
        if any(key.endswith(suffix) for suffix in settings.thumbnail_suffixes):
            index.setdefault(key, "/".join(rest))
    return index


def _asset_url(
    project: str,
    version: str,
    file_path: str,
    known_assets: AssetIndex,
    settings: Settings,
) -> str | None:
    for suffix in settings.thumbnail_suffixes:
        listed = known_assets.get(_asset_key(document_relative_parts(settings, project, version, file_path, suffix)))
        if listed is not None:
            return resource_url(settings, listed.split("/"))
    return None


def colocated_thumbnail(document: Document, known_assets: AssetIndex, settings: Settings) -> str | None:
    """Thumbnail stored beside the document in its origin project, if any."""
    return _asset_url(document.origin_project, document.version, document.file_path, known_assets, settings)


def fallback_candidates(document: Document, closure: Sequence[str], settings: Settings) -> list[tuple[str, str]]:
    """(project, version) pairs to search after the co-located asset.

    Order: owning project at the document's version, then at latest, then
    each dependency from highest to lowest priority, version before latest.
    """
    latest = settings.latest_version
    candidates: list[tuple[str, str]] = []
    for project in [document.project, *reversed(closure)]:
        candidates.append((project, document.version))
        if document.version != latest:
            candidates.append((project, latest))

    origin = (document.origin_project, document.version)
    return [c for c in dict.fromkeys(candidates) if c != origin]


def resolve_thumbnail(
    document: Document,
    closure: Sequence[str],
    known_assets: AssetIndex,
    settings: Settings,
) -> str | None:
    """
    Find a thumbnail URL for a merged document.

    Args:
        document: Final catalog entry
        closure: Resolved dependency order of the owning project
        known_assets: Index from build_asset_index()
        settings: Layout settings

    Returns:
        The first existing asset's URL, or None.
    """
    url = colocated_thumbnail(document, known_assets, settings)
    if url is not None:
        return url

    for project, version in fallback_candidates(document, closure, settings):
        url = _asset_url(project, version, document.file_path, known_assets, settings)
        if url is not None:
            return url
    return None
