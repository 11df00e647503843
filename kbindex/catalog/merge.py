"""Catalog construction: merge native and inherited documents per project."""

from __future__ import annotations

import logging
from dataclasses import replace

from ..config import Settings
from ..models import Catalog, ClassifiedEntry, Document, EntryKind, Project, TextFile
from .assets import AssetIndex, colocated_thumbnail, resolve_thumbnail
from .graph import MetadataLookup, resolve_closure
from .paths import entry_url

logger = logging.getLogger(__name__)


def discover_projects(entries: list[ClassifiedEntry]) -> list[str]:
    """Project ids in order of first appearance in the listing."""
    return list(dict.fromkeys(entry.project for entry in entries))


def document_from_entry(entry: ClassifiedEntry, known_assets: AssetIndex, settings: Settings) -> Document:
    """Build the native catalog entry for a classified document path."""
    document_name = entry.relative_path.rsplit("/", 1)[-1]
    doc = Document(
        id=entry.source_path,
        project=entry.project,
        version=entry.version or "",
        file_path=entry.relative_path,
        document_name=document_name,
        title=document_name,
        content_url=entry_url(entry, settings),
        source_path=entry.source_path,
    )
    thumbnail = colocated_thumbnail(doc, known_assets, settings)
    return replace(doc, thumbnail_url=thumbnail) if thumbnail else doc


def group_documents(
    entries: list[ClassifiedEntry],
    known_assets: AssetIndex,
    settings: Settings,
) -> dict[str, list[Document]]:
    """Native documents of every project, valid metadata or not."""
    by_project: dict[str, list[Document]] = {}
    for entry in entries:
        if entry.kind != EntryKind.DOCUMENT:
            continue
        doc = document_from_entry(entry, known_assets, settings)
        by_project.setdefault(entry.project, []).append(doc)
    return by_project


def inherit(document: Document, owner: str) -> Document:
    """Copy a document into another project's catalog, recording provenance."""
    return replace(
        document,
        id=f"{owner}:{document.id}",
        project=owner,
        source_project=document.source_project or document.project,
    )


def merge_documents(
    project_id: str,
    closure: list[str],
    documents_by_project: dict[str, list[Document]],
) -> dict[tuple[str, str], Document]:
    """
    Merge a project's documents with those of its dependency closure.

    Dependencies are applied in closure order, so a later dependency replaces
    an earlier one at the same (version, file_path) key. The project's own
    documents are applied last and always win.
    """
    merged: dict[tuple[str, str], Document] = {}
    for dep_id in closure:
        for dep_doc in documents_by_project.get(dep_id, []):
            merged[dep_doc.key] = inherit(dep_doc, project_id)

    for own_doc in documents_by_project.get(project_id, []):
        merged[own_doc.key] = own_doc

    return merged


def build_project(
    project_id: str,
    display_name: str,
    asset_owners: tuple[str, ...] | None,
    entries: list[ClassifiedEntry],
    settings: Settings,
) -> Project:
    """Project record with its free-text files attached."""
    text_files = []
    kb_url = None
    for entry in entries:
        if entry.project != project_id or entry.kind == EntryKind.DOCUMENT:
            continue
        url = entry_url(entry, settings)
        text_files.append(TextFile(name=entry.relative_path, url=url))
        if entry.kind == EntryKind.RAW_TEXT:
            kb_url = url

    return Project(
        id=project_id,
        display_name=display_name,
        auxiliary_text_files=tuple(text_files),
        asset_owners=asset_owners,
        kb_url=kb_url,
    )


def build_catalog(
    entries: list[ClassifiedEntry],
    lookup: MetadataLookup,
    known_assets: AssetIndex,
    settings: Settings,
) -> Catalog:
    """Build the merged catalog from classified entries.

    Args:
        entries: Output of classify_paths()
        lookup: Metadata for every project reachable from the listing,
            already fetched
        known_assets: Output of build_asset_index()
        settings: Layout settings

    Returns:
        Catalog with one Project per project that declared a display name,
        and the merged documents of those projects. Projects without valid
        metadata contribute no entries of their own but remain inheritable.
    """
    documents_by_project = group_documents(entries, known_assets, settings)

    projects: list[Project] = []
    documents: list[Document] = []
    skipped: list[str] = []

    for project_id in discover_projects(entries):
        metadata = lookup(project_id)
        if metadata is None or not metadata.display_name:
            skipped.append(project_id)
            continue

        projects.append(build_project(project_id, metadata.display_name, metadata.asset_owners, entries, settings))

        closure = resolve_closure(project_id, lookup)
        merged = merge_documents(project_id, closure, documents_by_project)
        for doc in merged.values():
            if doc.thumbnail_url is None:
                thumbnail = resolve_thumbnail(doc, closure, known_assets, settings)
                if thumbnail is not None:
                    doc = replace(doc, thumbnail_url=thumbnail)
            documents.append(doc)

    if skipped:
        logger.info("Projects without a display name (not browsable): %s", ", ".join(skipped))
    logger.info("Catalog built: %d projects, %d documents", len(projects), len(documents))

    return Catalog(projects=projects, documents=documents)
