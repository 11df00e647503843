"""Path classification and URL construction for the content tree.

Recognized layouts, relative to the root segment (default ``experiment``):

    <project>/KB.txt                          -> rawText
    <project>/<name>.txt                      -> versionFreeText
    <project>/KB/<version>/<dirs...>/<doc>.md -> document

Everything else is ignored.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from pathlib import Path
from urllib.parse import quote

from ..config import Settings
from ..models import ClassifiedEntry, EntryKind


def normalize_path(raw: str) -> str:
    """Normalize separators to forward slashes."""
    return raw.replace("\\", "/")


def root_relative_parts(raw: str, settings: Settings) -> list[str] | None:
    """Split a path into the segments following the root segment.

    Returns None if the root segment is absent or nothing follows it.
    """
    parts = normalize_path(raw).split("/")
    try:
        root_index = parts.index(settings.root_segment)
    except ValueError:
        return None

    rest = parts[root_index + 1 :]
    if not rest or any(not part for part in rest):
        return None
    return rest


def classify_path(raw: str, settings: Settings) -> ClassifiedEntry | None:
    """Classify one raw path, or return None if it is not part of the tree."""
    rest = root_relative_parts(raw, settings)
    if rest is None or len(rest) < 2:
        return None

    project, tail = rest[0], rest[1:]
    source_path = normalize_path(raw)

    # Free text directly under the project root
    if len(tail) == 1:
        name = tail[0]
        if name == settings.kb_text_name:
            kind = EntryKind.RAW_TEXT
        elif name.endswith(settings.free_text_suffix):
            kind = EntryKind.VERSION_FREE_TEXT
        else:
            return None
        return ClassifiedEntry(
            project=project,
            kind=kind,
            relative_path=name,
            source_path=source_path,
        )

    # Documents: KB/<version>/<one or more segments>.md
    if tail[0] != settings.document_segment or len(tail) < 3:
        return None

    version = tail[1]
    doc_parts = tail[2:]
    suffix = settings.document_suffix
    file_name = doc_parts[-1]
    if not file_name.endswith(suffix) or len(file_name) == len(suffix):
        return None

    relative_path = "/".join(doc_parts)[: -len(suffix)]
    return ClassifiedEntry(
        project=project,
        kind=EntryKind.DOCUMENT,
        relative_path=relative_path,
        source_path=source_path,
        version=version,
    )


def classify_paths(paths: Iterable[str], settings: Settings) -> list[ClassifiedEntry]:
    """Classify a listing, dropping unrecognized paths (listing order kept)."""
    entries = []
    for raw in paths:
        entry = classify_path(raw, settings)
        if entry is not None:
            entries.append(entry)
    return entries


def resource_url(settings: Settings, relative_parts: Iterable[str]) -> str:
    """URL of a resource below the root segment, each segment percent-encoded."""
    encoded = "/".join(quote(part, safe="") for part in relative_parts)
    return f"{settings.base_url}{quote(settings.root_segment, safe='')}/{encoded}"


def document_relative_parts(settings: Settings, project: str, version: str, file_path: str, suffix: str) -> list[str]:
    """Segments of `<project>/KB/<version>/<file_path><suffix>` below the root."""
    return [project, settings.document_segment, version, *f"{file_path}{suffix}".split("/")]


def entry_url(entry: ClassifiedEntry, settings: Settings) -> str:
    if entry.kind == EntryKind.DOCUMENT:
        parts = document_relative_parts(
            settings, entry.project, entry.version or "", entry.relative_path, settings.document_suffix
        )
    else:
        parts = [entry.project, entry.relative_path]
    return resource_url(settings, parts)


def metadata_url(settings: Settings, project_id: str) -> str:
    """URL of a project's index.json record."""
    return resource_url(settings, [project_id, "index.json"])


def scan_tree(site_dir: Path) -> Iterator[str]:
    """Enumerate files under a site directory as forward-slash relative paths.

    Hidden files and directories are skipped.
    """
    for path in sorted(site_dir.rglob("*")):
        if not path.is_file():
            continue
        rel = path.relative_to(site_dir)
        if any(part.startswith(".") for part in rel.parts):
            continue
        yield rel.as_posix()
