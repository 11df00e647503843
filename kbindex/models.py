"""Data models for catalog projects and documents."""

from dataclasses import dataclass, field
from enum import Enum

from .sorting import natural_sort_key


class EntryKind(str, Enum):
    """Kinds of classified paths under the content root."""

    DOCUMENT = "document"  # <root>/<project>/KB/<version>/**/*.md
    VERSION_FREE_TEXT = "versionFreeText"  # <root>/<project>/*.txt
    RAW_TEXT = "rawText"  # <root>/<project>/KB.txt


@dataclass(frozen=True)
class ClassifiedEntry:
    """One raw path that matched a recognized layout."""

    project: str
    kind: EntryKind
    relative_path: str  # extension stripped for documents
    source_path: str  # normalized original path
    version: str | None = None  # None for version-free text


@dataclass(frozen=True)
class ProjectMetadata:
    """Declared metadata from a project's index.json record."""

    display_name: str | None = None  # required for the project to be browsable
    dependencies: tuple[str, ...] = ()
    asset_owners: tuple[str, ...] | None = None  # "player" document names


@dataclass(frozen=True)
class TextFile:
    name: str
    url: str


@dataclass(frozen=True)
class Project:
    """A browsable project: metadata fetched and a display name declared."""

    id: str
    display_name: str
    auxiliary_text_files: tuple[TextFile, ...] = ()
    asset_owners: tuple[str, ...] | None = None
    kb_url: str | None = None


@dataclass(frozen=True)
class Document:
    """A catalog entry, owned by `project`.

    `source_project` is only set when the entry was inherited from a
    dependency, and names the project that originally declared it.
    """

    id: str
    project: str
    version: str
    file_path: str  # relative to <project>/KB/<version>, extension stripped
    document_name: str
    title: str
    content_url: str
    source_path: str
    source_project: str | None = None
    thumbnail_url: str | None = None

    @property
    def key(self) -> tuple[str, str]:
        """Dedup key within one owning project's catalog."""
        return (self.version, self.file_path)

    @property
    def origin_project(self) -> str:
        """Project whose tree physically holds this document."""
        return self.source_project or self.project

    @property
    def is_inherited(self) -> bool:
        return self.source_project is not None


@dataclass
class Catalog:
    """Result of one catalog build."""

    projects: list[Project] = field(default_factory=list)
    documents: list[Document] = field(default_factory=list)

    # Lookup tables built after construction
    _by_project: dict[str, list[Document]] = field(default_factory=dict, repr=False)
    _projects_by_id: dict[str, Project] = field(default_factory=dict, repr=False)

    def __post_init__(self):
        self._build_lookups()

    def _build_lookups(self):
        self._by_project = {}
        for doc in self.documents:
            self._by_project.setdefault(doc.project, []).append(doc)
        self._projects_by_id = {p.id: p for p in self.projects}

    def get_project(self, project_id: str) -> Project | None:
        return self._projects_by_id.get(project_id)

    def documents_for(self, project_id: str, version: str | None = None) -> list[Document]:
        """Documents owned by a project, naturally sorted by file path."""
        docs = self._by_project.get(project_id, [])
        if version is not None:
            docs = [d for d in docs if d.version == version]
        return sorted(docs, key=lambda d: (natural_sort_key(d.file_path), natural_sort_key(d.version)))

    def versions_for(self, project_id: str, latest: str = "latest") -> list[str]:
        """Distinct versions of a project, `latest` first, then natural order."""
        versions = {d.version for d in self._by_project.get(project_id, [])}
        ordered = sorted(versions - {latest}, key=natural_sort_key)
        return ([latest] if latest in versions else []) + ordered

    def find_document(self, project_id: str, version: str, file_path: str) -> Document | None:
        for doc in self._by_project.get(project_id, []):
            if doc.version == version and doc.file_path == file_path:
                return doc
        return None

    def to_dict(self) -> dict:
        """JSON-ready representation (camelCase, as consumed by the web UI)."""
        return {
            "projects": [
                {
                    "id": p.id,
                    "name": p.display_name,
                    "txtFiles": [{"name": t.name, "url": t.url} for t in p.auxiliary_text_files],
                    "player": list(p.asset_owners) if p.asset_owners is not None else None,
                    "kbUrl": p.kb_url,
                }
                for p in self.projects
            ],
            "documents": [
                {
                    "id": d.id,
                    "project": d.project,
                    "sourceProject": d.source_project,
                    "version": d.version,
                    "filePath": d.file_path,
                    "docName": d.document_name,
                    "title": d.title,
                    "url": d.content_url,
                    "thumbnail": d.thumbnail_url,
                    "fullPath": d.source_path,
                }
                for d in self.documents
            ],
        }
