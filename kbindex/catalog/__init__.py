"""Catalog building: classification, metadata, dependency merge and assets."""

from .assets import build_asset_index, resolve_thumbnail
from .graph import ProjectGraph, resolve_closure
from .merge import build_catalog
from .metadata import ProjectMetadataStore, parse_metadata
from .paths import classify_path, classify_paths, scan_tree
from .session import CatalogSession

__all__ = [
    "build_asset_index",
    "resolve_thumbnail",
    "ProjectGraph",
    "resolve_closure",
    "build_catalog",
    "ProjectMetadataStore",
    "parse_metadata",
    "classify_path",
    "classify_paths",
    "scan_tree",
    "CatalogSession",
]
