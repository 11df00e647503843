"""Cached resource retrieval."""

from .cache import RequestCache
from .fetch import Fetcher, HttpFetcher, LocalFetcher, ResourceNotFound, RetrievalError
from .frontmatter import parse_frontmatter, split_frontmatter, strip_frontmatter

__all__ = [
    "RequestCache",
    "Fetcher",
    "HttpFetcher",
    "LocalFetcher",
    "ResourceNotFound",
    "RetrievalError",
    "parse_frontmatter",
    "split_frontmatter",
    "strip_frontmatter",
]
