"""
Resource fetchers.

A fetcher turns a resource URL into text. Two implementations:

- LocalFetcher: serves URLs under `base_url` from a local site directory
- HttpFetcher:  GETs URLs through a shared httpx.AsyncClient

Both raise ResourceNotFound for missing resources and RetrievalError for any
other I/O failure.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Protocol
from urllib.parse import unquote, urlparse

import httpx


class RetrievalError(RuntimeError):
    """A resource could not be retrieved."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"Failed to retrieve {url}: {reason}")
        self.url = url
        self.reason = reason


class ResourceNotFound(RetrievalError):
    """The resource does not exist."""

    def __init__(self, url: str):
        super().__init__(url, "not found")


class Fetcher(Protocol):
    """Protocol for retrieving resource text by URL."""

    async def fetch_text(self, url: str) -> str:
        """
        Retrieve the text of a resource.

        Raises:
            ResourceNotFound: The resource does not exist.
            RetrievalError: Any other failure.
        """
        ...


class LocalFetcher:
    """
    Serve URLs from a local directory.

    A URL such as "/experiment/Alpha/index.json" with base_url "/" maps to
    <site_dir>/experiment/Alpha/index.json. Reads run in a worker thread.
    """

    def __init__(self, site_dir: Path, base_url: str = "/"):
        self.site_dir = site_dir.resolve()
        self.base_url = base_url

    def url_to_path(self, url: str) -> Path:
        path = unquote(urlparse(url).path)
        base_path = urlparse(self.base_url).path or "/"
        if not path.startswith(base_path):
            raise ResourceNotFound(url)
        relative = path[len(base_path) :].lstrip("/")
        candidate = (self.site_dir / relative).resolve()
        # Refuse anything escaping the site directory
        if candidate != self.site_dir and self.site_dir not in candidate.parents:
            raise ResourceNotFound(url)
        return candidate

    async def fetch_text(self, url: str) -> str:
        path = self.url_to_path(url)
        if not path.is_file():
            raise ResourceNotFound(url)
        try:
            return await asyncio.to_thread(path.read_text, encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise RetrievalError(url, str(e)) from e


class HttpFetcher:
    """Fetch resources over HTTP with a shared async client."""

    def __init__(self, base_url: str, timeout_s: float = 10.0, client: httpx.AsyncClient | None = None):
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout_s)

    async def fetch_text(self, url: str) -> str:
        try:
            response = await self._client.get(url)
        except httpx.TimeoutException as e:
            raise RetrievalError(url, "request timeout") from e
        except httpx.RequestError as e:
            raise RetrievalError(url, f"request error: {e}") from e

        if response.status_code == 404:
            raise ResourceNotFound(url)
        if not 200 <= response.status_code < 300:
            raise RetrievalError(url, f"HTTP {response.status_code}")
        return response.text

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
