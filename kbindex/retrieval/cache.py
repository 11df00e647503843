"""
Request-deduplicating async cache.

Each `RequestCache` keeps two tables keyed by resource identity (a URL):

- completed: results of loads that finished successfully
- pending:   the shared task of a load that is still running

The pending entry is registered before the first await, so a second caller
arriving while the first load is suspended joins it instead of starting a
duplicate. Failed loads are dropped from the pending table and never reach
the completed table; the next call starts a fresh load.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RequestCache(Generic[T]):
    """Memoizes async loads per key and shares in-flight loads between callers."""

    def __init__(self, name: str):
        self.name = name
        self._completed: dict[str, T] = {}
        self._pending: dict[str, asyncio.Future[T]] = {}
        self.loads_started = 0

    def __contains__(self, key: str) -> bool:
        return key in self._completed

    def __len__(self) -> int:
        return len(self._completed)

    def is_pending(self, key: str) -> bool:
        return key in self._pending

    async def get(self, key: str, load: Callable[[], Awaitable[T]]) -> T:
        """
        Return the value for key, running `load` at most once concurrently.

        Args:
            key: Resource identity
            load: Zero-argument coroutine function producing the value

        Returns:
            The completed value. If the load fails, every caller waiting on it
            receives the same exception.
        """
        if key in self._completed:
            return self._completed[key]

        task = self._pending.get(key)
        if task is None:
            logger.debug("%s cache miss: %s", self.name, key)
            task = asyncio.ensure_future(self._run(key, load))
            self._pending[key] = task
            self.loads_started += 1
        else:
            logger.debug("%s joined in-flight load: %s", self.name, key)

        # One caller being cancelled must not cancel the shared load
        return await asyncio.shield(task)

    async def _run(self, key: str, load: Callable[[], Awaitable[T]]) -> T:
        try:
            value = await load()
            self._completed[key] = value
            return value
        finally:
            self._pending.pop(key, None)

    def discard(self, key: str) -> None:
        """Forget a completed value (in-flight loads are left to finish)."""
        self._completed.pop(key, None)

    def clear(self) -> None:
        self._completed.clear()
