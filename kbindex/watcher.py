"""
File system watcher that signals catalog rebuilds.

Changes under the site directory are debounced: rapid bursts (editor save
cycles, bulk copies) are collapsed into one notification listing every
changed path.
"""

import logging
import time
from pathlib import Path
from typing import Callable

from watchdog.events import (
    FileCreatedEvent,
    FileDeletedEvent,
    FileModifiedEvent,
    FileMovedEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer

logger = logging.getLogger(__name__)


class ContentEventHandler(FileSystemEventHandler):
    """
    Collects changed paths and reports them once the tree is quiet.

    Hidden files and directories are ignored.
    """

    DEBOUNCE_SECONDS = 1.0

    def __init__(self, site_dir: Path, on_change: Callable[[list[str]], None]):
        super().__init__()
        self.site_dir = site_dir.resolve()
        self.on_change = on_change
        self.pending: dict[str, float] = {}  # path -> last event time

    def _is_relevant(self, path: str) -> bool:
        try:
            rel = Path(path).relative_to(self.site_dir)
        except ValueError:
            return False
        return not any(part.startswith(".") for part in rel.parts)

    def _touch(self, path: str) -> None:
        if self._is_relevant(path):
            self.pending[path] = time.time()

    def flush_pending(self, now: float | None = None) -> list[str]:
        """Report changes once no event arrived for the debounce window.

        Returns the reported paths (empty while still settling).
        """
        if not self.pending:
            return []
        now = time.time() if now is None else now
        if now - max(self.pending.values()) < self.DEBOUNCE_SECONDS:
            return []

        changed = sorted(self.pending)
        self.pending.clear()
        logger.debug("Content changed: %s", changed)
        self.on_change(changed)
        return changed

    def on_created(self, event: FileCreatedEvent) -> None:
        if not event.is_directory:
            self._touch(event.src_path)

    def on_modified(self, event: FileModifiedEvent) -> None:
        if not event.is_directory:
            self._touch(event.src_path)

    def on_deleted(self, event: FileDeletedEvent) -> None:
        if not event.is_directory:
            self._touch(event.src_path)

    def on_moved(self, event: FileMovedEvent) -> None:
        if event.is_directory:
            return
        self._touch(event.src_path)
        self._touch(event.dest_path)


def watch_content(
    site_dir: Path,
    on_change: Callable[[list[str]], None],
) -> tuple[Observer, ContentEventHandler]:
    """
    Start watching a site directory.

    Returns:
        Tuple of (observer, handler) - caller should call observer.stop() to stop watching
    """
    handler = ContentEventHandler(site_dir=site_dir, on_change=on_change)

    observer = Observer()
    observer.schedule(handler, str(handler.site_dir), recursive=True)
    observer.start()

    return observer, handler


def run_watch_loop(site_dir: Path, on_change: Callable[[list[str]], None]) -> None:
    """Watch until interrupted, flushing settled changes periodically."""
    observer, handler = watch_content(site_dir, on_change)

    try:
        while True:
            time.sleep(0.5)
            handler.flush_pending()
    except KeyboardInterrupt:
        observer.stop()

    observer.join()
