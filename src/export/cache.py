"""Revalidating cache of rendered pages.

Pages rendered on first request are kept for ``ttl`` seconds and then
rendered again on the next request.  Only HTML is cached; every render
still goes to the content API.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable


class PageCache:
    """Thread-safe path → HTML cache with a fixed time to live."""

    def __init__(self, ttl: float, clock: Callable[[], float] = time.monotonic) -> None:
        self._ttl = ttl
        self._clock = clock
        self._lock = threading.Lock()
        self._pages: dict[str, tuple[float, str]] = {}

    def get(self, path: str) -> str | None:
        """Return the cached page, or None if absent or stale."""
        with self._lock:
            entry = self._pages.get(path)
            if entry is None:
                return None
            stored_at, html = entry
            if self._clock() - stored_at >= self._ttl:
                del self._pages[path]
                return None
            return html

    def put(self, path: str, html: str) -> None:
        """Store ``html`` for ``path`` and drop every stale entry."""
        with self._lock:
            now = self._clock()
            self._pages = {
                p: entry for p, entry in self._pages.items() if now - entry[0] < self._ttl
            }
            self._pages[path] = (now, html)

    def invalidate(self, path: str | None = None) -> None:
        """Drop one page, or every page when ``path`` is None."""
        with self._lock:
            if path is None:
                self._pages.clear()
            else:
                self._pages.pop(path, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._pages)
