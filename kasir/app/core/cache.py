"""In-memory cache of named read views.

Read endpoints load through :meth:`QueryCache.get_or_load` under a view name
(``"products"``, ``"settings"``, ``"dashboard-stats"``). Mutations call
:meth:`QueryCache.invalidate` with the names they make stale, and the next read
re-fetches. For multi-replica deployments, swap to Redis.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)

PRODUCTS_VIEW = "products"
SETTINGS_VIEW = "settings"
DASHBOARD_STATS_VIEW = "dashboard-stats"


class QueryCache:
    """Process-local cache keyed by view name."""

    def __init__(self) -> None:
        self._views: dict[str, Any] = {}
        self._generations: dict[str, int] = {}
        self._lock = threading.Lock()

    def get_or_load(self, view: str, loader: Callable[[], Any]) -> Any:
        with self._lock:
            if view in self._views:
                return self._views[view]
            generation = self._generations.get(view, 0)
        value = loader()
        with self._lock:
            # An invalidation during the load makes this result stale
            if self._generations.get(view, 0) == generation:
                self._views[view] = value
        return value

    def invalidate(self, *views: str) -> None:
        with self._lock:
            for view in views:
                self._views.pop(view, None)
                self._generations[view] = self._generations.get(view, 0) + 1
        logger.debug("Invalidated views: %s", ", ".join(views))

    def clear(self) -> None:
        with self._lock:
            for view in set(self._views) | set(self._generations):
                self._generations[view] = self._generations.get(view, 0) + 1
            self._views.clear()

    def is_cached(self, view: str) -> bool:
        return view in self._views


query_cache = QueryCache()
