"""Thread-safe read-through cache for expansion results.

Expansion is pure for a given catalog, so results can be cached by
(country_code, year). Each key is computed at most once; concurrent callers
for the same key wait for the first computation.
"""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from typing import Callable, Hashable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class OccurrenceCache:
    """Bounded FIFO cache keyed by (country_code, year).

    Example:
        cache = OccurrenceCache(max_size=32)
        result = cache.get_or_compute(("JM", 2026), lambda: expand("JM", 2026))

        # After reloading templates
        cache.invalidate_all()
    """

    def __init__(self, max_size: int = 64):
        """Initialize the cache.

        Args:
            max_size: Maximum number of cached results (FIFO eviction when full)
        """
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        self.max_size = max_size
        self._entries: OrderedDict[Hashable, object] = OrderedDict()
        self._lock = threading.Lock()
        self.stats = {
            "hits": 0,
            "misses": 0,
            "evictions": 0,
            "invalidations": 0,
        }

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: Hashable) -> bool:
        with self._lock:
            return key in self._entries

    def get_or_compute(self, key: Hashable, factory: Callable[[], T]) -> T:
        """Return the cached value for ``key``, computing it on first use.

        The factory runs while the lock is held, so it is called at most once
        per key. Expansion is short and does no I/O.
        """
        with self._lock:
            if key in self._entries:
                self.stats["hits"] += 1
                logger.debug("Cache hit for key: %s", key)
                return self._entries[key]  # type: ignore[return-value]

            self.stats["misses"] += 1
            logger.debug("Cache miss for key: %s", key)
            value = factory()

            if len(self._entries) >= self.max_size:
                evicted, _ = self._entries.popitem(last=False)
                self.stats["evictions"] += 1
                logger.debug("Evicted cache entry: %s", evicted)

            self._entries[key] = value
            return value

    def invalidate_all(self) -> None:
        """Drop every cached entry."""
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
            self.stats["invalidations"] += 1
        logger.info("Invalidated %d cached expansion results", count)

    def get_stats(self) -> dict[str, float]:
        """Cache statistics including hit rate."""
        with self._lock:
            total = self.stats["hits"] + self.stats["misses"]
            hit_rate = self.stats["hits"] / total if total else 0.0
            return {**self.stats, "size": len(self._entries), "hit_rate": hit_rate}
