# src/dcsim_core/cache/service.py
"""
Provides the injectable solution cache shared by the analysis services.
"""
import logging
import threading
from collections import OrderedDict
from typing import Any, Dict, Hashable, Optional

from ..constants import DEFAULT_CACHE_MAX_ENTRIES

logger = logging.getLogger(__name__)


class SolutionCache:
    """
    A bounded, thread-safe least-recently-used cache of analysis results.

    The cache is an explicit service handed to the analyzers by the caller; it
    is never a module-level singleton. Request handlers running in parallel
    may share one instance. Stored values must be immutable (the frozen result
    dataclasses), since the same object is handed to every hit.
    """

    def __init__(self, max_entries: int = DEFAULT_CACHE_MAX_ENTRIES):
        if max_entries < 1:
            raise ValueError(f"Cache size must be at least 1, got {max_entries}.")
        self.max_entries = max_entries
        self._entries: "OrderedDict[Hashable, Any]" = OrderedDict()
        self._lock = threading.Lock()
        self.clear_stats()
        logger.debug(f"SolutionCache instance created (max {max_entries} entries).")

    def get(self, key: Hashable) -> Optional[Any]:
        """Returns the cached value for `key`, or None on a miss."""
        with self._lock:
            if key in self._entries:
                self._entries.move_to_end(key)
                self._stats['hits'] += 1
                # Logging the key can be verbose; truncate for readability.
                logger.debug(f"Cache HIT for key: {str(key)[:150]}...")
                return self._entries[key]
            self._stats['misses'] += 1
        logger.debug(f"Cache MISS for key: {str(key)[:150]}...")
        return None

    def put(self, key: Hashable, value: Any):
        """Stores `value`, evicting the least recently used entry when full."""
        with self._lock:
            if key in self._entries:
                logger.warning("Cache key collision detected. Overwriting existing value.")
                self._entries.move_to_end(key)
            self._entries[key] = value
            while len(self._entries) > self.max_entries:
                evicted_key, _ = self._entries.popitem(last=False)
                self._stats['evictions'] += 1
                logger.debug(f"Evicted cache entry: {str(evicted_key)[:150]}...")

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: Hashable) -> bool:
        with self._lock:
            return key in self._entries

    def get_stats(self) -> Dict[str, int]:
        """Returns a copy of the hit/miss/eviction statistics."""
        with self._lock:
            return dict(self._stats)

    def clear_stats(self):
        self._stats = {'hits': 0, 'misses': 0, 'evictions': 0}

    def clear(self):
        """Drops every cached entry. Statistics are kept."""
        with self._lock:
            self._entries.clear()
        logger.info("Cleared the solution cache.")
