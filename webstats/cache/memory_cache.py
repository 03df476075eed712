"""In-memory ("array") cache backend with LRU eviction."""

import asyncio
import sys
from datetime import datetime
from typing import Any, Optional, Dict
from collections import OrderedDict

from .base import CacheBackend, CacheEntry, CacheStats


class MemoryCacheBackend(CacheBackend):
    """Per-process cache held in a dict, bounded by LRU eviction.

    Entries live only as long as the process, which makes this backend the
    usual first link of a chained cache.
    """

    def __init__(self, max_size: int = 1000, name: str = "array"):
        super().__init__(name)
        self.max_size = max_size
        self.cache: OrderedDict[str, CacheEntry] = OrderedDict()
        self._lock = asyncio.Lock()

    async def get(self, key: str) -> Optional[Any]:
        """Get value from memory cache."""
        async with self._lock:
            entry = self.cache.get(key)
            if entry is None:
                self._record_miss()
                return None

            if entry.is_expired():
                del self.cache[key]
                self._record_miss()
                return None

            # Move to end (most recently used)
            self.cache.move_to_end(key)
            entry.touch()
            self._record_hit()
            return entry.data

    async def set(self, key: str, value: Any, ttl: float = 0) -> bool:
        """Set value in memory cache."""
        async with self._lock:
            self.cache.pop(key, None)
            self.cache[key] = CacheEntry(
                key=key, data=value, timestamp=datetime.now(), ttl_seconds=ttl
            )

            while len(self.cache) > self.max_size:
                self.cache.popitem(last=False)

            return True

    async def delete(self, key: str) -> bool:
        """Delete key from memory cache."""
        async with self._lock:
            return self.cache.pop(key, None) is not None

    async def has(self, key: str) -> bool:
        """Check if key exists in cache."""
        async with self._lock:
            entry = self.cache.get(key)
            if entry is None:
                return False
            if entry.is_expired():
                del self.cache[key]
                return False
            return True

    async def clear(self) -> bool:
        """Clear all cache entries."""
        async with self._lock:
            self.cache.clear()
            return True

    def get_stats(self) -> Dict[str, Any]:
        """Get memory cache statistics."""
        stats = CacheStats.for_backend(self)
        stats.size = len(self.cache)

        if self.cache:
            # Rough estimate, nested objects are not followed
            stats.memory_usage = sum(
                sys.getsizeof(entry.data) + sys.getsizeof(entry)
                for entry in self.cache.values()
            )
            entries = list(self.cache.values())
            stats.oldest_entry = min(entry.timestamp for entry in entries)
            stats.newest_entry = max(entry.timestamp for entry in entries)

        return {
            **stats.to_dict(),
            "backend": self.name,
            "max_size": self.max_size,
            "eviction_policy": "LRU",
        }

    async def close(self) -> None:
        """Drop all entries."""
        async with self._lock:
            self.cache.clear()
