"""Composite backend querying an ordered list of backends."""

from typing import Any, Optional, Dict, List, Sequence

from webstats.utils.logger import log_debug
from .base import CacheBackend

# Lifetime of values copied into faster backends after a hit further down.
BACKFILL_TTL = 300


class ChainedCacheBackend(CacheBackend):
    """Chain of backends, usually ordered from fastest to most durable.

    Reads stop at the first backend holding the key and copy the value into
    every backend before it. Writes, deletes and clears go to all backends.
    The chain owns its backends and closes them on ``close``.
    """

    def __init__(self, backends: Sequence[CacheBackend], name: str = "chained"):
        super().__init__(name)
        self.backends: List[CacheBackend] = list(backends)

    async def get(self, key: str) -> Optional[Any]:
        for index, backend in enumerate(self.backends):
            value = await backend.get(key)
            if value is None:
                continue

            for earlier in reversed(self.backends[:index]):
                await earlier.set(key, value, ttl=BACKFILL_TTL)

            if index:
                log_debug("Chained cache backfilled", key=key[:50], source=backend.name)
            self._record_hit()
            return value

        self._record_miss()
        return None

    async def set(self, key: str, value: Any, ttl: float = 0) -> bool:
        results = [await backend.set(key, value, ttl) for backend in self.backends]
        return all(results)

    async def delete(self, key: str) -> bool:
        # True when at least one backend held the key
        results = [await backend.delete(key) for backend in self.backends]
        return any(results)

    async def has(self, key: str) -> bool:
        for backend in self.backends:
            if await backend.has(key):
                return True
        return False

    async def clear(self) -> bool:
        results = [await backend.clear() for backend in self.backends]
        return all(results)

    def get_stats(self) -> Dict[str, Any]:
        return {
            "backend": self.name,
            "hits": self.hits,
            "misses": self.misses,
            "hit_rate_percent": self.get_hit_rate(),
            "chain": [backend.get_stats() for backend in self.backends],
        }

    async def close(self) -> None:
        for backend in self.backends:
            await backend.close()
