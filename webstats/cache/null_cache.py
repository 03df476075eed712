"""Cache backend that stores nothing."""

from typing import Any, Optional, Dict

from .base import CacheBackend, CacheStats


class NullCacheBackend(CacheBackend):
    """Accepts every write and misses on every read.

    Used to disable caching without changing calling code.
    """

    def __init__(self, name: str = "null"):
        super().__init__(name)

    async def get(self, key: str) -> Optional[Any]:
        self._record_miss()
        return None

    async def set(self, key: str, value: Any, ttl: float = 0) -> bool:
        return True

    async def delete(self, key: str) -> bool:
        return True

    async def has(self, key: str) -> bool:
        return False

    async def clear(self) -> bool:
        return True

    def get_stats(self) -> Dict[str, Any]:
        return {**CacheStats.for_backend(self).to_dict(), "backend": self.name}
