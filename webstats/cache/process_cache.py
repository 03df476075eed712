"""Host-local cache shared by every worker process, backed by diskcache."""

from typing import Any, Optional, Dict

from webstats.exceptions import BackendUnavailableError
from webstats.utils.logger import log_warning
from .base import CacheBackend, CacheStats

try:
    import diskcache
    DISKCACHE_AVAILABLE = True
except ImportError:
    DISKCACHE_AVAILABLE = False

_MISSING = object()


class ProcessCacheBackend(CacheBackend):
    """Cache shared between processes on the same host.

    All worker processes pointing at the same directory see the same entries;
    diskcache handles the cross-process locking.
    """

    def __init__(self, directory: str, name: str = "process"):
        super().__init__(name)

        if not DISKCACHE_AVAILABLE:
            raise BackendUnavailableError(name, "diskcache")

        self.directory = directory
        self._cache = diskcache.Cache(directory)

    async def get(self, key: str) -> Optional[Any]:
        """Get value from the shared cache."""
        try:
            value = self._cache.get(key, default=_MISSING)
        except diskcache.Timeout as e:
            log_warning("Process cache read timed out", key=key[:50], error=str(e))
            self._record_error()
            return None

        if value is _MISSING:
            self._record_miss()
            return None

        self._record_hit()
        return value

    async def set(self, key: str, value: Any, ttl: float = 0) -> bool:
        """Set value in the shared cache."""
        try:
            return bool(self._cache.set(key, value, expire=ttl if ttl > 0 else None))
        except diskcache.Timeout as e:
            log_warning("Process cache write timed out", key=key[:50], error=str(e))
            self._record_error()
            return False

    async def delete(self, key: str) -> bool:
        """Delete key from the shared cache."""
        try:
            return bool(self._cache.delete(key))
        except diskcache.Timeout:
            self._record_error()
            return False

    async def has(self, key: str) -> bool:
        """Check if key exists in the shared cache."""
        return key in self._cache

    async def clear(self) -> bool:
        """Clear all cache entries."""
        try:
            self._cache.clear()
            return True
        except diskcache.Timeout:
            self._record_error()
            return False

    def get_stats(self) -> Dict[str, Any]:
        """Get process cache statistics."""
        stats = CacheStats.for_backend(self)
        stats.size = len(self._cache)
        stats.memory_usage = self._cache.volume()
        return {
            **stats.to_dict(),
            "backend": self.name,
            "directory": self.directory,
        }

    async def close(self) -> None:
        """Close the underlying diskcache handle."""
        self._cache.close()
