"""Abstract base classes for cache backends."""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from dataclasses import dataclass
from typing import Any, Optional, Dict


@dataclass
class CacheEntry:
    """A cache entry with metadata."""

    key: str
    data: Any
    timestamp: datetime
    ttl_seconds: float = 0  # 0 keeps the entry until it is deleted
    access_count: int = 0

    def is_expired(self) -> bool:
        """Check if the cache entry has expired."""
        if self.ttl_seconds <= 0:
            return False
        return datetime.now() - self.timestamp > timedelta(seconds=self.ttl_seconds)

    def touch(self) -> None:
        """Update access count on cache hit."""
        self.access_count += 1


class CacheBackend(ABC):
    """Common contract of every cache backend.

    ``get`` returns ``None`` on a miss, so ``None`` itself cannot be cached.
    A ``ttl`` of zero or less means the entry never expires.
    """

    def __init__(self, name: str):
        self.name = name
        self.hits = 0
        self.misses = 0
        self.errors = 0

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        """Get value from cache by key."""

    @abstractmethod
    async def set(self, key: str, value: Any, ttl: float = 0) -> bool:
        """Set value in cache with TTL."""

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Delete key from cache."""

    @abstractmethod
    async def has(self, key: str) -> bool:
        """Check if key exists in cache."""

    @abstractmethod
    async def clear(self) -> bool:
        """Clear all cache entries."""

    @abstractmethod
    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics."""

    async def close(self) -> None:
        """Close cache backend and release resources."""

    def _record_hit(self) -> None:
        self.hits += 1

    def _record_miss(self) -> None:
        self.misses += 1

    def _record_error(self) -> None:
        self.errors += 1

    def get_hit_rate(self) -> float:
        """Calculate cache hit rate."""
        total = self.hits + self.misses
        return (self.hits / total * 100) if total > 0 else 0.0

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r})"


class CacheStats:
    """Cache statistics data structure."""

    def __init__(self):
        self.hits = 0
        self.misses = 0
        self.errors = 0
        self.size = 0
        self.memory_usage = 0
        self.oldest_entry = None
        self.newest_entry = None

    @classmethod
    def for_backend(cls, backend: CacheBackend) -> "CacheStats":
        """Create stats pre-filled with a backend's hit/miss counters."""
        stats = cls()
        stats.hits = backend.hits
        stats.misses = backend.misses
        stats.errors = backend.errors
        return stats

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "hits": self.hits,
            "misses": self.misses,
            "errors": self.errors,
            "hit_rate_percent": self.hit_rate,
            "size": self.size,
            "memory_usage_bytes": self.memory_usage,
            "oldest_entry": (
                self.oldest_entry.isoformat() if self.oldest_entry else None
            ),
            "newest_entry": (
                self.newest_entry.isoformat() if self.newest_entry else None
            ),
        }

    @property
    def hit_rate(self) -> float:
        """Calculate hit rate percentage."""
        total = self.hits + self.misses
        return (self.hits / total * 100) if total > 0 else 0.0
