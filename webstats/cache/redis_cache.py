"""Redis-based distributed cache backend."""

import pickle
from typing import Any, Optional, Dict

from webstats.exceptions import BackendUnavailableError
from webstats.utils.logger import log_warning
from .base import CacheBackend, CacheStats

try:
    import redis.asyncio as aioredis
    from redis.exceptions import RedisError
    REDIS_AVAILABLE = True
except ImportError:
    REDIS_AVAILABLE = False


class RedisCacheBackend(CacheBackend):
    """Redis-based cache backend for distributed caching.

    The connection is opened lazily on first use. Connection problems are
    logged and reported as misses or failed writes.
    """

    def __init__(self, redis_url: str = "redis://localhost:6379/0",
                 key_prefix: str = "webstats:", name: str = "redis"):
        super().__init__(name)

        if not REDIS_AVAILABLE:
            raise BackendUnavailableError(name, "redis")

        self.redis_url = redis_url
        self.key_prefix = key_prefix
        self.redis = None
        self._connected = False

    async def _ensure_connected(self) -> bool:
        """Ensure Redis connection is established."""
        if self._connected and self.redis:
            return True

        try:
            self.redis = aioredis.from_url(self.redis_url, decode_responses=False)
            await self.redis.ping()
            self._connected = True
            return True

        except (RedisError, OSError) as e:
            log_warning("Redis connection failed", redis_url=self.redis_url, error=str(e))
            await self._discard_client()
            self._record_error()
            return False

    async def _discard_client(self) -> None:
        """Close a client whose connection attempt failed."""
        client, self.redis = self.redis, None
        self._connected = False
        if client is not None:
            try:
                await client.aclose()
            except (RedisError, OSError) as e:
                log_warning("Closing failed Redis client raised", error=str(e))

    def _make_key(self, key: str) -> str:
        """Create Redis key with prefix."""
        return f"{self.key_prefix}{key}"

    async def get(self, key: str) -> Optional[Any]:
        """Get value from Redis cache."""
        if not await self._ensure_connected():
            self._record_miss()
            return None

        try:
            data_bytes = await self.redis.get(self._make_key(key))
        except RedisError as e:
            log_warning("Redis get failed", key=key[:50], error=str(e))
            self._record_error()
            return None

        if data_bytes is None:
            self._record_miss()
            return None

        try:
            value = pickle.loads(data_bytes)  # nosec B301
        except (pickle.UnpicklingError, EOFError, ValueError, TypeError, AttributeError, ImportError) as e:
            log_warning("Redis value could not be decoded", key=key[:50], error=str(e))
            self._record_error()
            return None

        self._record_hit()
        return value

    async def set(self, key: str, value: Any, ttl: float = 0) -> bool:
        """Set value in Redis cache."""
        if not await self._ensure_connected():
            return False

        try:
            data_bytes = pickle.dumps(value)
            if ttl > 0:
                await self.redis.set(self._make_key(key), data_bytes, px=int(ttl * 1000))
            else:
                await self.redis.set(self._make_key(key), data_bytes)
            return True

        except RedisError as e:
            log_warning("Redis set failed", key=key[:50], error=str(e))
            self._record_error()
            return False

    async def delete(self, key: str) -> bool:
        """Delete key from Redis cache."""
        if not await self._ensure_connected():
            return False

        try:
            return await self.redis.delete(self._make_key(key)) > 0
        except RedisError:
            self._record_error()
            return False

    async def has(self, key: str) -> bool:
        """Check if key exists in Redis cache."""
        if not await self._ensure_connected():
            return False

        try:
            return await self.redis.exists(self._make_key(key)) > 0
        except RedisError:
            self._record_error()
            return False

    async def clear(self) -> bool:
        """Clear all cache entries with our prefix."""
        if not await self._ensure_connected():
            return False

        try:
            keys = [key async for key in self.redis.scan_iter(match=f"{self.key_prefix}*", count=100)]
            if keys:
                await self.redis.delete(*keys)
            return True

        except RedisError as e:
            log_warning("Redis clear failed", error=str(e))
            self._record_error()
            return False

    def get_stats(self) -> Dict[str, Any]:
        """Get Redis cache statistics."""
        stats = CacheStats.for_backend(self)
        return {
            **stats.to_dict(),
            "backend": self.name,
            "redis_url": self.redis_url,
            "connected": self._connected,
            "key_prefix": self.key_prefix,
        }

    async def close(self) -> None:
        """Close Redis connection."""
        if self.redis:
            try:
                await self.redis.aclose()
            finally:
                self.redis = None
                self._connected = False
