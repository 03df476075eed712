"""Pluggable cache backends.

Backends available through the registry:
- null: stores nothing
- array: in-memory cache for the current process
- file: persistent file-based cache for single hosts
- process: cache shared by all processes on a host (requires diskcache)
- redis: distributed cache (requires redis)
- chained: ordered combination of the above
"""

from .base import CacheBackend, CacheEntry
from .chained import ChainedCacheBackend
from .eager import EagerCache, eager_cache_id
from .file_cache import FileCacheBackend
from .memory_cache import MemoryCacheBackend
from .null_cache import NullCacheBackend
from .process_cache import ProcessCacheBackend
from .redis_cache import RedisCacheBackend
from .registry import (
    BackendKind,
    BackendSettings,
    create_backend,
    create_eager_cache,
    resolve_backend,
)

__all__ = [
    "BackendKind",
    "BackendSettings",
    "CacheBackend",
    "CacheEntry",
    "ChainedCacheBackend",
    "EagerCache",
    "FileCacheBackend",
    "MemoryCacheBackend",
    "NullCacheBackend",
    "ProcessCacheBackend",
    "RedisCacheBackend",
    "create_backend",
    "create_eager_cache",
    "eager_cache_id",
    "resolve_backend",
]
