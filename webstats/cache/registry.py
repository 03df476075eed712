"""Backend registry: turns the configured backend name into a cache backend.

Resolution is explicit: configuration is parsed once into ``BackendSettings``
(so an unknown name fails before anything is built), and ``create_backend``
switches over ``BackendKind`` to construct the matching implementation.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from webstats.config import Config, get_config
from webstats.exceptions import ConfigurationError
from webstats.utils.logger import log_info, log_error
from webstats.version import VERSION
from .base import CacheBackend
from .chained import ChainedCacheBackend
from .eager import EagerCache, eager_cache_id
from .file_cache import FileCacheBackend
from .memory_cache import MemoryCacheBackend
from .null_cache import NullCacheBackend
from .process_cache import ProcessCacheBackend
from .redis_cache import RedisCacheBackend


class BackendKind(Enum):
    """Cache backend types."""

    NULL = "null"
    ARRAY = "array"
    FILE = "file"
    PROCESS = "process"
    REDIS = "redis"
    CHAINED = "chained"

    @classmethod
    def parse(cls, name: str) -> "BackendKind":
        """Map a configured backend name to its kind.

        Raises:
            ConfigurationError: If the name is not a known backend
        """
        try:
            return cls((name or "").strip().lower())
        except ValueError:
            valid = ", ".join(kind.value for kind in cls)
            raise ConfigurationError(
                f"Unknown cache backend '{name}', expected one of: {valid}"
            ) from None


@dataclass(frozen=True)
class BackendSettings:
    """Everything needed to build any backend, already validated."""

    backend: BackendKind = BackendKind.CHAINED
    chained_backends: Tuple[BackendKind, ...] = (BackendKind.ARRAY, BackendKind.FILE)
    file_cache_dir: str = "tmp/cache/tracker/"
    process_cache_dir: str = "tmp/cache/process/"
    redis_url: str = "redis://localhost:6379/0"
    redis_key_prefix: str = "webstats:"
    memory_max_size: int = 1000

    @classmethod
    def from_config(cls, config: Config) -> "BackendSettings":
        """Build settings from a ``Config``, defaulting the backend to chained."""
        backend_name = config.cache_backend or BackendKind.CHAINED.value
        return cls(
            backend=BackendKind.parse(backend_name),
            chained_backends=tuple(BackendKind.parse(name) for name in config.get_chained_backends()),
            file_cache_dir=config.get_file_cache_path(),
            process_cache_dir=config.get_process_cache_path(),
            redis_url=config.cache_redis_url,
            redis_key_prefix=config.cache_redis_key_prefix,
            memory_max_size=config.cache_max_memory_size,
        )


def create_backend(kind: BackendKind, settings: BackendSettings,
                   _resolving: Tuple[BackendKind, ...] = ()) -> CacheBackend:
    """Create a cache backend of the given kind.

    Args:
        kind: Backend to build
        settings: Validated backend settings

    Raises:
        ConfigurationError: If a chained backend refers back to itself
        BackendUnavailableError: If the backend's library is not installed
    """
    if kind is BackendKind.NULL:
        return NullCacheBackend()

    if kind is BackendKind.ARRAY:
        return MemoryCacheBackend(max_size=settings.memory_max_size)

    if kind is BackendKind.FILE:
        return FileCacheBackend(cache_dir=settings.file_cache_dir)

    if kind is BackendKind.PROCESS:
        return ProcessCacheBackend(directory=settings.process_cache_dir)

    if kind is BackendKind.REDIS:
        return RedisCacheBackend(
            redis_url=settings.redis_url, key_prefix=settings.redis_key_prefix
        )

    if kind is BackendKind.CHAINED:
        if kind in _resolving:
            raise ConfigurationError(
                "Chained cache backends must not contain 'chained' (cycle detected)"
            )
        backends = [
            create_backend(name, settings, _resolving + (kind,))
            for name in settings.chained_backends
        ]
        return ChainedCacheBackend(backends)

    raise ConfigurationError(f"Unsupported cache backend: {kind!r}")


def resolve_backend(config: Optional[Config] = None) -> CacheBackend:
    """Build the cache backend selected by configuration.

    Args:
        config: Configuration to read; the global configuration when omitted

    Returns:
        A ready-to-use cache backend
    """
    config = config or get_config()
    try:
        settings = BackendSettings.from_config(config)
        backend = create_backend(settings.backend, settings)
    except ConfigurationError as e:
        log_error("Failed to create cache backend",
                  backend_type=config.cache_backend, error=str(e))
        raise

    log_info("Cache backend created",
             backend_type=settings.backend.value,
             chain=[kind.value for kind in settings.chained_backends]
             if settings.backend is BackendKind.CHAINED else None)
    return backend


async def create_eager_cache(config: Optional[Config] = None,
                             tracker_request: bool = False,
                             version: str = VERSION) -> EagerCache:
    """Build and load the eager cache for this version and request type.

    The dictionary lives in the configured backend under
    ``eager_cache_id(version, tracker_request)``.
    """
    backend = resolve_backend(config)
    return await EagerCache(backend, eager_cache_id(version, tracker_request)).load()
