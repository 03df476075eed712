"""Eager cache: a whole dictionary of values kept under one backend entry.

Loaded once per request, read and modified in memory, and written back only
if something changed. Changes made before ``load`` take precedence over the
stored dictionary.
"""

from typing import Any, Dict, Optional, Set

from webstats.utils.logger import log_debug
from webstats.version import VERSION
from .base import CacheBackend

DEFAULT_PERSIST_TTL = 43200


def eager_cache_id(version: str = VERSION, tracker_request: bool = False) -> str:
    """Return the backend key of the eager cache for a version and request type."""
    cache_id = "eagercache-" + version.replace(".", "").replace("-", "") + "-"
    return cache_id + ("tracker" if tracker_request else "ui")


class EagerCache:
    def __init__(self, backend: CacheBackend, cache_id: str):
        self.backend = backend
        self.cache_id = cache_id
        self._content: Dict[str, Any] = {}
        self._is_dirty = False
        self._loaded = False
        self._flushed = False
        self._deleted: Set[str] = set()

    async def load(self) -> "EagerCache":
        """Read the stored dictionary from the backend (once)."""
        if self._loaded:
            return self

        content = await self.backend.get(self.cache_id)
        if isinstance(content, dict) and not self._flushed:
            loaded = {id: value for id, value in content.items() if id not in self._deleted}
            loaded.update(self._content)
            self._content = loaded
        self._deleted.clear()
        self._loaded = True
        return self

    def fetch(self, id: str) -> Optional[Any]:
        return self._content.get(id)

    def contains(self, id: str) -> bool:
        return id in self._content

    def save(self, id: str, value: Any) -> None:
        self._content[id] = value
        self._deleted.discard(id)
        self._is_dirty = True

    def delete(self, id: str) -> bool:
        if not self._loaded:
            # Unknown until loaded; remembered so load() drops it
            self._deleted.add(id)
            self._is_dirty = True
            return self._content.pop(id, None) is not None

        if id not in self._content:
            return False
        del self._content[id]
        self._is_dirty = True
        return True

    def flush_all(self) -> None:
        self._content = {}
        self._deleted.clear()
        self._flushed = True
        self._is_dirty = True

    async def persist_cache_if_needed(self, ttl: float = DEFAULT_PERSIST_TTL) -> bool:
        """Write the dictionary back to the backend if it was modified.

        Returns:
            True if a write happened and succeeded
        """
        if not self._is_dirty:
            return False

        stored = await self.backend.set(self.cache_id, self._content, ttl)
        if stored:
            self._is_dirty = False
        log_debug("Eager cache persisted", cache_id=self.cache_id,
                  entries=len(self._content), stored=stored)
        return stored
