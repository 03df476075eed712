"""File-based persistent cache backend."""

import asyncio
import hashlib
import os
import pickle
import tempfile
import time
from datetime import datetime
from pathlib import Path
from typing import Any, Optional, Dict, Tuple

from webstats.utils.logger import log_warning
from .base import CacheBackend, CacheStats

_MISSING = object()


class FileCacheBackend(CacheBackend):
    """Cache stored as one pickle file per key under a root directory.

    Each file holds ``(expires_at, value)``, so every instance pointing at the
    same directory (other requests, other worker processes) sees the same
    entries and expiry. Files are replaced atomically on write; the last
    writer of a key wins.
    """

    def __init__(self, cache_dir: str, name: str = "file"):
        super().__init__(name)
        self.cache_dir = Path(cache_dir)
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        self._lock = asyncio.Lock()

    def _get_file_path(self, key: str) -> Path:
        """Get file path for cache key."""
        key_hash = hashlib.md5(key.encode(), usedforsecurity=False).hexdigest()
        return self.cache_dir / f"cache_{key_hash}.pkl"

    @staticmethod
    def _read_entry(file_path: Path) -> Tuple[float, Any]:
        with open(file_path, "rb") as f:
            expires_at, data = pickle.load(f)  # nosec B301
        return expires_at, data

    def _load(self, key: str) -> Any:
        """Return the live value for key, or _MISSING. Expired files are removed."""
        file_path = self._get_file_path(key)
        try:
            expires_at, data = self._read_entry(file_path)
        except FileNotFoundError:
            return _MISSING

        if expires_at and expires_at < time.time():
            file_path.unlink(missing_ok=True)
            return _MISSING
        return data

    async def get(self, key: str) -> Optional[Any]:
        """Get value from file cache."""
        async with self._lock:
            try:
                data = self._load(key)
            except (OSError, pickle.UnpicklingError, EOFError, ValueError, TypeError) as e:
                log_warning("File cache read failed", key=key[:50], error=str(e))
                self._record_error()
                return None

            if data is _MISSING:
                self._record_miss()
                return None

            self._record_hit()
            return data

    async def set(self, key: str, value: Any, ttl: float = 0) -> bool:
        """Set value in file cache."""
        expires_at = time.time() + ttl if ttl > 0 else 0
        async with self._lock:
            file_path = self._get_file_path(key)
            tmp_path = None
            try:
                fd, tmp_path = tempfile.mkstemp(dir=self.cache_dir, prefix=".tmp_", suffix=".pkl")
                with os.fdopen(fd, "wb") as f:
                    pickle.dump((expires_at, value), f)
                os.replace(tmp_path, file_path)
                return True

            except (OSError, pickle.PicklingError, TypeError, AttributeError) as e:
                log_warning("File cache write failed", key=key[:50], error=str(e))
                if tmp_path and os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                self._record_error()
                return False

    async def delete(self, key: str) -> bool:
        """Delete key from file cache."""
        async with self._lock:
            file_path = self._get_file_path(key)
            try:
                file_path.unlink()
                return True
            except FileNotFoundError:
                return False
            except OSError as e:
                log_warning("File cache delete failed", key=key[:50], error=str(e))
                self._record_error()
                return False

    async def has(self, key: str) -> bool:
        """Check if key exists in cache."""
        async with self._lock:
            try:
                return self._load(key) is not _MISSING
            except (OSError, pickle.UnpicklingError, EOFError, ValueError, TypeError):
                self._record_error()
                return False

    async def clear(self) -> bool:
        """Clear all cache entries."""
        async with self._lock:
            try:
                for file_path in self.cache_dir.glob("cache_*.pkl"):
                    file_path.unlink(missing_ok=True)
                return True

            except OSError as e:
                log_warning("File cache clear failed", cache_dir=str(self.cache_dir), error=str(e))
                self._record_error()
                return False

    def get_stats(self) -> Dict[str, Any]:
        """Get file cache statistics."""
        stats = CacheStats.for_backend(self)
        timestamps = []

        for file_path in self.cache_dir.glob("cache_*.pkl"):
            try:
                file_stat = file_path.stat()
            except FileNotFoundError:
                continue
            stats.size += 1
            stats.memory_usage += file_stat.st_size
            timestamps.append(datetime.fromtimestamp(file_stat.st_mtime))

        if timestamps:
            stats.oldest_entry = min(timestamps)
            stats.newest_entry = max(timestamps)

        return {
            **stats.to_dict(),
            "backend": self.name,
            "cache_dir": str(self.cache_dir),
            "disk_usage_bytes": stats.memory_usage,
        }
