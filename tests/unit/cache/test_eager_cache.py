"""Unit tests for the eager cache."""

import pytest

from webstats.cache.eager import DEFAULT_PERSIST_TTL, EagerCache, eager_cache_id
from webstats.cache.file_cache import FileCacheBackend
from webstats.cache.memory_cache import MemoryCacheBackend
from webstats.cache.registry import create_eager_cache


class TestEagerCacheId:

    def test_ui_request(self):
        assert eager_cache_id("3.14.0-b2", tracker_request=False) == "eagercache-3140b2-ui"

    def test_tracker_request(self):
        assert eager_cache_id("3.14.0", tracker_request=True) == "eagercache-3140-tracker"


class TestEagerCache:

    @pytest.mark.asyncio
    async def test_loads_stored_dictionary(self):
        backend = MemoryCacheBackend()
        await backend.set("eager", {"a": 1})

        cache = await EagerCache(backend, "eager").load()

        assert cache.contains("a")
        assert cache.fetch("a") == 1
        assert cache.fetch("b") is None

    @pytest.mark.asyncio
    async def test_persists_only_when_modified(self):
        backend = MemoryCacheBackend()
        cache = await EagerCache(backend, "eager").load()

        assert not await cache.persist_cache_if_needed()

        cache.save("a", 1)
        assert await cache.persist_cache_if_needed()
        assert await backend.get("eager") == {"a": 1}
        assert backend.cache["eager"].ttl_seconds == DEFAULT_PERSIST_TTL

        # Clean again after a successful write
        assert not await cache.persist_cache_if_needed()

    @pytest.mark.asyncio
    async def test_delete_and_flush_mark_dirty(self):
        backend = MemoryCacheBackend()
        await backend.set("eager", {"a": 1, "b": 2})
        cache = await EagerCache(backend, "eager").load()

        assert cache.delete("a")
        assert not cache.delete("missing")
        await cache.persist_cache_if_needed(ttl=60)
        assert await backend.get("eager") == {"b": 2}

        cache.flush_all()
        await cache.persist_cache_if_needed()
        assert await backend.get("eager") == {}

    @pytest.mark.asyncio
    async def test_ignores_non_dict_content(self):
        backend = MemoryCacheBackend()
        await backend.set("eager", "garbage")

        cache = await EagerCache(backend, "eager").load()

        assert not cache.contains("garbage")

    @pytest.mark.asyncio
    async def test_save_before_load_keeps_stored_entries(self):
        backend = MemoryCacheBackend()
        await backend.set("eager", {"a": 1, "b": 2})

        cache = EagerCache(backend, "eager")
        cache.save("b", 20)
        cache.save("c", 3)
        await cache.load()

        assert cache.fetch("a") == 1
        assert cache.fetch("b") == 20
        assert cache.fetch("c") == 3

        await cache.persist_cache_if_needed()
        assert await backend.get("eager") == {"a": 1, "b": 20, "c": 3}

    @pytest.mark.asyncio
    async def test_delete_before_load_drops_stored_entry(self):
        backend = MemoryCacheBackend()
        await backend.set("eager", {"a": 1, "b": 2})

        cache = EagerCache(backend, "eager")
        cache.delete("a")
        await cache.load()

        assert not cache.contains("a")
        assert cache.fetch("b") == 2

    @pytest.mark.asyncio
    async def test_flush_before_load_discards_stored_entries(self):
        backend = MemoryCacheBackend()
        await backend.set("eager", {"a": 1})

        cache = EagerCache(backend, "eager")
        cache.flush_all()
        await cache.load()

        assert not cache.contains("a")
        await cache.persist_cache_if_needed()
        assert await backend.get("eager") == {}


class TestCreateEagerCache:

    @pytest.mark.asyncio
    async def test_uses_configured_backend_and_version_key(self, make_config):
        config = make_config(cache_backend="file")
        cache = await create_eager_cache(config, tracker_request=True, version="3.14.0")

        assert isinstance(cache.backend, FileCacheBackend)
        assert cache.cache_id == "eagercache-3140-tracker"

    @pytest.mark.asyncio
    async def test_loads_what_an_earlier_request_persisted(self, make_config):
        config = make_config(cache_backend="file")

        first = await create_eager_cache(config)
        first.save("segment", {"rows": 3})
        assert await first.persist_cache_if_needed()

        second = await create_eager_cache(config)
        assert second.cache_id == eager_cache_id(tracker_request=False)
        assert second.fetch("segment") == {"rows": 3}
