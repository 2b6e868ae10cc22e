"""
Unit tests for the in-memory cache.
"""

import pytest

from cache.memory import InMemoryCache


class TestInMemoryCache:
    """Tests for InMemoryCache."""

    @pytest.mark.asyncio
    async def test_get_missing_key_returns_none(self, memory_cache):
        assert await memory_cache.get("nope") is None

    @pytest.mark.asyncio
    async def test_set_and_get(self, memory_cache):
        await memory_cache.set("k", "v", 10)

        assert await memory_cache.get("k") == "v"

    @pytest.mark.asyncio
    async def test_entry_expires(self, memory_cache, clock):
        await memory_cache.set("k", "v", 10)

        clock.advance(10)

        assert await memory_cache.get("k") is None
        assert len(memory_cache) == 0

    @pytest.mark.asyncio
    async def test_ttl_rounds_up(self, memory_cache, clock):
        await memory_cache.set("k", "v", 10)

        clock.advance(9.5)

        assert await memory_cache.get_ttl("k") == 1

    @pytest.mark.asyncio
    async def test_ttl_of_missing_key_is_not_positive(self, memory_cache):
        assert await memory_cache.get_ttl("nope") <= 0

    @pytest.mark.asyncio
    async def test_set_replaces_value_and_ttl(self, memory_cache):
        await memory_cache.set("k", "v1", 10)
        await memory_cache.set("k", "v2", 100)

        assert await memory_cache.get("k") == "v2"
        assert await memory_cache.get_ttl("k") == 100

    @pytest.mark.asyncio
    @pytest.mark.parametrize("ttl", [0, -5])
    async def test_non_positive_ttl_is_rejected(self, memory_cache, ttl):
        with pytest.raises(ValueError):
            await memory_cache.set("k", "v", ttl)

    @pytest.mark.asyncio
    async def test_delete_is_idempotent(self, memory_cache):
        await memory_cache.set("k", "v", 10)

        await memory_cache.delete("k")
        await memory_cache.delete("k")

        assert await memory_cache.get("k") is None

    @pytest.mark.asyncio
    async def test_gc_only_purges_expired_entries_under_prefix(self, memory_cache, clock):
        await memory_cache.set("session/a", "1", 5)
        await memory_cache.set("session/b", "2", 500)
        await memory_cache.set("other/c", "3", 5)
        clock.advance(10)

        await memory_cache.gc("session/")

        assert len(memory_cache) == 2
        assert await memory_cache.get("session/b") == "2"

    @pytest.mark.asyncio
    async def test_health_check(self):
        assert await InMemoryCache().health_check() is True
