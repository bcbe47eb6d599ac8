"""Tests for the Redis-backed display name cache."""

import logging

from unittest.mock import AsyncMock

import pytest

from redis.exceptions import ConnectionError as RedisConnectionError

from moderationdesk_api.services.cache import DEFAULT_TTL_SECONDS
from moderationdesk_api.services.cache import NameCache


def test_default_ttl_is_ten_minutes():
    assert DEFAULT_TTL_SECONDS == 600


@pytest.mark.asyncio
async def test_get_many_returns_only_cached_names(name_cache, fake_redis):
    fake_redis.values["test:name:profile:u1"] = "Alex"

    names = await name_cache.get_many("profile", ["u1", "u2"])

    assert names == {"u1": "Alex"}


@pytest.mark.asyncio
async def test_get_many_without_ids_skips_redis():
    client_factory = AsyncMock()
    cache = NameCache(client_factory=client_factory, key_prefix="test")

    assert await cache.get_many("profile", []) == {}
    client_factory.assert_not_awaited()


@pytest.mark.asyncio
async def test_set_many_writes_with_expiry(name_cache, fake_redis):
    """Every entry is stored with SETEX so Redis expires it."""
    await name_cache.set_many("category", {"cat-1": "Science", "cat-2": "Comedy"})

    assert fake_redis.values == {
        "test:name:category:cat-1": "Science",
        "test:name:category:cat-2": "Comedy",
    }
    assert fake_redis.ttls == {
        "test:name:category:cat-1": 600,
        "test:name:category:cat-2": 600,
    }


@pytest.mark.asyncio
async def test_bulk_writes_keep_nothing_in_process(fake_redis):
    """Many short-lived names all land in Redis with a lifetime attached."""

    async def client_factory():
        return fake_redis

    cache = NameCache(ttl=10, client_factory=client_factory, key_prefix="test")

    await cache.set_many("profile", {f"u{i}": f"User {i}" for i in range(1000)})

    assert len(fake_redis.values) == 1000
    assert set(fake_redis.ttls.values()) == {10}
    assert not any(isinstance(value, dict) for value in vars(cache).values())


@pytest.mark.asyncio
async def test_namespaces_do_not_collide(name_cache):
    await name_cache.set_many("profile", {"1": "Alex"})
    await name_cache.set_many("category", {"1": "Science"})

    assert await name_cache.get_many("profile", ["1"]) == {"1": "Alex"}
    assert await name_cache.get_many("category", ["1"]) == {"1": "Science"}


@pytest.mark.asyncio
async def test_read_failure_is_a_miss(caplog):
    client = AsyncMock()
    client.mget.side_effect = RedisConnectionError("redis down")

    async def client_factory():
        return client

    cache = NameCache(client_factory=client_factory, key_prefix="test")

    with caplog.at_level(logging.WARNING):
        names = await cache.get_many("profile", ["u1"])

    assert names == {}
    assert "Name cache read failed" in caplog.text


@pytest.mark.asyncio
async def test_write_failure_is_logged(caplog):
    client = AsyncMock()
    client.setex.side_effect = RedisConnectionError("redis down")

    async def client_factory():
        return client

    cache = NameCache(client_factory=client_factory, key_prefix="test")

    with caplog.at_level(logging.WARNING):
        await cache.set_many("profile", {"u1": "Alex"})

    assert "Name cache write failed" in caplog.text
