"""Tests for list and hash cache primitives."""

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from context_store.core.exceptions import CacheConnectionError
from context_store.services.cache import CacheService

pytestmark = pytest.mark.asyncio


class TestLists:
    async def test_push_appends_serialized_values(self, cache: CacheService, redis_client):
        redis_client.rpush.return_value = 3

        length = await cache.push_to_list("events", {"a": 1}, "b", 3)

        assert length == 3
        redis_client.rpush.assert_awaited_once_with("tg:events", '{"a":1}', '"b"', "3")

    async def test_push_nothing_returns_current_length(self, cache: CacheService, redis_client):
        redis_client.llen.return_value = 5
        assert await cache.push_to_list("events") == 5
        redis_client.rpush.assert_not_awaited()

    async def test_push_has_no_ttl(self, cache: CacheService, redis_client):
        redis_client.rpush.return_value = 1
        await cache.push_to_list("events", "x")
        redis_client.expire.assert_not_awaited()

    async def test_get_list_defaults_to_whole_list(self, cache: CacheService, redis_client):
        redis_client.lrange.return_value = ['{"a":1}', '"b"']

        assert await cache.get_list("events") == [{"a": 1}, "b"]
        redis_client.lrange.assert_awaited_once_with("tg:events", 0, -1)

    async def test_get_list_range_and_namespace(self, cache: CacheService, redis_client):
        redis_client.lrange.return_value = []

        assert await cache.get_list("events", 1, 2, namespace="ns") == []
        redis_client.lrange.assert_awaited_once_with("tg:ns:events", 1, 2)

    async def test_push_error_propagates(self, cache: CacheService, redis_client):
        redis_client.rpush.side_effect = RedisConnectionError("down")
        with pytest.raises(CacheConnectionError):
            await cache.push_to_list("events", "x")


class TestHashes:
    async def test_set_hash_serializes_each_field(self, cache: CacheService, redis_client):
        await cache.set_hash("profile", {"name": "Ada", "tags": ["x"], "age": 36})

        redis_client.hset.assert_awaited_once_with(
            "tg:profile",
            mapping={"name": '"Ada"', "tags": '["x"]', "age": "36"},
        )

    async def test_set_hash_empty_is_noop(self, cache: CacheService, redis_client):
        await cache.set_hash("profile", {})
        redis_client.hset.assert_not_awaited()

    async def test_get_hash_deserializes(self, cache: CacheService, redis_client):
        redis_client.hgetall.return_value = {"name": '"Ada"', "tags": '["x"]'}
        assert await cache.get_hash("profile") == {"name": "Ada", "tags": ["x"]}

    async def test_get_hash_absent(self, cache: CacheService, redis_client):
        redis_client.hgetall.return_value = {}
        assert await cache.get_hash("profile", namespace="users") is None
        redis_client.hgetall.assert_awaited_once_with("tg:users:profile")
