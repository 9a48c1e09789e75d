"""List and hash cache operations."""

from typing import Any

from redis.exceptions import RedisError

from context_store.core.logging import get_logger
from context_store.services.cache import serialization
from context_store.services.cache.base import BaseCacheOperations, wrap_store_error

logger = get_logger(__name__)


class CollectionCacheMixin(BaseCacheOperations):
    """Ordered lists and field maps. No TTL is applied; callers set one explicitly."""

    # ========== List operations ==========

    async def push_to_list(self, key: str, *values: Any, namespace: str | None = None) -> int:
        """Append values to the tail of a list (maintains insertion order).

        Returns the new list length.
        """
        full_key = self._make_key(key, namespace)
        if not values:
            return await self.list_length(key, namespace=namespace)

        serialized = [serialization.dumps(v) for v in values]
        try:
            length = await self._client.rpush(full_key, *serialized)
        except RedisError as e:
            raise wrap_store_error("rpush", e, key=full_key, namespace=namespace) from e

        logger.debug("List push", key=full_key, count=len(values), total_length=length)
        return int(length)

    async def get_list(
        self,
        key: str,
        start: int = 0,
        end: int = -1,
        *,
        namespace: str | None = None,
    ) -> list[Any]:
        """Get an inclusive range of a list; ``end=-1`` reads to the end."""
        full_key = self._make_key(key, namespace)

        try:
            raw_items = await self._client.lrange(full_key, start, end)
        except RedisError as e:
            raise wrap_store_error("lrange", e, key=full_key, namespace=namespace) from e

        return [serialization.loads(item) for item in raw_items]

    async def list_length(self, key: str, *, namespace: str | None = None) -> int:
        """Number of elements in a list (0 when missing)."""
        full_key = self._make_key(key, namespace)

        try:
            return int(await self._client.llen(full_key))
        except RedisError as e:
            raise wrap_store_error("llen", e, key=full_key, namespace=namespace) from e

    # ========== Hash operations ==========

    async def set_hash(
        self,
        key: str,
        fields: dict[str, Any],
        *,
        namespace: str | None = None,
    ) -> None:
        """Store a field map; each field value is serialized independently."""
        if not fields:
            return

        full_key = self._make_key(key, namespace)
        mapping = {field: serialization.dumps(value) for field, value in fields.items()}

        try:
            await self._client.hset(full_key, mapping=mapping)
        except RedisError as e:
            raise wrap_store_error("hset", e, key=full_key, namespace=namespace) from e

        logger.debug("Hash set", key=full_key, fields=len(mapping))

    async def get_hash(
        self,
        key: str,
        *,
        namespace: str | None = None,
    ) -> dict[str, Any] | None:
        """Get all fields of a hash; None when the hash has no fields."""
        full_key = self._make_key(key, namespace)

        try:
            raw = await self._client.hgetall(full_key)
        except RedisError as e:
            raise wrap_store_error("hgetall", e, key=full_key, namespace=namespace) from e

        if not raw:
            return None
        return {field: serialization.loads(value) for field, value in raw.items()}
