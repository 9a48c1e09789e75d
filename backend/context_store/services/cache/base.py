"""Base cache operations - namespaced scalar primitives over Redis."""

import asyncio
from typing import Any

from redis.asyncio import Redis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisError
from redis.exceptions import TimeoutError as RedisTimeoutError

from context_store.core.exceptions import CacheConnectionError, CacheError
from context_store.core.logging import get_logger
from context_store.services.cache import serialization
from context_store.services.cache.constants import DEFAULT_KEY_PREFIX, TTL_DEFAULT
from context_store.services.cache.keys import KeyNamespacer

logger = get_logger(__name__)


def wrap_store_error(
    operation: str,
    error: RedisError,
    *,
    key: str | None = None,
    namespace: str | None = None,
) -> CacheError:
    """Log a Redis failure and convert it to the application error shape."""
    details: dict[str, Any] = {"operation": operation}
    if key is not None:
        details["key"] = key
    if namespace is not None:
        details["namespace"] = namespace

    logger.error(
        "Cache operation failed",
        operation=operation,
        key=key,
        namespace=namespace,
        error=str(error),
    )

    if isinstance(error, (RedisConnectionError, RedisTimeoutError)):
        return CacheConnectionError(f"Cache unavailable during {operation}", details)
    return CacheError(f"Cache {operation} failed", details)


class BaseCacheOperations:
    """Scalar Redis operations scoped by the key namespacer.

    Store faults are never swallowed here: they surface as
    ``CacheConnectionError`` (retryable) or ``CacheError``.
    """

    def __init__(
        self,
        client: Redis,
        *,
        key_prefix: str = DEFAULT_KEY_PREFIX,
        default_ttl: int = TTL_DEFAULT,
    ) -> None:
        """Initialize the cache service with an already-created client."""
        self._client = client
        self.keys = KeyNamespacer(key_prefix)
        self.default_ttl = default_ttl

    @property
    def client(self) -> Redis:
        """The shared Redis client."""
        return self._client

    def _make_key(self, key: str | int, namespace: str | None = None) -> str:
        """Create a fully-qualified cache key."""
        return self.keys.full_key(key, namespace)

    # ========== String operations ==========

    async def set(
        self,
        key: str,
        value: Any,
        *,
        namespace: str | None = None,
        ttl: int | None = None,
    ) -> None:
        """Serialize and store a value.

        ``ttl=None`` applies the default TTL; ``ttl <= 0`` stores the value
        without expiration.
        """
        full_key = self._make_key(key, namespace)
        serialized = serialization.dumps(value)
        ttl = self.default_ttl if ttl is None else ttl

        try:
            if ttl > 0:
                await self._client.set(full_key, serialized, ex=ttl)
            else:
                await self._client.set(full_key, serialized)
        except RedisError as e:
            raise wrap_store_error("set", e, key=full_key, namespace=namespace) from e

        logger.debug("Cache set", key=full_key, ttl=ttl, namespace=namespace)

    async def get(
        self,
        key: str,
        namespace: str | None = None,
        *,
        schema: Any = None,
    ) -> Any | None:
        """Get and deserialize a value; None when missing or expired."""
        full_key = self._make_key(key, namespace)

        try:
            raw = await self._client.get(full_key)
        except RedisError as e:
            raise wrap_store_error("get", e, key=full_key, namespace=namespace) from e

        if raw is None:
            return None
        return serialization.loads(raw, schema)

    async def delete(self, key: str, namespace: str | None = None) -> bool:
        """Delete a value. Returns True when something was removed."""
        full_key = self._make_key(key, namespace)

        try:
            removed = await self._client.delete(full_key)
        except RedisError as e:
            raise wrap_store_error("delete", e, key=full_key, namespace=namespace) from e

        logger.debug("Cache delete", key=full_key, removed=removed)
        return bool(removed)

    async def exists(self, key: str, namespace: str | None = None) -> bool:
        """Check whether a key exists."""
        full_key = self._make_key(key, namespace)

        try:
            return await self._client.exists(full_key) == 1
        except RedisError as e:
            raise wrap_store_error("exists", e, key=full_key, namespace=namespace) from e

    async def get_ttl(self, key: str, namespace: str | None = None) -> int:
        """Remaining TTL in seconds: -1 without expiration, -2 when absent."""
        full_key = self._make_key(key, namespace)

        try:
            return int(await self._client.ttl(full_key))
        except RedisError as e:
            raise wrap_store_error("ttl", e, key=full_key, namespace=namespace) from e

    async def update_ttl(self, key: str, ttl: int, namespace: str | None = None) -> bool:
        """Reset a key's TTL. Returns False when the key does not exist."""
        full_key = self._make_key(key, namespace)

        try:
            updated = await self._client.expire(full_key, ttl)
        except RedisError as e:
            raise wrap_store_error("expire", e, key=full_key, namespace=namespace) from e

        logger.debug("Cache TTL updated", key=full_key, ttl=ttl)
        return bool(updated)

    async def clear(self, namespace: str | None = None) -> int:
        """Delete every key in a namespace (or under the prefix).

        Uses KEYS, which blocks Redis while scanning; acceptable only for
        cache-sized key spaces.
        """
        pattern = self.keys.pattern(namespace)

        try:
            keys = await self._client.keys(pattern)
            if not keys:
                logger.debug("No keys to clear", pattern=pattern)
                return 0
            removed = await self._client.delete(*keys)
        except RedisError as e:
            raise wrap_store_error("clear", e, key=pattern, namespace=namespace) from e

        logger.info("Cache cleared", pattern=pattern, keys_deleted=removed)
        return int(removed)

    # ========== Health check ==========

    async def health_check(self, timeout: float = 5.0) -> bool:
        """Check Redis connectivity with timeout. Never raises."""
        try:
            result = await asyncio.wait_for(self._client.ping(), timeout=timeout)
            return bool(result)
        except asyncio.TimeoutError:
            logger.error("Redis health check timed out", timeout=timeout)
            return False
        except Exception as e:
            logger.error("Redis health check failed", error=str(e))
            return False
