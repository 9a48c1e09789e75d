"""Main CacheService combining all cache operations."""

from redis.asyncio import Redis

from context_store.core.config import Settings, get_settings
from context_store.services.cache.conversation import ConversationCacheMixin
from context_store.services.cache.vectors import VectorIndex


class CacheService(ConversationCacheMixin):
    """Async Redis caching service.

    Combines all cache operations through inheritance:
    - BaseCacheOperations: namespaced scalar get/set/TTL, clear, health check
    - CollectionCacheMixin: list and hash primitives
    - ConversationCacheMixin: conversation contexts and active conversation index

    The vector index lives in ``VectorIndex`` so that a failure to create it
    leaves this service usable.
    """

    @classmethod
    def from_settings(cls, client: Redis, settings: Settings | None = None) -> "CacheService":
        """Build a service over ``client`` using the configured prefix and default TTL."""
        settings = settings or get_settings()
        return cls(
            client,
            key_prefix=settings.redis_key_prefix,
            default_ttl=settings.cache_default_ttl,
        )


async def create_vector_index(client: Redis, settings: Settings | None = None) -> VectorIndex:
    """Create and initialize the vector index from settings."""
    settings = settings or get_settings()
    return await VectorIndex.create(
        client,
        key_prefix=settings.redis_key_prefix,
        index_name=settings.vector_index_name,
        dimension=settings.vector_dimension,
    )
