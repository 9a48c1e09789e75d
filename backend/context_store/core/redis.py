"""Redis client lifecycle.

The client is created once by the application lifespan and passed to
every cache component; nothing in this package holds a global connection.
"""

from redis.asyncio import ConnectionPool, Redis

from context_store.core.config import Settings, get_settings
from context_store.core.logging import get_logger

logger = get_logger(__name__)


def create_redis_client(settings: Settings | None = None) -> Redis:
    """Build an async Redis client backed by a connection pool.

    No I/O happens here; the first command opens a connection.
    """
    settings = settings or get_settings()

    pool = ConnectionPool.from_url(
        settings.redis_url,
        max_connections=settings.redis_max_connections,
        socket_timeout=settings.redis_socket_timeout,
        socket_connect_timeout=settings.redis_socket_timeout,
        decode_responses=True,
    )
    client = Redis(connection_pool=pool)

    logger.info(
        "Redis client created",
        host=settings.redis_host,
        port=settings.redis_port,
        db=settings.redis_db,
        pool_size=settings.redis_max_connections,
    )
    return client


async def close_redis_client(client: Redis) -> None:
    """Close the client and disconnect its pool."""
    await client.aclose()
    await client.connection_pool.disconnect()
    logger.info("Redis client closed")
