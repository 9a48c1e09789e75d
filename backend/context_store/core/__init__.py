"""Core module exports."""

from context_store.core.config import Settings, get_settings
from context_store.core.exceptions import (
    AppException,
    CacheConnectionError,
    CacheError,
    DimensionMismatchError,
    NotFoundError,
    SerializationError,
    ValidationError,
    VectorIndexError,
)
from context_store.core.logging import get_logger, setup_logging
from context_store.core.redis import close_redis_client, create_redis_client

__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Logging
    "get_logger",
    "setup_logging",
    # Redis
    "create_redis_client",
    "close_redis_client",
    # Exceptions
    "AppException",
    "CacheConnectionError",
    "CacheError",
    "DimensionMismatchError",
    "NotFoundError",
    "SerializationError",
    "ValidationError",
    "VectorIndexError",
]
