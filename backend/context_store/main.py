"""FastAPI application entry point."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException

from context_store.api import health_router
from context_store.core.config import get_settings
from context_store.core.exceptions import (
    AppException,
    VectorIndexError,
    app_exception_handler,
    http_exception_handler,
    unhandled_exception_handler,
)
from context_store.core.logging import get_logger, setup_logging
from context_store.core.redis import close_redis_client, create_redis_client
from context_store.services.cache import CacheService, create_vector_index

# Initialize logging first
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager for startup and shutdown events.

    Startup:
    - Create the shared Redis client and the cache service over it
    - Ensure the vector index; a failure leaves the cache usable

    Shutdown:
    - Close the Redis client and its connection pool
    """
    settings = get_settings()

    logger.info(
        "Starting application",
        app_name=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
    )

    client = create_redis_client(settings)
    app.state.redis = client
    app.state.cache_service = CacheService.from_settings(client, settings)

    try:
        app.state.vector_index = await create_vector_index(client, settings)
        logger.info("Vector index ready", index=settings.vector_index_name)
    except VectorIndexError as e:
        app.state.vector_index = None
        logger.error("Vector search disabled", error=e.message, details=e.details)

    yield

    logger.info("Shutting down application")
    await close_redis_client(client)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Conversation context, namespaced cache and vector search on Redis",
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
    )

    # Register exception handlers
    app.add_exception_handler(AppException, app_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(HTTPException, http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # Include routers
    app.include_router(health_router)

    return app


# Create application instance
app = create_app()
