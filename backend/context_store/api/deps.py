"""API dependencies for FastAPI routes.

Services are created once by the application lifespan and kept on
``app.state``; these dependencies only hand them out.
"""

from typing import Annotated

from fastapi import Depends, Request

from context_store.services.cache import CacheService, VectorIndex


def get_cache_service(request: Request) -> CacheService:
    """The application's cache service."""
    return request.app.state.cache_service  # type: ignore[no-any-return]


def get_vector_index(request: Request) -> VectorIndex | None:
    """The vector index, or None when it failed to initialize."""
    return getattr(request.app.state, "vector_index", None)


# Type aliases for cleaner route signatures
Cache = Annotated[CacheService, Depends(get_cache_service)]
Vectors = Annotated[VectorIndex | None, Depends(get_vector_index)]
