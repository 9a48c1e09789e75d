"""API module exports."""

from context_store.api.deps import Cache, Vectors, get_cache_service, get_vector_index
from context_store.api.routes import health_router

__all__ = [
    # Routers
    "health_router",
    # Dependencies
    "Cache",
    "Vectors",
    "get_cache_service",
    "get_vector_index",
]
