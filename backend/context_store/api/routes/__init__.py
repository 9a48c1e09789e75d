"""Routes module exports."""

from context_store.api.routes.health import router as health_router

__all__ = [
    "health_router",
]
