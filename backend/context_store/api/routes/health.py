"""Health check and monitoring endpoints."""

import platform
import sys
import time
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from context_store.api.deps import Cache, Vectors
from context_store.api.schemas import HealthResponse, ServiceHealth
from context_store.core.config import get_settings
from context_store.services.cache import CacheService

router = APIRouter(tags=["Health"])

# Track server start time for uptime calculation
_server_start_time = datetime.now(timezone.utc)


def _get_system_info() -> dict[str, Any]:
    """Get system information for health endpoints."""
    return {
        "hostname": platform.node(),
        "platform": platform.system(),
        "python_version": sys.version.split()[0],
        "architecture": platform.machine(),
    }


def _get_uptime() -> dict[str, Any]:
    """Calculate server uptime."""
    now = datetime.now(timezone.utc)
    delta = now - _server_start_time

    days = delta.days
    hours, remainder = divmod(delta.seconds, 3600)
    minutes, seconds = divmod(remainder, 60)

    return {
        "started_at": _server_start_time.isoformat(),
        "uptime_seconds": int(delta.total_seconds()),
        "uptime_human": f"{days}d {hours}h {minutes}m {seconds}s",
    }


async def _timed_cache_check(cache: CacheService, timeout: float = 5.0) -> tuple[bool, float]:
    """Run the cache health check and measure its latency in milliseconds."""
    start = time.perf_counter()
    healthy = await cache.health_check(timeout=timeout)
    return healthy, (time.perf_counter() - start) * 1000


@router.get(
    "/",
    summary="Root endpoint",
    response_description="API information and basic health status",
)
async def root() -> dict[str, Any]:
    """Root endpoint with API information."""
    settings = get_settings()

    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "status": "healthy",
        "environment": settings.environment,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Comprehensive health check",
    response_description="Health status of the cache and vector index",
)
async def health_check(cache: Cache, vectors: Vectors) -> HealthResponse:
    """
    Health check endpoint for monitoring.

    - **cache**: Redis connectivity and round-trip latency. Unreachable
      Redis makes the whole service unhealthy.
    - **vector_index**: whether the RediSearch index was initialized.
      A missing index only degrades the service.
    """
    settings = get_settings()
    services: dict[str, ServiceHealth] = {}
    overall_status = "healthy"

    healthy, latency = await _timed_cache_check(cache)
    services["cache"] = ServiceHealth(
        status="healthy" if healthy else "unhealthy",
        latency_ms=round(latency, 2),
        details={"type": "redis", "db": settings.redis_db},
    )
    if not healthy:
        overall_status = "unhealthy"

    vector_ready = vectors is not None and vectors.is_initialized
    services["vector_index"] = ServiceHealth(
        status="healthy" if vector_ready else "degraded",
        details={"index": settings.vector_index_name, "dimension": settings.vector_dimension},
    )
    if not vector_ready and overall_status == "healthy":
        overall_status = "degraded"

    return HealthResponse(
        status=overall_status,
        timestamp=datetime.now(timezone.utc),
        version=settings.app_version,
        services=services,
    )


@router.get(
    "/health/live",
    summary="Liveness probe",
    response_description="Simple liveness check for orchestrators",
)
async def liveness() -> dict[str, str]:
    """
    Kubernetes liveness probe endpoint.

    Returns 200 if the service process is running. Does not touch Redis.
    """
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get(
    "/health/ready",
    summary="Readiness probe",
    response_description="Readiness check for load balancers",
)
async def readiness(cache: Cache) -> JSONResponse:
    """
    Kubernetes readiness probe endpoint.

    Returns 503 Service Unavailable when Redis does not answer a PING.
    """
    if not await cache.health_check(timeout=5.0):
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "not_ready",
                "reason": "cache_unavailable",
                "message": "Redis health check failed",
                "timestamp": datetime.now(timezone.utc).isoformat(),
            },
        )

    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content={
            "status": "ready",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
    )


@router.get(
    "/health/info",
    summary="System information",
    response_description="Detailed system and runtime information",
)
async def system_info() -> dict[str, Any]:
    """Application metadata, system information and uptime."""
    settings = get_settings()

    return {
        "application": {
            "name": settings.app_name,
            "version": settings.app_version,
            "environment": settings.environment,
        },
        "system": _get_system_info(),
        "uptime": _get_uptime(),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get(
    "/health/cache",
    summary="Cache health check",
    response_description="Detailed cache connectivity status",
)
async def cache_health(cache: Cache, vectors: Vectors) -> JSONResponse:
    """
    Check Redis connectivity and response time.

    Returns 503 when Redis is unreachable.
    """
    healthy, latency = await _timed_cache_check(cache)

    response_data: dict[str, Any] = {
        "service": "cache",
        "type": "redis",
        "status": "healthy" if healthy else "unhealthy",
        "latency_ms": round(latency, 2),
        "vector_index": vectors is not None and vectors.is_initialized,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }

    status_code = status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE
    return JSONResponse(status_code=status_code, content=response_data)
