"""Test configuration and fixtures.

Provides isolated test fixtures for:
- A mocked async Redis client (no server needed)
- A recording pipeline for multi-command writes
- Cache service / vector index built over the mock
- HTTP client with app.state populated by the mocks
"""

from collections.abc import AsyncGenerator
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from context_store.main import create_app
from context_store.services.cache import CacheService, VectorIndex

TEST_PREFIX = "tg:"
TEST_DIMENSION = 4


# =============================================================================
# Redis mocks
# =============================================================================

class RecordingPipeline:
    """Stands in for redis.asyncio Pipeline: queues calls, returns canned results."""

    def __init__(self, results: list[Any] | None = None, error: Exception | None = None):
        self.calls: list[tuple[str, tuple[Any, ...], dict[str, Any]]] = []
        self.results = results
        self.error = error
        self.executed = False

    async def __aenter__(self) -> "RecordingPipeline":
        return self

    async def __aexit__(self, *exc: Any) -> None:
        return None

    def __getattr__(self, name: str) -> Any:
        def _queue(*args: Any, **kwargs: Any) -> "RecordingPipeline":
            self.calls.append((name, args, kwargs))
            return self
        return _queue

    async def execute(self) -> list[Any]:
        self.executed = True
        if self.error is not None:
            raise self.error
        if self.results is not None:
            return self.results
        return [True] * len(self.calls)

    def command_names(self) -> list[str]:
        return [name for name, _, _ in self.calls]


@pytest.fixture
def pipeline() -> RecordingPipeline:
    return RecordingPipeline()


@pytest.fixture
def redis_client(pipeline: RecordingPipeline) -> MagicMock:
    """Mock of redis.asyncio.Redis with the commands this package uses."""
    client = MagicMock()
    for command in (
        "get", "set", "delete", "exists", "ttl", "expire", "keys",
        "rpush", "lrange", "llen", "hset", "hgetall", "ping", "execute_command",
    ):
        setattr(client, command, AsyncMock())
    client.pipeline = MagicMock(return_value=pipeline)
    return client


@pytest.fixture
def cache(redis_client: MagicMock) -> CacheService:
    return CacheService(redis_client, key_prefix=TEST_PREFIX)


@pytest.fixture
def search_index(redis_client: MagicMock) -> MagicMock:
    """Mock of the object returned by ``client.ft(index_name)``."""
    ft = MagicMock()
    ft.info = AsyncMock(return_value={"index_name": "idx:vectors"})
    ft.search = AsyncMock()
    redis_client.ft = MagicMock(return_value=ft)
    return ft


@pytest_asyncio.fixture
async def vector_index(redis_client: MagicMock, search_index: MagicMock) -> VectorIndex:
    return await VectorIndex.create(
        redis_client,
        key_prefix=TEST_PREFIX,
        dimension=TEST_DIMENSION,
    )


# =============================================================================
# HTTP Client Fixtures
# =============================================================================

@pytest.fixture
def app(cache: CacheService) -> FastAPI:
    """Application with state set directly; the lifespan is not run."""
    application = create_app()
    application.state.cache_service = cache
    application.state.vector_index = None
    return application


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
