# context_store/cli.py
import asyncio
import os
import sys

import uvicorn

from context_store.core.config import get_settings
from context_store.core.redis import close_redis_client, create_redis_client
from context_store.services.cache import CacheService


def dev() -> None:
    uvicorn.run("context_store.main:app", host="0.0.0.0", port=8000, reload=True)


def start() -> None:
    port = int(os.environ.get("PORT", 8000))
    uvicorn.run("context_store.main:app", host="0.0.0.0", port=port)


async def _clear(namespace: str | None) -> int:
    settings = get_settings()
    client = create_redis_client(settings)
    try:
        return await CacheService.from_settings(client, settings).clear(namespace)
    finally:
        await close_redis_client(client)


def clear() -> None:
    # Usage: context-store-clear [namespace]
    namespace = sys.argv[1] if len(sys.argv) > 1 else None
    removed = asyncio.run(_clear(namespace))
    print(f"Removed {removed} keys")


def pytest() -> None:
    import pytest
    # Run the configured testpaths, stop after first failure
    pytest.main(["-x"])
