"""Per-command caching of bot responses.

Each chat command gets its own namespace and TTL so that, for example,
summaries live longer than search results and can be cleared on their own.
"""

from typing import Any

from context_store.core.exceptions import AppException
from context_store.core.logging import get_logger
from context_store.services.cache import CacheService

logger = get_logger(__name__)

# command -> (namespace, ttl seconds)
COMMAND_CACHE_POLICY: dict[str, tuple[str, int]] = {
    "/tg-search": ("search", 3600),  # 1 hour
    "/tg-question": ("question", 7200),  # 2 hours
    "/tg-summary": ("summary", 86400),  # 24 hours
}
DEFAULT_POLICY: tuple[str, int] = ("default", 3600)


def _normalize(content: str) -> str:
    return content.lower().strip()


class CommandResponseCache:
    """Cache of rendered command responses. Cache failures read as misses."""

    def __init__(self, cache: CacheService) -> None:
        self.cache = cache

    @staticmethod
    def policy_for(command: str) -> tuple[str, int]:
        """Namespace and TTL used for a command."""
        return COMMAND_CACHE_POLICY.get(command, DEFAULT_POLICY)

    @staticmethod
    def cache_key(command: str, content: str) -> str:
        return f"{command}:{_normalize(content)}"

    async def get_cached_response(self, command: str, content: str) -> dict[str, Any] | None:
        """Return a cached response marked with ``metadata.source == "cache"``."""
        namespace, _ = self.policy_for(command)

        try:
            cached = await self.cache.get(self.cache_key(command, content), namespace)
        except AppException as e:
            logger.error("Cached response lookup failed", command=command, error=e.message)
            return None

        if not isinstance(cached, dict):
            return None

        logger.info(
            "Response served from cache",
            command=command,
            content=content[:50],
            namespace=namespace,
        )
        return {**cached, "metadata": {**(cached.get("metadata") or {}), "source": "cache"}}

    async def set_cached_response(
        self,
        command: str,
        content: str,
        response: dict[str, Any],
    ) -> bool:
        """Store a response under the command's namespace and TTL."""
        namespace, ttl = self.policy_for(command)

        try:
            await self.cache.set(
                self.cache_key(command, content),
                response,
                namespace=namespace,
                ttl=ttl,
            )
        except AppException as e:
            logger.error("Caching response failed", command=command, error=e.message)
            return False

        logger.debug(
            "Response cached",
            command=command,
            content=content[:50],
            namespace=namespace,
            ttl=ttl,
        )
        return True

    async def invalidate_command(self, command: str) -> int:
        """Drop every cached response of one command's namespace."""
        namespace, _ = self.policy_for(command)
        return await self.cache.clear(namespace)
