"""Conversation context cache operations."""

from redis.exceptions import RedisError

from context_store.core.logging import get_logger
from context_store.services.cache import serialization
from context_store.services.cache.base import wrap_store_error
from context_store.services.cache.collection import CollectionCacheMixin
from context_store.services.cache.constants import (
    MAX_ACTIVE_CONVERSATIONS,
    NAMESPACE_ACTIVE_CONVERSATIONS,
    NAMESPACE_CONTEXT,
    TTL_ACTIVE_CONVERSATIONS,
    TTL_CONVERSATION_CONTEXT,
)
from context_store.services.cache.models import ConversationContext

logger = get_logger(__name__)


class ConversationCacheMixin(CollectionCacheMixin):
    """Per-conversation transcripts plus each user's active conversation index."""

    def _context_key(self, user_id: str, conversation_id: str) -> str:
        return self._make_key(f"{user_id}:{conversation_id}", NAMESPACE_CONTEXT)

    def _active_key(self, user_id: str) -> str:
        return self._make_key(user_id, NAMESPACE_ACTIVE_CONVERSATIONS)

    # ========== Context (String with fixed TTL) ==========

    async def save_context(self, context: ConversationContext) -> bool:
        """Store the full context and bump it to the front of the user's index.

        Never raises: failures are logged and reported as False.
        """
        context_key = self._context_key(context.user_id, context.conversation_id)
        active_key = self._active_key(context.user_id)

        try:
            serialized = context.model_dump_json()
            async with self._client.pipeline(transaction=True) as pipe:
                pipe.set(context_key, serialized, ex=TTL_CONVERSATION_CONTEXT)
                pipe.lpush(active_key, context.conversation_id)
                pipe.ltrim(active_key, 0, MAX_ACTIVE_CONVERSATIONS - 1)
                pipe.expire(active_key, TTL_ACTIVE_CONVERSATIONS)
                await pipe.execute()
        except RedisError as e:
            logger.error(
                "Cache save context failed",
                user_id=context.user_id,
                conversation_id=context.conversation_id,
                error=str(e),
            )
            return False
        except ValueError as e:
            logger.error(
                "Cache context serialization failed",
                user_id=context.user_id,
                conversation_id=context.conversation_id,
                error=str(e),
            )
            return False

        logger.debug(
            "Context saved",
            user_id=context.user_id,
            conversation_id=context.conversation_id,
            messages=len(context.messages),
        )
        return True

    async def get_context(self, user_id: str, conversation_id: str) -> ConversationContext | None:
        """Get a cached context; None when missing, expired or the store is down."""
        key = self._context_key(user_id, conversation_id)

        try:
            raw = await self._client.get(key)
        except RedisError as e:
            logger.warning(
                "Cache get context failed",
                user_id=user_id,
                conversation_id=conversation_id,
                error=str(e),
            )
            return None

        if raw is None:
            return None
        return serialization.loads(raw, ConversationContext)  # type: ignore[no-any-return]

    async def remove_context(self, user_id: str, conversation_id: str) -> bool:
        """Delete a context and every occurrence of it in the user's index.

        Returns True when a context entry was removed.
        """
        context_key = self._context_key(user_id, conversation_id)
        active_key = self._active_key(user_id)

        try:
            async with self._client.pipeline(transaction=True) as pipe:
                pipe.delete(context_key)
                pipe.lrem(active_key, 0, conversation_id)
                removed, _ = await pipe.execute()
        except RedisError as e:
            raise wrap_store_error("remove_context", e, key=context_key, namespace=NAMESPACE_CONTEXT) from e

        logger.debug(
            "Context removed",
            user_id=user_id,
            conversation_id=conversation_id,
            removed=removed,
        )
        return bool(removed)

    # ========== Active conversations (List, most recent first) ==========

    async def get_active_conversations(self, user_id: str) -> list[str]:
        """Conversation ids for a user, most recent first."""
        key = self._active_key(user_id)

        try:
            items = await self._client.lrange(key, 0, MAX_ACTIVE_CONVERSATIONS - 1)
        except RedisError as e:
            raise wrap_store_error(
                "get_active_conversations", e, key=key, namespace=NAMESPACE_ACTIVE_CONVERSATIONS
            ) from e

        return [str(item) for item in items]
