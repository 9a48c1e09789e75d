"""Conversation context manager.

Thin layer over the context store used by message handlers: resolves the
user's current conversation, appends turns with a bounded window, and
keeps session metadata current.
"""

from typing import Literal

from context_store.core.exceptions import AppException
from context_store.core.logging import get_logger
from context_store.services.cache import (
    CacheService,
    ContextMessage,
    ContextMetadata,
    ConversationContext,
)
from context_store.services.cache.models import utcnow

logger = get_logger(__name__)

# Messages kept per context (system prompt included)
MAX_CONTEXT_MESSAGES = 10


def trim_messages(
    messages: list[ContextMessage],
    limit: int = MAX_CONTEXT_MESSAGES,
) -> list[ContextMessage]:
    """Keep the first system message plus the most recent turns."""
    if len(messages) <= limit:
        return messages

    system_prompt = next((m for m in messages if m.role == "system"), None)
    if system_prompt is None:
        return messages[-limit:]

    recent = [m for m in messages if m is not system_prompt][-(limit - 1):]
    return [system_prompt, *recent]


class ConversationContextManager:
    """Reads and updates conversation contexts without ever raising to handlers."""

    def __init__(self, cache: CacheService) -> None:
        self.cache = cache

    async def get_context(
        self,
        user_id: str,
        conversation_id: str | None = None,
    ) -> ConversationContext | None:
        """Get a context; without an id, use the user's most recent conversation."""
        try:
            if conversation_id is None:
                active = await self.cache.get_active_conversations(user_id)
                if not active:
                    return None
                conversation_id = active[0]

            return await self.cache.get_context(user_id, conversation_id)
        except AppException as e:
            logger.error("Failed to get conversation context", user_id=user_id, error=e.message)
            return None

    async def save_context(self, context: ConversationContext) -> bool:
        """Stamp session timestamps and persist the context."""
        now = utcnow()
        metadata = context.metadata or ContextMetadata()
        metadata.last_interaction = now
        metadata.last_update = now
        metadata.start_time = metadata.start_time or now
        context.metadata = metadata

        return await self.cache.save_context(context)

    async def add_message(
        self,
        user_id: str,
        conversation_id: str,
        content: str,
        role: Literal["system", "user", "assistant"],
        command: str | None = None,
    ) -> ConversationContext | None:
        """Append a turn, trim the window and save. None when the save fails.

        ``message_count`` counts every message of the session, including
        those already trimmed out of the window. ``command`` is recorded in
        ``active_commands``.
        """
        context = await self.get_context(user_id, conversation_id)
        if context is None:
            context = ConversationContext(user_id=user_id, conversation_id=conversation_id)

        context.messages.append(ContextMessage(role=role, content=content))
        context.messages = trim_messages(context.messages)

        context.metadata.message_count += 1
        if command:
            context.metadata.active_commands.append(command)

        if not await self.save_context(context):
            logger.warning(
                "Context not saved after adding message",
                user_id=user_id,
                conversation_id=conversation_id,
            )
            return None
        return context

    async def clear_context(self, user_id: str, conversation_id: str) -> bool:
        """Remove a conversation context. False on failure."""
        try:
            return await self.cache.remove_context(user_id, conversation_id)
        except AppException as e:
            logger.error(
                "Failed to clear conversation context",
                user_id=user_id,
                conversation_id=conversation_id,
                error=e.message,
            )
            return False
