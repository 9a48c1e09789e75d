"""Services module exports."""

from context_store.services.cache import CacheService, VectorIndex, create_vector_index
from context_store.services.conversation import ConversationContextManager
from context_store.services.embeddings import (
    EmbeddingDocument,
    EmbeddingProcessor,
    EmbeddingProvider,
)
from context_store.services.response_cache import CommandResponseCache

__all__ = [
    # Cache
    "CacheService",
    "VectorIndex",
    "create_vector_index",
    # Conversation
    "ConversationContextManager",
    # Embeddings
    "EmbeddingDocument",
    "EmbeddingProcessor",
    "EmbeddingProvider",
    # Response cache
    "CommandResponseCache",
]
