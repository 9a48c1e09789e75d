"""Async Redis cache and context store.

Provides namespaced caching with optimal data structures:
- String (SET/GET): JSON values, conversation contexts (30 minute TTL)
- List (LPUSH/LTRIM/LRANGE): per-user active conversations, capped at 10
- Hash (HSET/HGETALL): field maps and vector records
- RediSearch (FT.SEARCH KNN): cosine similarity over float32 embeddings

Features:
- Every key goes through KeyNamespacer: <prefix><namespace>:<key>
- Store faults raise CacheError / CacheConnectionError, except the
  context read/save path and the health check, which degrade to defaults
- One shared client injected by the application lifespan
"""

from context_store.services.cache.constants import (
    DEFAULT_KEY_PREFIX,
    MAX_ACTIVE_CONVERSATIONS,
    NAMESPACE_ACTIVE_CONVERSATIONS,
    NAMESPACE_CONTEXT,
    NAMESPACE_VECTORS,
    TTL_ACTIVE_CONVERSATIONS,
    TTL_CONVERSATION_CONTEXT,
    TTL_DEFAULT,
)
from context_store.services.cache.keys import KeyNamespacer
from context_store.services.cache.models import (
    ContextMessage,
    ContextMetadata,
    ConversationContext,
    VectorMatch,
)
from context_store.services.cache.service import CacheService, create_vector_index
from context_store.services.cache.vectors import VectorIndex

__all__ = [
    # TTL constants
    "TTL_DEFAULT",
    "TTL_CONVERSATION_CONTEXT",
    "TTL_ACTIVE_CONVERSATIONS",
    "MAX_ACTIVE_CONVERSATIONS",
    # Key layout
    "DEFAULT_KEY_PREFIX",
    "NAMESPACE_CONTEXT",
    "NAMESPACE_ACTIVE_CONVERSATIONS",
    "NAMESPACE_VECTORS",
    "KeyNamespacer",
    # Models
    "ContextMessage",
    "ContextMetadata",
    "ConversationContext",
    "VectorMatch",
    # Services
    "CacheService",
    "VectorIndex",
    "create_vector_index",
]
