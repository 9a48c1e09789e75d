"""Cache TTL, namespace and limit constants."""

# Cache TTL constants (in seconds)
TTL_DEFAULT = 3600  # 1 hour - applied when set() gets no ttl
TTL_CONVERSATION_CONTEXT = 1800  # 30 minutes - abandoned conversations expire
TTL_ACTIVE_CONVERSATIONS = 7 * 24 * 3600  # 7 days - survives session gaps

# Index limits
MAX_ACTIVE_CONVERSATIONS = 10

# Global key prefix (overridable through settings.redis_key_prefix)
DEFAULT_KEY_PREFIX = "tg:"

# Namespaces - <prefix><namespace>:<key>
NAMESPACE_CONTEXT = "context"  # context:{user_id}:{conversation_id}
NAMESPACE_ACTIVE_CONVERSATIONS = "activeConvs"  # activeConvs:{user_id} (list)
NAMESPACE_VECTORS = "vectors"  # vectors:{item_key} (hash: vector, metadata)

# Vector record fields
VECTOR_FIELD = "vector"
METADATA_FIELD = "metadata"
