"""Vector similarity index on RediSearch.

Records are Redis hashes under ``<prefix>vectors:<item_key>`` with two
fields: ``vector`` (packed little-endian float32) and ``metadata`` (JSON).
The index uses HNSW with cosine distance, so a hit's similarity is
``1 - distance``.
"""

import asyncio
from collections.abc import Sequence
from typing import Any

import numpy as np
from redis.asyncio import Redis
from redis.commands.search.query import Query
from redis.exceptions import RedisError, ResponseError

from context_store.core.exceptions import (
    DimensionMismatchError,
    NotFoundError,
    VectorIndexError,
)
from context_store.core.logging import get_logger
from context_store.services.cache import serialization
from context_store.services.cache.base import wrap_store_error
from context_store.services.cache.constants import (
    DEFAULT_KEY_PREFIX,
    METADATA_FIELD,
    NAMESPACE_VECTORS,
    VECTOR_FIELD,
)
from context_store.services.cache.keys import KeyNamespacer
from context_store.services.cache.models import VectorMatch

logger = get_logger(__name__)

DEFAULT_INDEX_NAME = "idx:vectors"
DEFAULT_DIMENSION = 1536
SCORE_FIELD = "score"


class VectorIndex:
    """KNN search over embeddings stored in Redis hashes.

    Build it with ``await VectorIndex.create(client)`` so the index exists
    before any operation runs; operations on an uninitialized instance
    raise ``VectorIndexError``.
    """

    def __init__(
        self,
        client: Redis,
        *,
        key_prefix: str = DEFAULT_KEY_PREFIX,
        index_name: str = DEFAULT_INDEX_NAME,
        dimension: int = DEFAULT_DIMENSION,
    ) -> None:
        self._client = client
        self.keys = KeyNamespacer(key_prefix)
        self.index_name = index_name
        self.dimension = dimension
        self._initialized = False
        self._init_lock = asyncio.Lock()

    @classmethod
    async def create(
        cls,
        client: Redis,
        *,
        key_prefix: str = DEFAULT_KEY_PREFIX,
        index_name: str = DEFAULT_INDEX_NAME,
        dimension: int = DEFAULT_DIMENSION,
    ) -> "VectorIndex":
        """Construct and initialize; raises VectorIndexError if the index can't be ensured."""
        index = cls(client, key_prefix=key_prefix, index_name=index_name, dimension=dimension)
        await index.initialize()
        return index

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    @property
    def record_prefix(self) -> str:
        """Key prefix the index is restricted to."""
        return self.keys.full_key("", NAMESPACE_VECTORS)

    async def initialize(self) -> None:
        """Ensure the index exists. An existing index is left untouched."""
        async with self._init_lock:
            if self._initialized:
                return

            try:
                if await self._index_exists():
                    logger.info("Vector index already exists", index=self.index_name)
                else:
                    await self._create_index()
                    logger.info(
                        "Vector index created",
                        index=self.index_name,
                        dimension=self.dimension,
                        prefix=self.record_prefix,
                    )
            except RedisError as e:
                logger.error("Vector index initialization failed", index=self.index_name, error=str(e))
                raise VectorIndexError(
                    "Vector index could not be initialized",
                    {"index": self.index_name, "error": str(e)},
                ) from e

            self._initialized = True

    async def _index_exists(self) -> bool:
        try:
            await self._client.ft(self.index_name).info()
            return True
        except ResponseError as e:
            message = str(e).lower()
            if "unknown index" in message or "no such index" in message:
                return False
            raise

    async def _create_index(self) -> None:
        await self._client.execute_command(
            "FT.CREATE", self.index_name,
            "ON", "HASH",
            "PREFIX", "1", self.record_prefix,
            "SCHEMA",
            METADATA_FIELD, "TEXT",
            VECTOR_FIELD, "VECTOR", "HNSW", "6",
            "TYPE", "FLOAT32",
            "DIM", str(self.dimension),
            "DISTANCE_METRIC", "COSINE",
        )

    def _require_initialized(self) -> None:
        if not self._initialized:
            raise VectorIndexError(
                "Vector index is not initialized",
                {"index": self.index_name},
            )

    def _pack(self, vector: Sequence[float]) -> bytes:
        """Pack as little-endian float32, rejecting the wrong dimensionality."""
        array = np.asarray(vector, dtype="<f4")
        if array.ndim != 1 or array.shape[0] != self.dimension:
            actual = int(array.shape[0]) if array.ndim == 1 else int(array.size)
            raise DimensionMismatchError(self.dimension, actual)
        return array.tobytes()

    # ========== Records ==========

    async def store_vector(
        self,
        key: str,
        vector: Sequence[float],
        metadata: dict[str, Any] | None = None,
    ) -> None:
        """Upsert a vector (and optional metadata) under the item's key."""
        self._require_initialized()
        full_key = self.keys.full_key(key, NAMESPACE_VECTORS)

        mapping: dict[str, bytes | str] = {VECTOR_FIELD: self._pack(vector)}
        if metadata is not None:
            mapping[METADATA_FIELD] = serialization.dumps(metadata)

        try:
            await self._client.hset(full_key, mapping=mapping)
        except RedisError as e:
            raise wrap_store_error("store_vector", e, key=full_key, namespace=NAMESPACE_VECTORS) from e

        logger.debug("Vector stored", key=full_key, dimension=self.dimension)

    async def update_vector_metadata(self, key: str, metadata: dict[str, Any]) -> None:
        """Replace only the metadata field; the vector is unchanged."""
        self._require_initialized()
        full_key = self.keys.full_key(key, NAMESPACE_VECTORS)
        serialized = serialization.dumps(metadata)

        try:
            if not await self._client.exists(full_key):
                raise NotFoundError("Vector", {"key": key})
            await self._client.hset(full_key, METADATA_FIELD, serialized)
        except RedisError as e:
            raise wrap_store_error(
                "update_vector_metadata", e, key=full_key, namespace=NAMESPACE_VECTORS
            ) from e

        logger.debug("Vector metadata updated", key=full_key, fields=list(metadata))

    async def delete_vector(self, key: str) -> None:
        """Remove a record; a missing key is not an error."""
        self._require_initialized()
        full_key = self.keys.full_key(key, NAMESPACE_VECTORS)

        try:
            removed = await self._client.delete(full_key)
        except RedisError as e:
            raise wrap_store_error("delete_vector", e, key=full_key, namespace=NAMESPACE_VECTORS) from e

        logger.debug("Vector deleted", key=full_key, removed=removed)

    # ========== Search ==========

    async def search_similar_vectors(
        self,
        vector: Sequence[float],
        limit: int = 5,
        threshold: float = 0.7,
    ) -> list[VectorMatch]:
        """K-nearest-neighbour search.

        Returns at most ``limit`` matches with similarity >= ``threshold``,
        best first. No match is an empty list.
        """
        self._require_initialized()
        if limit <= 0:
            return []

        blob = self._pack(vector)
        query = (
            Query(f"*=>[KNN $k @{VECTOR_FIELD} $vec AS {SCORE_FIELD}]")
            .sort_by(SCORE_FIELD)
            .return_fields(SCORE_FIELD, METADATA_FIELD)
            .paging(0, limit)
            .dialect(2)
        )

        try:
            result = await self._client.ft(self.index_name).search(
                query,
                query_params={"k": limit, "vec": blob},
            )
        except RedisError as e:
            raise wrap_store_error("search_similar_vectors", e, key=self.index_name) from e

        matches: list[VectorMatch] = []
        for doc in result.docs:
            similarity = 1.0 - float(getattr(doc, SCORE_FIELD))
            if similarity < threshold:
                continue
            raw_metadata = getattr(doc, METADATA_FIELD, None)
            matches.append(
                VectorMatch(
                    key=self.keys.strip(doc.id, NAMESPACE_VECTORS),
                    score=similarity,
                    metadata=serialization.loads(raw_metadata) if raw_metadata else None,
                )
            )

        matches.sort(key=lambda m: m.score, reverse=True)
        logger.debug(
            "Vector search",
            candidates=len(result.docs),
            matches=len(matches),
            threshold=threshold,
        )
        return matches[:limit]
