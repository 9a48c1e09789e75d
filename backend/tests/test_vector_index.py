"""Tests for the RediSearch-backed vector index."""

from types import SimpleNamespace
from unittest.mock import MagicMock

import numpy as np
import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import ResponseError

from context_store.core.exceptions import (
    CacheConnectionError,
    DimensionMismatchError,
    NotFoundError,
    VectorIndexError,
)
from context_store.services.cache import VectorIndex

pytestmark = pytest.mark.asyncio

TEST_PREFIX = "tg:"
TEST_DIMENSION = 4
VECTOR = [0.1, 0.2, 0.3, 0.4]


def _doc(key: str, distance: float, metadata: str | None = None) -> SimpleNamespace:
    doc = SimpleNamespace(id=f"tg:vectors:{key}", score=str(distance))
    if metadata is not None:
        doc.metadata = metadata
    return doc


def _result(*docs: SimpleNamespace) -> SimpleNamespace:
    return SimpleNamespace(total=len(docs), docs=list(docs))


# =============================================================================
# Initialization
# =============================================================================

class TestInitialize:
    async def test_existing_index_is_reused(self, redis_client, search_index):
        index = await VectorIndex.create(redis_client, dimension=TEST_DIMENSION)

        assert index.is_initialized
        redis_client.ft.assert_called_with("idx:vectors")
        redis_client.execute_command.assert_not_awaited()

    async def test_missing_index_is_created(self, redis_client, search_index):
        search_index.info.side_effect = ResponseError("Unknown index name")

        await VectorIndex.create(redis_client, key_prefix=TEST_PREFIX, dimension=TEST_DIMENSION)

        args = redis_client.execute_command.await_args.args
        assert args[:2] == ("FT.CREATE", "idx:vectors")
        assert args[args.index("PREFIX"):args.index("PREFIX") + 3] == ("PREFIX", "1", "tg:vectors:")
        assert "HNSW" in args
        assert args[args.index("DIM") + 1] == str(TEST_DIMENSION)
        assert args[args.index("DISTANCE_METRIC") + 1] == "COSINE"
        assert args[args.index("TYPE") + 1] == "FLOAT32"

    async def test_no_such_index_message_also_creates(self, redis_client, search_index):
        search_index.info.side_effect = ResponseError("no such index")
        await VectorIndex.create(redis_client, dimension=TEST_DIMENSION)
        redis_client.execute_command.assert_awaited_once()

    async def test_initialize_is_idempotent(self, redis_client, search_index):
        index = VectorIndex(redis_client, dimension=TEST_DIMENSION)
        await index.initialize()
        await index.initialize()
        search_index.info.assert_awaited_once()

    async def test_create_failure_raises(self, redis_client, search_index):
        search_index.info.side_effect = ResponseError("Unknown index name")
        redis_client.execute_command.side_effect = ResponseError("unknown command 'FT.CREATE'")

        with pytest.raises(VectorIndexError) as exc_info:
            await VectorIndex.create(redis_client, dimension=TEST_DIMENSION)
        assert exc_info.value.details["index"] == "idx:vectors"

    async def test_unreachable_store_raises(self, redis_client, search_index):
        search_index.info.side_effect = RedisConnectionError("down")
        with pytest.raises(VectorIndexError):
            await VectorIndex.create(redis_client, dimension=TEST_DIMENSION)

    async def test_operations_require_initialization(self, redis_client):
        index = VectorIndex(redis_client, dimension=TEST_DIMENSION)

        assert not index.is_initialized
        with pytest.raises(VectorIndexError):
            await index.store_vector("doc1", VECTOR)
        with pytest.raises(VectorIndexError):
            await index.search_similar_vectors(VECTOR)
        with pytest.raises(VectorIndexError):
            await index.delete_vector("doc1")
        redis_client.hset.assert_not_awaited()


# =============================================================================
# Records
# =============================================================================

class TestStoreVector:
    async def test_stores_packed_vector_and_metadata(self, vector_index, redis_client):
        await vector_index.store_vector("doc1", VECTOR, {"title": "A"})

        redis_client.hset.assert_awaited_once()
        call = redis_client.hset.await_args
        assert call.args == ("tg:vectors:doc1",)
        mapping = call.kwargs["mapping"]
        assert mapping["metadata"] == '{"title":"A"}'
        assert mapping["vector"] == np.asarray(VECTOR, dtype="<f4").tobytes()
        assert len(mapping["vector"]) == TEST_DIMENSION * 4

    async def test_without_metadata(self, vector_index, redis_client):
        await vector_index.store_vector("doc1", VECTOR)
        assert "metadata" not in redis_client.hset.await_args.kwargs["mapping"]

    async def test_wrong_dimension_rejected(self, vector_index, redis_client):
        with pytest.raises(DimensionMismatchError) as exc_info:
            await vector_index.store_vector("doc1", [0.1, 0.2])
        assert exc_info.value.details == {"expected": TEST_DIMENSION, "actual": 2}
        redis_client.hset.assert_not_awaited()

    async def test_store_error_is_wrapped(self, vector_index, redis_client):
        redis_client.hset.side_effect = RedisConnectionError("down")
        with pytest.raises(CacheConnectionError):
            await vector_index.store_vector("doc1", VECTOR)


class TestUpdateMetadata:
    async def test_replaces_metadata_only(self, vector_index, redis_client):
        redis_client.exists.return_value = 1

        await vector_index.update_vector_metadata("doc1", {"title": "B"})

        redis_client.hset.assert_awaited_once_with("tg:vectors:doc1", "metadata", '{"title":"B"}')

    async def test_missing_record_raises_not_found(self, vector_index, redis_client):
        redis_client.exists.return_value = 0

        with pytest.raises(NotFoundError):
            await vector_index.update_vector_metadata("ghost", {"title": "B"})
        redis_client.hset.assert_not_awaited()


class TestDeleteVector:
    async def test_delete(self, vector_index, redis_client):
        redis_client.delete.return_value = 1
        await vector_index.delete_vector("doc1")
        redis_client.delete.assert_awaited_once_with("tg:vectors:doc1")

    async def test_delete_missing_is_not_an_error(self, vector_index, redis_client):
        redis_client.delete.return_value = 0
        await vector_index.delete_vector("doc1")


# =============================================================================
# Search
# =============================================================================

class TestSearch:
    async def test_threshold_filters_and_orders(self, vector_index, search_index):
        search_index.search.return_value = _result(
            _doc("near", 0.05, '{"title":"near"}'),
            _doc("far", 0.6),
            _doc("mid", 0.2, '{"title":"mid"}'),
        )

        matches = await vector_index.search_similar_vectors(VECTOR, limit=5, threshold=0.7)

        assert [m.key for m in matches] == ["near", "mid"]
        assert matches[0].score == pytest.approx(0.95)
        assert matches[1].score == pytest.approx(0.8)
        assert matches[0].metadata == {"title": "near"}

    async def test_missing_metadata_is_none(self, vector_index, search_index):
        search_index.search.return_value = _result(_doc("bare", 0.0))
        matches = await vector_index.search_similar_vectors(VECTOR)
        assert matches[0].metadata is None

    async def test_no_hits(self, vector_index, search_index):
        search_index.search.return_value = _result()
        assert await vector_index.search_similar_vectors(VECTOR) == []

    async def test_limit_caps_results(self, vector_index, search_index):
        search_index.search.return_value = _result(
            _doc("a", 0.01), _doc("b", 0.02), _doc("c", 0.03),
        )
        matches = await vector_index.search_similar_vectors(VECTOR, limit=2, threshold=0.0)
        assert [m.key for m in matches] == ["a", "b"]

    async def test_query_parameters(self, vector_index, search_index):
        search_index.search.return_value = _result()

        await vector_index.search_similar_vectors(VECTOR, limit=3)

        call = search_index.search.await_args
        query = call.args[0]
        assert "KNN $k @vector $vec" in query.query_string()
        assert call.kwargs["query_params"] == {
            "k": 3,
            "vec": np.asarray(VECTOR, dtype="<f4").tobytes(),
        }

    async def test_non_positive_limit_returns_empty(self, vector_index, search_index):
        assert await vector_index.search_similar_vectors(VECTOR, limit=0) == []
        search_index.search.assert_not_awaited()

    async def test_wrong_dimension_rejected(self, vector_index, search_index):
        with pytest.raises(DimensionMismatchError):
            await vector_index.search_similar_vectors([1.0])
        search_index.search.assert_not_awaited()

    async def test_search_error_is_wrapped(self, vector_index, search_index):
        search_index.search.side_effect = RedisConnectionError("down")
        with pytest.raises(CacheConnectionError):
            await vector_index.search_similar_vectors(VECTOR)


async def test_record_prefix_follows_key_prefix():
    index = VectorIndex(MagicMock(), key_prefix="app:")
    assert index.record_prefix == "app:vectors:"
