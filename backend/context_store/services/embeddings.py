"""Embedding ingestion into the vector index.

The embedding model itself is external; anything implementing
``EmbeddingProvider`` (an OpenAI client wrapper, a local model) can be
plugged in.
"""

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol

from context_store.core.logging import get_logger
from context_store.services.cache import VectorIndex, VectorMatch

logger = get_logger(__name__)

PREVIEW_LENGTH = 200


class EmbeddingProvider(Protocol):
    """Turns text into embedding vectors."""

    async def embed(self, text: str) -> list[float]: ...

    async def embed_batch(self, texts: Sequence[str]) -> list[list[float]]: ...


@dataclass
class EmbeddingDocument:
    """A document to index."""

    id: str
    content: str
    metadata: dict[str, Any] = field(default_factory=dict)

    def preview(self) -> str:
        if len(self.content) <= PREVIEW_LENGTH:
            return self.content
        return self.content[:PREVIEW_LENGTH] + "..."

    def index_metadata(self) -> dict[str, Any]:
        return {**self.metadata, "content": self.preview()}


class EmbeddingProcessor:
    """Embeds documents and keeps the vector index in sync."""

    def __init__(self, provider: EmbeddingProvider, vector_index: VectorIndex) -> None:
        self.provider = provider
        self.vector_index = vector_index

    async def process_document(self, document: EmbeddingDocument) -> None:
        """Embed one document and store it with a content preview."""
        logger.info("Processing document for embeddings", document_id=document.id)
        try:
            embedding = await self.provider.embed(document.content)
            await self.vector_index.store_vector(document.id, embedding, document.index_metadata())
        except Exception as e:
            logger.error("Document embedding failed", document_id=document.id, error=str(e))
            raise

        logger.info(
            "Document processed",
            document_id=document.id,
            embedding_length=len(embedding),
        )

    async def process_batch(self, documents: Sequence[EmbeddingDocument]) -> None:
        """Embed documents in one provider call and store them concurrently."""
        if not documents:
            return

        logger.info("Processing document batch", count=len(documents))
        try:
            embeddings = await self.provider.embed_batch([doc.content for doc in documents])
            if len(embeddings) != len(documents):
                raise ValueError(
                    f"Provider returned {len(embeddings)} embeddings for {len(documents)} documents"
                )
            await asyncio.gather(
                *(
                    self.vector_index.store_vector(doc.id, embedding, doc.index_metadata())
                    for doc, embedding in zip(documents, embeddings)
                )
            )
        except Exception as e:
            logger.error("Batch embedding failed", count=len(documents), error=str(e))
            raise

        logger.info("Batch processed", documents_processed=len(documents))

    async def remove_document(self, document_id: str) -> None:
        """Delete a document's embedding."""
        try:
            await self.vector_index.delete_vector(document_id)
        except Exception as e:
            logger.error("Removing embedding failed", document_id=document_id, error=str(e))
            raise
        logger.info("Embedding removed", document_id=document_id)

    async def update_metadata(self, document_id: str, metadata: dict[str, Any]) -> None:
        """Replace a document's metadata, keeping its embedding."""
        try:
            await self.vector_index.update_vector_metadata(document_id, metadata)
        except Exception as e:
            logger.error("Updating embedding metadata failed", document_id=document_id, error=str(e))
            raise
        logger.info("Embedding metadata updated", document_id=document_id, fields=list(metadata))

    async def search(
        self,
        query: str,
        limit: int = 5,
        threshold: float = 0.7,
    ) -> list[VectorMatch]:
        """Embed a query and return similar documents."""
        embedding = await self.provider.embed(query)
        return await self.vector_index.search_similar_vectors(embedding, limit, threshold)
