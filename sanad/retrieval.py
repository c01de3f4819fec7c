"""Best-effort retrieval of legal context from the vector store."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .config import config
from .errors import ConfigurationError, EmbeddingUnavailable, StoreUnavailable
from .models import Query, RetrievedChunk, RetrievedContext

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .embeddings import EmbeddingService
    from .vector_store import BaseSQLiteStore

SOURCE_SEPARATOR = "\n\n---\n\n"

logger = config.get_logger(__name__)


def format_source_block(index: int, chunk: RetrievedChunk) -> str:
    """Render one retrieved chunk for the prompt.

    Returns:
        ``Source {index} (Similarity: {score}) [{source}]:`` followed by the text.
    """
    label = f" [{chunk.source}]" if chunk.source else ""
    return f"Source {index} (Similarity: {chunk.score:.2f}){label}:\n{chunk.text}"


def assemble_context(chunks: Sequence[RetrievedChunk]) -> str:
    return SOURCE_SEPARATOR.join(
        format_source_block(i, chunk) for i, chunk in enumerate(chunks, start=1)
    )


class DocumentRetriever:
    """Embeds a query and fetches the closest chunks of a collection."""

    def __init__(
        self,
        embedding_service: EmbeddingService,
        vector_store: BaseSQLiteStore,
        default_limit: int | None = None,
    ) -> None:
        self.embedding_service = embedding_service
        self.vector_store = vector_store
        self.default_limit = (
            default_limit if default_limit is not None else config.RETRIEVAL_TOP_K
        )

    def retrieve(
        self,
        collection_name: str,
        query_text: str,
        limit: int | None = None,
    ) -> RetrievedContext:
        """Retrieve the chunks most similar to the query.

        Embedding and store failures are logged and turn into an empty
        context, as does a collection name the store rejects. A query vector
        of the wrong dimension still raises ConfigurationError.

        Args:
            collection_name: Collection to search.
            query_text: The user's question.
            limit: Maximum number of chunks, defaults to ``default_limit``.

        Returns:
            RetrievedContext with chunks in descending score order.

        Raises:
            ConfigurationError: If the embedding dimension does not match the
                collection.
        """
        if Query(query_text).is_blank:
            return RetrievedContext.empty()

        limit = self.default_limit if limit is None else limit

        try:
            self.vector_store.ensure_collection(collection_name)
        except (ConfigurationError, StoreUnavailable):
            logger.exception("Collection %s is unavailable", collection_name)
            return RetrievedContext.empty()

        try:
            query_vector = self.embedding_service.embed(query_text)
            hits = self.vector_store.search(collection_name, query_vector, limit)
        except (EmbeddingUnavailable, StoreUnavailable):
            logger.exception("Error searching documents in %s", collection_name)
            return RetrievedContext.empty()

        chunks = []
        for hit in sorted(hits, key=lambda h: h.score, reverse=True):
            text = hit.payload.get("text")
            if not text:
                logger.warning("Skipping point %s without text payload", hit.id)
                continue
            source = hit.payload.get("source")
            chunks.append(
                RetrievedChunk(
                    text=str(text),
                    source=str(source) if source else None,
                    score=hit.score,
                )
            )

        if not chunks:
            logger.info("No relevant documents found in %s", collection_name)
            return RetrievedContext.empty()

        for i, chunk in enumerate(chunks, start=1):
            logger.info(
                "  Context %d: %s (score: %.4f)",
                i,
                chunk.source or "unknown",
                chunk.score,
            )

        return RetrievedContext(
            chunks=tuple(chunks),
            assembled_text=assemble_context(chunks),
        )
