"""Ingestion of legal documents into a vector store collection."""

from __future__ import annotations

import uuid
from pathlib import Path
from typing import TYPE_CHECKING, Any

from .config import config
from .document_processing import DocumentLoader, TextChunker
from .embeddings import EmbeddingService
from .errors import SanadError
from .vector_store import get_vector_store

if TYPE_CHECKING:
    from .vector_store import BaseSQLiteStore

logger = config.get_logger(__name__)


class IngestionPipeline:
    """Load -> Split -> Embed -> Upsert, one collection at a time."""

    def __init__(
        self,
        embedding_service: EmbeddingService | None = None,
        vector_store: BaseSQLiteStore | None = None,
        chunk_size: int | None = None,
        overlap: int | None = None,
    ) -> None:
        """Initialize the ingestion pipeline.

        Args:
            embedding_service: Embedding service. If None, uses the configured
                embedding model.
            vector_store: Target vector store. If None, uses the configured
                backend.
            chunk_size: Size of text chunks. If None, uses config.CHUNK_SIZE.
            overlap: Overlap between chunks. If None, uses config.CHUNK_OVERLAP.
        """
        if chunk_size is None:
            chunk_size = config.CHUNK_SIZE
        if overlap is None:
            overlap = config.CHUNK_OVERLAP

        self.chunker = TextChunker(chunk_size=chunk_size, overlap=overlap)
        self.embedding_service = embedding_service or EmbeddingService()
        self.vector_store = vector_store or get_vector_store()
        logger.info("Using %s vector storage", self.vector_store.backend)

    def add_document(
        self,
        collection_name: str,
        text: str,
        document_id: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> str:
        """Embed a single text and upsert it into the collection.

        Args:
            collection_name: Target collection, created if missing.
            text: Document text.
            document_id: Point id. A random UUID is generated when omitted.
            metadata: Extra payload fields, e.g. ``{"source": "..."}``.

        Returns:
            The id of the stored point.

        Raises:
            ValueError: If the text is empty.
        """
        if not text or not text.strip():
            msg = "Document text cannot be empty."
            raise ValueError(msg)

        self.vector_store.ensure_collection(collection_name)
        vector = self.embedding_service.embed(text)
        point_id = document_id or str(uuid.uuid4())

        payload: dict[str, Any] = {"text": text, **(metadata or {})}
        self.vector_store.upsert(collection_name, point_id, vector, payload)
        return point_id

    def ingest_file(self, collection_name: str, file_path: Path) -> int:
        """Process a document file through the complete ingestion pipeline.

        Returns:
            Number of chunks stored.
        """
        logger.info("Starting ingestion of %s into %s", file_path, collection_name)

        text = DocumentLoader.load_document(file_path)
        chunks = self.chunker.chunk_text(text, source=file_path.name)
        if not chunks:
            logger.warning("No text extracted from %s", file_path)
            return 0

        self.vector_store.ensure_collection(collection_name)
        embeddings = self.embedding_service.get_embeddings_batch(
            [chunk.text for chunk in chunks]
        )

        points = [
            (chunk.id, embedding, chunk.payload())
            for chunk, embedding in zip(chunks, embeddings, strict=True)
        ]

        self.vector_store.upsert_points(collection_name, points)
        logger.info("Stored %d chunks from %s", len(points), file_path.name)
        return len(points)


def bootstrap_collection(
    vector_store: BaseSQLiteStore | None = None,
    collection_name: str | None = None,
) -> bool:
    """Make sure the knowledge collection exists before serving traffic.

    Failures are logged, never raised.

    Returns:
        True if the collection is ready, False if it was skipped or failed.
    """
    collection_name = collection_name or config.LEGAL_DOCS_COLLECTION_NAME
    if not collection_name:
        logger.warning(
            "LEGAL_DOCS_COLLECTION_NAME not set. Skipping collection initialization."
        )
        return False

    try:
        store = vector_store or get_vector_store()
        logger.info('Ensuring collection "%s" exists...', collection_name)
        store.ensure_collection(collection_name)
    except SanadError:
        logger.exception("Failed to initialize collection %s", collection_name)
        return False

    logger.info('Collection "%s" is ready.', collection_name)
    return True
