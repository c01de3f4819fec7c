"""SQLite-based vector storage with numpy file backend."""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np

from sanad.config import config
from sanad.models import SearchHit
from sanad.vector_store.base import BaseSQLiteStore, store_errors

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sanad.vector_store.base import PointRecord

logger = config.get_logger(__name__)


class SQLiteVectorStore(BaseSQLiteStore):
    """Vector storage using SQLite for payloads and numpy files for embeddings."""

    backend = "sqlite"

    def __init__(
        self,
        db_path: Path = Path("data/vector_store.db"),
        vectors_dir: Path = Path("data/vectors"),
        dimension: int | None = None,
    ) -> None:
        """Initialize the SQLiteVectorStore with database and vector directory paths.

        Args:
            db_path: Path to the SQLite database file.
            vectors_dir: Directory to store numpy vector files.
            dimension: Vector dimension for new collections.
        """
        self.vectors_dir = Path(vectors_dir)

        super().__init__(db_path, dimension)

        with store_errors("initialize vector directory"):
            self.vectors_dir.mkdir(exist_ok=True, parents=True)

    def _vector_path(self, collection_name: str, vector_id: int) -> Path:
        return self.vectors_dir / collection_name / f"{vector_id:08d}.npy"

    def upsert_points(
        self,
        collection_name: str,
        points: Sequence[PointRecord],
    ) -> None:
        """Insert or replace points, one numpy file per vector."""
        if not points:
            return

        dimension = self._require_dimension(collection_name)
        vectors = [self._prepare_vector(vector, dimension) for _, vector, _ in points]

        with store_errors(f'upsert points into "{collection_name}"'):
            (self.vectors_dir / collection_name).mkdir(exist_ok=True, parents=True)

            with sqlite3.connect(str(self.db_path)) as conn:
                cursor = conn.cursor()
                for (point_id, _, payload), vector in zip(points, vectors, strict=True):
                    vector_id, _replaced = self._upsert_point_row(
                        cursor, collection_name, str(point_id), payload
                    )
                    np.save(self._vector_path(collection_name, vector_id), vector)
                conn.commit()

        logger.info("Upserted %d points into %s", len(points), collection_name)

    @staticmethod
    def cosine_similarity(
        query_embedding: np.ndarray,
        embeddings: np.ndarray,
    ) -> np.ndarray:
        """Calculate cosine similarity between query and document embeddings.

        Returns:
            np.ndarray: Array of cosine similarity scores
                    between the query and each document embedding.
        """
        query_norm = np.linalg.norm(query_embedding)
        doc_norms = np.linalg.norm(embeddings, axis=1)
        denominator = np.where(doc_norms * query_norm == 0, 1.0, doc_norms * query_norm)

        return np.dot(embeddings, query_embedding) / denominator

    def search(
        self,
        collection_name: str,
        query_vector: np.ndarray,
        limit: int = 3,
    ) -> list[SearchHit]:
        """Search the nearest points of a collection by brute-force cosine.

        Returns:
            At most ``limit`` hits ordered by descending score.
        """
        dimension = self.collection_dimension(collection_name)
        if dimension is None:
            logger.warning("Collection %s does not exist", collection_name)
            return []
        if limit <= 0:
            return []

        query = self._prepare_vector(query_vector, dimension)

        with store_errors(f'search "{collection_name}"'):
            with sqlite3.connect(str(self.db_path)) as conn:
                points = self._fetch_points(conn.cursor(), collection_name)

            vector_ids: list[int] = []
            embeddings_list: list[np.ndarray] = []
            for vector_id in points:
                vector_path = self._vector_path(collection_name, vector_id)
                if vector_path.exists():
                    vector_ids.append(vector_id)
                    embeddings_list.append(np.load(vector_path))
                else:
                    logger.warning("Vector file not found: %s", vector_path)

        if not embeddings_list:
            return []

        similarities = self.cosine_similarity(query, np.vstack(embeddings_list))
        top_indices = np.argsort(-similarities, kind="stable")[:limit]

        results = []
        for idx in top_indices:
            point_id, payload = points[vector_ids[idx]]
            results.append(
                SearchHit(
                    id=point_id,
                    score=float(np.clip(similarities[idx], -1.0, 1.0)),
                    payload=payload,
                )
            )
        return results
