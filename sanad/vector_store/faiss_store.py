"""FAISS-backed vector storage with SQLite metadata."""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import TYPE_CHECKING

import faiss
import numpy as np

from sanad.config import config
from sanad.models import SearchHit
from sanad.vector_store.base import BaseSQLiteStore, store_errors

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sanad.vector_store.base import PointRecord

logger = config.get_logger(__name__)


class FaissVectorStore(BaseSQLiteStore):
    """One FAISS inner-product index per collection, payloads in SQLite."""

    backend = "faiss"

    def __init__(
        self,
        db_path: Path = Path("data/vector_store.db"),
        index_dir: Path = Path("data/faiss"),
        dimension: int | None = None,
    ) -> None:
        """Configure FAISS-backed vector store."""
        self.index_dir = Path(index_dir)
        self._indexes: dict[str, tuple[faiss.IndexIDMap2, float]] = {}

        super().__init__(db_path, dimension)

        with store_errors("initialize FAISS index directory"):
            self.index_dir.mkdir(exist_ok=True, parents=True)

    def index_path(self, collection_name: str) -> Path:
        return self.index_dir / f"{collection_name}.faiss"

    def _load_index(self, collection_name: str, dimension: int) -> faiss.IndexIDMap2:
        """Return the collection index, reloading it if another writer updated it.

        Returns:
            The FAISS index for the collection (empty if never written).
        """
        path = self.index_path(collection_name)
        mtime = path.stat().st_mtime if path.exists() else 0.0

        cached = self._indexes.get(collection_name)
        if cached is not None and cached[1] >= mtime:
            return cached[0]

        if path.exists():
            index = faiss.read_index(str(path))
            logger.info(
                "Loaded FAISS index for %s with %d vectors",
                collection_name,
                index.ntotal,
            )
        else:
            index = faiss.IndexIDMap2(faiss.IndexFlatIP(dimension))
            logger.info(
                "Initialized FAISS IndexIDMap2 for %s with dimension %d",
                collection_name,
                dimension,
            )

        self._indexes[collection_name] = (index, mtime)
        return index

    def _write_index(self, collection_name: str, index: faiss.IndexIDMap2) -> None:
        path = self.index_path(collection_name)
        faiss.write_index(index, str(path))
        self._indexes[collection_name] = (index, path.stat().st_mtime)

    def upsert_points(
        self,
        collection_name: str,
        points: Sequence[PointRecord],
    ) -> None:
        """Insert or replace points in the FAISS index and metadata store."""
        if not points:
            return

        dimension = self._require_dimension(collection_name)
        vectors = [self._prepare_vector(vector, dimension) for _, vector, _ in points]

        with store_errors(f'upsert points into "{collection_name}"'):
            index = self._load_index(collection_name, dimension)
            vector_ids: list[int] = []
            replaced_ids: list[int] = []

            # rows commit only once the index file has been written
            try:
                with sqlite3.connect(str(self.db_path)) as conn:
                    cursor = conn.cursor()
                    for point_id, _, payload in points:
                        vector_id, replaced = self._upsert_point_row(
                            cursor, collection_name, str(point_id), payload
                        )
                        vector_ids.append(vector_id)
                        if replaced:
                            replaced_ids.append(vector_id)

                    if replaced_ids:
                        index.remove_ids(np.asarray(replaced_ids, dtype="int64"))

                    # last write wins when one batch repeats a point id
                    latest = dict(zip(vector_ids, vectors, strict=True))
                    index.add_with_ids(
                        np.vstack(list(latest.values())).astype("float32"),
                        np.asarray(list(latest.keys()), dtype="int64"),
                    )
                    self._write_index(collection_name, index)
            except Exception:
                # the cached index was edited in place; reload it from disk
                self._indexes.pop(collection_name, None)
                raise

        logger.info(
            "Upserted %d points into %s (%d replaced)",
            len(latest),
            collection_name,
            len(replaced_ids),
        )

    def search(
        self,
        collection_name: str,
        query_vector: np.ndarray,
        limit: int = 3,
    ) -> list[SearchHit]:
        """Search the nearest points of a collection by cosine similarity.

        Returns:
            At most ``limit`` hits ordered by descending score.
        """
        dimension = self.collection_dimension(collection_name)
        if dimension is None:
            logger.warning("Collection %s does not exist", collection_name)
            return []
        if limit <= 0:
            return []

        normalized_query = self._prepare_vector(query_vector, dimension)

        with store_errors(f'search "{collection_name}"'):
            index = self._load_index(collection_name, dimension)
            if index.ntotal == 0:
                return []

            scores, vector_ids = index.search(
                normalized_query.reshape(1, -1),
                min(limit, index.ntotal),
            )

            found_ids = [int(v) for v in vector_ids[0] if int(v) != -1]
            with sqlite3.connect(str(self.db_path)) as conn:
                points = self._fetch_points(conn.cursor(), collection_name, found_ids)

        results: list[SearchHit] = []
        for score, vector_id in zip(scores[0], vector_ids[0], strict=True):
            point = points.get(int(vector_id))
            if point is None:
                continue
            point_id, payload = point
            results.append(
                SearchHit(
                    id=point_id,
                    score=float(np.clip(score, -1.0, 1.0)),
                    payload=payload,
                )
            )
        return results
