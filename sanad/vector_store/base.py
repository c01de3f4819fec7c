"""Shared collection registry and payload storage for vector stores."""

from __future__ import annotations

import json
import re
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Any

import numpy as np

from sanad.config import config
from sanad.errors import ConfigurationError, StoreUnavailable

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

    from sanad.models import SearchHit

COSINE_DISTANCE = "cosine"
COLLECTION_NAME_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.-]*$")

PointRecord = tuple[str, np.ndarray, dict[str, Any]]

logger = config.get_logger(__name__)


@contextmanager
def store_errors(action: str) -> Iterator[None]:
    """Re-raise backend faults as StoreUnavailable.

    Raises:
        StoreUnavailable: If SQLite, the filesystem or FAISS fails.
    """
    try:
        yield
    except (sqlite3.Error, OSError, RuntimeError) as e:
        logger.exception("Vector store error while trying to %s", action)
        msg = f"Failed to {action}: {e!s}"
        raise StoreUnavailable(msg) from e


class BaseSQLiteStore:
    """Collection registry and point payloads kept in SQLite.

    Subclasses own the vectors themselves and implement ``upsert_points``
    and ``search``.
    """

    backend = "base"

    def __init__(self, db_path: Path, dimension: int | None = None) -> None:
        """Initialize metadata store and ensure schema exists."""
        self.db_path = Path(db_path)
        self.dimension = dimension if dimension is not None else (
            config.EMBEDDING_DIMENSIONS
        )
        with store_errors("initialize vector store"):
            self.db_path.parent.mkdir(exist_ok=True, parents=True)
            self._create_tables()

    def _create_tables(self) -> None:
        """Create collection and point tables if they don't exist."""
        with sqlite3.connect(str(self.db_path)) as conn:
            cursor = conn.cursor()

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS collections (
                    name TEXT PRIMARY KEY,
                    dimension INTEGER NOT NULL,
                    distance TEXT NOT NULL DEFAULT 'cosine',
                    created_at DATETIME DEFAULT CURRENT_TIMESTAMP
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS points (
                    vector_id INTEGER PRIMARY KEY AUTOINCREMENT,
                    collection TEXT NOT NULL,
                    point_id TEXT NOT NULL,
                    payload TEXT NOT NULL,
                    updated_at DATETIME DEFAULT CURRENT_TIMESTAMP,
                    UNIQUE (collection, point_id),
                    FOREIGN KEY (collection) REFERENCES collections (name)
                )
            """)

            cursor.execute(
                "CREATE INDEX IF NOT EXISTS idx_points_collection ON points(collection)"
            )
            conn.commit()

    @staticmethod
    def _validate_collection_name(name: str) -> None:
        if not COLLECTION_NAME_PATTERN.match(name or ""):
            msg = f"Invalid collection name: {name!r}"
            raise ConfigurationError(msg)

    def list_collections(self) -> list[str]:
        """List the names of existing collections.

        Returns:
            Collection names in alphabetical order.
        """
        with (
            store_errors("list collections"),
            sqlite3.connect(str(self.db_path)) as conn,
        ):
            cursor = conn.cursor()
            cursor.execute("SELECT name FROM collections ORDER BY name")
            return [row[0] for row in cursor.fetchall()]

    def ensure_collection(self, name: str) -> None:
        """Create the collection unless it already exists."""
        self._validate_collection_name(name)
        if name in self.list_collections():
            return

        with (
            store_errors(f'create collection "{name}"'),
            sqlite3.connect(str(self.db_path)) as conn,
        ):
            cursor = conn.cursor()
            cursor.execute(
                (
                    "INSERT OR IGNORE INTO collections (name, dimension, distance) "
                    "VALUES (?, ?, ?)"
                ),
                (name, self.dimension, COSINE_DISTANCE),
            )
            created = cursor.rowcount == 1
            conn.commit()

        if created:
            logger.info(
                'Collection "%s" created (dimension=%d, distance=%s)',
                name,
                self.dimension,
                COSINE_DISTANCE,
            )

    def collection_dimension(self, name: str) -> int | None:
        """Return the vector dimension of a collection, or None if it is missing."""
        with (
            store_errors(f'read collection "{name}"'),
            sqlite3.connect(str(self.db_path)) as conn,
        ):
            cursor = conn.cursor()
            cursor.execute(
                "SELECT dimension FROM collections WHERE name = ?",
                (name,),
            )
            row = cursor.fetchone()
        return int(row[0]) if row else None

    def count(self, name: str) -> int:
        """Return the number of points stored in a collection."""
        with (
            store_errors(f'count points in "{name}"'),
            sqlite3.connect(str(self.db_path)) as conn,
        ):
            cursor = conn.cursor()
            cursor.execute(
                "SELECT COUNT(*) FROM points WHERE collection = ?",
                (name,),
            )
            return int(cursor.fetchone()[0])

    def upsert(
        self,
        collection_name: str,
        point_id: str,
        vector: np.ndarray,
        payload: dict[str, Any],
    ) -> None:
        """Insert a point or replace the point with the same id."""
        self.upsert_points(collection_name, [(point_id, vector, payload)])

    def upsert_points(
        self,
        collection_name: str,
        points: Sequence[PointRecord],
    ) -> None:
        raise NotImplementedError

    def search(
        self,
        collection_name: str,
        query_vector: np.ndarray,
        limit: int = 3,
    ) -> list[SearchHit]:
        raise NotImplementedError

    def _require_dimension(self, name: str) -> int:
        """Dimension of an existing collection.

        Raises:
            StoreUnavailable: If the collection does not exist.
        """
        dimension = self.collection_dimension(name)
        if dimension is None:
            msg = f'Collection "{name}" does not exist'
            raise StoreUnavailable(msg)
        return dimension

    @staticmethod
    def _prepare_vector(vector: np.ndarray, dimension: int) -> np.ndarray:
        """Check the dimension and L2-normalize a vector.

        Returns:
            A float32 unit vector (zero vectors are returned unchanged).

        Raises:
            ConfigurationError: If the vector length differs from the collection.
        """
        array = np.asarray(vector, dtype=np.float32).reshape(-1)
        if array.shape[0] != dimension:
            msg = (
                f"Embedding dimension {array.shape[0]} does not match "
                f"collection dimension {dimension}"
            )
            raise ConfigurationError(msg)
        norm = np.linalg.norm(array)
        if norm == 0:
            return array
        return array / norm

    @staticmethod
    def _upsert_point_row(
        cursor: sqlite3.Cursor,
        collection_name: str,
        point_id: str,
        payload: dict[str, Any],
    ) -> tuple[int, bool]:
        """Insert or update the payload row of a point.

        Returns:
            Tuple of (vector id, whether an existing point was replaced).
        """
        payload_json = json.dumps(payload, ensure_ascii=False, sort_keys=True)
        cursor.execute(
            "SELECT vector_id FROM points WHERE collection = ? AND point_id = ?",
            (collection_name, point_id),
        )
        row = cursor.fetchone()
        if row is not None:
            cursor.execute(
                (
                    "UPDATE points SET payload = ?, updated_at = CURRENT_TIMESTAMP "
                    "WHERE vector_id = ?"
                ),
                (payload_json, row[0]),
            )
            return int(row[0]), True

        cursor.execute(
            "INSERT INTO points (collection, point_id, payload) VALUES (?, ?, ?)",
            (collection_name, point_id, payload_json),
        )
        vector_id = cursor.lastrowid
        if vector_id is None:
            msg = "Failed to insert point row"
            raise RuntimeError(msg)
        return int(vector_id), False

    @staticmethod
    def _fetch_points(
        cursor: sqlite3.Cursor,
        collection_name: str,
        vector_ids: Sequence[int] | None = None,
    ) -> dict[int, tuple[str, dict[str, Any]]]:
        """Load point ids and payloads keyed by vector id.

        Returns:
            Mapping of vector id to (point id, payload).
        """
        if vector_ids is None:
            cursor.execute(
                (
                    "SELECT vector_id, point_id, payload FROM points "
                    "WHERE collection = ? ORDER BY vector_id"
                ),
                (collection_name,),
            )
        else:
            if not vector_ids:
                return {}
            placeholders = ", ".join("?" for _ in vector_ids)
            cursor.execute(
                (
                    "SELECT vector_id, point_id, payload FROM points "
                    f"WHERE collection = ? AND vector_id IN ({placeholders})"  # noqa: S608
                ),
                (collection_name, *(int(v) for v in vector_ids)),
            )
        return {
            int(vector_id): (point_id, json.loads(payload))
            for vector_id, point_id, payload in cursor.fetchall()
        }
