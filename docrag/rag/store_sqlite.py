"""SQLite vector store for exhaustive semantic search.

Handles:
- Schema creation (document_embeddings table + filename index)
- Batched, transactional insertion of embedded chunks
- Full scans with embeddings decoded for ranking
"""
import sqlite3
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

import numpy as np
import structlog

from docrag import config
from docrag.errors import StoreError
from docrag.rag.codec import decode_embedding, encode_embedding

logger = structlog.get_logger()


@dataclass
class EmbeddedChunk:
    """A chunk paired with its document embedding, ready to be stored."""

    content: str
    embedding: Union[Sequence[float], np.ndarray]
    filename: str
    chunk_index: int
    total_chunks: int


@dataclass
class StoredRecord:
    """A persisted chunk with its decoded embedding."""

    id: int
    content: str
    embedding: np.ndarray
    filename: str
    chunk_index: int
    total_chunks: int
    created_at: str


class SQLiteVectorStore:
    """Single-file vector store backed by SQLite."""

    def __init__(self, db_path: Union[str, Path] = None, dimension: int = None):
        """Initialize the vector store.

        The connection is opened on first use and shared until close().

        Args:
            db_path: Path to the SQLite file, or ":memory:" (default: config.DB_PATH)
            dimension: Embedding dimension (default: config.EMBEDDING_DIMENSION)
        """
        self.db_path = db_path if db_path is not None else config.DB_PATH
        self.dimension = dimension or config.EMBEDDING_DIMENSION
        self._conn: Optional[sqlite3.Connection] = None

        logger.info(
            "sqlite_store_initialized",
            db_path=str(self.db_path),
            dimension=self.dimension,
        )

    def _get_connection(self) -> sqlite3.Connection:
        """Open the shared connection if needed.

        Raises:
            StoreError: If the database cannot be opened
        """
        if self._conn is None:
            try:
                if str(self.db_path) != ":memory:":
                    Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
                self._conn = sqlite3.connect(str(self.db_path))
                self._conn.row_factory = sqlite3.Row
            except (sqlite3.Error, OSError) as e:
                logger.error("database_open_failed", db_path=str(self.db_path), error=str(e))
                raise StoreError(f"Failed to open database {self.db_path}: {e}") from e
        return self._conn

    def initialize(self) -> None:
        """Create the schema if it does not exist. Safe to call repeatedly.

        Raises:
            StoreError: If schema creation fails
        """
        conn = self._get_connection()

        try:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS document_embeddings (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    content TEXT NOT NULL,
                    embedding BLOB NOT NULL,
                    filename TEXT NOT NULL,
                    chunk_index INTEGER NOT NULL,
                    total_chunks INTEGER NOT NULL,
                    created_at TEXT NOT NULL
                )
            """)

            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_filename
                ON document_embeddings(filename)
            """)

            conn.commit()
            logger.debug("schema_initialized", db_path=str(self.db_path))

        except sqlite3.Error as e:
            conn.rollback()
            logger.error("schema_init_failed", error=str(e))
            raise StoreError(f"Failed to initialize schema: {e}") from e

    def insert_batch(self, records: Sequence[EmbeddedChunk]) -> List[int]:
        """Insert embedded chunks in a single transaction.

        Args:
            records: Chunks with their embeddings

        Returns:
            IDs assigned to the inserted rows, in input order

        Raises:
            ValueError: If an embedding has the wrong dimension (nothing is written)
            StoreError: If the insert fails (the batch is rolled back)
        """
        if not records:
            return []

        created_at = datetime.now(timezone.utc).isoformat()
        rows = [
            (
                record.content,
                encode_embedding(record.embedding, self.dimension),
                record.filename,
                record.chunk_index,
                record.total_chunks,
                created_at,
            )
            for record in records
        ]

        conn = self._get_connection()
        ids = []

        try:
            cursor = conn.cursor()
            for row in rows:
                cursor.execute("""
                    INSERT INTO document_embeddings (
                        content, embedding, filename,
                        chunk_index, total_chunks, created_at
                    ) VALUES (?, ?, ?, ?, ?, ?)
                """, row)
                ids.append(cursor.lastrowid)

            conn.commit()

        except sqlite3.Error as e:
            conn.rollback()
            logger.error("records_insert_failed", error=str(e), batch_size=len(rows))
            raise StoreError(f"Failed to insert records: {e}") from e

        logger.info("records_inserted", count=len(ids), first_id=ids[0], last_id=ids[-1])

        return ids

    def scan_all(self) -> List[StoredRecord]:
        """Return every stored record with its embedding decoded.

        Raises:
            CorruptionError: If any stored embedding has the wrong byte length
            StoreError: If the query fails
        """
        conn = self._get_connection()

        try:
            rows = conn.execute("""
                SELECT
                    id, content, embedding, filename,
                    chunk_index, total_chunks, created_at
                FROM document_embeddings
                ORDER BY id
            """).fetchall()
        except sqlite3.Error as e:
            logger.error("records_scan_failed", error=str(e))
            raise StoreError(f"Failed to scan records: {e}") from e

        records = [
            StoredRecord(
                id=row["id"],
                content=row["content"],
                embedding=decode_embedding(
                    row["embedding"], self.dimension, record_id=row["id"]
                ),
                filename=row["filename"],
                chunk_index=row["chunk_index"],
                total_chunks=row["total_chunks"],
                created_at=row["created_at"],
            )
            for row in rows
        ]

        logger.debug("records_scanned", count=len(records))

        return records

    def count(self) -> int:
        """Get the total number of stored records.

        Raises:
            StoreError: If the query fails
        """
        conn = self._get_connection()

        try:
            return conn.execute("SELECT COUNT(*) FROM document_embeddings").fetchone()[0]
        except sqlite3.Error as e:
            logger.error("record_count_failed", error=str(e))
            raise StoreError(f"Failed to count records: {e}") from e

    def get_stats(self) -> Dict[str, Any]:
        """Get statistics about the vector store.

        Returns:
            Dictionary with store statistics
        """
        conn = self._get_connection()

        try:
            row = conn.execute("""
                SELECT COUNT(*) AS record_count, COUNT(DISTINCT filename) AS file_count
                FROM document_embeddings
            """).fetchone()
        except sqlite3.Error as e:
            logger.error("store_stats_failed", error=str(e))
            raise StoreError(f"Failed to read store statistics: {e}") from e

        return {
            "db_path": str(self.db_path),
            "dimension": self.dimension,
            "record_count": row["record_count"],
            "file_count": row["file_count"],
        }

    def close(self) -> None:
        """Close the shared connection."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None
            logger.debug("sqlite_store_closed", db_path=str(self.db_path))

    def __enter__(self) -> "SQLiteVectorStore":
        self.initialize()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
