"""Cosine-similarity ranking of stored records against a query vector."""
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Sequence, Union

import numpy as np
import structlog

from docrag import config
from docrag.errors import InputError
from docrag.rag.store_sqlite import StoredRecord

logger = structlog.get_logger()

Vector = Union[Sequence[float], np.ndarray]


@dataclass
class SearchResult:
    """A single ranked chunk."""

    content: str
    filename: str
    chunk_index: int
    similarity: float

    @property
    def source(self) -> str:
        """Get a formatted source string for display."""
        return f"{self.filename}#{self.chunk_index}"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def cosine_similarity(a: Vector, b: Vector) -> float:
    """Cosine similarity of two equal-length vectors.

    A zero-magnitude vector yields NaN.
    """
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)

    if a.shape != b.shape:
        raise ValueError(f"Vector dimension mismatch: {a.shape} vs {b.shape}")

    with np.errstate(divide="ignore", invalid="ignore"):
        return float(np.dot(a, b) / (np.linalg.norm(a) * np.linalg.norm(b)))


def rank(
    query_vector: Vector,
    candidates: Sequence[StoredRecord],
    top_k: int,
    dimension: int = None,
) -> List[SearchResult]:
    """Score every candidate against the query and keep the best ``top_k``.

    Ties keep the candidates' scan order.

    Args:
        query_vector: Query embedding
        candidates: Stored records to score
        top_k: Maximum number of results
        dimension: Expected vector dimension (default: config.EMBEDDING_DIMENSION)

    Returns:
        SearchResults sorted by non-increasing similarity

    Raises:
        InputError: If top_k is less than 1
        ValueError: If the query has the wrong dimension
    """
    dimension = dimension or config.EMBEDDING_DIMENSION

    if top_k < 1:
        raise InputError(f"top_k must be at least 1, got {top_k}")

    query = np.asarray(query_vector, dtype=np.float64)
    if query.ndim != 1 or query.shape[0] != dimension:
        raise ValueError(
            f"Query dimension mismatch: expected {dimension}, got shape {query.shape}"
        )

    if not candidates:
        return []

    matrix = np.vstack([c.embedding for c in candidates]).astype(np.float64)

    with np.errstate(divide="ignore", invalid="ignore"):
        scores = (matrix @ query) / (np.linalg.norm(matrix, axis=1) * np.linalg.norm(query))

    # Stable sort on the negated scores keeps scan order for ties
    order = np.argsort(-scores, kind="stable")[:top_k]

    results = [
        SearchResult(
            content=candidates[i].content,
            filename=candidates[i].filename,
            chunk_index=candidates[i].chunk_index,
            similarity=float(scores[i]),
        )
        for i in order
    ]

    logger.debug(
        "candidates_ranked",
        candidate_count=len(candidates),
        top_k=top_k,
        top_similarity=results[0].similarity if results else None,
    )

    return results
