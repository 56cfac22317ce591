"""Brute-force cosine similarity search over document records.

Every query scores every record (O(n * D)). There is no index structure, which
is fine for a small in-memory corpus and is the scalability ceiling of this
design.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from inmemory_rag.errors import DimensionMismatchError, InvalidQueryError

if TYPE_CHECKING:
    from inmemory_rag.store import DocumentRecord


@dataclass(frozen=True)
class RetrievedDocument:
    """A record's content paired with its similarity to one query."""

    document_id: str
    content: str
    similarity: float


def _cosine_scores(matrix: np.ndarray, query: np.ndarray) -> np.ndarray:
    """Cosine similarity of each row of ``matrix`` against ``query``.

    Rows (or a query) that are all zeros score exactly 0.0. Each vector is
    divided by its own largest magnitude first so that squaring very large or
    very small components cannot overflow or underflow.
    """
    matrix = _scale_rows(matrix)
    query = _scale_rows(query[np.newaxis, :])[0]
    denominators = np.linalg.norm(matrix, axis=1) * np.linalg.norm(query)
    dots = matrix @ query
    scores = np.zeros_like(dots)
    np.divide(dots, denominators, out=scores, where=denominators != 0.0)
    return np.clip(scores, -1.0, 1.0)


def _scale_rows(matrix: np.ndarray) -> np.ndarray:
    scale = np.max(np.abs(matrix), axis=1, keepdims=True)
    return np.divide(matrix, scale, out=np.zeros_like(matrix), where=scale != 0.0)


def _as_query_vector(query_embedding: Sequence[float] | None) -> np.ndarray:
    if query_embedding is None or len(query_embedding) == 0:
        raise InvalidQueryError("Query embedding cannot be null or empty")
    try:
        query = np.asarray([float(v) for v in query_embedding], dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise InvalidQueryError(f"Query embedding must be numeric: {e}") from e
    if not np.all(np.isfinite(query)):
        raise InvalidQueryError("Query embedding must contain only finite values")
    return query


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity of two vectors of equal length, in [-1.0, 1.0].

    Raises:
        DimensionMismatchError: If the vectors differ in length.
    """
    if len(a) != len(b):
        raise DimensionMismatchError(expected=len(a), actual=len(b))
    if len(a) == 0:
        return 0.0
    matrix = np.asarray([b], dtype=np.float64)
    return float(_cosine_scores(matrix, np.asarray(a, dtype=np.float64))[0])


def similarity_search(
    records: Sequence[DocumentRecord],
    query_embedding: Sequence[float],
    top_k: int,
    min_similarity: float,
) -> list[RetrievedDocument]:
    """Rank ``records`` by cosine similarity to ``query_embedding``.

    Results scoring strictly below ``min_similarity`` are dropped first, the
    rest are sorted by descending similarity and only then cut to ``top_k``.
    The sort is stable, so equal scores keep the order of ``records``.

    Args:
        records: Records to score, in tie-break order.
        query_embedding: Non-empty query vector.
        top_k: Maximum number of results (0 returns an empty list).
        min_similarity: Inclusive lower bound, not clamped or validated.

    Returns:
        RetrievedDocument list, most similar first.

    Raises:
        InvalidQueryError: If the query is empty, non-numeric or not finite,
            or top_k is negative.
        DimensionMismatchError: On the first record whose embedding length
            differs from the query's. The whole search is aborted.
    """
    query = _as_query_vector(query_embedding)
    if top_k < 0:
        raise InvalidQueryError(f"top_k must not be negative, got {top_k}")
    if not records:
        return []

    for record in records:
        if len(record.embedding) != query.size:
            raise DimensionMismatchError(
                expected=query.size,
                actual=len(record.embedding),
                document_id=record.id,
            )

    matrix = np.asarray([record.embedding for record in records], dtype=np.float64)
    scores = _cosine_scores(matrix, query)

    results = [
        RetrievedDocument(
            document_id=record.id,
            content=record.content,
            similarity=float(score),
        )
        for record, score in zip(records, scores)
        if score >= min_similarity
    ]
    results.sort(key=lambda r: r.similarity, reverse=True)
    return results[:top_k]
