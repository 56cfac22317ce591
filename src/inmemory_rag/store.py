"""In-memory vector store for document embeddings."""

from __future__ import annotations

import math
import threading
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from inmemory_rag.errors import DimensionMismatchError, InvalidRecordError
from inmemory_rag.logger import get_logger
from inmemory_rag.similarity import RetrievedDocument, similarity_search

logger = get_logger(__name__)


@dataclass(frozen=True)
class DocumentRecord:
    """A document and its embedding. The embedding is kept as a tuple."""

    id: str
    content: str
    embedding: tuple[float, ...]

    @classmethod
    def create(
        cls, id: str, content: str, embedding: Sequence[float] | None
    ) -> DocumentRecord:
        """Validate the fields and build a record.

        Raises:
            InvalidRecordError: If id or content is empty, or the embedding is
                empty, missing or not a sequence of finite numbers.
        """
        if not id:
            raise InvalidRecordError("Document must have a non-empty id")
        if not content:
            raise InvalidRecordError(f"Document {id!r} must have non-empty content")
        if embedding is None or len(embedding) == 0:
            raise InvalidRecordError(f"Document {id!r} must have an embedding")
        try:
            vector = tuple(float(value) for value in embedding)
        except (TypeError, ValueError) as e:
            raise InvalidRecordError(
                f"Document {id!r} has a non-numeric embedding"
            ) from e
        if not all(math.isfinite(value) for value in vector):
            raise InvalidRecordError(f"Document {id!r} has a non-finite embedding")
        return cls(id=id, content=content, embedding=vector)


class VectorStore:
    """Thread-safe mapping of document id to DocumentRecord.

    A single coarse lock guards the mapping. Searches copy the record list
    under the lock and score outside it, so a concurrent insert is seen either
    entirely or not at all.

    Iteration order (and therefore the tie-break order of equal search scores)
    is the order in which the current records were inserted. Re-inserting an
    existing id moves that record to the end.
    """

    def __init__(self, dimension: int | None = None) -> None:
        self._dimension = dimension
        self._records: dict[str, DocumentRecord] = {}
        self._lock = threading.RLock()

    @property
    def dimension(self) -> int | None:
        return self._dimension

    def _check_dimension(self, record: DocumentRecord) -> None:
        if self._dimension is not None and len(record.embedding) != self._dimension:
            raise DimensionMismatchError(
                expected=self._dimension,
                actual=len(record.embedding),
                document_id=record.id,
            )

    def insert(self, record: DocumentRecord) -> None:
        """Insert a record, replacing any record with the same id."""
        if not isinstance(record, DocumentRecord):
            raise InvalidRecordError(f"Expected DocumentRecord, got {type(record).__name__}")
        record = DocumentRecord.create(record.id, record.content, record.embedding)
        self._check_dimension(record)
        with self._lock:
            self._records.pop(record.id, None)
            self._records[record.id] = record
        logger.debug("Added document %s to vector store", record.id)

    def add(self, id: str, content: str, embedding: Sequence[float]) -> DocumentRecord:
        """Build a record from raw fields, insert it and return it."""
        record = DocumentRecord.create(id, content, embedding)
        self.insert(record)
        return record

    def add_documents(self, records: Iterable[DocumentRecord]) -> int:
        """Insert many records. Nothing is stored if any record is invalid."""
        validated = [
            DocumentRecord.create(r.id, r.content, r.embedding) for r in records
        ]
        for record in validated:
            self._check_dimension(record)
        with self._lock:
            for record in validated:
                self._records.pop(record.id, None)
                self._records[record.id] = record
        logger.debug("Added %d documents to vector store", len(validated))
        return len(validated)

    def get(self, id: str) -> DocumentRecord | None:
        with self._lock:
            return self._records.get(id)

    def all(self) -> list[DocumentRecord]:
        """Snapshot of every record, in insertion order."""
        with self._lock:
            return list(self._records.values())

    def size(self) -> int:
        with self._lock:
            return len(self._records)

    def __len__(self) -> int:
        return self.size()

    def __contains__(self, id: object) -> bool:
        with self._lock:
            return id in self._records

    def delete(self, id: str) -> bool:
        """Remove one record. Returns False if the id was not stored."""
        with self._lock:
            removed = self._records.pop(id, None)
        return removed is not None

    def clear(self) -> None:
        with self._lock:
            self._records.clear()
        logger.info("Cleared all documents from vector store")

    def search(
        self,
        query_embedding: Sequence[float],
        top_k: int,
        min_similarity: float,
    ) -> list[RetrievedDocument]:
        """Cosine similarity search over a snapshot of the store.

        See ``similarity_search`` for ordering, filtering and error rules.
        """
        logger.debug(
            "Performing similarity search with top_k=%d, min_similarity=%s",
            top_k,
            min_similarity,
        )
        return similarity_search(self.all(), query_embedding, top_k, min_similarity)
