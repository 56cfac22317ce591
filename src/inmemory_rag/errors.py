"""Error types raised by the store, the search engine and the pipeline.

Validation errors (caller misuse) derive from ``ValueError``; stage failures
(embedding, retrieval, templating, generation) derive from ``RuntimeError``.
"""

from __future__ import annotations


class RagError(Exception):
    """Base class for every error raised by this package."""


class RagValidationError(RagError, ValueError):
    """The caller passed something unusable."""


class InvalidRecordError(RagValidationError):
    """A document record is missing its id, content or embedding."""


class InvalidQueryError(RagValidationError):
    """A search was requested with an unusable embedding or a negative top_k."""


class InvalidQuestionError(RagValidationError):
    """The question is empty or whitespace."""


class DimensionMismatchError(RagError, ValueError):
    """Two embeddings that must be compared have different lengths."""

    def __init__(
        self,
        expected: int,
        actual: int,
        document_id: str | None = None,
    ) -> None:
        self.expected = expected
        self.actual = actual
        self.document_id = document_id
        where = f" for document {document_id!r}" if document_id is not None else ""
        super().__init__(
            f"Embedding dimension mismatch{where}: expected {expected}, got {actual}"
        )


class PipelineStageError(RagError, RuntimeError):
    """A pipeline stage failed. The underlying error is chained as __cause__."""

    stage = "pipeline"

    def __init__(self, message: str) -> None:
        super().__init__(f"{self.stage} stage failed: {message}")
        self.reason = message


class EmbeddingError(PipelineStageError):
    stage = "embed"


class RetrievalError(PipelineStageError):
    stage = "retrieve"


class TemplateError(PipelineStageError):
    stage = "assemble"


class GenerationError(PipelineStageError):
    stage = "generate"
