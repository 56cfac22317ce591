"""Pipeline orchestration: embed -> retrieve -> assemble -> generate.

Pure logic layer: no CLI or HTTP dependency, easy to test and reuse.
"""

from __future__ import annotations

import math
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from inmemory_rag.config import RagSettings
from inmemory_rag.config import settings as default_settings
from inmemory_rag.embedder import Embedder, OpenAIEmbedder, SentenceTransformerEmbedder
from inmemory_rag.errors import (
    DimensionMismatchError,
    EmbeddingError,
    GenerationError,
    InvalidQueryError,
    InvalidQuestionError,
    RetrievalError,
)
from inmemory_rag.generator import ClaudeCodeGenerator, Generator, OpenAIChatGenerator
from inmemory_rag.hooks import LoggingHooks, PipelineHooks, Stage
from inmemory_rag.loader import load_directory
from inmemory_rag.logger import get_logger
from inmemory_rag.prompt import DEFAULT_TEMPLATE_PATH, PromptTemplate, format_context
from inmemory_rag.similarity import RetrievedDocument
from inmemory_rag.splitter import split_documents
from inmemory_rag.store import DocumentRecord, VectorStore

logger = get_logger(__name__)


@dataclass(frozen=True)
class AnswerEnvelope:
    """Result of a question-answering request."""

    question: str
    answer: str
    retrieved: list[RetrievedDocument] = field(default_factory=list)
    processing_time: float = 0.0

    @property
    def processing_time_ms(self) -> int:
        return round(self.processing_time * 1000)


@dataclass
class IndexResult:
    """Result of an indexing operation."""

    total_documents: int
    total_chunks: int
    document_ids: list[str] = field(default_factory=list)


def _describe(error: Exception) -> str:
    return str(error) or type(error).__name__


class RagPipeline:
    """Answers one question at a time against a shared VectorStore.

    Stages run strictly in order and the first failure ends the request with
    its stage error. Nothing here mutates the store.
    """

    def __init__(
        self,
        store: VectorStore,
        embedder: Embedder,
        generator: Generator,
        top_k: int = 2,
        min_similarity: float = 0.7,
        prompt_template: PromptTemplate | Path | None = None,
        hooks: Sequence[PipelineHooks] | None = None,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        if top_k < 0:
            raise InvalidQueryError(f"top_k must not be negative, got {top_k}")
        self._store = store
        self._embedder = embedder
        self._generator = generator
        self._top_k = top_k
        self._min_similarity = min_similarity
        self._prompt_template = (
            prompt_template if prompt_template is not None else DEFAULT_TEMPLATE_PATH
        )
        self._hooks = list(hooks) if hooks is not None else [LoggingHooks()]
        self._clock = clock

    @property
    def top_k(self) -> int:
        return self._top_k

    @property
    def min_similarity(self) -> float:
        return self._min_similarity

    def answer_question(self, question: str) -> AnswerEnvelope:
        """Run the full pipeline for one question.

        Raises:
            InvalidQuestionError: If the question is empty or whitespace.
            EmbeddingError: The embedding capability failed or returned an
                empty, non-numeric or non-finite vector.
            RetrievalError: The search rejected the query or hit a dimension
                mismatch.
            TemplateError: The prompt template is unreadable or malformed.
            GenerationError: The generation capability failed or returned
                an empty answer.
        """
        if question is None or not question.strip():
            raise InvalidQuestionError("Question cannot be empty")

        start = self._clock()
        self._notify("on_question", question)

        embedding = self._run_stage(Stage.EMBED, self._embed, question)
        retrieved = self._run_stage(Stage.RETRIEVE, self._retrieve, embedding)
        prompt = self._run_stage(Stage.ASSEMBLE, self._assemble, question, retrieved)
        answer = self._run_stage(Stage.GENERATE, self._generate, prompt)

        envelope = AnswerEnvelope(
            question=question,
            answer=answer,
            retrieved=retrieved,
            processing_time=self._clock() - start,
        )
        self._notify("on_complete", envelope)
        return envelope

    def _run_stage(self, stage: Stage, func: Callable[..., Any], *args: Any) -> Any:
        self._notify("on_stage_start", stage)
        started = self._clock()
        try:
            output = func(*args)
        except Exception as e:
            self._notify("on_failure", stage, e)
            raise
        elapsed = self._clock() - started
        self._notify("on_stage_end", stage, output, elapsed)
        return output

    def _notify(self, method: str, *args: Any) -> None:
        # A broken hook is logged and skipped; it never changes the outcome
        for hook in self._hooks:
            try:
                getattr(hook, method)(*args)
            except Exception:
                logger.exception("Hook %s.%s failed", type(hook).__name__, method)

    def _embed(self, question: str) -> Sequence[float]:
        try:
            embedding = self._embedder.embed(question)
        except Exception as e:
            raise EmbeddingError(_describe(e)) from e
        if embedding is None or len(embedding) == 0:
            raise EmbeddingError("embedding capability returned an empty vector")
        try:
            vector = tuple(float(v) for v in embedding)
        except (TypeError, ValueError) as e:
            raise EmbeddingError(f"embedding capability returned non-numeric values: {e}") from e
        if not all(math.isfinite(v) for v in vector):
            raise EmbeddingError("embedding capability returned non-finite values")
        return vector

    def _retrieve(self, embedding: Sequence[float]) -> list[RetrievedDocument]:
        try:
            return self._store.search(embedding, self._top_k, self._min_similarity)
        except (InvalidQueryError, DimensionMismatchError) as e:
            raise RetrievalError(_describe(e)) from e

    def _load_template(self) -> PromptTemplate:
        if isinstance(self._prompt_template, PromptTemplate):
            return self._prompt_template
        return PromptTemplate.from_file(self._prompt_template)

    def _assemble(self, question: str, retrieved: list[RetrievedDocument]) -> str:
        context = format_context(retrieved)
        return self._load_template().render(context=context, question=question)

    def _generate(self, prompt: str) -> str:
        try:
            answer = self._generator.generate(prompt)
        except Exception as e:
            raise GenerationError(_describe(e)) from e
        if not answer or not answer.strip():
            raise GenerationError("generation capability returned an empty answer")
        return answer


def index_documents(
    store: VectorStore,
    embedder: Embedder,
    data_dir: str | Path,
    chunk_size: int = 500,
    chunk_overlap: int = 50,
) -> IndexResult:
    """Load -> Split -> Embed -> Store.

    Chunk ids are ``"<filename>#<chunk_index>"``, so re-indexing the same
    directory replaces records instead of duplicating them.

    Raises:
        ValueError: If data_dir doesn't exist or has no .txt files.
        EmbeddingError: If any chunk can't be embedded. Nothing is stored.
    """
    docs = load_directory(data_dir)
    chunks = split_documents(docs, chunk_size=chunk_size, chunk_overlap=chunk_overlap)

    records: list[DocumentRecord] = []
    for chunk in chunks:
        doc_id = f"{chunk.metadata['filename']}#{chunk.metadata['chunk_index']}"
        try:
            embedding = embedder.embed(chunk.content)
        except Exception as e:
            raise EmbeddingError(f"{doc_id}: {_describe(e)}") from e
        if embedding is None or len(embedding) == 0:
            raise EmbeddingError(f"{doc_id}: embedding capability returned an empty vector")
        records.append(DocumentRecord.create(doc_id, chunk.content, embedding))

    store.add_documents(records)
    return IndexResult(
        total_documents=len(docs),
        total_chunks=len(records),
        document_ids=[r.id for r in records],
    )


def _require_api_key(settings: RagSettings) -> str:
    if settings.openai_api_key is None:
        raise ValueError("RAG_OPENAI_API_KEY is required for the openai backend")
    return settings.openai_api_key.get_secret_value()


def build_embedder(settings: RagSettings = default_settings) -> Embedder:
    if settings.embedding_backend == "openai":
        return OpenAIEmbedder(
            model=settings.embedding_model,
            api_key=_require_api_key(settings),
            base_url=settings.openai_base_url,
            timeout=settings.request_timeout,
        )
    return SentenceTransformerEmbedder(settings.embedding_model)


def build_generator(settings: RagSettings = default_settings) -> Generator:
    if settings.generation_backend == "openai":
        return OpenAIChatGenerator(
            model=settings.chat_model,
            api_key=_require_api_key(settings),
            base_url=settings.openai_base_url,
            timeout=settings.generation_timeout,
        )
    return ClaudeCodeGenerator(timeout=settings.generation_timeout)


def build_pipeline(
    store: VectorStore,
    settings: RagSettings = default_settings,
    embedder: Embedder | None = None,
    generator: Generator | None = None,
    hooks: Sequence[PipelineHooks] | None = None,
) -> RagPipeline:
    """Wire a pipeline from settings; explicit capabilities take precedence."""
    return RagPipeline(
        store=store,
        embedder=embedder if embedder is not None else build_embedder(settings),
        generator=generator if generator is not None else build_generator(settings),
        top_k=settings.max_results,
        min_similarity=settings.similarity_threshold,
        prompt_template=settings.prompt_template_path,
        hooks=hooks,
    )
