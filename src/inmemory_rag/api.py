"""HTTP interface: POST /ask and a health check."""

from __future__ import annotations

from datetime import datetime
from http import HTTPStatus
from typing import Any

from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel, Field

from inmemory_rag.errors import PipelineStageError, RagValidationError
from inmemory_rag.logger import get_logger
from inmemory_rag.pipeline import AnswerEnvelope, RagPipeline

logger = get_logger(__name__)


class QuestionRequest(BaseModel):
    question: str = Field(..., description="Natural-language question")


class RetrievedDocumentOut(BaseModel):
    document_id: str
    content: str
    similarity: float


class QuestionResponse(BaseModel):
    question: str
    answer: str
    retrieved_documents: list[RetrievedDocumentOut]
    processing_time_ms: int

    @classmethod
    def from_envelope(cls, envelope: AnswerEnvelope) -> QuestionResponse:
        return cls(
            question=envelope.question,
            answer=envelope.answer,
            retrieved_documents=[
                RetrievedDocumentOut(
                    document_id=r.document_id,
                    content=r.content,
                    similarity=r.similarity,
                )
                for r in envelope.retrieved
            ],
            processing_time_ms=envelope.processing_time_ms,
        )


def _error_body(
    status: HTTPStatus,
    message: str,
    request: Request,
    details: Any = None,
) -> dict[str, Any]:
    body: dict[str, Any] = {
        "timestamp": datetime.now().isoformat(),
        "status": status.value,
        "error": status.phrase,
        "message": message,
        "path": request.url.path,
    }
    if details is not None:
        body["details"] = details
    return body


def create_app(pipeline: RagPipeline) -> FastAPI:
    """Build the FastAPI app around an already wired pipeline."""
    app = FastAPI(title="In-memory RAG", version="0.1.0")
    app.state.pipeline = pipeline

    @app.exception_handler(RequestValidationError)
    async def handle_validation_errors(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        details = {
            ".".join(str(part) for part in error["loc"] if part != "body"): error["msg"]
            for error in exc.errors()
        }
        logger.warning("Validation error: %s", details)
        return JSONResponse(
            status_code=HTTPStatus.BAD_REQUEST,
            content=_error_body(HTTPStatus.BAD_REQUEST, "Validation failed", request, details),
        )

    @app.exception_handler(RagValidationError)
    async def handle_invalid_input(request: Request, exc: RagValidationError) -> JSONResponse:
        logger.warning("Invalid request: %s", exc)
        return JSONResponse(
            status_code=HTTPStatus.BAD_REQUEST,
            content=_error_body(HTTPStatus.BAD_REQUEST, str(exc), request),
        )

    @app.exception_handler(PipelineStageError)
    async def handle_stage_error(request: Request, exc: PipelineStageError) -> JSONResponse:
        logger.error("RAG processing error: %s", exc, exc_info=exc)
        return JSONResponse(
            status_code=HTTPStatus.INTERNAL_SERVER_ERROR,
            content=_error_body(
                HTTPStatus.INTERNAL_SERVER_ERROR,
                str(exc),
                request,
                {"stage": exc.stage},
            ),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.error("Unexpected error: %s", exc, exc_info=exc)
        return JSONResponse(
            status_code=HTTPStatus.INTERNAL_SERVER_ERROR,
            content=_error_body(
                HTTPStatus.INTERNAL_SERVER_ERROR, "An unexpected error occurred", request
            ),
        )

    @app.post("/ask", response_model=QuestionResponse)
    async def ask(body: QuestionRequest) -> QuestionResponse:
        logger.info("Received question: %s", body.question)
        # The pipeline blocks on network-bound capabilities
        envelope = await run_in_threadpool(pipeline.answer_question, body.question)
        logger.info(
            "Returning answer with %d retrieved documents, processed in %dms",
            len(envelope.retrieved),
            envelope.processing_time_ms,
        )
        return QuestionResponse.from_envelope(envelope)

    @app.get("/", response_class=PlainTextResponse)
    async def health() -> str:
        return "RAG application is running!"

    return app
