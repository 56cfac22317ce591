"""Callbacks invoked by the pipeline at stage boundaries."""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, Any

from inmemory_rag.logger import get_logger

if TYPE_CHECKING:
    from inmemory_rag.pipeline import AnswerEnvelope

_pipeline_logger = get_logger("inmemory_rag.pipeline")


class Stage(str, Enum):
    EMBED = "embed"
    RETRIEVE = "retrieve"
    ASSEMBLE = "assemble"
    GENERATE = "generate"


class PipelineHooks:
    """No-op base class. Override the methods you need.

    An exception raised by a hook is logged by the pipeline and does not
    affect the request.
    """

    def on_question(self, question: str) -> None:
        pass

    def on_stage_start(self, stage: Stage) -> None:
        pass

    def on_stage_end(self, stage: Stage, output: Any, elapsed: float) -> None:
        pass

    def on_failure(self, stage: Stage, error: Exception) -> None:
        pass

    def on_complete(self, envelope: AnswerEnvelope) -> None:
        pass


class LoggingHooks(PipelineHooks):
    """Log the progress of each request."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or _pipeline_logger

    def on_question(self, question: str) -> None:
        self._logger.info("Processing question: %s", question)

    def on_stage_start(self, stage: Stage) -> None:
        self._logger.debug("Stage %s started", stage.value)

    def on_stage_end(self, stage: Stage, output: Any, elapsed: float) -> None:
        if stage is Stage.RETRIEVE:
            self._logger.info(
                "Retrieved %d documents with similarities: %s",
                len(output),
                [f"{r.similarity:.3f}" for r in output],
            )
        elif stage is Stage.ASSEMBLE:
            self._logger.debug("Generated prompt with %d characters", len(output))
        elif stage is Stage.GENERATE:
            self._logger.debug("Generated answer: %d characters", len(output))

    def on_failure(self, stage: Stage, error: Exception) -> None:
        self._logger.error("Error processing question in %s stage: %s", stage.value, error)

    def on_complete(self, envelope: AnswerEnvelope) -> None:
        self._logger.info("Question processed in %dms", envelope.processing_time_ms)
