"""Tests for the HTTP interface."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from inmemory_rag.api import create_app
from inmemory_rag.pipeline import RagPipeline
from inmemory_rag.prompt import PromptTemplate
from inmemory_rag.store import VectorStore


class StubEmbedder:
    def embed(self, text: str) -> list[float]:
        return [1.0, 0.0]


class EchoGenerator:
    def generate(self, prompt: str) -> str:
        return prompt


def _make_client(embedder=None, generator=None, raise_server_exceptions: bool = True) -> TestClient:
    store = VectorStore()
    store.add("cats", "cats are mammals", [1.0, 0.0])
    store.add("stocks", "the stock market fell", [0.0, 1.0])
    pipeline = RagPipeline(
        store=store,
        embedder=embedder or StubEmbedder(),
        generator=generator or EchoGenerator(),
        prompt_template=PromptTemplate("{context}\n{question}"),
        hooks=[],
    )
    return TestClient(create_app(pipeline), raise_server_exceptions=raise_server_exceptions)


class TestAsk:
    def test_should_return_answer_envelope(self):
        client = _make_client()

        response = client.post("/ask", json={"question": "What are cats?"})

        assert response.status_code == 200
        body = response.json()
        assert body["question"] == "What are cats?"
        assert "cats are mammals" in body["answer"]
        assert len(body["retrieved_documents"]) == 1
        doc = body["retrieved_documents"][0]
        assert doc["document_id"] == "cats"
        assert doc["content"] == "cats are mammals"
        assert doc["similarity"] == pytest.approx(1.0)
        assert isinstance(body["processing_time_ms"], int)

    def test_health(self):
        response = _make_client().get("/")

        assert response.status_code == 200
        assert response.text == "RAG application is running!"


class TestErrors:
    def test_missing_question_is_400(self):
        response = _make_client().post("/ask", json={})

        assert response.status_code == 400
        body = response.json()
        assert body["message"] == "Validation failed"
        assert body["error"] == "Bad Request"
        assert body["path"] == "/ask"
        assert "question" in body["details"]

    def test_blank_question_is_400(self):
        response = _make_client().post("/ask", json={"question": "   "})

        assert response.status_code == 400
        assert response.json()["message"] == "Question cannot be empty"

    def test_generation_failure_is_500_with_stage(self):
        generator = MagicMock()
        generator.generate.side_effect = RuntimeError("upstream timeout")

        response = _make_client(generator=generator).post("/ask", json={"question": "q"})

        assert response.status_code == 500
        body = response.json()
        assert body["details"] == {"stage": "generate"}
        assert "upstream timeout" in body["message"]

    def test_retrieval_failure_is_500_with_stage(self):
        embedder = MagicMock()
        embedder.embed.return_value = [1.0, 0.0, 0.0]

        response = _make_client(embedder=embedder).post("/ask", json={"question": "q"})

        assert response.status_code == 500
        assert response.json()["details"] == {"stage": "retrieve"}

    @pytest.mark.parametrize("vector", [[float("nan"), 0.0], ["x", "y"]])
    def test_unusable_embedding_is_500_with_embed_stage(self, vector):
        embedder = MagicMock()
        embedder.embed.return_value = vector

        response = _make_client(embedder=embedder).post("/ask", json={"question": "q"})

        assert response.status_code == 500
        assert response.json()["details"] == {"stage": "embed"}

    def test_unexpected_error_is_generic_500(self):
        store = MagicMock()
        store.search.side_effect = KeyError("boom")
        pipeline = RagPipeline(
            store=store,
            embedder=StubEmbedder(),
            generator=EchoGenerator(),
            hooks=[],
        )
        client = TestClient(create_app(pipeline), raise_server_exceptions=False)

        response = client.post("/ask", json={"question": "q"})

        assert response.status_code == 500
        assert response.json()["message"] == "An unexpected error occurred"
