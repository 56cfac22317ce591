import sys
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import httpx
import numpy as np
import pytest

from inmemory_rag.embedder import Embedder, OpenAIEmbedder, SentenceTransformerEmbedder


def _mock_response(status_code: int, payload: dict | None = None) -> httpx.Response:
    request = httpx.Request("POST", "https://api.example.com/v1/embeddings")
    return httpx.Response(status_code, json=payload or {}, request=request)


class TestOpenAIEmbedder:
    """OpenAI-compatible /embeddings backend."""

    def test_should_return_embedding(self):
        # Given
        payload = {"data": [{"embedding": [0.1, -0.2, 0.3], "index": 0}]}

        with patch(
            "inmemory_rag.embedder._http_post", return_value=_mock_response(200, payload)
        ) as m:
            # When
            vector = OpenAIEmbedder(
                model="text-embedding-3-small", api_key="sk-test", timeout=5.0
            ).embed("hello")

        # Then
        assert vector == [0.1, -0.2, 0.3]
        assert m.call_args[0][0] == "https://api.openai.com/v1/embeddings"
        assert m.call_args[1]["json"] == {"model": "text-embedding-3-small", "input": "hello"}
        assert m.call_args[1]["timeout"] == 5.0

    def test_should_raise_on_error_status(self):
        with patch("inmemory_rag.embedder._http_post", return_value=_mock_response(500)):
            with pytest.raises(RuntimeError, match="Embedding API error: status 500"):
                OpenAIEmbedder(model="m", api_key="k").embed("hello")

    def test_should_raise_on_malformed_body(self):
        with patch("inmemory_rag.embedder._http_post", return_value=_mock_response(200, {"data": []})):
            with pytest.raises(RuntimeError, match="Malformed"):
                OpenAIEmbedder(model="m", api_key="k").embed("hello")

    def test_should_require_api_key(self):
        with pytest.raises(ValueError):
            OpenAIEmbedder(model="m", api_key="")

    def test_should_satisfy_protocol(self):
        assert isinstance(OpenAIEmbedder(model="m", api_key="k"), Embedder)


class TestSentenceTransformerEmbedder:
    """Local model backend, with the model class mocked out."""

    def test_should_encode_with_named_model(self):
        # Given
        model = MagicMock()
        model.encode.return_value = np.array([0.5, 0.25], dtype=np.float32)
        fake_module = SimpleNamespace(SentenceTransformer=MagicMock(return_value=model))

        with patch.dict(sys.modules, {"sentence_transformers": fake_module}):
            # When
            embedder = SentenceTransformerEmbedder("some/model")
            vector = embedder.embed("hello")

        # Then
        fake_module.SentenceTransformer.assert_called_once_with("some/model")
        model.encode.assert_called_once_with("hello")
        assert vector == [0.5, 0.25]
        assert all(isinstance(v, float) for v in vector)
