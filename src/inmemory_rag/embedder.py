"""Embedding capability: text -> fixed-length vector."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

import httpx


@runtime_checkable
class Embedder(Protocol):
    """Anything that can turn text into an embedding vector."""

    def embed(self, text: str) -> Sequence[float]: ...


def _http_post(url: str, json: dict, headers: dict, timeout: float) -> httpx.Response:
    """HTTP POST. Split out so tests can mock it."""
    return httpx.post(url, json=json, headers=headers, timeout=timeout)


class SentenceTransformerEmbedder:
    """Local HuggingFace model via sentence-transformers (``local`` extra)."""

    def __init__(self, model_name: str = "sentence-transformers/all-MiniLM-L6-v2") -> None:
        from sentence_transformers import SentenceTransformer

        self.model_name = model_name
        self._model = SentenceTransformer(model_name)

    def embed(self, text: str) -> list[float]:
        return self._model.encode(text).tolist()


class OpenAIEmbedder:
    """Embeddings from an OpenAI-compatible ``/embeddings`` endpoint."""

    def __init__(
        self,
        model: str,
        api_key: str,
        base_url: str = "https://api.openai.com/v1",
        timeout: float = 30.0,
    ) -> None:
        if not api_key:
            raise ValueError("api_key must not be empty")
        self.model = model
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout

    def embed(self, text: str) -> list[float]:
        """Embed one text.

        Raises:
            RuntimeError: If the API answers with a non-200 status or a body
                without an embedding.
        """
        response = _http_post(
            f"{self._base_url}/embeddings",
            json={"model": self.model, "input": text},
            headers={"Authorization": f"Bearer {self._api_key}"},
            timeout=self._timeout,
        )
        if response.status_code != 200:
            raise RuntimeError(
                f"Embedding API error: status {response.status_code}"
            )
        try:
            return list(response.json()["data"][0]["embedding"])
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise RuntimeError(f"Malformed embedding API response: {e}") from e
