"""Generation capability: prompt -> text."""

from __future__ import annotations

import subprocess
from typing import Protocol, runtime_checkable

import httpx


@runtime_checkable
class Generator(Protocol):
    """Anything that can answer a fully rendered prompt."""

    def generate(self, prompt: str) -> str: ...


def _http_post(url: str, json: dict, headers: dict, timeout: float) -> httpx.Response:
    """HTTP POST. Split out so tests can mock it."""
    return httpx.post(url, json=json, headers=headers, timeout=timeout)


class ClaudeCodeGenerator:
    """Generate answers using Claude Code CLI as LLM backend."""

    def __init__(self, timeout: float = 120.0) -> None:
        self._timeout = timeout

    def generate(self, prompt: str) -> str:
        """Call Claude Code CLI via subprocess.

        Raises:
            RuntimeError: If the CLI exits with a non-zero status.
            subprocess.TimeoutExpired: If the CLI runs past the timeout.
        """
        result = subprocess.run(
            ["claude", "-p", prompt],
            capture_output=True,
            text=True,
            timeout=self._timeout,
        )
        if result.returncode != 0:
            raise RuntimeError(
                f"Claude Code CLI failed: {result.stderr.strip()}"
            )
        return result.stdout.strip()


class OpenAIChatGenerator:
    """Single-turn completion against an OpenAI-compatible chat API."""

    def __init__(
        self,
        model: str,
        api_key: str,
        base_url: str = "https://api.openai.com/v1",
        timeout: float = 120.0,
    ) -> None:
        if not api_key:
            raise ValueError("api_key must not be empty")
        self.model = model
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout

    def generate(self, prompt: str) -> str:
        response = _http_post(
            f"{self._base_url}/chat/completions",
            json={
                "model": self.model,
                "messages": [{"role": "user", "content": prompt}],
            },
            headers={"Authorization": f"Bearer {self._api_key}"},
            timeout=self._timeout,
        )
        if response.status_code != 200:
            raise RuntimeError(f"Chat API error: status {response.status_code}")
        try:
            content = response.json()["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise RuntimeError(f"Malformed chat API response: {e}") from e
        return (content or "").strip()
