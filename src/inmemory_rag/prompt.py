"""Context assembly and prompt templating."""

from __future__ import annotations

import re
from collections.abc import Sequence
from pathlib import Path

from inmemory_rag.errors import TemplateError
from inmemory_rag.similarity import RetrievedDocument

DEFAULT_TEMPLATE_PATH = Path(__file__).parent / "prompts" / "rag_template.txt"

PLACEHOLDERS = ("context", "question")

_PLACEHOLDER_RE = re.compile(r"\{([A-Za-z_][A-Za-z0-9_]*)\}")


def format_context(results: Sequence[RetrievedDocument]) -> str:
    """Render retrieved documents as numbered blocks.

    Each result becomes:
        [Document N]
        content

    Blocks are separated by one blank line. No results gives "".
    """
    return "\n\n".join(
        f"[Document {i}]\n{result.content}"
        for i, result in enumerate(results, start=1)
    )


class PromptTemplate:
    """A prompt with exactly the {context} and {question} placeholders."""

    def __init__(self, text: str) -> None:
        found = set(_PLACEHOLDER_RE.findall(text))
        missing = [name for name in PLACEHOLDERS if name not in found]
        if missing:
            raise TemplateError(
                f"Prompt template is missing placeholder(s): "
                f"{', '.join('{' + m + '}' for m in missing)}"
            )
        unknown = sorted(found - set(PLACEHOLDERS))
        if unknown:
            raise TemplateError(
                f"Prompt template has unknown placeholder(s): "
                f"{', '.join('{' + u + '}' for u in unknown)}"
            )
        self._text = text

    @property
    def text(self) -> str:
        return self._text

    @classmethod
    def from_file(cls, path: str | Path) -> PromptTemplate:
        """Read a UTF-8 template file.

        Raises:
            TemplateError: If the file can't be read or is not a valid template.
        """
        try:
            text = Path(path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise TemplateError(f"Failed to load prompt template {path}: {e}") from e
        return cls(text)

    @classmethod
    def default(cls) -> PromptTemplate:
        return cls.from_file(DEFAULT_TEMPLATE_PATH)

    def render(self, context: str, question: str) -> str:
        """Substitute both placeholders in a single pass.

        Placeholder-like text inside ``context`` or ``question`` is left as is.
        """
        values = {"context": context, "question": question}
        return _PLACEHOLDER_RE.sub(lambda m: values[m.group(1)], self._text)
