"""Tests for context assembly and prompt templates."""

from __future__ import annotations

import pytest

from inmemory_rag.errors import TemplateError
from inmemory_rag.prompt import DEFAULT_TEMPLATE_PATH, PromptTemplate, format_context
from inmemory_rag.similarity import RetrievedDocument


def _result(content: str, similarity: float = 0.9, doc_id: str = "doc") -> RetrievedDocument:
    return RetrievedDocument(document_id=doc_id, content=content, similarity=similarity)


# --- Group A: context assembly ---


class TestFormatContext:
    def test_empty_results_give_empty_string(self):
        assert format_context([]) == ""

    def test_single_result(self):
        assert format_context([_result("cats are mammals")]) == "[Document 1]\ncats are mammals"

    def test_numbered_blocks_separated_by_blank_line(self):
        context = format_context([_result("first"), _result("second"), _result("third")])

        assert context == (
            "[Document 1]\nfirst\n\n"
            "[Document 2]\nsecond\n\n"
            "[Document 3]\nthird"
        )
        assert not context.endswith("\n")

    def test_keeps_given_order(self):
        context = format_context([_result("low", 0.1), _result("high", 0.9)])
        assert context.index("low") < context.index("high")


# --- Group B: templates ---


class TestPromptTemplate:
    def test_render_substitutes_both_placeholders(self):
        template = PromptTemplate("Context:\n{context}\n\nQ: {question}")

        prompt = template.render(context="[Document 1]\nfacts", question="why?")

        assert prompt == "Context:\n[Document 1]\nfacts\n\nQ: why?"

    def test_placeholder_text_in_values_is_not_expanded(self):
        template = PromptTemplate("{context} | {question}")

        prompt = template.render(context="see {question}", question="what is {context}?")

        assert prompt == "see {question} | what is {context}?"

    def test_non_identifier_braces_are_literal(self):
        template = PromptTemplate('Reply as {"answer": "..."}\n{context}\n{question}')
        assert template.render(context="c", question="q").startswith('Reply as {"answer"')

    @pytest.mark.parametrize("text", ["{context} only", "{question} only", "no placeholders"])
    def test_missing_placeholder_raises(self, text):
        with pytest.raises(TemplateError, match="missing"):
            PromptTemplate(text)

    def test_unknown_placeholder_raises(self):
        with pytest.raises(TemplateError, match="unknown"):
            PromptTemplate("{context} {question} {history}")

    def test_from_file(self, tmp_path):
        path = tmp_path / "template.txt"
        path.write_text("Docs: {context}\nQuestion: {question}", encoding="utf-8")

        template = PromptTemplate.from_file(path)

        assert template.render(context="c", question="q") == "Docs: c\nQuestion: q"

    def test_from_missing_file_raises(self, tmp_path):
        with pytest.raises(TemplateError, match="Failed to load"):
            PromptTemplate.from_file(tmp_path / "missing.txt")

    def test_template_error_is_runtime_error(self):
        with pytest.raises(RuntimeError):
            PromptTemplate("nothing")

    def test_bundled_default_is_valid(self):
        assert DEFAULT_TEMPLATE_PATH.exists()
        prompt = PromptTemplate.default().render(context="CTX", question="QQ")
        assert "CTX" in prompt
        assert "QQ" in prompt
