"""Fixed-size character chunking with overlap."""

from __future__ import annotations

from inmemory_rag.loader import SourceDocument


def split_text(text: str, chunk_size: int = 500, chunk_overlap: int = 50) -> list[str]:
    """Split text into windows of ``chunk_size`` characters.

    Consecutive windows share ``chunk_overlap`` characters. Whitespace-only
    windows are dropped.

    Raises:
        ValueError: If chunk_size < 1 or chunk_overlap is not in [0, chunk_size).
    """
    if chunk_size < 1:
        raise ValueError("chunk_size must be positive")
    if not 0 <= chunk_overlap < chunk_size:
        raise ValueError("chunk_overlap must be >= 0 and smaller than chunk_size")

    step = chunk_size - chunk_overlap
    chunks: list[str] = []
    for start in range(0, len(text), step):
        chunk = text[start : start + chunk_size].strip()
        if chunk:
            chunks.append(chunk)
        if start + chunk_size >= len(text):
            break
    return chunks


def split_document(
    document: SourceDocument,
    chunk_size: int = 500,
    chunk_overlap: int = 50,
) -> list[SourceDocument]:
    """Split one document; each chunk keeps the metadata plus ``chunk_index``."""
    return [
        SourceDocument(
            content=chunk,
            metadata={**document.metadata, "chunk_index": i},
        )
        for i, chunk in enumerate(split_text(document.content, chunk_size, chunk_overlap))
    ]


def split_documents(
    documents: list[SourceDocument],
    chunk_size: int = 500,
    chunk_overlap: int = 50,
) -> list[SourceDocument]:
    chunks: list[SourceDocument] = []
    for document in documents:
        chunks.extend(split_document(document, chunk_size, chunk_overlap))
    return chunks
