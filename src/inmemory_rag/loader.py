"""Load plain-text corpus files."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class SourceDocument:
    """Text read from the corpus plus where it came from."""

    content: str
    metadata: dict[str, str | int] = field(default_factory=dict)


def load_file(path: str | Path) -> SourceDocument:
    """Read one UTF-8 .txt file."""
    path = Path(path)
    return SourceDocument(
        content=path.read_text(encoding="utf-8"),
        metadata={"filename": path.name, "source": str(path)},
    )


def load_directory(data_dir: str | Path) -> list[SourceDocument]:
    """Read every .txt file in ``data_dir``, sorted by filename.

    Raises:
        ValueError: If data_dir doesn't exist or has no .txt files.
    """
    data_dir = Path(data_dir)

    if not data_dir.is_dir():
        raise ValueError(f"Directory does not exist: {data_dir}")

    txt_files = sorted(data_dir.glob("*.txt"))
    if not txt_files:
        raise ValueError(f"No .txt files found in {data_dir}")

    return [load_file(path) for path in txt_files]
