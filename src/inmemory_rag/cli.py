"""CLI entrypoint for the in-memory RAG pipeline."""

from __future__ import annotations

from pathlib import Path

import typer

from inmemory_rag.config import settings
from inmemory_rag.pipeline import (
    AnswerEnvelope,
    IndexResult,
    RagPipeline,
    build_embedder,
    build_generator,
    index_documents,
)
from inmemory_rag.prompt import PromptTemplate
from inmemory_rag.store import VectorStore

app = typer.Typer(help="In-memory RAG CLI")


def _load_pipeline(
    data_dir: str,
    top_k: int,
    threshold: float,
    template: str | None,
    chunk_size: int,
    chunk_overlap: int,
) -> RagPipeline:
    """Index ``data_dir`` into a fresh store and wire a pipeline over it."""
    store = VectorStore(dimension=settings.embedding_dimension)
    embedder = build_embedder(settings)

    typer.echo(f"Indexing documents from {data_dir} ...")
    result: IndexResult = index_documents(
        store,
        embedder,
        data_dir,
        chunk_size=chunk_size,
        chunk_overlap=chunk_overlap,
    )
    typer.echo(
        f"  Indexed {result.total_chunks} chunks from {result.total_documents} documents"
    )

    prompt_template = Path(template) if template else settings.prompt_template_path
    if isinstance(prompt_template, Path):
        # Fail before the first question rather than on it
        PromptTemplate.from_file(prompt_template)

    return RagPipeline(
        store=store,
        embedder=embedder,
        generator=build_generator(settings),
        top_k=top_k,
        min_similarity=threshold,
        prompt_template=prompt_template,
    )


def _print_envelope(envelope: AnswerEnvelope) -> None:
    typer.echo(f"  Found {len(envelope.retrieved)} relevant documents")
    typer.echo("")
    typer.echo("Answer:")
    typer.echo(f"  {envelope.answer}")
    typer.echo("")

    if envelope.retrieved:
        typer.echo("Sources:")
        for i, doc in enumerate(envelope.retrieved, start=1):
            typer.echo(f"  [{i}] {doc.document_id} (similarity: {doc.similarity:.3f})")
    typer.echo(f"({envelope.processing_time_ms}ms)")


@app.command()
def hello() -> None:
    """Smoke test."""
    typer.echo("RAG pipeline is ready.")


@app.command()
def ask(
    question: str = typer.Argument(..., help="Question to ask"),
    data_dir: str = typer.Option("./data", help="Directory containing .txt files"),
    top_k: int = typer.Option(settings.max_results, help="Maximum number of results"),
    threshold: float = typer.Option(
        settings.similarity_threshold, help="Minimum similarity score"
    ),
    template: str = typer.Option(None, help="Prompt template file"),
    chunk_size: int = typer.Option(settings.chunk_size, help="Characters per chunk"),
    chunk_overlap: int = typer.Option(settings.chunk_overlap, help="Overlap between chunks"),
) -> None:
    """Index a directory, then answer a single question against it."""
    try:
        pipeline = _load_pipeline(
            data_dir, top_k, threshold, template, chunk_size, chunk_overlap
        )
        typer.echo("Searching for relevant documents...")
        envelope = pipeline.answer_question(question)
    except (ValueError, RuntimeError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    _print_envelope(envelope)


@app.command()
def chat(
    data_dir: str = typer.Option("./data", help="Directory containing .txt files"),
    top_k: int = typer.Option(settings.max_results, help="Maximum number of results"),
    threshold: float = typer.Option(
        settings.similarity_threshold, help="Minimum similarity score"
    ),
    template: str = typer.Option(None, help="Prompt template file"),
    chunk_size: int = typer.Option(settings.chunk_size, help="Characters per chunk"),
    chunk_overlap: int = typer.Option(settings.chunk_overlap, help="Overlap between chunks"),
) -> None:
    """Interactive REPL: ask multiple questions."""
    try:
        pipeline = _load_pipeline(
            data_dir, top_k, threshold, template, chunk_size, chunk_overlap
        )
    except (ValueError, RuntimeError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    typer.echo("RAG Chat (type 'quit' or 'exit' to stop)")
    typer.echo("")

    while True:
        try:
            question = input("You: ").strip()
        except (EOFError, KeyboardInterrupt):
            typer.echo("\nGoodbye!")
            break

        if question.lower() in ("quit", "exit", "q"):
            typer.echo("Goodbye!")
            break

        if not question:
            continue

        typer.echo("Searching...")
        try:
            envelope = pipeline.answer_question(question)
        except (ValueError, RuntimeError) as e:
            typer.echo(f"Error: {e}")
            continue

        _print_envelope(envelope)
        typer.echo("")


@app.command()
def serve(
    data_dir: str = typer.Option("./data", help="Directory containing .txt files"),
    host: str = typer.Option(settings.api_host, help="Bind address"),
    port: int = typer.Option(settings.api_port, help="Port"),
) -> None:
    """Index a directory and serve POST /ask over HTTP."""
    import uvicorn

    from inmemory_rag.api import create_app

    try:
        pipeline = _load_pipeline(
            data_dir,
            settings.max_results,
            settings.similarity_threshold,
            None,
            settings.chunk_size,
            settings.chunk_overlap,
        )
    except (ValueError, RuntimeError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    uvicorn.run(create_app(pipeline), host=host, port=port)


if __name__ == "__main__":
    app()
