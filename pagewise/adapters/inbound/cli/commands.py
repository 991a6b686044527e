"""CLI interface for pagewise."""

import json

import typer
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from ....composition import container
from ....config import settings
from ....config.logging import setup_logging
from ....core.domain import ChatMessage, CitationEvent, FinishEvent, TextEvent
from ...common.exception_handler import format_exception_json, get_error_code

app = typer.Typer(
    name="pagewise",
    help="pagewise - chat with the web pages you have saved",
    add_completion=False,
)

console = Console(force_terminal=True, legacy_windows=False)

USER_OPTION = typer.Option(
    None, "--user", "-u", help="Owner id of the corpus (defaults to CLI_USER_ID)"
)


def handle_cli_error(exc: Exception) -> None:
    """Handle and display errors in CLI with structured format.

    In debug mode, shows full JSON error details.
    In normal mode, shows a user-friendly message with error code.

    Args:
        exc: The exception to handle.
    """
    error_data = format_exception_json(exc, include_trace=settings.debug)

    if settings.debug:
        console.print(
            Panel(
                json.dumps(error_data, indent=2),
                title="[bold red]Error Details[/]",
                border_style="red",
            )
        )
        return

    error = error_data["error"]
    console.print(f"\n[red]Error [{get_error_code(exc)}]:[/] {error['message']}")
    console.print(f"[dim]Type: {error['type']}[/]")
    console.print("[dim]Set DEBUG=true for full details[/]")


def _owner(user: str | None) -> str:
    return user or settings.cli_user_id


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level")) -> None:
    setup_logging("DEBUG" if verbose else settings.log_level, json_format=settings.log_json)


def _stream_answer(messages: list[ChatMessage], owner_id: str) -> str:
    """Print an answer as it streams and return its full text."""
    service = container.get_chat_service()
    with console.status("[bold green]Searching your pages...[/]"):
        events = service.answer(messages, owner_id)

    citations: list[CitationEvent] = []
    parts: list[str] = []
    grounded = False
    try:
        for event in events:
            if isinstance(event, CitationEvent):
                citations.append(event)
            elif isinstance(event, TextEvent):
                parts.append(event.delta)
                console.print(event.delta, end="", markup=False, highlight=False)
            elif isinstance(event, FinishEvent):
                grounded = event.grounded
    finally:
        events.close()
    console.print()

    if citations:
        console.print("\n[dim]Sources:[/]")
        for number, citation in enumerate(citations, 1):
            console.print(
                f"  [dim]{number}. {citation.title} ({citation.similarity:.2f}) {citation.url}[/]"
            )
    elif not grounded:
        console.print("\n[yellow]No saved page matched this question.[/]")

    return "".join(parts)


@app.command()
def ingest(
    url: str = typer.Argument(..., help="Web page to save"),
    user: str | None = USER_OPTION,
) -> None:
    """Scrape a page and add it to your corpus."""
    try:
        with console.status(f"[bold green]Ingesting {url}...[/]"):
            result = container.get_ingestion_service().ingest(url, _owner(user))
    except Exception as exc:
        handle_cli_error(exc)
        raise typer.Exit(1)

    doc = result.document
    console.print(f"[green]Saved[/] {doc.display_name} [dim]({doc.doc_id})[/]")
    console.print(f"[dim]{result.chunk_count} chunks indexed[/]")


@app.command()
def ask(
    question: str = typer.Argument(..., help="Question about your saved pages"),
    user: str | None = USER_OPTION,
) -> None:
    """Ask a single question and stream the answer."""
    try:
        _stream_answer([ChatMessage(role="user", content=question)], _owner(user))
    except Exception as exc:
        handle_cli_error(exc)
        raise typer.Exit(1)


@app.command()
def chat(user: str | None = USER_OPTION) -> None:
    """Start an interactive chat session over your saved pages."""
    console.print(
        Panel.fit(
            "[bold]pagewise[/]\n"
            "[dim]Answers come from the pages you have saved.[/]\n\n"
            "[dim]Type 'quit' or 'exit' to leave[/]",
            title="Welcome",
            border_style="cyan",
        )
    )

    owner_id = _owner(user)
    history: list[ChatMessage] = []
    while True:
        query = Prompt.ask("\n[bold cyan]You[/]")
        if query.lower() in ("quit", "exit", "q"):
            console.print("[dim]Goodbye![/]")
            break
        if not query.strip():
            continue

        history.append(ChatMessage(role="user", content=query))
        try:
            answer = _stream_answer(history, owner_id)
        except KeyboardInterrupt:
            console.print("\n[dim]Interrupted.[/]")
            history.pop()
            continue
        except Exception as exc:
            handle_cli_error(exc)
            history.pop()
            continue
        history.append(ChatMessage(role="assistant", content=answer))


@app.command()
def documents(user: str | None = USER_OPTION) -> None:
    """List your saved pages, newest first."""
    try:
        docs = container.get_ingestion_service().list_documents(_owner(user))
    except Exception as exc:
        handle_cli_error(exc)
        raise typer.Exit(1)

    if not docs:
        console.print("[yellow]No saved pages yet. Run 'pagewise ingest <url>' to add one.[/]")
        return

    table = Table(title=f"{len(docs)} saved pages")
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Title")
    table.add_column("URL", style="cyan")
    table.add_column("Saved", style="dim")
    for doc in docs:
        table.add_row(doc.doc_id, doc.display_name, doc.url, doc.created_at.strftime("%Y-%m-%d"))
    console.print(table)


@app.command()
def delete(
    document_id: str = typer.Argument(..., help="Id of the page to delete"),
    user: str | None = USER_OPTION,
) -> None:
    """Delete a saved page and its chunks."""
    try:
        container.get_ingestion_service().delete(document_id, _owner(user))
    except Exception as exc:
        handle_cli_error(exc)
        raise typer.Exit(1)
    console.print(f"[green]Deleted[/] {document_id}")


@app.command()
def graph(
    threshold: float = typer.Option(
        settings.graph_threshold, help="Link pages more similar than this"
    ),
    as_json: bool = typer.Option(False, "--json", help="Print nodes and links as JSON"),
    user: str | None = USER_OPTION,
) -> None:
    """Show which of your pages are similar to each other."""
    try:
        result = container.get_graph_service().build_graph(_owner(user), threshold=threshold)
    except Exception as exc:
        handle_cli_error(exc)
        raise typer.Exit(1)

    if as_json:
        console.print_json(data=result.to_dict())
        return

    names = {node.id: node.name for node in result.nodes}
    console.print(f"[bold]{len(result.nodes)} pages, {len(result.edges)} links[/]")
    table = Table()
    table.add_column("Page")
    table.add_column("Page")
    table.add_column("Similarity", justify="right")
    for edge in sorted(result.edges, key=lambda e: e.value, reverse=True):
        table.add_row(names[edge.source], names[edge.target], f"{edge.value:.3f}")
    console.print(table)


@app.command()
def status() -> None:
    """Show configuration and vector store status."""
    console.print("[bold]pagewise status[/]\n")

    if settings.google_api_key:
        console.print("✅ Google API key configured")
    else:
        console.print("❌ Google API key not set (set GOOGLE_API_KEY in .env)")

    console.print(f"Vector backend: [cyan]{settings.vector_backend}[/]")
    try:
        stats = container.get_vector_store().get_stats()
    except Exception as exc:
        handle_cli_error(exc)
        raise typer.Exit(1)
    console.print(f"  documents: {stats.get('documents', 0)}")
    console.print(f"  chunks: {stats.get('chunks', 0)}")


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", help="Interface to bind"),
    port: int = typer.Option(8000, help="Port to listen on"),
    reload: bool = typer.Option(False, help="Reload on code changes"),
) -> None:
    """Run the HTTP API."""
    import uvicorn

    uvicorn.run(
        "pagewise.adapters.inbound.api.main:app",
        host=host,
        port=port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    app()
