from pathlib import Path
from typing import Annotated

from rich.console import Console
from rich.table import Table
from typer import Argument, Exit, Option, Typer

from .config import load_config
from .errors import ArchiveError
from .logging_config import configure_logging
from .services import ArchiveServices, build_services
from .server import run_server

app = Typer(help="TimeArchive: document archive with semantic search.")
console = Console()


def _services(db_path: str | None) -> ArchiveServices:
    config = load_config(db_path=db_path)
    configure_logging(config.log_level, json_logs=config.log_json)
    return build_services(config)


@app.command()
def serve(
    host: Annotated[str, Option("--host", help="Interface to bind.")] = "127.0.0.1",
    port: Annotated[int, Option("--port", "-p", help="Port to listen on.")] = 4000,
    db_path: Annotated[str | None, Option("--db-path", help="DuckDB file.")] = None,
) -> None:
    """Run the HTTP API."""
    run_server(_services(db_path), host=host, port=port)


@app.command()
def ingest(
    title: Annotated[str, Option("--title", "-t", help="Document title.")] = "",
    date: Annotated[str, Option("--date", "-d", help="Free-form date label.")] = "",
    text: Annotated[str | None, Option("--text", help="Document text.")] = None,
    file: Annotated[
        Path | None, Option("--file", "-f", help="PDF (or other file with --text).")
    ] = None,
    db_path: Annotated[str | None, Option("--db-path", help="DuckDB file.")] = None,
) -> None:
    """Store a document and its embedding."""
    if text is None and file is None:
        console.print("[bold red]Provide --text or --file[/]")
        raise Exit(code=2)

    services = _services(db_path)
    try:
        if file is not None:
            result = services.ingestion.ingest_file(
                str(file.resolve()),
                filename=file.name,
                title=title or None,
                date=date,
                fallback_text=text or "",
            )
        else:
            result = services.ingestion.ingest_text(title=title, date=date, text=text or "")
    except ArchiveError as exc:
        console.print(f"[bold red]{exc.kind}:[/] {exc}")
        raise Exit(code=1)
    finally:
        services.close()

    state = "embedded" if result.embedded else "not embedded"
    console.print(f"Stored [bold]{result.document_id}[/] ({state}, {result.chunks} chunks)")


@app.command()
def search(
    query: Annotated[str, Argument(help="Free-text query.")],
    page: Annotated[int, Option("--page", help="1-based page number.")] = 1,
    limit: Annotated[int, Option("--limit", "-l", help="Results per page.")] = 10,
    db_path: Annotated[str | None, Option("--db-path", help="DuckDB file.")] = None,
) -> None:
    """Rank archived documents against a query."""
    services = _services(db_path)
    try:
        result = services.search_engine.search(query, page=page, limit=limit)
    except ArchiveError as exc:
        console.print(f"[bold red]{exc.kind}:[/] {exc}")
        raise Exit(code=1)
    finally:
        services.close()

    table = Table(title=f"{result.total} matches (page {result.page})")
    table.add_column("Score", justify="right")
    table.add_column("Title")
    table.add_column("Date")
    table.add_column("Id", style="dim")
    for item in result.results:
        table.add_row(f"{item.score:.4f}", item.title, item.date, item.id)
    console.print(table)


@app.command("create-user")
def create_user(
    email: Annotated[str, Argument(help="Login email.")],
    password: Annotated[str, Option("--password", prompt=True, hide_input=True)],
    role: Annotated[str, Option("--role", help="admin, editor or viewer.")] = "editor",
    db_path: Annotated[str | None, Option("--db-path", help="DuckDB file.")] = None,
) -> None:
    """Register a user directly in the store."""
    services = _services(db_path)
    try:
        user = services.auth.register(email, password, role)  # type: ignore[arg-type]
    except (ArchiveError, ValueError) as exc:
        console.print(f"[bold red]Error:[/] {exc}")
        raise Exit(code=1)
    finally:
        services.close()
    console.print(f"Created [bold]{user.email}[/] ({user.role})")
