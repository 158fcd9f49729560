"""CLI interface for browsing a Kavita server using Typer."""

import logging

import httpx
import typer
from markdownify import markdownify
from rich.console import Console
from rich.logging import RichHandler
from rich.markdown import Markdown
from rich.table import Table

from kavita_source.client import KavitaClient
from kavita_source.exceptions import KavitaError
from kavita_source.models import Credentials, NovelItem
from kavita_source.session import SessionManager
from kavita_source.storage import Storage

app = typer.Typer(help="Browse and read EPUB series from a Kavita server")
console = Console()


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log requests and session activity"),
) -> None:
    """Browse and read EPUB series from a Kavita server."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=console, show_path=False)],
        )


def _build_client(storage: Storage) -> KavitaClient:
    transport = httpx.Client(timeout=30.0)
    return KavitaClient(SessionManager(storage, transport), transport)


def _handle_error(e: Exception) -> None:
    """Print a user-facing error and exit."""
    if isinstance(e, KavitaError):
        console.print(f"[red]{e.message}[/red]")
    else:
        console.print(f"[red]Error: {e}[/red]")
    raise typer.Exit(1)


def _print_novels(novels: list[NovelItem]) -> None:
    if not novels:
        console.print("[yellow]No novels found.[/yellow]")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("Path", style="cyan")
    table.add_column("Name")
    for novel in novels:
        table.add_row(novel.path, novel.name)
    console.print(table)


@app.command()
def configure(
    url: str = typer.Option(..., "--url", help="Kavita server URL (e.g., 'http://localhost:5000')"),
    api_key: str = typer.Option(..., "--api-key", help="API key from your Kavita user settings"),
) -> None:
    """Save the server URL and API key."""
    storage = Storage()
    storage.save_credentials(Credentials(url=url, api_key=api_key))
    console.print(f"[green]Saved:[/green] {storage.storage_path}")


@app.command("list")
def list_novels(
    page: int = typer.Option(1, "--page", "-p", help="Page number"),
) -> None:
    """List EPUB novels in the library."""
    client = _build_client(Storage())

    try:
        _print_novels(client.list_novels(page))
    except (KavitaError, httpx.HTTPError) as e:
        _handle_error(e)


@app.command()
def search(
    term: str = typer.Argument(..., help="Series name to search for"),
    page: int = typer.Option(1, "--page", "-p", help="Page number"),
) -> None:
    """Search EPUB novels by series name."""
    client = _build_client(Storage())

    try:
        _print_novels(client.search_novels(term, page))
    except (KavitaError, httpx.HTTPError) as e:
        _handle_error(e)


@app.command()
def show(path: str = typer.Argument(..., help="Novel path ('library/series/chapter')")) -> None:
    """Display novel metadata and its chapters."""
    client = _build_client(Storage())

    try:
        novel = client.get_detail(path)

        console.print(f"\n[bold]{novel.name}[/bold] ({novel.status})")
        if novel.author:
            console.print(f"  Author: {novel.author}")
        if novel.artist:
            console.print(f"  Artist: {novel.artist}")
        if novel.genres:
            console.print(f"  Genres: {novel.genres}")
        if novel.summary:
            console.print()
            console.print(Markdown(markdownify(novel.summary)))

        table = Table(show_header=True, header_style="bold")
        table.add_column("#", justify="right")
        table.add_column("Chapter")
        table.add_column("Path", style="cyan")
        for chapter in novel.chapters:
            table.add_row(str(chapter.chapter_number), chapter.name, chapter.path)
        console.print(table)
    except (KavitaError, httpx.HTTPError) as e:
        _handle_error(e)


@app.command()
def read(
    path: str = typer.Argument(..., help="Chapter path from 'kavita show'"),
    raw: bool = typer.Option(False, "--raw", help="Print page HTML instead of rendering it"),
) -> None:
    """Print a chapter's text."""
    client = _build_client(Storage())

    try:
        content = client.get_content(path)

        if raw:
            typer.echo(content)
        else:
            md = markdownify(content, heading_style="ATX", strip=["script", "style"])
            console.print(Markdown(md))
    except (KavitaError, httpx.HTTPError) as e:
        _handle_error(e)


@app.command()
def url(
    path: str = typer.Argument(..., help="Novel or chapter path"),
    novel: bool = typer.Option(False, "--novel", help="Treat PATH as a novel path"),
) -> None:
    """Print the browser URL for a novel or chapter."""
    client = _build_client(Storage())

    try:
        typer.echo(client.resolve_url(path, is_novel=novel))
    except KavitaError as e:
        _handle_error(e)


if __name__ == "__main__":
    app()
