"""
Command-line interface for Comic Client.

This module provides a small CLI for loading pages of the comics site from
a terminal, built with Typer and Rich. It is mostly useful to inspect what
a page loader returns, comment trees in particular.
"""

import json
from typing import Any, Dict, List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.tree import Tree

from comic_client import __version__
from comic_client.constants import MAX_COMMENT_DEPTH, LoaderState
from comic_client.core.comment_tree import count_comments
from comic_client.core.models import Chapter, Comic, ComicGenre, LoadResult
from comic_client.exceptions import ComicClientError
from comic_client.loaders import EnvCredentialProvider, StaticCredentialProvider, get_available_pages
from comic_client.services.page_service import PageService
from comic_client.utils.http import APIClient
from comic_client.utils.logging import configure_logging, get_logger

# Initialize Typer app
app = typer.Typer(
    name="comic-client",
    help="Load pages of the comics site API from the command line",
    add_completion=False,
)

# Initialize console for rich output
console = Console()
logger = get_logger(__name__)

EXIT_FAILURE = 1
EXIT_REDIRECT = 2

_options: Dict[str, Any] = {}


def version_callback(value: bool) -> None:
    """Print version information and exit."""
    if value:
        console.print(
            Panel.fit(
                f"[bold]Comic Client[/bold] [cyan]v{__version__}[/cyan]",
                border_style="cyan",
            )
        )
        raise typer.Exit()


@app.callback()
def main(
    base_url: Optional[str] = typer.Option(
        None, "--base-url", "-u", help="API base URL (defaults to COMIC_API_BASE_URL)"
    ),
    token: Optional[str] = typer.Option(
        None, "--token", help="Session token (defaults to the COMIC_AUTH_TOKEN variable)"
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Log requests at debug level"),
    version: bool = typer.Option(
        False, "--version", "-v", help="Show version and exit", callback=version_callback,
        is_eager=True,
    ),
):
    """
    Comic Client - load comics, chapters and comment threads.
    """
    try:
        configure_logging("DEBUG" if verbose else None)
    except ComicClientError as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(code=EXIT_FAILURE)
    _options["base_url"] = base_url
    _options["token"] = token


def _service(depth: Optional[int] = None) -> PageService:
    credentials = (
        StaticCredentialProvider(_options["token"])
        if _options.get("token")
        else EnvCredentialProvider()
    )
    return PageService(
        client=APIClient(base_url=_options.get("base_url")),
        credentials=credentials,
        depth=depth,
    )


def _exit_unless_ok(result: LoadResult) -> None:
    """Print a failed or redirected result and exit with the matching code."""
    if result.state == LoaderState.REDIRECT:
        console.print(
            f"[yellow]Authentication required:[/yellow] redirect ({result.status}) to {result.location}"
        )
        raise typer.Exit(code=EXIT_REDIRECT)
    if result.state == LoaderState.FAILURE:
        status = result.status if result.status is not None else result.kind.value
        console.print(f"[bold red]Error {status}:[/bold red] {result.message}")
        raise typer.Exit(code=EXIT_FAILURE)


def _add_comments(tree: Tree, comments: List[Dict[str, Any]]) -> None:
    for comment in comments:
        user = comment.get("user") or {}
        author = user.get("username", "unknown") if isinstance(user, dict) else "unknown"
        branch = tree.add(f"[cyan]{escape(str(author))}[/cyan]: {escape(str(comment.get('content') or ''))}")
        _add_comments(branch, comment.get("child_comments") or [])


def _print_comments(title: str, comments: List[Dict[str, Any]]) -> None:
    tree = Tree(f"[bold]{title}[/bold] ({count_comments(comments)} comments shown)")
    _add_comments(tree, comments)
    console.print(tree)


def _call(command: str, method: str, *args, depth: Optional[int] = None) -> Any:
    """Build the page service and call one of its methods, exiting on client errors."""
    try:
        return getattr(_service(depth), method)(*args)
    except ComicClientError as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        logger.error(f"Error in {command} command: {e}")
        raise typer.Exit(code=EXIT_FAILURE)


def _run(command: str, method: str, *args, depth: Optional[int] = None) -> LoadResult:
    result = _call(command, method, *args, depth=depth)
    _exit_unless_ok(result)
    return result


@app.command("comic")
def comic_command(
    username: str = typer.Argument(..., help="Author username"),
    comic_slug: str = typer.Argument(..., help="Comic slug"),
    depth: Optional[int] = typer.Option(
        None, "--depth", "-d", min=0, max=MAX_COMMENT_DEPTH,
        help="Comment levels to show (defaults to COMMENT_MAX_DEPTH)",
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the raw page data as JSON"),
) -> None:
    """
    Show a comic and its comment thread.
    """
    result = _run("comic", "load_comic", username, comic_slug, depth=depth)
    if as_json:
        console.print_json(json.dumps(result.data, default=str))
        return

    comic = Comic.model_validate(result.data["comic"])
    byline = f" by {escape(comic.author.username)}" if comic.author else ""
    console.print(Panel.fit(f"[bold]{escape(comic.title)}[/bold]{byline}", border_style="green"))
    if comic.description:
        console.print(escape(comic.description))
    if comic.chapters:
        console.print(f"{len(comic.chapters)} chapter(s)")
    _print_comments("Comments", result.data["comments"])


@app.command("chapter")
def chapter_command(
    username: str = typer.Argument(..., help="Author username"),
    comic_slug: str = typer.Argument(..., help="Comic slug"),
    chapter_number: int = typer.Argument(..., min=1, help="Chapter number"),
    depth: Optional[int] = typer.Option(
        None, "--depth", "-d", min=0, max=MAX_COMMENT_DEPTH,
        help="Comment levels to show (defaults to COMMENT_MAX_DEPTH)",
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the raw page data as JSON"),
) -> None:
    """
    Show a chapter and its comment thread.
    """
    result = _run("chapter", "load_chapter", username, comic_slug, chapter_number, depth=depth)
    if as_json:
        console.print_json(json.dumps(result.data, default=str))
        return

    chapter = Chapter.model_validate(result.data["chapter"])
    title = chapter.title or f"Chapter {chapter.number}"
    console.print(Panel.fit(f"[bold]{escape(title)}[/bold]", border_style="green"))
    _print_comments("Comments", result.data["comments"])


@app.command("genres")
def genres_command() -> None:
    """
    List the comic genres.
    """
    result = _run("genres", "load_comic_genres")

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("ID")
    table.add_column("Genre")
    for genre in (ComicGenre.model_validate(item) for item in result.data["genres"]):
        table.add_row(str(genre.id), escape(genre.name))
    console.print(table)


@app.command("whoami")
def whoami_command() -> None:
    """
    Show the user the session token belongs to.
    """
    user = _call("whoami", "current_user")
    if user is None:
        console.print("[yellow]Not signed in.[/yellow]")
        return
    console.print(f"Signed in as [cyan]{user.get('username')}[/cyan]")


@app.command("pages")
def pages_command() -> None:
    """
    List the available page loaders.
    """
    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Page")
    table.add_column("Description")
    for name, description in get_available_pages().items():
        table.add_row(name, description)
    console.print(table)


if __name__ == "__main__":
    app()
