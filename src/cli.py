"""CLI interface for spacetraveling."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from spacetraveling.blog.context import RenderContext
from spacetraveling.blog.derive import is_edited, reading_time
from spacetraveling.blog.formatting import DATE_PATTERN, EDITED_PATTERN, display_date
from spacetraveling.blog.neighbors import resolve_adjacent_posts
from spacetraveling.blog.pagination import PaginationController
from spacetraveling.cms.client import ContentClient, PrismicClient
from spacetraveling.config import SpacetravelingConfig, load_config, merge_cli_overrides
from spacetraveling.errors import CMSFetchError, ConfigError, DocumentNotFoundError
from spacetraveling.export.builder import build_site, home_query

app = typer.Typer(
    name="spacetraveling",
    help="Render a Prismic-backed blog as a static site or serve it live.",
    no_args_is_help=True,
)

console = Console()
logger = logging.getLogger(__name__)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from spacetraveling import __version__

        console.print(f"spacetraveling {__version__}")
        raise typer.Exit()


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _make_client(config: SpacetravelingConfig) -> ContentClient:
    return PrismicClient(config.cms)


def _override_or_exit(config: SpacetravelingConfig, **flags: object) -> SpacetravelingConfig:
    try:
        return merge_cli_overrides(config, **flags)
    except ConfigError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(1) from exc


def _client_or_exit(config: SpacetravelingConfig) -> ContentClient:
    try:
        return _make_client(config)
    except ConfigError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(1) from exc


@app.callback()
def main(
    ctx: typer.Context,
    config_path: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Path to a .spacetraveling.toml file."),
    ] = None,
    endpoint: Annotated[
        Optional[str],
        typer.Option("--endpoint", help="Content API endpoint (overrides config)."),
    ] = None,
    verbose: Annotated[
        bool, typer.Option("--verbose", help="Enable debug logging.")
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
) -> None:
    """spacetraveling - a static blog front-end for a headless CMS."""
    _setup_logging(verbose)
    try:
        config = load_config(config_path)
    except ConfigError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(1) from exc
    ctx.obj = _override_or_exit(config, api_endpoint=endpoint)


@app.command()
def build(
    ctx: typer.Context,
    out: Annotated[
        Optional[Path],
        typer.Option("--out", "-o", help="Output directory. Defaults to site.output_dir."),
    ] = None,
) -> None:
    """Render every page into a static site directory."""
    config: SpacetravelingConfig = ctx.obj
    output_dir = out or Path(config.site.output_dir)
    client = _client_or_exit(config)

    console.print(f"Building site into: {output_dir}")
    report = build_site(client, config, output_dir)

    console.print(f"[green]Wrote {len(report.pages_written)} page(s)[/green]")
    if not report.ok:
        console.print(f"[red]{len(report.failures)} page(s) failed:[/red]")
        for failure in report.failures:
            console.print(f"  - {failure.route}: {failure.error_type}: {failure.error}")
        raise typer.Exit(1)


@app.command()
def serve(
    ctx: typer.Context,
    host: Annotated[Optional[str], typer.Option("--host", help="Bind address.")] = None,
    port: Annotated[Optional[int], typer.Option("--port", "-p", help="Bind port.")] = None,
) -> None:
    """Serve the site live, rendering pages on demand."""
    import uvicorn

    from spacetraveling.server import create_app

    config = _override_or_exit(ctx.obj, host=host, port=port)
    client = _client_or_exit(config)
    console.print(f"Serving on http://{config.server.host}:{config.server.port}")
    uvicorn.run(create_app(config, client), host=config.server.host, port=config.server.port)


@app.command()
def posts(
    ctx: typer.Context,
    all_pages: Annotated[
        bool, typer.Option("--all", help="Follow the cursor through every page.")
    ] = False,
    page_size: Annotated[
        Optional[int], typer.Option("--page-size", help="Posts per page.")
    ] = None,
) -> None:
    """List posts, newest first."""
    config = _override_or_exit(ctx.obj, page_size=page_size)
    client = _client_or_exit(config)

    try:
        controller = PaginationController(
            client, home_query(client, config, RenderContext.published())
        )
        if all_pages:
            controller.load_all()
    except CMSFetchError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(1) from exc

    state = controller.state
    if not state.results:
        console.print("[yellow]No posts found.[/yellow]")
        raise typer.Exit(0)

    table = Table(title=config.site.title)
    table.add_column("uid")
    table.add_column("Title")
    table.add_column("Author")
    table.add_column("Published")
    for document in state.results:
        table.add_row(
            document.uid or "-",
            document.data.title,
            document.data.author,
            display_date(
                document.first_publication_date,
                DATE_PATTERN,
                locale=config.site.locale,
                tz=config.site.timezone,
            ),
        )
    console.print(table)
    if state.has_more:
        console.print("[dim]More posts available; use --all to list every page.[/dim]")


@app.command()
def show(
    ctx: typer.Context,
    uid: Annotated[str, typer.Argument(help="Post uid (slug).")],
) -> None:
    """Show a post's reading time, edit status and neighbors."""
    config: SpacetravelingConfig = ctx.obj
    client = _client_or_exit(config)
    context = RenderContext.published()
    doc_type = config.cms.document_type

    try:
        document = client.get_by_uid(doc_type, uid)
        adjacent = resolve_adjacent_posts(client, document.id, context, doc_type=doc_type)
    except DocumentNotFoundError as exc:
        console.print(f"[red]Not found:[/red] {uid}")
        raise typer.Exit(1) from exc
    except CMSFetchError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(1) from exc

    fmt = {"locale": config.site.locale, "tz": config.site.timezone}
    console.print(f"[bold]{document.data.title}[/bold]")
    console.print(f"Author: {document.data.author}")
    console.print(
        f"Published: {display_date(document.first_publication_date, DATE_PATTERN, **fmt)}"
    )
    console.print(f"Reading time: {reading_time(document.data.content)} min")
    if is_edited(document.first_publication_date, document.last_publication_date):
        edited_at = display_date(document.last_publication_date, EDITED_PATTERN, **fmt)
        console.print(f"Edited: {edited_at}")
    if adjacent.previous:
        console.print(f"Previous: {adjacent.previous.data.title} ({adjacent.previous.route})")
    if adjacent.next:
        console.print(f"Next: {adjacent.next.data.title} ({adjacent.next.route})")
