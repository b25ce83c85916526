"""CLI interface for seosync."""

import json
import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from seosync.config import load_config, merge_cli_overrides
from seosync.errors import (
    NotFoundError,
    RemoteMutationError,
    RemoteQueryError,
    SEOSyncError,
    ValidationError,
)
from seosync.models import ContentEntity, EntityType, SEOUpdateRequest
from seosync.services import SEOSyncService

app = typer.Typer(
    name="seosync",
    help="Edit SEO titles and descriptions for Shopify products, pages and articles.",
    no_args_is_help=True,
)

console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from seosync import __version__

        console.print(f"seosync {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    config_path: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Path to a .seosync.toml file."),
    ] = None,
    shop: Annotated[
        Optional[str],
        typer.Option("--shop", help="Store domain, e.g. my-store.myshopify.com."),
    ] = None,
    token: Annotated[
        Optional[str],
        typer.Option("--token", help="Admin API access token."),
    ] = None,
    all_pages: Annotated[
        Optional[bool],
        typer.Option("--all/--first-page", help="Follow cursors through every page."),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Log remote calls."),
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
    """seosync - SEO metadata editor for Shopify content."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=console, show_path=False)],
        )
    ctx.obj = {
        "config_path": config_path,
        "shop": shop,
        "token": token,
        "follow_cursors": all_pages,
    }


def _build_service(ctx: typer.Context) -> SEOSyncService:
    opts = ctx.obj or {}
    config = load_config(opts.get("config_path"))
    config = merge_cli_overrides(
        config,
        shop=opts.get("shop"),
        token=opts.get("token"),
        follow_cursors=opts.get("follow_cursors"),
    )
    return SEOSyncService.from_config(config)


def _fail(exc: SEOSyncError) -> typer.Exit:
    if isinstance(exc, RemoteMutationError):
        console.print(f"[red]Update rejected:[/red] {exc}")
    elif isinstance(exc, ValidationError):
        console.print(f"[red]Invalid request:[/red] {exc}")
    elif isinstance(exc, (NotFoundError, RemoteQueryError)):
        console.print(f"[red]Could not load:[/red] {exc}")
    else:
        console.print(f"[red]Error:[/red] {exc}")
    return typer.Exit(1)


def _entity_dict(entity: ContentEntity) -> dict[str, object]:
    return entity.model_dump(mode="json", exclude_none=True)


def _entity_table(title: str, entities: list[ContentEntity]) -> Table:
    table = Table(title=title)
    table.add_column("ID", overflow="fold")
    table.add_column("Title")
    table.add_column("Handle")
    table.add_column("SEO title")
    table.add_column("SEO description")
    for entity in entities:
        table.add_row(
            entity.id,
            entity.title,
            entity.handle,
            entity.seo.title or "[dim]-[/dim]",
            entity.seo.description or "[dim]-[/dim]",
        )
    return table


@app.command("list")
def list_cmd(
    ctx: typer.Context,
    entity_type: Annotated[EntityType, typer.Argument(help="product, page or article.")],
    blog: Annotated[
        Optional[str],
        typer.Option("--blog", "-b", help="Blog id (articles only). Defaults to the first blog."),
    ] = None,
    as_json: Annotated[bool, typer.Option("--json", help="Print JSON instead of a table.")] = False,
) -> None:
    """List entities of one type with their SEO fields."""
    try:
        service = _build_service(ctx)
        scope = blog
        if entity_type is EntityType.ARTICLE and scope is None:
            blogs = service.fetch_blogs()
            if not blogs:
                console.print("[yellow]This store has no blogs.[/yellow]")
                raise typer.Exit(0)
            scope = blogs[0].id
        entities = service.fetch_entities(entity_type, scope=scope)
    except SEOSyncError as exc:
        raise _fail(exc) from exc

    if as_json:
        typer.echo(json.dumps([_entity_dict(e) for e in entities], indent=2))
        return
    if not entities:
        console.print(f"[yellow]No {entity_type.value}s found.[/yellow]")
        return
    console.print(_entity_table(f"{entity_type.value.capitalize()}s", entities))


@app.command()
def blogs(ctx: typer.Context) -> None:
    """List blogs."""
    try:
        found = _build_service(ctx).fetch_blogs()
    except SEOSyncError as exc:
        raise _fail(exc) from exc

    if not found:
        console.print("[yellow]This store has no blogs.[/yellow]")
        return
    table = Table(title="Blogs")
    table.add_column("ID", overflow="fold")
    table.add_column("Title")
    for blog in found:
        table.add_row(blog.id, blog.title)
    console.print(table)


@app.command()
def themes(ctx: typer.Context) -> None:
    """List online-store themes."""
    try:
        found = _build_service(ctx).fetch_themes()
    except SEOSyncError as exc:
        raise _fail(exc) from exc

    table = Table(title="Themes")
    table.add_column("ID", overflow="fold")
    table.add_column("Name")
    table.add_column("Role")
    for theme in found:
        table.add_row(theme.id, theme.name, theme.role)
    console.print(table)


@app.command()
def snapshot(
    ctx: typer.Context,
    blog: Annotated[
        Optional[str],
        typer.Option("--blog", "-b", help="Blog whose articles to include."),
    ] = None,
    as_json: Annotated[bool, typer.Option("--json", help="Print JSON instead of a summary.")] = False,
) -> None:
    """Load products, pages, blogs and one blog's articles in one pass."""
    try:
        snap = _build_service(ctx).load_snapshot(blog)
    except SEOSyncError as exc:
        raise _fail(exc) from exc

    if as_json:
        typer.echo(snap.model_dump_json(indent=2, exclude_none=True))
        return
    console.print(f"Products: {len(snap.products)}")
    console.print(f"Pages:    {len(snap.pages)}")
    console.print(f"Blogs:    {len(snap.blogs)}")
    if snap.selected_blog_id is None:
        console.print("Articles: 0 (no blogs)")
    else:
        console.print(f"Articles: {len(snap.articles)} in {snap.selected_blog_id}")


@app.command()
def update(
    ctx: typer.Context,
    entity_type: Annotated[EntityType, typer.Argument(help="product, page or article.")],
    entity_id: Annotated[str, typer.Argument(help="Global id of the entity.")],
    title: Annotated[str, typer.Option("--title", "-t", help="New SEO title.")],
    description: Annotated[str, typer.Option("--description", "-d", help="New SEO description.")],
) -> None:
    """Set the SEO title and description of one entity."""
    request = SEOUpdateRequest(
        entity_type=entity_type,
        entity_id=entity_id,
        title=title,
        description=description,
    )
    try:
        updated = _build_service(ctx).update_seo(request)
    except SEOSyncError as exc:
        raise _fail(exc) from exc

    console.print(f"[green]Updated {updated.id}[/green]")
    console.print(f"  SEO title:       {updated.seo.title or ''}")
    console.print(f"  SEO description: {updated.seo.description or ''}")
