"""devcat CLI — browse devfile registries from the terminal."""

import asyncio
import logging

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from devcat import __version__
from devcat.config import CatalogSettings, load_endpoints
from devcat.errors import CatalogError

console = Console()


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
def main(verbose: bool):
    """devcat — devfile catalog browser.

    Aggregates devfiles from every configured registry endpoint and
    narrows them by search text, tags, and types.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def _load_session(config: str | None):
    from devcat.catalog.session import CatalogSession

    settings = CatalogSettings.from_env()
    endpoints = load_endpoints(config or settings.endpoints_path)
    session = asyncio.run(CatalogSession.load(endpoints))

    for failure in session.failures:
        console.print(f"[yellow]![/] Skipped endpoint {failure}")
    return session


def _config_option(func):
    return click.option(
        "--config", "-c", default=None, help="Endpoint configuration file (JSON or YAML)"
    )(func)


# ── Search ───────────────────────────────────────────────────────────


@main.command()
@click.argument("text", default="")
@_config_option
@click.option("--tag", "-t", multiple=True, help="Filter by tag (repeatable, OR)")
@click.option("--type", "types", multiple=True, help="Filter by type (repeatable, OR)")
def search(text: str, config: str | None, tag: tuple, types: tuple):
    """Search the aggregated catalog.

    TEXT matches display name, description, and tags (case-insensitive).
    """
    from devcat.catalog.filters import apply_state
    from devcat.catalog.models import FacetDimension

    try:
        session = _load_session(config)
    except CatalogError as e:
        raise click.ClickException(str(e))

    state = session.state.with_search_text(text)
    for dimension, values, param in (
        (FacetDimension.TAGS, set(tag), "--tag"),
        (FacetDimension.TYPES, set(types), "--type"),
    ):
        unknown = state.unknown_values(dimension, values)
        if unknown:
            raise click.BadParameter(
                f"no devfile has {', '.join(sorted(unknown))}", param_hint=param
            )
        state = state.select(dimension, values)

    visible = apply_state(session.devfiles, state)

    if not visible:
        console.print("[yellow]No matching devfiles found.[/]")
        return

    table = Table(title=f"Devfiles ({len(visible)} of {len(session.devfiles)})")
    table.add_column("Name", style="cyan")
    table.add_column("Display Name")
    table.add_column("Type", style="green")
    table.add_column("Source", style="dim")
    table.add_column("Tags")

    for devfile in visible:
        table.add_row(
            devfile.name,
            devfile.display_name,
            devfile.type,
            devfile.source_repo,
            ", ".join(devfile.tags),
        )

    console.print(table)


# ── Facets ───────────────────────────────────────────────────────────


@main.command()
@_config_option
@click.option(
    "--dimension", "-d", default=None, type=click.Choice(["tags", "types"]),
    help="Only show one facet dimension",
)
def facets(config: str | None, dimension: str | None):
    """Show tag and type frequencies across the catalog."""
    from devcat.catalog.models import FacetDimension

    try:
        session = _load_session(config)
    except CatalogError as e:
        raise click.ClickException(str(e))

    dimensions = [FacetDimension(dimension)] if dimension else list(FacetDimension)
    for dim in dimensions:
        entries = session.state.facets(dim)
        table = Table(title=f"{dim.value.capitalize()} ({len(entries)})")
        table.add_column("Value", style="cyan")
        table.add_column("Count", justify="right", style="green")
        for entry in entries:
            table.add_row(entry.value, str(entry.frequency))
        console.print(table)


# ── Show ─────────────────────────────────────────────────────────────


@main.command()
@click.argument("name")
@_config_option
@click.option("--source", "-s", default="", help="Only match devfiles from this endpoint")
def show(name: str, config: str | None, source: str):
    """Show one devfile; stacks include their devfile YAML."""
    from devcat.catalog.client import fetch_devfile_detail

    try:
        session = _load_session(config)
        devfile = session.get(name, source)
        detail = asyncio.run(
            fetch_devfile_detail(devfile, CatalogSettings.from_env().registry_url)
        )
    except CatalogError as e:
        raise click.ClickException(str(e))

    header = (
        f"[bold]{devfile.display_name or devfile.name}[/] ({devfile.type or 'unknown'})\n"
        f"{devfile.description}\n\n"
        f"Source: {devfile.source_repo}\n"
        f"Tags: {', '.join(devfile.tags) or '-'}"
    )
    console.print(Panel(header, title=devfile.name))

    if detail.starter_projects:
        console.print("\n[bold]Starter Projects:[/]")
        for project in detail.starter_projects:
            console.print(f"  [cyan]{project.get('name', '?')}[/] {project.get('description', '')}")

    if detail.yaml_text:
        console.print(Syntax(detail.yaml_text, "yaml"))


if __name__ == "__main__":
    main()
