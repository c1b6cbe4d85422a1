"""PageScout CLI - Typer-based command line interface."""

import asyncio
import json
import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from pagescout import __version__
from pagescout.config import get_section, load_config, merge_configs
from pagescout.discovery.models import PageDiscoveryResult
from pagescout.discovery.orchestrator import discover_pages
from pagescout.discovery.url_utils import prepare_base_url
from pagescout.exceptions import InvalidBaseUrlError

app = typer.Typer(
    name="pagescout",
    help="PageScout - page discovery for website audits",
    add_completion=False,
    no_args_is_help=True,
)
console = Console()
err_console = Console(stderr=True)

SOURCE_STYLES = {
    "homepage": "bold green",
    "sitemap": "cyan",
    "internal-link": "magenta",
}


def setup_logging(verbose: bool) -> None:
    """Route library logging through Rich on stderr."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


@app.command()
def discover(
    url: Annotated[str, typer.Argument(help="Site domain or URL")],
    max_pages: Annotated[
        int | None,
        typer.Option("--max-pages", "-n", min=1, help="Maximum pages to return (config default: 100)"),
    ] = None,
    quick: Annotated[bool, typer.Option("--quick", "-q", help="Skip link crawling")] = False,
    as_json: Annotated[bool, typer.Option("--json", help="Print the result as JSON")] = False,
    timebox: Annotated[
        float | None, typer.Option("--timebox", help="Overall time budget in seconds")
    ] = None,
    config_file: Annotated[Path | None, typer.Option("--config", help="Custom config file")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging")] = False,
) -> None:
    """Discover the pages of a website."""
    setup_logging(verbose)

    try:
        target = prepare_base_url(url)
    except InvalidBaseUrlError as e:
        err_console.print(f"[red]Error:[/] {e}")
        raise typer.Exit(2)

    try:
        config = load_config(config_file)
    except Exception as e:
        err_console.print(f"[red]Error loading config:[/] {e}")
        raise typer.Exit(1)

    if max_pages is None:
        max_pages = get_section(config, "discovery").get("max_pages", 100)
    if timebox is not None:
        config = merge_configs(config, {"discovery": {"timebox_seconds": timebox}})

    try:
        result = asyncio.run(discover_pages(target, max_pages, quick=quick, config=config))
    except KeyboardInterrupt:
        err_console.print("\n[yellow]Discovery interrupted by user.[/]")
        raise typer.Exit(130)

    if as_json:
        console.print_json(json.dumps(result.to_dict()))
    else:
        _display_result(target, result)


def _display_result(target: str, result: PageDiscoveryResult) -> None:
    """Display discovered pages and per-source counts."""
    table = Table(title=f"Pages discovered for {target}")
    table.add_column("#", justify="right", style="dim")
    table.add_column("URL", style="cyan", overflow="fold")
    table.add_column("Title")
    table.add_column("Source")

    for index, page in enumerate(result.pages, start=1):
        style = SOURCE_STYLES.get(page.source.value, "")
        table.add_row(str(index), page.url, page.title, f"[{style}]{page.source.value}[/]")

    console.print(table)

    summary = Table(title="Sources")
    summary.add_column("Source", style="cyan")
    summary.add_column("Count", justify="right")
    for name, count in result.sources.to_dict().items():
        summary.add_row(name, str(count))
    summary.add_row("[bold]Total[/]", f"[bold]{result.total_found}[/]")

    console.print(summary)


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"PageScout v{__version__}")


if __name__ == "__main__":
    app()
