import asyncio
import json
import logging
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from hf_wrapped.analyzers.slides import ClosingSlide
from hf_wrapped.errors import NotFoundError, RefreshWindowClosedError
from hf_wrapped.generate import generate_wrapped
from hf_wrapped.hub.client import HubClient
from hf_wrapped.models import StorySlide, WrappedResult
from hf_wrapped.settings import Settings
from hf_wrapped.storage.dataset_cache import SnapshotCache

load_dotenv()
app = typer.Typer()
console = Console()

SUBJECT_TYPES = ("auto", "user", "organization")


async def _run(handle: str, year: Optional[int], subject_type: str, refresh: bool, closing: ClosingSlide) -> WrappedResult:
    settings = Settings()
    async with HubClient(settings.hub_url, timeout=settings.http_timeout) as client:
        cache = SnapshotCache(client.http, settings)
        return await generate_wrapped(
            handle,
            year=year,
            subject_type=subject_type,
            allow_refresh=refresh,
            client=client,
            cache=cache,
            settings=settings,
            closing=closing,
        )


def render_slide(slide: StorySlide) -> Panel:
    body = Table.grid(padding=(0, 2))
    body.add_column(style="dim")
    body.add_column(style="bold")
    for metric in slide.metrics:
        style = "bold magenta" if metric.accent == "primary" else "bold"
        body.add_row(metric.label, f"[{style}]{metric.value}[/]")
    if slide.highlights:
        body.add_row("", "")
        for highlight in slide.highlights:
            body.add_row("•", highlight)
    return Panel(body, title=f"[bold]{slide.title}[/]", subtitle=slide.subtitle, title_align="left")


@app.command()
def generate(
    handle: str = typer.Argument(help="Hugging Face user or organization, with or without @"),
    year: Optional[int] = typer.Option(None, "--year", "-y", help="Year to wrap (default: current UTC year)"),
    subject_type: str = typer.Option("auto", "--subject-type", "-s", help="auto, user or organization"),
    refresh: bool = typer.Option(False, "--refresh", help="Skip the cache and recompute (only before the freeze date)"),
    closing: ClosingSlide = typer.Option(ClosingSlide.CTA, "--closing", help="Closing slide: cta or share"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Save the result JSON to file"),
    as_json: bool = typer.Option(False, "--json", help="Print the result as JSON instead of slides"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logs"),
):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )
    if subject_type not in SUBJECT_TYPES:
        console.print(f"[bold red]Error:[/] --subject-type must be one of {', '.join(SUBJECT_TYPES)}, got '{subject_type}'")
        raise typer.Exit(1)

    try:
        with console.status(f"[bold green]Wrapping {handle}..."):
            result = asyncio.run(_run(handle, year, subject_type, refresh, closing))
    except (NotFoundError, RefreshWindowClosedError) as exc:
        console.print(f"[bold red]Error:[/] {exc}")
        raise typer.Exit(1)

    document = result.model_dump(mode="json", by_alias=True)
    if output:
        output.write_text(json.dumps(document, ensure_ascii=False, indent=2))
        console.print(f"[bold green]✓[/] Wrapped saved to [cyan]{output}[/]")

    if as_json:
        console.print_json(data=document)
        return

    source = "cache" if result.cached else "live"
    console.print(f"[dim]{result.profile.handle} · {result.year} · {result.archetype.value} · {source}[/]")
    for slide in result.slides:
        console.print(render_slide(slide))
