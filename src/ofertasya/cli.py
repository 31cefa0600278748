"""CLI entry point using Typer."""

import asyncio
import json
from pathlib import Path
from typing import TYPE_CHECKING

import typer
from rich.console import Console
from rich.table import Table

from ofertasya.config import settings
from ofertasya.logs import configure_logging

if TYPE_CHECKING:
    from ofertasya.offers.service import IngestionService

app = typer.Typer(
    name="ofertasya",
    help="Ofertas YA - Driiveme relocation offer watcher.",
)
console = Console()

configure_logging(settings.log_level)


def _build_service() -> "IngestionService":
    from ofertasya.db import init_db
    from ofertasya.offers.service import IngestionService
    from ofertasya.offers.store import SqlOfferStore
    from ofertasya.outbound.broadcast import WebSocketBroadcaster

    init_db()
    # Offline commands have no dashboard clients; events go nowhere.
    return IngestionService(SqlOfferStore(), WebSocketBroadcaster())


def _format_price(price: float | None) -> str:
    return "free" if price is None else f"{price:g} EUR"


@app.command()
def serve(
    host: str = typer.Option(settings.host, help="Interface to bind"),
    port: int = typer.Option(settings.port, help="Port to listen on"),
    poll: bool = typer.Option(True, "--poll/--no-poll", help="Run the marketplace poller"),
) -> None:
    """Run the API server (and the poller)."""
    import uvicorn

    from ofertasya.api.app import create_app

    mode = "demo" if settings.demo_mode else "live"
    console.print(f"[bold blue]Starting Ofertas YA on {host}:{port} ({mode} mode)[/bold blue]")
    uvicorn.run(create_app(settings, start_poller=poll), host=host, port=port, log_level=settings.log_level.lower())


@app.command("init-db")
def init_db_command() -> None:
    """Create database tables."""
    from ofertasya.db import init_db

    init_db()
    console.print("[bold green]Database ready.[/bold green]")


@app.command("poll-once")
def poll_once() -> None:
    """Run a single poll cycle against the configured source."""
    from ofertasya.jobs.poller import Poller
    from ofertasya.sources.registry import build_source

    poller = Poller(_build_service(), build_source(settings))
    stats = asyncio.run(poller.poll_once())

    table = Table(title="Poll Results")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")
    for key in ("fetched", "new", "duplicates", "errors"):
        table.add_row(key.capitalize(), str(stats.get(key, 0)))
    console.print(table)

    if "error" in stats:
        console.print(f"[bold red]Error:[/bold red] {stats['error']}")
        raise typer.Exit(1)


@app.command()
def recent(limit: int = typer.Option(settings.recent_offers_limit, help="Max offers to show")) -> None:
    """Show the most recently detected offers."""
    from ofertasya.offers.store import SqlOfferStore

    offers = SqlOfferStore().list_recent(limit)
    if not offers:
        console.print("[yellow]No offers detected yet.[/yellow]")
        return

    table = Table(title="Recent Offers")
    table.add_column("Detected", style="cyan")
    table.add_column("Route", style="white")
    table.add_column("Vehicle", style="magenta")
    table.add_column("Price", style="green")
    table.add_column("External ID", style="dim")
    for offer in offers:
        table.add_row(
            offer.detected_at.strftime("%Y-%m-%d %H:%M"),
            f"{offer.from_city} -> {offer.to_city}",
            offer.vehicle,
            _format_price(offer.price),
            offer.external_id,
        )
    console.print(table)


@app.command()
def ingest(path: Path = typer.Argument(..., help="JSON file with one offer object or a list of them")) -> None:
    """Ingest offers from a JSON file through the normal pipeline."""
    if not path.exists():
        console.print(f"[bold red]Error:[/bold red] File not found: {path}")
        raise typer.Exit(1)

    try:
        data = json.loads(path.read_text())
    except json.JSONDecodeError as e:
        console.print(f"[bold red]Error:[/bold red] Invalid JSON: {e}")
        raise typer.Exit(1)

    payloads = data if isinstance(data, list) else [data]
    service = _build_service()

    async def _run() -> list:
        return [await service.ingest_payload(payload) for payload in payloads]

    try:
        offers = asyncio.run(_run())
    except Exception as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    for offer in offers:
        console.print(f"[green]{offer.external_id}[/green] {offer.title}")


if __name__ == "__main__":
    app()
