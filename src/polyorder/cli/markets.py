"""Markets subcommand: search."""

from __future__ import annotations

import typer

from polyorder.cli.format import fail
from polyorder.errors import ClobError
from polyorder.ingestion.polymarket.gamma import search_events

app = typer.Typer(help="Market discovery")


@app.command("search")
def search(
    ctx: typer.Context,
    query: str = typer.Argument(..., help="Keywords to search for"),
) -> None:
    """Search events and markets by keyword; list outcome token ids."""
    settings = ctx.obj["settings"]
    try:
        events = search_events(query, base_url=settings.gamma_api_base, timeout=settings.http_timeout_sec)
    except ClobError as e:
        fail(e)
    if not events:
        typer.echo("No events found.")
        return
    typer.echo(f"Found {len(events)} events:")
    for event in events:
        typer.echo(f"Event: {event.title} (ID: {event.event_id})")
        for m in event.markets:
            typer.echo(f"  - Market: {m.question} (ID: {m.market_id})")
            if m.outcomes:
                typer.echo("    Outcomes:")
                for o in m.outcomes:
                    typer.echo(f"      - {o.name}: {o.token_id}")
            else:
                typer.echo(f"    Outcomes (raw): {m.raw_outcomes}")
                typer.echo(f"    Token IDs (raw): {m.raw_token_ids}")
