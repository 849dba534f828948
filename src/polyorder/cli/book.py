"""Book subcommand: show, midpoint, trades."""

from __future__ import annotations

from decimal import Decimal

import typer

from polyorder.cli.format import fail, format_price
from polyorder.errors import ClobError, NoLiquidity
from polyorder.ingestion.polymarket.clob import ClobClient
from polyorder.ingestion.polymarket.data import fetch_trades

app = typer.Typer(help="Order book, midpoint and recent trades for a token")


def _price(value: Decimal, tick: Decimal | None) -> str:
    return format_price(value, tick) if tick else str(value)


@app.command("show")
def show(
    ctx: typer.Context,
    token_id: str = typer.Option(..., "--token-id", "-t", help="Token ID to fetch order book for"),
    depth: int = typer.Option(10, "--depth", "-d", help="Levels per side to print"),
) -> None:
    """Print midpoint, spread and the top levels of the book."""
    settings = ctx.obj["settings"]
    try:
        with ClobClient.from_settings(settings) as clob:
            book = clob.fetch_book(token_id)
    except ClobError as e:
        fail(e)
    tick = book.tick_size
    typer.echo(f"Order Book for {token_id}:")
    try:
        typer.echo(f"  Midpoint Price: {_price(book.midpoint(), tick)}")
    except NoLiquidity:
        typer.echo("  Midpoint Price: N/A")
    try:
        typer.echo(f"  Spread: {_price(book.spread(), tick)}")
    except NoLiquidity:
        typer.echo("  Spread: N/A")
    bids, asks = book.depth(depth)
    typer.echo("  Bids:")
    for lev in bids:
        typer.echo(f"    Price: {_price(lev.price, tick)}, Size: {lev.size}")
    typer.echo("  Asks:")
    for lev in asks:
        typer.echo(f"    Price: {_price(lev.price, tick)}, Size: {lev.size}")


@app.command("midpoint")
def midpoint(
    ctx: typer.Context,
    token_id: str = typer.Option(..., "--token-id", "-t", help="Token ID to fetch midpoint for"),
) -> None:
    """Print the exchange-reported midpoint price."""
    settings = ctx.obj["settings"]
    try:
        with ClobClient.from_settings(settings) as clob:
            mid = clob.midpoint(token_id)
    except ClobError as e:
        fail(e)
    typer.echo(f"Midpoint Price: {mid}")


@app.command("trades")
def trades(
    ctx: typer.Context,
    token_id: str = typer.Option(..., "--token-id", "-t", help="Token ID whose market's trades to list"),
    limit: int = typer.Option(20, "--limit", "-n", help="Max trades"),
) -> None:
    """Recent trades in the token's market."""
    settings = ctx.obj["settings"]
    try:
        with ClobClient.from_settings(settings) as clob:
            market_id = clob.resolve_market_id(token_id)
        prints = fetch_trades(market_id, base_url=settings.data_api_base, limit=limit, timeout=settings.http_timeout_sec)
    except ClobError as e:
        fail(e)
    typer.echo(f"Recent Trades for {token_id}:")
    for t in prints:
        typer.echo(f"- {t.side} {t.size} {t.outcome or t.token_id} @ {t.price}  ts={t.timestamp}  {t.title}")
