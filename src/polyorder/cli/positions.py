"""Positions subcommand: list holdings with value and PnL at the current midpoint."""

from __future__ import annotations

from decimal import Decimal

import typer

from polyorder.cli.format import fail, format_pct, format_usd
from polyorder.config.credentials import Credentials, checksum_address
from polyorder.errors import ClobError, MissingCredentials, TransportError
from polyorder.ingestion.polymarket.clob import ClobClient
from polyorder.ingestion.polymarket.data import fetch_positions
from polyorder.orders.signer import address_for_key
from polyorder.positions.pnl import evaluate_all

app = typer.Typer(help="Open positions and unrealized PnL")


def resolve_user_address(user: str | None, credentials: Credentials) -> str:
    """Explicit argument, then USER_ADDRESS, then FUNDER_ADDRESS, then the private key's address."""
    if user:
        return checksum_address(user, "user")
    if credentials.user_address:
        return checksum_address(credentials.user_address, "USER_ADDRESS")
    if credentials.funder_address:
        return checksum_address(credentials.funder_address, "FUNDER_ADDRESS")
    if credentials.private_key is not None:
        return address_for_key(credentials.private_key)
    raise MissingCredentials("USER_ADDRESS or PRIVATE_KEY")


@app.command("list")
def list_positions(
    ctx: typer.Context,
    user: str | None = typer.Option(
        None, "--user", "-u", help="User address. If omitted, derived from the environment."
    ),
    limit: int = typer.Option(50, "--limit", "-n", help="Max positions"),
) -> None:
    """Show each position's size, entry, current value and PnL."""
    settings = ctx.obj["settings"]
    try:
        address = resolve_user_address(user, ctx.obj["credentials"])
        positions = fetch_positions(address, base_url=settings.data_api_base, limit=limit, timeout=settings.http_timeout_sec)
        midpoints: dict[str, Decimal] = {}
        with ClobClient.from_settings(settings) as clob:
            for pos in positions:
                try:
                    midpoints[pos.token_id] = clob.midpoint(pos.token_id)
                except TransportError:
                    continue
    except ClobError as e:
        fail(e)
    typer.echo(f"Positions for {address}:")
    for pos, val in evaluate_all(positions, midpoints):
        typer.echo(f"- Market: {pos.title}")
        typer.echo(f"  Token ID: {pos.token_id}")
        typer.echo(f"  Outcome: {pos.outcome}")
        typer.echo(f"  Size: {pos.size}")
        typer.echo(f"  Avg Price: {pos.avg_price}")
        if val is None:
            typer.echo("  Current Value: N/A")
            typer.echo("  PnL: N/A")
        else:
            typer.echo(f"  Current Value: {format_usd(val.current_value)}")
            pct = format_pct(val.pnl_pct) if val.pnl_pct is not None else "N/A"
            typer.echo(f"  PnL: {format_usd(val.pnl_abs)} ({pct})")
        typer.echo("--------------------------------------------------")
