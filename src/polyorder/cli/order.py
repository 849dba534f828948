"""Order subcommand: place (limit GTC or market FOK)."""

from __future__ import annotations

import json

import typer

from polyorder.cli.format import fail, format_price, parse_decimal
from polyorder.errors import ClobError
from polyorder.ingestion.polymarket.clob import ClobClient
from polyorder.models.order import LimitOrder, MarketOrder, OrderIntent, Side
from polyorder.orders.assembler import AssemblerConfig, OrderAssembler
from polyorder.orders.numeric import from_base_units

app = typer.Typer(help="Build, sign and submit orders")


@app.command("place")
def place(
    ctx: typer.Context,
    token_id: str = typer.Option(..., "--token-id", "-t", help="Token ID of the outcome"),
    side: str = typer.Option(..., "--side", "-s", help='Side to trade: "buy" or "sell"'),
    amount: str = typer.Option(
        ..., "--amount", "-a", help="Shares (limit orders, market sells) or USDC to spend (market buys)"
    ),
    price: str | None = typer.Option(
        None, "--price", "-p", help="Limit price. If omitted, places a market order (FOK)."
    ),
    market_id: str | None = typer.Option(
        None, "--market", "-m", help="Market condition id (looked up from the book if omitted)"
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Sign and print the order without submitting"),
) -> None:
    """Assemble a signed order and submit it to the CLOB."""
    settings = ctx.obj["settings"]
    credentials = ctx.obj["credentials"]
    try:
        kind = LimitOrder(price=parse_decimal(price, "price")) if price is not None else MarketOrder()
        intent = OrderIntent(
            token_id=token_id,
            side=Side.parse(side),
            kind=kind,
            amount=parse_decimal(amount, "amount"),
        )
        with ClobClient.from_settings(settings) as clob:
            market = clob.fetch_market(market_id or clob.resolve_market_id(token_id))
            assembler = OrderAssembler(AssemblerConfig.from_settings(settings, credentials), credentials, clob)
            assembled = assembler.assemble(intent, market)
            order = assembled.signed.order
            shares = from_base_units(order.taker_amount if intent.side is Side.BUY else order.maker_amount)
            quote = from_base_units(order.maker_amount if intent.side is Side.BUY else order.taker_amount)
            typer.echo(f"Signer: {order.signer}")
            if order.maker != order.signer:
                typer.echo(f"Maker (funder): {order.maker}")
            typer.echo(
                f"{assembled.time_in_force.value} {intent.side.value} {shares} shares for {quote} USDC"
                f" @ {format_price(order.price, market.tick_size)}"
            )
            if assembled.estimated_price is not None:
                typer.echo(f"Book VWAP estimate: {assembled.estimated_price.quantize(market.tick_size / 100)}")
            if dry_run:
                typer.echo(json.dumps(assembled.signed.to_payload(), indent=2))
                return
            creds = credentials.api or clob.derive_api_credentials(credentials.require_private_key())
            response = clob.post_order(assembled, creds)
    except ClobError as e:
        fail(e)
    if not response.success:
        typer.echo(f"Order not accepted: {response.error_msg}", err=True)
        raise typer.Exit(1)
    typer.echo(f"Order ID: {response.order_id}")
    typer.echo(f"Status: {response.status}")
