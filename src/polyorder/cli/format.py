"""Human-readable rendering of prices, percentages and errors for CLI output."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

import typer

from polyorder.errors import ClobError, ValidationError

_CENT = Decimal("0.01")
_TENTH = Decimal("0.1")


def format_price(price: Decimal, tick_size: Decimal = _CENT) -> str:
    """Price with as many decimal places as the market's tick size."""
    return str(price.quantize(tick_size, rounding=ROUND_HALF_UP))


def format_pct(fraction: Decimal) -> str:
    """0.2222 -> '+22.2%'."""
    pct = (fraction * 100).quantize(_TENTH, rounding=ROUND_HALF_UP)
    return f"{pct:+}%"


def format_usd(amount: Decimal) -> str:
    value = amount.quantize(_CENT, rounding=ROUND_HALF_UP)
    if value < 0:
        return f"-${-value}"
    return f"${value}"


def parse_decimal(raw: str, field: str) -> Decimal:
    try:
        value = Decimal(raw.strip())
    except (InvalidOperation, AttributeError):
        raise ValidationError(f"Invalid {field}: {raw!r}", field) from None
    if not value.is_finite():
        raise ValidationError(f"Invalid {field}: {raw!r}", field)
    return value


def fail(err: ClobError) -> None:
    """Print the error to stderr and exit 1."""
    typer.echo(f"Error: {err}", err=True)
    raise typer.Exit(1)
