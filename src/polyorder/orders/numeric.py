"""Price/size normalization and base-unit conversion. Decimal only, never float.

Signed amounts must reproduce the exact integers the exchange contract
recomputes, so every value that ends up in an order goes through here.
"""

from __future__ import annotations

from decimal import ROUND_FLOOR, ROUND_HALF_UP, Decimal
from typing import NamedTuple

from polyorder.errors import BelowMinimumSize, InvalidTick

# USDC collateral and conditional tokens both use 6 decimals.
BASE_UNIT_DECIMALS = 6
_BASE_UNIT_SCALE = Decimal(10) ** BASE_UNIT_DECIMALS


class RoundConfig(NamedTuple):
    """Decimal places allowed for price, share size and derived amount."""

    price: int
    size: int
    amount: int

    @property
    def lot_size(self) -> Decimal:
        return Decimal(1).scaleb(-self.size)


ROUNDING: dict[Decimal, RoundConfig] = {
    Decimal("0.1"): RoundConfig(price=1, size=2, amount=3),
    Decimal("0.01"): RoundConfig(price=2, size=2, amount=4),
    Decimal("0.001"): RoundConfig(price=3, size=2, amount=5),
    Decimal("0.0001"): RoundConfig(price=4, size=2, amount=6),
}


def as_decimal(value: Decimal | str | int) -> Decimal:
    """Coerce to Decimal, refusing binary floats."""
    if isinstance(value, float):
        raise TypeError("float values are not accepted; pass Decimal or str")
    return value if isinstance(value, Decimal) else Decimal(value)


def rounding_for(tick_size: Decimal | str) -> RoundConfig:
    tick = as_decimal(tick_size).normalize()
    cfg = ROUNDING.get(tick)
    if cfg is not None:
        return cfg
    places = max(0, -tick.as_tuple().exponent)
    return RoundConfig(price=places, size=2, amount=min(places + 2, BASE_UNIT_DECIMALS))


def normalize_price(price: Decimal | str, tick_size: Decimal | str) -> Decimal:
    """Round to the nearest valid tick. Prices are probabilities in (0, 1)."""
    p = as_decimal(price)
    tick = as_decimal(tick_size)
    if not (0 < tick < 1):
        raise InvalidTick(p, tick, field="tick_size")
    if not (0 < p < 1):
        raise InvalidTick(p, tick)
    ticks = (p / tick).to_integral_value(rounding=ROUND_HALF_UP)
    normalized = (ticks * tick).quantize(tick)
    if not (0 < normalized < 1):
        raise InvalidTick(p, tick)
    return normalized


def normalize_size(
    amount: Decimal | str,
    lot_size: Decimal | str,
    minimum: Decimal | str = Decimal(0),
    field: str = "amount",
) -> Decimal:
    """Floor to the lot size. Never rounds up."""
    a = as_decimal(amount)
    lot = as_decimal(lot_size)
    floor_min = as_decimal(minimum)
    if lot <= 0:
        raise ValueError(f"lot size must be positive, got {lot}")
    lots = (a / lot).to_integral_value(rounding=ROUND_FLOOR)
    floored = (lots * lot).quantize(lot)
    if floored <= 0 or floored < floor_min:
        raise BelowMinimumSize(a, floor_min if floor_min > 0 else lot, field)
    return floored


def floor_to(value: Decimal, places: int) -> Decimal:
    return value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_FLOOR)


def to_base_units(value: Decimal) -> int:
    """Decimal amount -> integer 1e-6 units. Refuses to drop a fractional remainder."""
    scaled = as_decimal(value) * _BASE_UNIT_SCALE
    integral = scaled.to_integral_value(rounding=ROUND_FLOOR)
    if scaled != integral:
        raise ValueError(f"{value} has more than {BASE_UNIT_DECIMALS} decimal places")
    return int(integral)


def from_base_units(units: int) -> Decimal:
    return Decimal(units) / _BASE_UNIT_SCALE
