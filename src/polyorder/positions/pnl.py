"""Mark positions to the current midpoint: value and unrealized PnL."""

from __future__ import annotations

from decimal import Decimal

import structlog

from polyorder.errors import UndefinedPercentage
from polyorder.models.position import Position, PositionValuation

log = structlog.get_logger(__name__)


def _mark(position: Position, current_midpoint: Decimal, with_pct: bool) -> PositionValuation:
    move = current_midpoint - position.avg_price
    return PositionValuation(
        current_value=position.size * current_midpoint,
        pnl_abs=position.size * move,
        pnl_pct=move / position.avg_price if with_pct else None,
    )


def evaluate(position: Position, current_midpoint: Decimal) -> PositionValuation:
    """current_value = size * mid, pnl_abs = size * (mid - avg), pnl_pct = (mid - avg) / avg."""
    if position.avg_price == 0:
        raise UndefinedPercentage()
    return _mark(position, current_midpoint, with_pct=True)


def evaluate_all(
    positions: list[Position], midpoints: dict[str, Decimal]
) -> list[tuple[Position, PositionValuation | None]]:
    """Value each position; None where no midpoint is known.

    A zero average price still gets a value and absolute PnL, with pnl_pct None.
    """
    out: list[tuple[Position, PositionValuation | None]] = []
    for pos in positions:
        mid = midpoints.get(pos.token_id)
        if mid is None:
            log.warning("position_no_midpoint", token_id=pos.token_id)
            out.append((pos, None))
            continue
        try:
            out.append((pos, evaluate(pos, mid)))
        except UndefinedPercentage:
            log.warning("position_zero_avg_price", token_id=pos.token_id)
            out.append((pos, _mark(pos, mid, with_pct=False)))
    return out
