"""Position held by a user and its mark-to-midpoint valuation."""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class Position(BaseModel):
    """Externally sourced holding. Read-only for the PnL calculator."""

    model_config = ConfigDict(frozen=True)

    token_id: str
    market_id: str = ""
    title: str = ""
    outcome: str = ""
    size: Decimal = Field(..., ge=0)
    avg_price: Decimal = Field(..., ge=0)


class PositionValuation(BaseModel):
    model_config = ConfigDict(frozen=True)

    current_value: Decimal
    pnl_abs: Decimal
    pnl_pct: Decimal | None = None  # fraction, 0.25 == 25%; None when avg_price is 0
