"""Market, Outcome - canonical entities."""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Outcome(BaseModel):
    """Single outcome (e.g. Yes/No token) in a market."""

    model_config = ConfigDict(frozen=True)

    token_id: str
    name: str
    price: Decimal = Field(default=Decimal("0"), ge=0, le=1, description="Probability/price in [0, 1]")


class Market(BaseModel):
    """Tradable question. Tick size, minimum size and fee schedule govern order construction."""

    model_config = ConfigDict(frozen=True)

    market_id: str  # Polymarket condition ID
    question: str = ""
    tick_size: Decimal = Field(default=Decimal("0.01"), gt=0, lt=1)
    min_order_size: Decimal = Field(default=Decimal("0"), ge=0)
    neg_risk: bool = False
    fee_rate_bps: int = Field(default=0, ge=0)
    active: bool = True
    outcomes: tuple[Outcome, ...] = ()
    extra: dict[str, Any] = Field(default_factory=dict)

    def outcome_for(self, token_id: str) -> Outcome | None:
        return next((o for o in self.outcomes if o.token_id == token_id), None)


class SearchMarket(BaseModel):
    """Market row as returned by Gamma search, with outcome/token pairing."""

    market_id: str
    question: str = ""
    condition_id: str | None = None
    outcomes: list[Outcome] = Field(default_factory=list)
    raw_outcomes: str = "[]"
    raw_token_ids: str = "[]"


class SearchEvent(BaseModel):
    """Event grouping one or more markets (Polymarket event)."""

    event_id: str
    title: str
    markets: list[SearchMarket] = Field(default_factory=list)
