"""OrderBookSnapshot - immutable L2 book with midpoint, spread and depth walks."""

from __future__ import annotations

from decimal import Decimal
from typing import NamedTuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from polyorder.errors import InsufficientLiquidity, NoLiquidity, ValidationError
from polyorder.models.order import Side


class PriceLevel(BaseModel):
    """Single price level (price -> size)."""

    model_config = ConfigDict(frozen=True)

    price: Decimal = Field(..., ge=0, le=1)
    size: Decimal = Field(..., ge=0)


class BookFill(NamedTuple):
    """Result of walking the book: shares filled, their volume-weighted price and the last level touched."""

    shares: Decimal
    average_price: Decimal
    worst_price: Decimal


class OrderBookSnapshot(BaseModel):
    """Point-in-time L2 book for one token. Never mutated; re-fetch for fresh state."""

    model_config = ConfigDict(frozen=True)

    token_id: str
    market_id: str = ""
    bids: tuple[PriceLevel, ...] = ()  # best (highest) first
    asks: tuple[PriceLevel, ...] = ()  # best (lowest) first
    timestamp: int | None = None  # ms epoch
    tick_size: Decimal | None = None
    min_order_size: Decimal | None = None
    neg_risk: bool | None = None

    @field_validator("bids")
    @classmethod
    def _sort_bids(cls, levels: tuple[PriceLevel, ...]) -> tuple[PriceLevel, ...]:
        return tuple(sorted((lev for lev in levels if lev.size > 0), key=lambda lev: lev.price, reverse=True))

    @field_validator("asks")
    @classmethod
    def _sort_asks(cls, levels: tuple[PriceLevel, ...]) -> tuple[PriceLevel, ...]:
        return tuple(sorted((lev for lev in levels if lev.size > 0), key=lambda lev: lev.price))

    @property
    def best_bid(self) -> Decimal | None:
        return self.bids[0].price if self.bids else None

    @property
    def best_ask(self) -> Decimal | None:
        return self.asks[0].price if self.asks else None

    @property
    def crossed(self) -> bool:
        bb, ba = self.best_bid, self.best_ask
        return bb is not None and ba is not None and bb >= ba

    def midpoint(self) -> Decimal:
        """Mean of best bid and ask; the other side's best if one side is empty."""
        bb, ba = self.best_bid, self.best_ask
        if bb is not None and ba is not None:
            return (bb + ba) / 2
        if bb is None and ba is None:
            raise NoLiquidity(self.token_id)
        return bb if bb is not None else ba

    def spread(self) -> Decimal:
        bb, ba = self.best_bid, self.best_ask
        if bb is None or ba is None:
            raise NoLiquidity(self.token_id, field="spread")
        return ba - bb

    def _levels_for(self, side: Side) -> tuple[PriceLevel, ...]:
        # A buyer takes from the asks, a seller hits the bids.
        return self.asks if side is Side.BUY else self.bids

    def walk_for_quote(self, side: Side, quote_amount: Decimal) -> BookFill:
        """Consume levels best-first until `quote_amount` of notional is reached.

        The last level may be partially consumed. Raises InsufficientLiquidity if
        the whole side cannot absorb the amount (including an empty side).
        """
        remaining = Decimal(quote_amount)
        if remaining <= 0:
            raise ValidationError(f"Quote amount must be positive, got {quote_amount}", "amount")
        shares = Decimal(0)
        spent = Decimal(0)
        worst = Decimal(0)
        for lev in self._levels_for(side):
            if remaining <= 0:
                break
            worst = lev.price
            notional = lev.price * lev.size
            if notional >= remaining:
                shares += remaining / lev.price
                spent += remaining
                remaining = Decimal(0)
                break
            shares += lev.size
            spent += notional
            remaining -= notional
        if remaining > 0 or shares == 0:
            raise InsufficientLiquidity(quote_amount, spent)
        return BookFill(shares=shares, average_price=spent / shares, worst_price=worst)

    def walk_for_size(self, side: Side, size: Decimal) -> BookFill:
        """Consume levels best-first until `size` shares are filled."""
        remaining = Decimal(size)
        if remaining <= 0:
            raise ValidationError(f"Size must be positive, got {size}", "amount")
        shares = Decimal(0)
        notional = Decimal(0)
        worst = Decimal(0)
        for lev in self._levels_for(side):
            if remaining <= 0:
                break
            worst = lev.price
            take = min(lev.size, remaining)
            shares += take
            notional += take * lev.price
            remaining -= take
        if remaining > 0 or shares == 0:
            raise InsufficientLiquidity(size, shares)
        return BookFill(shares=shares, average_price=notional / shares, worst_price=worst)

    def depth(self, n: int = 5) -> tuple[tuple[PriceLevel, ...], tuple[PriceLevel, ...]]:
        """Return (top N bids, top N asks)."""
        return self.bids[:n], self.asks[:n]
