"""TradePrint - canonical trade."""

from decimal import Decimal

from pydantic import BaseModel, Field


class TradePrint(BaseModel):
    """Executed trade from the Data API trade history."""

    market_id: str
    token_id: str
    side: str = Field(..., pattern="^(BUY|SELL)$")
    price: Decimal = Field(..., ge=0, le=1)
    size: Decimal = Field(..., ge=0)
    timestamp: int | None = None  # s epoch
    outcome: str = ""
    title: str = ""
