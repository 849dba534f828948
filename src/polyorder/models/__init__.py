"""Canonical schema (Pydantic) - Market, OrderBook, Order, Position, Trade."""

from polyorder.models.market import Market, Outcome, SearchEvent, SearchMarket
from polyorder.models.order import (
    AssembledOrder,
    ExchangeDomain,
    LimitOrder,
    MarketOrder,
    OrderAmounts,
    OrderIntent,
    OrderResponse,
    OrderState,
    Side,
    SignatureType,
    SignedOrder,
    TimeInForce,
    UnsignedOrder,
)
from polyorder.models.orderbook import BookFill, OrderBookSnapshot, PriceLevel
from polyorder.models.position import Position, PositionValuation
from polyorder.models.trade import TradePrint

__all__ = [
    "Market",
    "Outcome",
    "SearchEvent",
    "SearchMarket",
    "AssembledOrder",
    "ExchangeDomain",
    "LimitOrder",
    "MarketOrder",
    "OrderAmounts",
    "OrderIntent",
    "OrderResponse",
    "OrderState",
    "Side",
    "SignatureType",
    "SignedOrder",
    "TimeInForce",
    "UnsignedOrder",
    "BookFill",
    "OrderBookSnapshot",
    "PriceLevel",
    "Position",
    "PositionValuation",
    "TradePrint",
]
