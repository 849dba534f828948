"""Polymarket REST payloads -> canonical Market / OrderBookSnapshot / Position / TradePrint."""

from __future__ import annotations

import json
from decimal import Decimal, InvalidOperation
from typing import Any

import structlog

from polyorder.models.market import Market, Outcome, SearchEvent, SearchMarket
from polyorder.models.orderbook import OrderBookSnapshot, PriceLevel
from polyorder.models.position import Position
from polyorder.models.trade import TradePrint

log = structlog.get_logger(__name__)


def _decimal(s: str | int | Decimal | None, default: Decimal | None = None) -> Decimal | None:
    if s is None or s == "":
        return default
    try:
        return s if isinstance(s, Decimal) else Decimal(str(s))
    except (InvalidOperation, ValueError):
        return default


def _int(s: Any) -> int | None:
    try:
        return int(s) if s is not None else None
    except (TypeError, ValueError):
        return None


def _levels(raw: list[Any]) -> list[PriceLevel]:
    out = []
    for lev in raw:
        if not isinstance(lev, dict):
            continue
        p, s = _decimal(lev.get("price")), _decimal(lev.get("size"))
        if p is None or s is None:
            continue
        if 0 <= p <= 1 and s >= 0:
            out.append(PriceLevel(price=p, size=s))
    return out


def parse_book(payload: dict[str, Any], token_id: str = "") -> OrderBookSnapshot:
    """Convert a CLOB /book response. Uses 'bids'/'asks' or 'buys'/'sells'."""
    snap = OrderBookSnapshot(
        token_id=str(payload.get("asset_id") or token_id),
        market_id=str(payload.get("market") or ""),
        bids=tuple(_levels(payload.get("bids") or payload.get("buys") or [])),
        asks=tuple(_levels(payload.get("asks") or payload.get("sells") or [])),
        timestamp=_int(payload.get("timestamp")),
        tick_size=_decimal(payload.get("tick_size")),
        min_order_size=_decimal(payload.get("min_order_size")),
        neg_risk=payload.get("neg_risk"),
    )
    if snap.crossed:
        log.warning("orderbook_crossed", token_id=snap.token_id, best_bid=str(snap.best_bid), best_ask=str(snap.best_ask))
    return snap


def parse_market(raw: dict[str, Any]) -> Market:
    """Convert a CLOB /markets/{condition_id} object to canonical Market."""
    outcomes = tuple(
        Outcome(
            token_id=str(t.get("token_id") or ""),
            name=str(t.get("outcome") or ""),
            price=_decimal(t.get("price"), Decimal(0)),
        )
        for t in raw.get("tokens") or []
        if isinstance(t, dict)
    )
    fee = _decimal(raw.get("taker_base_fee"), Decimal(0))
    return Market(
        market_id=str(raw.get("condition_id") or raw.get("market") or ""),
        question=raw.get("question") or "",
        tick_size=_decimal(raw.get("minimum_tick_size"), Decimal("0.01")),
        min_order_size=_decimal(raw.get("minimum_order_size"), Decimal(0)),
        neg_risk=bool(raw.get("neg_risk", False)),
        fee_rate_bps=int(fee),
        active=bool(raw.get("active", True) and not raw.get("closed", False)),
        outcomes=outcomes,
        extra={"slug": raw.get("market_slug")},
    )


def pair_outcomes(outcomes_str: str | list[str] | None, token_ids_str: str | list[str] | None) -> list[tuple[str, str]] | None:
    """Pair outcome names with token ids (Gamma ships both as JSON strings).

    Returns None unless both parse and have the same non-zero length.
    """
    try:
        names = outcomes_str if isinstance(outcomes_str, list) else json.loads(outcomes_str or "")
        token_ids = token_ids_str if isinstance(token_ids_str, list) else json.loads(token_ids_str or "")
    except (json.JSONDecodeError, TypeError):
        return None
    if not isinstance(names, list) or not isinstance(token_ids, list):
        return None
    if not names or len(names) != len(token_ids):
        return None
    return [(str(n), str(t)) for n, t in zip(names, token_ids)]


def _raw_json_field(value: Any) -> str:
    if value is None:
        return "[]"
    return value if isinstance(value, str) else json.dumps(value)


def parse_search_event(raw: dict[str, Any]) -> SearchEvent:
    """Convert a Gamma /public-search event with nested markets."""
    markets = []
    for m in raw.get("markets") or []:
        if not isinstance(m, dict):
            continue
        raw_outcomes = _raw_json_field(m.get("outcomes"))
        raw_tokens = _raw_json_field(m.get("clobTokenIds"))
        pairs = pair_outcomes(raw_outcomes, raw_tokens) or []
        markets.append(
            SearchMarket(
                market_id=str(m.get("id") or ""),
                question=m.get("question") or "",
                condition_id=m.get("conditionId"),
                outcomes=[Outcome(token_id=tid, name=name) for name, tid in pairs],
                raw_outcomes=raw_outcomes,
                raw_token_ids=raw_tokens,
            )
        )
    return SearchEvent(event_id=str(raw.get("id") or ""), title=raw.get("title") or "", markets=markets)


def parse_position(row: dict[str, Any]) -> Position:
    """Convert a Data API /positions row."""
    return Position(
        token_id=str(row.get("asset") or ""),
        market_id=str(row.get("conditionId") or ""),
        title=row.get("title") or "",
        outcome=row.get("outcome") or "",
        size=_decimal(row.get("size"), Decimal(0)),
        avg_price=_decimal(row.get("avgPrice"), Decimal(0)),
    )


def parse_trade(row: dict[str, Any]) -> TradePrint | None:
    """Convert a Data API /trades row. Returns None for rows with an unknown side."""
    side = str(row.get("side") or "").upper()
    if side not in ("BUY", "SELL"):
        return None
    return TradePrint(
        market_id=str(row.get("conditionId") or ""),
        token_id=str(row.get("asset") or ""),
        side=side,
        price=_decimal(row.get("price"), Decimal(0)),
        size=_decimal(row.get("size"), Decimal(0)),
        timestamp=_int(row.get("timestamp")),
        outcome=row.get("outcome") or "",
        title=row.get("title") or "",
    )
