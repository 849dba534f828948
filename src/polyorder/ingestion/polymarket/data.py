"""Polymarket Data API client - positions and trade history."""

from __future__ import annotations

import httpx
import structlog

from polyorder.ingestion.http import get_json
from polyorder.ingestion.polymarket.normalize import parse_position, parse_trade
from polyorder.models.position import Position
from polyorder.models.trade import TradePrint

log = structlog.get_logger(__name__)

DATA_API_BASE = "https://data-api.polymarket.com"


def fetch_positions(
    user: str,
    base_url: str | None = None,
    limit: int = 50,
    timeout: float = 30.0,
    transport: httpx.BaseTransport | None = None,
) -> list[Position]:
    base = (base_url or DATA_API_BASE).rstrip("/")
    rows = get_json(
        base + "/positions",
        {"user": user, "limit": limit},
        what="positions",
        ident=user,
        timeout=timeout,
        transport=transport,
    )
    positions = []
    for row in rows if isinstance(rows, list) else []:
        if not isinstance(row, dict):
            continue
        try:
            positions.append(parse_position(row))
        except Exception as e:
            log.warning("skip_position", asset=row.get("asset"), error=str(e))
    return positions


def fetch_trades(
    market: str,
    base_url: str | None = None,
    limit: int = 20,
    timeout: float = 30.0,
    transport: httpx.BaseTransport | None = None,
) -> list[TradePrint]:
    """Recent trades for a market (condition id)."""
    base = (base_url or DATA_API_BASE).rstrip("/")
    rows = get_json(
        base + "/trades",
        {"market": market, "limit": limit},
        what="trades",
        ident=market,
        timeout=timeout,
        transport=transport,
    )
    trades = []
    for row in rows if isinstance(rows, list) else []:
        trade = parse_trade(row) if isinstance(row, dict) else None
        if trade is not None:
            trades.append(trade)
    return trades
