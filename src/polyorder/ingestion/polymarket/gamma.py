"""Polymarket Gamma API client - market search."""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from polyorder.ingestion.http import get_json
from polyorder.ingestion.polymarket.normalize import parse_search_event
from polyorder.models.market import SearchEvent

log = structlog.get_logger(__name__)

GAMMA_API_BASE = "https://gamma-api.polymarket.com"


def search_events(
    query: str,
    base_url: str | None = None,
    timeout: float = 30.0,
    transport: httpx.BaseTransport | None = None,
) -> list[SearchEvent]:
    """Keyword search over events and their markets."""
    base = (base_url or GAMMA_API_BASE).rstrip("/")
    data = get_json(
        base + "/public-search",
        {"q": query},
        what="search",
        ident=query,
        timeout=timeout,
        transport=transport,
    )
    raw_events: list[Any] = (data.get("events") or []) if isinstance(data, dict) else []
    events = []
    for raw in raw_events:
        if not isinstance(raw, dict):
            continue
        try:
            events.append(parse_search_event(raw))
        except Exception as e:
            log.warning("skip_event", event_id=raw.get("id"), error=str(e))
    return events
