"""One-shot JSON GET for the public index APIs (Gamma, Data)."""

from __future__ import annotations

import json
from decimal import Decimal
from typing import Any

import httpx

from polyorder.errors import NotFound, Transient, TransportError
from polyorder.ingestion.retry import call_with_retries


def get_json(
    url: str,
    params: dict[str, Any] | None = None,
    *,
    what: str,
    ident: str,
    timeout: float = 30.0,
    max_retries: int = 3,
    transport: httpx.BaseTransport | None = None,
) -> Any:
    """GET url and decode JSON (numbers as Decimal). Retries timeouts, 429 and 5xx."""

    def once() -> Any:
        try:
            with httpx.Client(timeout=timeout, transport=transport) as client:
                resp = client.get(url, params=params)
        except httpx.TimeoutException:
            raise Transient(f"GET {url} timed out", what) from None
        except httpx.TransportError as e:
            raise Transient(f"GET {url} failed: {type(e).__name__}", what) from None
        if resp.status_code == 429 or resp.status_code >= 500:
            raise Transient(f"HTTP {resp.status_code} from {url}", what)
        if resp.status_code == 404:
            raise NotFound(what, ident)
        if resp.status_code >= 400:
            raise TransportError(f"HTTP {resp.status_code} from {url}", what)
        try:
            return json.loads(resp.content, parse_float=Decimal)
        except ValueError:
            raise TransportError(f"invalid JSON from {url}", what) from None

    return call_with_retries(once, op=f"GET {url}", max_retries=max_retries)
