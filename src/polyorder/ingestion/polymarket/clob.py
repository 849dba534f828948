"""Polymarket CLOB REST client - book, market, midpoint, API keys, order submission."""

from __future__ import annotations

import json
import time
from collections.abc import Callable
from decimal import Decimal
from typing import Any

import httpx
import structlog

from polyorder.config.credentials import ApiCredentials
from polyorder.config.settings import Settings
from polyorder.errors import NotFound, SubmissionRejected, Transient, TransportError
from polyorder.ingestion.polymarket.auth import l1_headers, l2_headers
from polyorder.ingestion.polymarket.normalize import parse_book, parse_market
from polyorder.ingestion.retry import call_with_retries
from polyorder.models.market import Market
from polyorder.models.order import AssembledOrder, OrderResponse
from polyorder.models.orderbook import OrderBookSnapshot
from polyorder.orders.identity import validate_token_id
from polyorder.orders.signer import KeyInput, address_for_key

log = structlog.get_logger(__name__)

CLOB_HOST = "https://clob.polymarket.com"


def _json(resp: httpx.Response) -> Any:
    """Decode with Decimal for JSON numbers so prices never pass through float."""
    try:
        return json.loads(resp.content, parse_float=Decimal)
    except ValueError:
        raise TransportError(f"invalid JSON from {resp.request.url.path}", "response") from None


def _error_detail(resp: httpx.Response) -> str:
    try:
        data = json.loads(resp.content)
    except ValueError:
        return resp.text[:200]
    if isinstance(data, dict):
        return str(data.get("error") or data.get("errorMsg") or data)
    return str(data)


class ClobClient:
    """Synchronous CLOB client. Reads retry on Transient; submission re-sends identical bytes."""

    def __init__(
        self,
        host: str = CLOB_HOST,
        *,
        chain_id: int = 137,
        timeout: float = 15.0,
        max_retries: int = 3,
        backoff_base_sec: float = 0.5,
        backoff_max_sec: float = 8.0,
        transport: httpx.BaseTransport | None = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.host = host.rstrip("/")
        self.chain_id = chain_id
        self.max_retries = max_retries
        self.backoff_base_sec = backoff_base_sec
        self.backoff_max_sec = backoff_max_sec
        self._sleep = sleep
        self._clock = clock
        self._http = httpx.Client(base_url=self.host, timeout=timeout, transport=transport)

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs: Any) -> ClobClient:
        return cls(
            settings.clob_host,
            chain_id=settings.chain_id,
            timeout=settings.http_timeout_sec,
            max_retries=settings.max_retries,
            backoff_base_sec=settings.backoff_base_sec,
            backoff_max_sec=settings.backoff_max_sec,
            **kwargs,
        )

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> ClobClient:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def _retry(self, fn: Callable[[], Any], op: str) -> Any:
        return call_with_retries(
            fn,
            op=op,
            max_retries=self.max_retries,
            base_delay=self.backoff_base_sec,
            max_delay=self.backoff_max_sec,
            sleep=self._sleep,
        )

    def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            resp = self._http.request(method, path, **kwargs)
        except httpx.TimeoutException:
            raise Transient(f"{method} {path} timed out", path) from None
        except httpx.TransportError as e:
            raise Transient(f"{method} {path} failed: {type(e).__name__}", path) from None
        if resp.status_code >= 500:
            raise Transient(f"HTTP {resp.status_code} from {method} {path}", path)
        return resp

    def _get_json(self, path: str, params: dict[str, Any] | None, what: str, ident: str) -> Any:
        def once() -> Any:
            resp = self._send("GET", path, params=params)
            if resp.status_code == 429:
                raise Transient(f"rate limited on {path}", path)
            if resp.status_code in (400, 404):
                raise NotFound(what, ident)
            if resp.status_code >= 400:
                raise TransportError(f"HTTP {resp.status_code} from GET {path}: {_error_detail(resp)}", path)
            return _json(resp)

        return self._retry(once, f"GET {path}")

    def fetch_book(self, token_id: str) -> OrderBookSnapshot:
        validate_token_id(token_id)
        data = self._get_json("/book", {"token_id": token_id}, "book", token_id)
        book = parse_book(data, token_id)
        log.debug("book_fetched", token_id=token_id, bids=len(book.bids), asks=len(book.asks))
        return book

    def fetch_market(self, market_id: str) -> Market:
        data = self._get_json(f"/markets/{market_id}", None, "market", market_id)
        if not isinstance(data, dict) or not data:
            raise NotFound("market", market_id)
        return parse_market(data)

    def resolve_market_id(self, token_id: str) -> str:
        """Condition id of the market a token belongs to, read from its book summary."""
        book = self.fetch_book(token_id)
        if not book.market_id:
            raise NotFound("market", token_id)
        return book.market_id

    def midpoint(self, token_id: str) -> Decimal:
        validate_token_id(token_id)
        data = self._get_json("/midpoint", {"token_id": token_id}, "midpoint", token_id)
        mid = data.get("mid") if isinstance(data, dict) else None
        if mid is None:
            raise NotFound("midpoint", token_id)
        return Decimal(str(mid))

    def derive_api_credentials(self, private_key: KeyInput, nonce: int = 0) -> ApiCredentials:
        """Derive (or create, if none exist) the L2 API key for the wallet."""
        address = address_for_key(private_key)

        def request(method: str, path: str) -> httpx.Response:
            headers = l1_headers(private_key, address, self.chain_id, int(self._clock()), nonce)
            return self._send(method, path, headers=headers)

        resp = self._retry(lambda: request("GET", "/auth/derive-api-key"), "GET /auth/derive-api-key")
        if resp.status_code >= 400:
            log.info("api_key_derive_failed", status=resp.status_code)
            resp = self._retry(lambda: request("POST", "/auth/api-key"), "POST /auth/api-key")
        if resp.status_code >= 400:
            raise TransportError(f"cannot obtain API key (HTTP {resp.status_code}): {_error_detail(resp)}", "api_key")
        data = _json(resp)
        return ApiCredentials(
            api_key=data["apiKey"],
            api_secret=data["secret"],
            api_passphrase=data["passphrase"],
        )

    def post_order(self, order: AssembledOrder, creds: ApiCredentials) -> OrderResponse:
        """Submit an assembled order. Retries re-send the same body; 4xx is final."""
        if not isinstance(order, AssembledOrder):
            raise TypeError("only an AssembledOrder can be submitted")
        body = order.request_body(creds.api_key)
        address = order.signed.order.signer

        def once() -> OrderResponse:
            headers = l2_headers(creds, address, int(self._clock()), "POST", "/order", body)
            headers["Content-Type"] = "application/json"
            resp = self._send("POST", "/order", headers=headers, content=body)
            if resp.status_code >= 400:
                raise SubmissionRejected(resp.status_code, _error_detail(resp))
            return OrderResponse.from_api(_json(resp))

        try:
            result = self._retry(once, "POST /order")
        except SubmissionRejected as e:
            log.warning("order_submission_rejected", status=e.status_code, order_hash=order.signed.order_hash)
            raise
        log.info(
            "order_submitted",
            order_hash=order.signed.order_hash,
            order_id=result.order_id,
            status=result.status,
            success=result.success,
        )
        return result
