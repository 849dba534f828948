"""Order assembly state machine: intent -> sized -> normalized -> identified -> signed."""

from __future__ import annotations

import time
from collections.abc import Callable
from decimal import Decimal
from typing import Protocol

import structlog
from pydantic import BaseModel, ConfigDict

from polyorder.config.credentials import Credentials, checksum_address
from polyorder.config.settings import Settings
from polyorder.errors import BelowMinimumSize, ClobError, MarketClosed, OrderRejected, TokenNotInMarket
from polyorder.models.market import Market
from polyorder.models.order import (
    AssembledOrder,
    LimitOrder,
    OrderAmounts,
    OrderIntent,
    OrderState,
    Side,
    SignatureType,
    TimeInForce,
)
from polyorder.models.orderbook import OrderBookSnapshot
from polyorder.orders.identity import ContractConfig, OrderBuilder, contract_config, generate_salt, validate_token_id
from polyorder.orders.numeric import floor_to, normalize_price, normalize_size, rounding_for, to_base_units
from polyorder.orders.signer import address_for_key, sign_order

log = structlog.get_logger(__name__)


class BookSource(Protocol):
    def fetch_book(self, token_id: str) -> OrderBookSnapshot: ...


class AssemblerConfig(BaseModel):
    """Everything assembly needs besides the key. Built once, passed explicitly."""

    model_config = ConfigDict(frozen=True)

    chain_id: int
    contracts: ContractConfig
    signature_type: int = SignatureType.EOA
    funder_address: str | None = None
    nonce: int = 0
    fok_window_sec: int = 60

    @classmethod
    def from_settings(cls, settings: Settings, credentials: Credentials) -> AssemblerConfig:
        return cls(
            chain_id=settings.chain_id,
            contracts=contract_config(settings.chain_id, settings.contract_overrides),
            signature_type=settings.signature_type,
            funder_address=(
                checksum_address(credentials.funder_address, "FUNDER_ADDRESS") if credentials.funder_address else None
            ),
            nonce=settings.nonce,
            fok_window_sec=settings.fok_window_sec,
        )


class _Sizing(BaseModel):
    """Normalized decimal amounts before base-unit conversion."""

    shares: Decimal
    quote: Decimal
    estimated_price: Decimal | None = None


class OrderAssembler:
    """Turns an OrderIntent into an AssembledOrder, or raises OrderRejected.

    Market orders fetch the book exactly once; the snapshot is used for the rest
    of the assembly. Nothing is retried here: a failure means the caller starts
    over from a fresh intent.
    """

    def __init__(
        self,
        config: AssemblerConfig,
        credentials: Credentials,
        books: BookSource,
        *,
        salt_factory: Callable[[], int] = generate_salt,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.config = config
        self.credentials = credentials
        self.books = books
        self.salt_factory = salt_factory
        self.clock = clock

    def _builder(self) -> OrderBuilder:
        signer = address_for_key(self.credentials.require_private_key())
        return OrderBuilder(
            chain_id=self.config.chain_id,
            contracts=self.config.contracts,
            signer=signer,
            maker=self.config.funder_address,
            signature_type=self.config.signature_type,
            nonce=self.config.nonce,
            fok_window_sec=self.config.fok_window_sec,
            salt_factory=self.salt_factory,
            clock=self.clock,
        )

    def assemble(self, intent: OrderIntent, market: Market) -> AssembledOrder:
        states = [OrderState.RECEIVED]
        bound = log.bind(token_id=intent.token_id, side=intent.side.value, kind=intent.kind.type)
        try:
            validate_token_id(intent.token_id)
            self._check_market(intent, market)
            key = self.credentials.require_private_key()
            if isinstance(intent.kind, LimitOrder):
                sizing = self._size_limit(intent, market, intent.kind.price)
            else:
                sizing = self._size_market(intent, market)
                states.append(OrderState.SIZED)
            amounts = self._amounts(intent.side, sizing)
            states.append(OrderState.NORMALIZED)
            unsigned = self._builder().build(intent, market, amounts)
            states.append(OrderState.IDENTIFIED)
            signed = sign_order(unsigned, key)
            states.append(OrderState.SIGNED)
        except ClobError as e:
            bound.warning("order_rejected", state=states[-1].value, error_kind=e.kind, reason=e.message, field=e.field)
            raise OrderRejected(states[-1].value, e) from e
        states.append(OrderState.ASSEMBLED)
        tif = TimeInForce.FOK if intent.is_market else TimeInForce.GTC
        bound.info(
            "order_assembled",
            maker_amount=unsigned.maker_amount,
            taker_amount=unsigned.taker_amount,
            order_type=tif.value,
            order_hash=signed.order_hash,
        )
        return AssembledOrder(
            signed=signed,
            time_in_force=tif,
            intent=intent,
            states=tuple(states),
            estimated_price=sizing.estimated_price,
        )

    @staticmethod
    def _check_market(intent: OrderIntent, market: Market) -> None:
        if not market.active:
            raise MarketClosed(market.market_id)
        # Markets fetched without outcome data cannot be cross-checked.
        if market.outcomes and market.outcome_for(intent.token_id) is None:
            raise TokenNotInMarket(intent.token_id, market.market_id)

    def _size_limit(self, intent: OrderIntent, market: Market, price: Decimal) -> _Sizing:
        cfg = rounding_for(market.tick_size)
        limit_price = normalize_price(price, market.tick_size)
        shares = normalize_size(intent.amount, cfg.lot_size, market.min_order_size)
        quote = floor_to(shares * limit_price, cfg.amount)
        if quote <= 0:
            raise BelowMinimumSize(quote, cfg.lot_size, "quote")
        return _Sizing(shares=shares, quote=quote)

    def _size_market(self, intent: OrderIntent, market: Market) -> _Sizing:
        """Price at the worst level the walk consumes so the FOK can fill completely.

        The book VWAP is kept only as the reported estimate.
        """
        cfg = rounding_for(market.tick_size)
        if intent.side is Side.BUY:
            quote = normalize_size(intent.amount, cfg.lot_size)
            book = self.books.fetch_book(intent.token_id)
            fill = book.walk_for_quote(Side.BUY, quote)
            worst = normalize_price(fill.worst_price, market.tick_size)
            shares = floor_to(quote / worst, cfg.amount)
            if shares <= 0:
                raise BelowMinimumSize(shares, cfg.lot_size, "shares")
            log.debug("market_buy_sized", quote=str(quote), shares=str(shares), price=str(worst), vwap=str(fill.average_price))
            return _Sizing(shares=shares, quote=quote, estimated_price=fill.average_price)
        shares = normalize_size(intent.amount, cfg.lot_size, market.min_order_size)
        book = self.books.fetch_book(intent.token_id)
        fill = book.walk_for_size(Side.SELL, shares)
        worst = normalize_price(fill.worst_price, market.tick_size)
        quote = floor_to(shares * worst, cfg.amount)
        if quote <= 0:
            raise BelowMinimumSize(quote, cfg.lot_size, "quote")
        log.debug("market_sell_sized", shares=str(shares), quote=str(quote), price=str(worst), vwap=str(fill.average_price))
        return _Sizing(shares=shares, quote=quote, estimated_price=fill.average_price)

    @staticmethod
    def _amounts(side: Side, sizing: _Sizing) -> OrderAmounts:
        shares = to_base_units(sizing.shares)
        quote = to_base_units(sizing.quote)
        if side is Side.BUY:
            return OrderAmounts(maker_amount=quote, taker_amount=shares)
        return OrderAmounts(maker_amount=shares, taker_amount=quote)
