"""Order assembly end to end: sizing, amounts, identity, signature."""

import json
from decimal import Decimal

import pytest
from eth_account import Account
from eth_account.messages import encode_typed_data

from conftest import FIXED_NOW, FIXED_SALT, OTHER_ADDRESS, TEST_ADDRESS, TOKEN_ID, FakeBooks, make_book
from polyorder.config.credentials import Credentials
from polyorder.errors import (
    BelowMinimumSize,
    InsufficientLiquidity,
    InvalidAddress,
    InvalidTick,
    MalformedTokenId,
    MarketClosed,
    MissingCredentials,
    OrderRejected,
    TokenNotInMarket,
)
from polyorder.models.order import LimitOrder, MarketOrder, OrderIntent, OrderState, Side, TimeInForce
from polyorder.config.settings import Settings
from polyorder.orders.assembler import AssemblerConfig, OrderAssembler


def limit(side, amount, price, token_id=TOKEN_ID):
    return OrderIntent(token_id=token_id, side=side, kind=LimitOrder(price=Decimal(price)), amount=Decimal(amount))


def market_order(side, amount, token_id=TOKEN_ID):
    return OrderIntent(token_id=token_id, side=side, kind=MarketOrder(), amount=Decimal(amount))


def test_limit_buy_amounts(assembler, market, books):
    out = assembler.assemble(limit(Side.BUY, "10", "0.55"), market)
    order = out.signed.order
    assert order.maker_amount == 5_500_000
    assert order.taker_amount == 10_000_000
    assert order.expiration == 0
    assert order.salt == FIXED_SALT
    assert out.time_in_force is TimeInForce.GTC
    assert out.states[-1] is OrderState.ASSEMBLED
    assert OrderState.SIZED not in out.states
    assert books.calls == 0


def test_limit_sell_amounts(assembler, market):
    order = assembler.assemble(limit(Side.SELL, "10", "0.55"), market).signed.order
    assert order.maker_amount == 10_000_000
    assert order.taker_amount == 5_500_000
    assert order.side is Side.SELL


def test_limit_price_snapped_to_tick(assembler, market):
    order = assembler.assemble(limit(Side.BUY, "10", "0.555"), market).signed.order
    assert order.maker_amount == 5_600_000


def test_signature_recovers_to_key_address(assembler, market):
    signed = assembler.assemble(limit(Side.BUY, "10", "0.55"), market).signed
    signable = encode_typed_data(full_message=signed.order.typed_data())
    assert Account.recover_message(signable, signature=signed.signature) == TEST_ADDRESS


def test_fresh_salt_per_assembly(assembler_config, credentials, books, market):
    asm = OrderAssembler(assembler_config, credentials, books)
    a = asm.assemble(limit(Side.BUY, "10", "0.55"), market).signed
    b = asm.assemble(limit(Side.BUY, "10", "0.55"), market).signed
    assert a.order.salt != b.order.salt
    assert a.order_hash != b.order_hash


def test_request_body_is_stable(assembler, market):
    first = assembler.assemble(limit(Side.BUY, "10", "0.55"), market)
    second = assembler.assemble(limit(Side.BUY, "10", "0.55"), market)
    assert first.request_body("key") == second.request_body("key")
    body = json.loads(first.request_body("key"))
    assert body["orderType"] == "GTC"
    assert body["owner"] == "key"
    assert body["order"]["makerAmount"] == "5500000"
    assert body["order"]["side"] == "BUY"


def test_market_buy_walks_asks_once(assembler, market, books):
    out = assembler.assemble(market_order(Side.BUY, "50"), market)
    order = out.signed.order
    assert books.calls == 1
    assert order.maker_amount == 50_000_000
    assert order.taker_amount == 89_285_700
    assert order.expiration == int(FIXED_NOW) + 60
    assert out.time_in_force is TimeInForce.FOK
    assert OrderState.SIZED in out.states
    assert abs(out.estimated_price - Decimal("0.56")) < Decimal("1e-20")


def test_market_sell_walks_bids(assembler, market, books):
    out = assembler.assemble(market_order(Side.SELL, "100"), market)
    order = out.signed.order
    assert books.calls == 1
    assert order.maker_amount == 100_000_000
    assert order.taker_amount == 54_000_000
    assert out.estimated_price == Decimal("0.54")


def test_market_buy_insufficient_liquidity(assembler, market):
    with pytest.raises(OrderRejected) as exc:
        assembler.assemble(market_order(Side.BUY, "1000"), market)
    assert isinstance(exc.value.reason, InsufficientLiquidity)
    assert isinstance(exc.value.__cause__, InsufficientLiquidity)


def test_market_order_on_empty_book(assembler_config, credentials, market):
    asm = OrderAssembler(assembler_config, credentials, FakeBooks(make_book()))
    with pytest.raises(OrderRejected) as exc:
        asm.assemble(market_order(Side.SELL, "10"), market)
    assert isinstance(exc.value.reason, InsufficientLiquidity)


@pytest.mark.parametrize(
    "intent, error",
    [
        (limit(Side.BUY, "10", "1.2"), InvalidTick),
        (limit(Side.BUY, "4.99", "0.55"), BelowMinimumSize),
        (limit(Side.BUY, "10", "0.55", token_id="0xabc"), MalformedTokenId),
        (limit(Side.BUY, "10", "0.55", token_id="\u00b2"), MalformedTokenId),
        (limit(Side.BUY, "10", "0.55", token_id="42"), TokenNotInMarket),
        (market_order(Side.SELL, "4"), BelowMinimumSize),
    ],
)
def test_rejections_carry_the_cause(assembler, market, books, intent, error):
    with pytest.raises(OrderRejected) as exc:
        assembler.assemble(intent, market)
    assert isinstance(exc.value.reason, error)
    assert exc.value.state == OrderState.RECEIVED.value
    assert books.calls == 0


def test_missing_private_key(assembler_config, books, market):
    asm = OrderAssembler(assembler_config, Credentials(), books)
    with pytest.raises(OrderRejected) as exc:
        asm.assemble(limit(Side.BUY, "10", "0.55"), market)
    assert isinstance(exc.value.reason, MissingCredentials)


def test_funder_is_maker(assembler_config, credentials, books, market):
    config = assembler_config.model_copy(update={"funder_address": OTHER_ADDRESS, "signature_type": 2})
    order = OrderAssembler(config, credentials, books).assemble(limit(Side.BUY, "10", "0.55"), market).signed.order
    assert order.maker == OTHER_ADDRESS
    assert order.signer == TEST_ADDRESS
    assert order.signature_type == 2


def test_neg_risk_market_uses_neg_risk_exchange(assembler, market, assembler_config):
    neg = market.model_copy(update={"neg_risk": True})
    order = assembler.assemble(limit(Side.BUY, "10", "0.55"), neg).signed.order
    assert order.domain.verifying_contract.lower() == assembler_config.contracts.neg_risk_exchange


def test_multi_level_market_sell_priced_at_worst_bid(assembler, market):
    out = assembler.assemble(market_order(Side.SELL, "150"), market)
    order = out.signed.order
    assert order.maker_amount == 150_000_000
    assert order.taker_amount == 79_500_000
    assert order.price == Decimal("0.53")
    assert abs(out.estimated_price - Decimal("80.5") / 150) < Decimal("1e-20")


def test_multi_level_market_buy_priced_at_worst_ask(assembler, market):
    out = assembler.assemble(market_order(Side.BUY, "120"), market)
    order = out.signed.order
    assert order.maker_amount == 120_000_000
    assert order.taker_amount == 206_896_500
    assert order.price >= Decimal("0.58")
    assert out.estimated_price < Decimal("0.58")


def test_closed_market_rejected(assembler, market, books):
    closed = market.model_copy(update={"active": False})
    with pytest.raises(OrderRejected) as exc:
        assembler.assemble(market_order(Side.BUY, "50"), closed)
    assert isinstance(exc.value.reason, MarketClosed)
    assert books.calls == 0


def test_market_without_outcomes_is_not_cross_checked(assembler, market):
    bare = market.model_copy(update={"outcomes": ()})
    order = assembler.assemble(limit(Side.BUY, "10", "0.55", token_id="42"), bare).signed.order
    assert order.token_id == 42


def test_proxy_signature_without_funder(assembler_config, credentials, books, market):
    config = assembler_config.model_copy(update={"signature_type": 1})
    with pytest.raises(OrderRejected) as exc:
        OrderAssembler(config, credentials, books).assemble(limit(Side.BUY, "10", "0.55"), market)
    assert isinstance(exc.value.reason, MissingCredentials)
    assert exc.value.reason.field == "FUNDER_ADDRESS"


def test_config_checksums_funder_lazily():
    settings = Settings()
    config = AssemblerConfig.from_settings(settings, Credentials(funder_address=OTHER_ADDRESS.lower()))
    assert config.funder_address == OTHER_ADDRESS
    with pytest.raises(InvalidAddress):
        AssemblerConfig.from_settings(settings, Credentials(funder_address="nope"))
