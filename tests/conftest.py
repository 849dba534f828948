"""Shared fixtures: a well-known test key, a standard market and book."""

from decimal import Decimal

import pytest

from polyorder.config.credentials import Credentials
from polyorder.models.market import Market, Outcome
from polyorder.models.orderbook import OrderBookSnapshot, PriceLevel
from polyorder.orders.assembler import AssemblerConfig, OrderAssembler
from polyorder.orders.identity import contract_config

# Hardhat/anvil default account #0 - public test key, never funded on mainnet.
TEST_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
TEST_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
OTHER_ADDRESS = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"

TOKEN_ID = "71321045679252212594626385532706912750332728571942532289631379312455583992563"
MARKET_ID = "0xdd22472e552920b8438158ea7238bfadfa4f736aa4cee91a6b86c39ead110917"

FIXED_SALT = 123456789
FIXED_NOW = 1_700_000_000.0


class FakeBooks:
    """BookSource that serves one snapshot and counts fetches."""

    def __init__(self, book: OrderBookSnapshot) -> None:
        self.book = book
        self.calls = 0

    def fetch_book(self, token_id: str) -> OrderBookSnapshot:
        self.calls += 1
        return self.book


def make_book(bids=(), asks=(), token_id: str = TOKEN_ID) -> OrderBookSnapshot:
    return OrderBookSnapshot(
        token_id=token_id,
        market_id=MARKET_ID,
        bids=tuple(PriceLevel(price=Decimal(p), size=Decimal(s)) for p, s in bids),
        asks=tuple(PriceLevel(price=Decimal(p), size=Decimal(s)) for p, s in asks),
    )


@pytest.fixture
def market() -> Market:
    return Market(
        market_id=MARKET_ID,
        question="Will it rain tomorrow?",
        tick_size=Decimal("0.01"),
        min_order_size=Decimal("5"),
        outcomes=(Outcome(token_id=TOKEN_ID, name="Yes", price=Decimal("0.55")),),
    )


@pytest.fixture
def book() -> OrderBookSnapshot:
    return make_book(
        bids=[("0.54", "100"), ("0.53", "50")],
        asks=[("0.56", "200"), ("0.58", "50")],
    )


@pytest.fixture
def credentials() -> Credentials:
    return Credentials.from_env({"PRIVATE_KEY": TEST_KEY})


@pytest.fixture
def assembler_config() -> AssemblerConfig:
    return AssemblerConfig(chain_id=137, contracts=contract_config(137), fok_window_sec=60)


@pytest.fixture
def books(book) -> FakeBooks:
    return FakeBooks(book)


@pytest.fixture
def assembler(assembler_config, credentials, books) -> OrderAssembler:
    return OrderAssembler(
        assembler_config,
        credentials,
        books,
        salt_factory=lambda: FIXED_SALT,
        clock=lambda: FIXED_NOW,
    )
