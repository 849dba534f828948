"""OrderBookSnapshot: ordering, midpoint, spread and depth walks."""

from decimal import Decimal

import pytest

from conftest import make_book
from polyorder.errors import InsufficientLiquidity, NoLiquidity, ValidationError
from polyorder.models.order import Side


def test_levels_sorted_best_first_and_empty_levels_dropped():
    snap = make_book(
        bids=[("0.53", "50"), ("0.54", "100"), ("0.52", "0")],
        asks=[("0.58", "50"), ("0.56", "200")],
    )
    assert [lev.price for lev in snap.bids] == [Decimal("0.54"), Decimal("0.53")]
    assert [lev.price for lev in snap.asks] == [Decimal("0.56"), Decimal("0.58")]
    assert snap.best_bid == Decimal("0.54")
    assert snap.best_ask == Decimal("0.56")
    assert not snap.crossed


def test_midpoint_and_spread(book):
    assert book.midpoint() == Decimal("0.55")
    assert book.spread() == Decimal("0.02")


def test_midpoint_one_sided():
    snap = make_book(bids=[("0.40", "10")])
    assert snap.midpoint() == Decimal("0.40")
    with pytest.raises(NoLiquidity):
        snap.spread()


def test_midpoint_empty_book():
    with pytest.raises(NoLiquidity):
        make_book().midpoint()


def test_walk_for_quote_partial_level():
    snap = make_book(asks=[("0.56", "200")])
    fill = snap.walk_for_quote(Side.BUY, Decimal("50"))
    assert abs(fill.shares - Decimal("89.285714")) < Decimal("0.000001")
    assert abs(fill.average_price - Decimal("0.56")) < Decimal("1e-20")


def test_walk_for_quote_crosses_levels(book):
    # 0.56 * 200 = 112 notional at the first level, 8 more at 0.58
    fill = book.walk_for_quote(Side.BUY, Decimal("120"))
    assert abs(fill.shares - (Decimal(200) + Decimal(8) / Decimal("0.58"))) < Decimal("1e-20")
    assert Decimal("0.56") < fill.average_price < Decimal("0.58")
    assert fill.worst_price == Decimal("0.58")


def test_walk_for_quote_insufficient(book):
    with pytest.raises(InsufficientLiquidity):
        book.walk_for_quote(Side.BUY, Decimal("1000"))
    with pytest.raises(InsufficientLiquidity):
        make_book(bids=[("0.5", "10")]).walk_for_quote(Side.BUY, Decimal("50"))


def test_walk_for_size_sells_into_bids(book):
    fill = book.walk_for_size(Side.SELL, Decimal("100"))
    assert fill == (Decimal("100"), Decimal("0.54"), Decimal("0.54"))
    deeper = book.walk_for_size(Side.SELL, Decimal("150"))
    assert deeper.shares == Decimal("150")
    assert deeper.worst_price == Decimal("0.53")
    assert abs(deeper.average_price - Decimal("80.5") / 150) < Decimal("1e-20")
    with pytest.raises(InsufficientLiquidity):
        book.walk_for_size(Side.SELL, Decimal("151"))


def test_depth(book):
    bids, asks = book.depth(1)
    assert len(bids) == 1 and len(asks) == 1
    assert bids[0].price == Decimal("0.54")


@pytest.mark.parametrize("amount", ["0", "-5"])
def test_walks_reject_non_positive_amounts(book, amount):
    with pytest.raises(ValidationError):
        book.walk_for_quote(Side.BUY, Decimal(amount))
    with pytest.raises(ValidationError):
        book.walk_for_size(Side.SELL, Decimal(amount))
