"""Position valuation at the current midpoint."""

from decimal import Decimal

import pytest

from polyorder.errors import UndefinedPercentage
from polyorder.models.position import Position
from polyorder.positions.pnl import evaluate, evaluate_all


def _pos(token_id="1", size="10.5", avg="0.45"):
    return Position(token_id=token_id, size=Decimal(size), avg_price=Decimal(avg))


def test_evaluate():
    val = evaluate(_pos(), Decimal("0.55"))
    assert val.current_value == Decimal("5.775")
    assert val.pnl_abs == Decimal("1.050")
    assert abs(val.pnl_pct - Decimal("0.2222")) < Decimal("0.0001")


def test_evaluate_loss():
    val = evaluate(_pos(size="4", avg="0.50"), Decimal("0.40"))
    assert val.pnl_abs == Decimal("-0.40")
    assert val.pnl_pct == Decimal("-0.2")


def test_zero_average_price_is_undefined():
    with pytest.raises(UndefinedPercentage):
        evaluate(_pos(avg="0"), Decimal("0.55"))


def test_evaluate_all_tolerates_gaps():
    positions = [_pos("1"), _pos("2"), _pos("3", avg="0")]
    out = evaluate_all(positions, {"1": Decimal("0.55"), "3": Decimal("0.2")})
    assert [v is None for _, v in out] == [False, True, False]
    assert out[0][1].current_value == Decimal("5.775")


def test_zero_average_price_keeps_value():
    [(_, val)] = evaluate_all([_pos("1", size="10", avg="0")], {"1": Decimal("0.5")})
    assert val.current_value == Decimal("5.0")
    assert val.pnl_abs == Decimal("5.0")
    assert val.pnl_pct is None
