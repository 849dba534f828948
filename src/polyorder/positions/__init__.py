"""Position valuation."""

from polyorder.positions.pnl import evaluate, evaluate_all

__all__ = ["evaluate", "evaluate_all"]
