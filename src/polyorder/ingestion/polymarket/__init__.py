"""Polymarket CLOB, Gamma and Data API clients."""
