"""polyorder - Polymarket CLOB order construction, signing and submission."""

__version__ = "0.6.0"
