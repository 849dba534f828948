"""Error taxonomy for order construction, signing and exchange I/O.

Families:
  validation   - bad tick, below-minimum size, malformed ids (local, never retried)
  liquidity    - no book / not enough depth (local, caller must re-observe market)
  crypto       - bad key, signing failure (fatal for the invocation)
  transport    - network/HTTP failures (Transient is retryable)
  credentials  - required credential missing from the environment
"""

from __future__ import annotations


class ClobError(Exception):
    """Base error. Carries a human-readable message and the offending field."""

    kind = "error"

    def __init__(self, message: str, field: str | None = None) -> None:
        self.message = message
        self.field = field
        super().__init__(message)

    def __str__(self) -> str:
        if self.field:
            return f"{self.kind}: {self.message} [field={self.field}]"
        return f"{self.kind}: {self.message}"


# --- validation ---

class ValidationError(ClobError):
    kind = "validation"


class InvalidTick(ValidationError):
    def __init__(self, price: object, tick_size: object, field: str = "price") -> None:
        super().__init__(f"Price {price} is not valid for tick size {tick_size}", field)


class BelowMinimumSize(ValidationError):
    def __init__(self, amount: object, minimum: object, field: str = "amount") -> None:
        super().__init__(f"Amount {amount} is below the minimum of {minimum}", field)


class MalformedTokenId(ValidationError):
    def __init__(self, token_id: object) -> None:
        super().__init__(f"Token id must be a decimal integer, got {token_id!r}", "token_id")


class InvalidSide(ValidationError):
    def __init__(self, side: object) -> None:
        super().__init__(f"Invalid side {side!r}: must be 'buy' or 'sell'", "side")


class InvalidAddress(ValidationError):
    def __init__(self, address: object, field: str = "address") -> None:
        super().__init__(f"Invalid address format: {address!r}", field)


class TokenNotInMarket(ValidationError):
    def __init__(self, token_id: str, market_id: str) -> None:
        super().__init__(f"Token {token_id} is not an outcome of market {market_id}", "token_id")


class MarketClosed(ValidationError):
    def __init__(self, market_id: str) -> None:
        super().__init__(f"Market {market_id} is not accepting orders", "market")


# --- liquidity ---

class LiquidityError(ClobError):
    kind = "liquidity"


class NoLiquidity(LiquidityError):
    def __init__(self, token_id: str = "", field: str = "book") -> None:
        where = f" for token {token_id}" if token_id else ""
        super().__init__(f"Order book has no liquidity{where}", field)


class InsufficientLiquidity(LiquidityError):
    def __init__(self, requested: object, available: object, field: str = "amount") -> None:
        super().__init__(
            f"Insufficient liquidity: requested {requested}, book can fill {available}",
            field,
        )


# --- crypto ---

class CryptoError(ClobError):
    kind = "crypto"


class InvalidKey(CryptoError):
    def __init__(self, reason: str = "not a valid secp256k1 private key") -> None:
        super().__init__(f"Private key rejected: {reason}", "private_key")


class SigningFailure(CryptoError):
    def __init__(self, reason: str) -> None:
        super().__init__(f"Signing failed: {reason}", "signature")


# --- transport ---

class TransportError(ClobError):
    kind = "transport"


class Transient(TransportError):
    """Network error, timeout or 5xx. Safe to retry."""


class NotFound(TransportError):
    def __init__(self, what: str, ident: str) -> None:
        super().__init__(f"{what} not found: {ident}", what)


class SubmissionRejected(TransportError):
    def __init__(self, status_code: int, detail: str) -> None:
        self.status_code = status_code
        super().__init__(f"Exchange rejected order (HTTP {status_code}): {detail}", "order")


# --- credentials ---

class CredentialError(ClobError):
    kind = "credentials"


class MissingCredentials(CredentialError):
    def __init__(self, names: str) -> None:
        super().__init__(f"Missing credentials: set {names}", names)


# --- arithmetic ---

class UndefinedPercentage(ClobError):
    kind = "arithmetic"

    def __init__(self, field: str = "avg_price") -> None:
        super().__init__("PnL percentage is undefined for a zero average price", field)


class OrderRejected(ClobError):
    """Terminal failure of order assembly. `reason` is the underlying error."""

    kind = "rejected"

    def __init__(self, state: str, reason: ClobError) -> None:
        self.state = state
        self.reason = reason
        super().__init__(f"order rejected after {state}: {reason}", reason.field)
