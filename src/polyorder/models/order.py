"""Order intent, typed-data order, signed order and exchange response."""

from __future__ import annotations

import json
from decimal import Decimal
from enum import Enum, IntEnum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from polyorder.errors import InvalidSide

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

# Canonical EIP-712 field order of the CTF Exchange Order struct.
ORDER_FIELDS: list[dict[str, str]] = [
    {"name": "salt", "type": "uint256"},
    {"name": "maker", "type": "address"},
    {"name": "signer", "type": "address"},
    {"name": "taker", "type": "address"},
    {"name": "tokenId", "type": "uint256"},
    {"name": "makerAmount", "type": "uint256"},
    {"name": "takerAmount", "type": "uint256"},
    {"name": "expiration", "type": "uint256"},
    {"name": "nonce", "type": "uint256"},
    {"name": "feeRateBps", "type": "uint256"},
    {"name": "side", "type": "uint8"},
    {"name": "signatureType", "type": "uint8"},
]

DOMAIN_FIELDS: list[dict[str, str]] = [
    {"name": "name", "type": "string"},
    {"name": "version", "type": "string"},
    {"name": "chainId", "type": "uint256"},
    {"name": "verifyingContract", "type": "address"},
]


class Side(str, Enum):
    BUY = "BUY"
    SELL = "SELL"

    @property
    def code(self) -> int:
        """uint8 encoding used in the signed struct."""
        return 0 if self is Side.BUY else 1

    @classmethod
    def parse(cls, value: str) -> Side:
        """Case-insensitive 'buy' / 'sell'."""
        try:
            return cls(value.strip().upper())
        except (AttributeError, ValueError):
            raise InvalidSide(value) from None


class SignatureType(IntEnum):
    EOA = 0
    POLY_PROXY = 1
    POLY_GNOSIS_SAFE = 2


class TimeInForce(str, Enum):
    GTC = "GTC"
    FOK = "FOK"


class OrderState(str, Enum):
    RECEIVED = "received"
    SIZED = "sized"
    NORMALIZED = "normalized"
    IDENTIFIED = "identified"
    SIGNED = "signed"
    ASSEMBLED = "assembled"
    REJECTED = "rejected"


class LimitOrder(BaseModel):
    """Rests on the book at `price` until cancelled."""

    model_config = ConfigDict(frozen=True)

    type: Literal["limit"] = "limit"
    price: Decimal


class MarketOrder(BaseModel):
    """Fill-or-kill against current book depth."""

    model_config = ConfigDict(frozen=True)

    type: Literal["market"] = "market"


OrderKind = Annotated[LimitOrder | MarketOrder, Field(discriminator="type")]


class OrderIntent(BaseModel):
    """User-level request.

    `amount` is shares for limit orders and market sells, and quote currency
    (USDC) for market buys.
    """

    model_config = ConfigDict(frozen=True)

    token_id: str
    side: Side
    kind: OrderKind
    amount: Decimal

    @property
    def is_market(self) -> bool:
        return isinstance(self.kind, MarketOrder)


class OrderAmounts(BaseModel):
    """Maker/taker amounts in integer base units (1e-6)."""

    model_config = ConfigDict(frozen=True)

    maker_amount: int = Field(..., gt=0)
    taker_amount: int = Field(..., gt=0)


class ExchangeDomain(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = "Polymarket CTF Exchange"
    version: str = "1"
    chain_id: int
    verifying_contract: str

    def as_eip712(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "version": self.version,
            "chainId": self.chain_id,
            "verifyingContract": self.verifying_contract,
        }


class UnsignedOrder(BaseModel):
    model_config = ConfigDict(frozen=True)

    salt: int
    maker: str
    signer: str
    taker: str = ZERO_ADDRESS
    token_id: int
    maker_amount: int
    taker_amount: int
    expiration: int = 0
    nonce: int = 0
    fee_rate_bps: int = 0
    side: Side
    signature_type: int = SignatureType.EOA
    domain: ExchangeDomain

    def message(self) -> dict[str, Any]:
        return {
            "salt": self.salt,
            "maker": self.maker,
            "signer": self.signer,
            "taker": self.taker,
            "tokenId": self.token_id,
            "makerAmount": self.maker_amount,
            "takerAmount": self.taker_amount,
            "expiration": self.expiration,
            "nonce": self.nonce,
            "feeRateBps": self.fee_rate_bps,
            "side": self.side.code,
            "signatureType": int(self.signature_type),
        }

    def typed_data(self) -> dict[str, Any]:
        """Full EIP-712 message for hashing and signing."""
        return {
            "types": {"EIP712Domain": DOMAIN_FIELDS, "Order": ORDER_FIELDS},
            "primaryType": "Order",
            "domain": self.domain.as_eip712(),
            "message": self.message(),
        }

    @property
    def price(self) -> Decimal:
        """Effective price encoded by the maker/taker ratio."""
        if self.side is Side.BUY:
            return Decimal(self.maker_amount) / Decimal(self.taker_amount)
        return Decimal(self.taker_amount) / Decimal(self.maker_amount)


class SignedOrder(BaseModel):
    model_config = ConfigDict(frozen=True)

    order: UnsignedOrder
    signature: str  # 0x-prefixed 65-byte r||s||v
    order_hash: str

    def to_payload(self) -> dict[str, Any]:
        """Wire representation expected by POST /order."""
        o = self.order
        return {
            "salt": o.salt,
            "maker": o.maker,
            "signer": o.signer,
            "taker": o.taker,
            "tokenId": str(o.token_id),
            "makerAmount": str(o.maker_amount),
            "takerAmount": str(o.taker_amount),
            "expiration": str(o.expiration),
            "nonce": str(o.nonce),
            "feeRateBps": str(o.fee_rate_bps),
            "side": o.side.value,
            "signatureType": int(o.signature_type),
            "signature": self.signature,
        }


class AssembledOrder(BaseModel):
    """Output of a successful assembly. The only thing the submission client accepts."""

    model_config = ConfigDict(frozen=True)

    signed: SignedOrder
    time_in_force: TimeInForce
    intent: OrderIntent
    states: tuple[OrderState, ...]
    estimated_price: Decimal | None = None  # book VWAP, market orders only

    def request_body(self, owner: str) -> bytes:
        """Deterministic JSON bytes for submission. Same order -> same bytes."""
        body = {"order": self.signed.to_payload(), "owner": owner, "orderType": self.time_in_force.value}
        return json.dumps(body, separators=(",", ":")).encode("utf-8")


class OrderResponse(BaseModel):
    success: bool = True
    order_id: str = ""
    status: str = ""
    error_msg: str = ""
    making_amount: str | None = None
    taking_amount: str | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> OrderResponse:
        return cls(
            success=bool(data.get("success", True)),
            order_id=str(data.get("orderID") or data.get("orderId") or ""),
            status=str(data.get("status") or ""),
            error_msg=str(data.get("errorMsg") or ""),
            making_amount=data.get("makingAmount"),
            taking_amount=data.get("takingAmount"),
        )
