"""Order identity and EIP-712 domain: salt, expiration, fee, maker/taker amounts."""

from __future__ import annotations

import secrets
import time
from collections.abc import Callable
from typing import Any

import structlog
from pydantic import BaseModel, ConfigDict

from polyorder.config.credentials import checksum_address
from polyorder.errors import MalformedTokenId, MissingCredentials
from polyorder.models.market import Market
from polyorder.models.order import (
    ZERO_ADDRESS,
    ExchangeDomain,
    OrderAmounts,
    OrderIntent,
    SignatureType,
    UnsignedOrder,
)

log = structlog.get_logger(__name__)

SALT_BITS = 128


class ContractConfig(BaseModel):
    """Exchange contracts for one chain."""

    model_config = ConfigDict(frozen=True)

    exchange: str
    neg_risk_exchange: str
    collateral: str
    conditional_tokens: str


CONTRACTS: dict[int, ContractConfig] = {
    137: ContractConfig(
        exchange="0x4bfb41d5b3570defd03c39a9a4d8de6bd8b8982e",
        neg_risk_exchange="0xc5d563a36ae78145c45a50134d48a1215220f80a",
        collateral="0x2791bca1f2de4661ed88a30c99a7a9449aa84174",
        conditional_tokens="0x4d97dcd97ec945f40cf65f87097ace5ea0476045",
    ),
}


def contract_config(chain_id: int, overrides: dict[str, Any] | None = None) -> ContractConfig:
    """Known contracts for `chain_id`, with per-field overrides from config."""
    base = CONTRACTS.get(chain_id)
    fields = base.model_dump() if base else {}
    fields.update(overrides or {})
    missing = [f for f in ContractConfig.model_fields if not fields.get(f)]
    if missing:
        raise ValueError(f"No contract addresses for chain {chain_id}: missing {', '.join(missing)}")
    return ContractConfig(**fields)


def exchange_domain(chain_id: int, contracts: ContractConfig, neg_risk: bool) -> ExchangeDomain:
    verifying = contracts.neg_risk_exchange if neg_risk else contracts.exchange
    return ExchangeDomain(chain_id=chain_id, verifying_contract=checksum_address(verifying, "verifying_contract"))


def generate_salt() -> int:
    """Fresh CSPRNG salt so identical economic terms never hash the same."""
    return secrets.randbits(SALT_BITS)


def validate_token_id(token_id: str) -> int:
    if not isinstance(token_id, str) or not (token_id.isascii() and token_id.isdecimal()):
        raise MalformedTokenId(token_id)
    return int(token_id)


class OrderBuilder:
    """Builds the unsigned typed-data order for one signer.

    `salt_factory` and `clock` are injectable so tests can pin them.
    """

    def __init__(
        self,
        *,
        chain_id: int,
        contracts: ContractConfig,
        signer: str,
        maker: str | None = None,
        signature_type: int = SignatureType.EOA,
        nonce: int = 0,
        fok_window_sec: int = 60,
        salt_factory: Callable[[], int] = generate_salt,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.chain_id = chain_id
        self.contracts = contracts
        if int(signature_type) != SignatureType.EOA and not maker:
            # Proxy and safe orders must name the wallet that holds the funds.
            raise MissingCredentials("FUNDER_ADDRESS")
        self.signer = checksum_address(signer, "signer")
        self.maker = checksum_address(maker, "maker") if maker else self.signer
        self.signature_type = int(signature_type)
        self.nonce = nonce
        self.fok_window_sec = fok_window_sec
        self.salt_factory = salt_factory
        self.clock = clock

    def expiration_for(self, intent: OrderIntent) -> int:
        """0 (good-til-cancelled) for limit orders, now + FOK window for market orders."""
        if not intent.is_market or self.fok_window_sec <= 0:
            return 0
        return int(self.clock()) + self.fok_window_sec

    def build(self, intent: OrderIntent, market: Market, amounts: OrderAmounts) -> UnsignedOrder:
        token_id = validate_token_id(intent.token_id)
        order = UnsignedOrder(
            salt=self.salt_factory(),
            maker=self.maker,
            signer=self.signer,
            taker=ZERO_ADDRESS,
            token_id=token_id,
            maker_amount=amounts.maker_amount,
            taker_amount=amounts.taker_amount,
            expiration=self.expiration_for(intent),
            nonce=self.nonce,
            fee_rate_bps=market.fee_rate_bps,
            side=intent.side,
            signature_type=self.signature_type,
            domain=exchange_domain(self.chain_id, self.contracts, market.neg_risk),
        )
        log.debug(
            "order_identified",
            token_id=intent.token_id,
            side=intent.side.value,
            expiration=order.expiration,
            fee_rate_bps=order.fee_rate_bps,
            neg_risk=market.neg_risk,
        )
        return order
