"""EIP-712 signing. Key material lives only inside the signing call."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import structlog
from eth_account import Account
from eth_account.messages import SignableMessage, encode_typed_data
from eth_utils import keccak
from pydantic import SecretStr

from polyorder.errors import InvalidKey, SigningFailure
from polyorder.models.order import SignedOrder, UnsignedOrder

log = structlog.get_logger(__name__)

# secp256k1 group order
_CURVE_ORDER = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141

KeyInput = str | bytes | SecretStr


@contextmanager
def _key_material(private_key: KeyInput) -> Iterator[bytearray]:
    """Parse the key into a mutable buffer and zero it on every exit path."""
    if isinstance(private_key, SecretStr):
        private_key = private_key.get_secret_value()
    buf = bytearray()
    try:
        if isinstance(private_key, (bytes, bytearray)):
            buf.extend(private_key)
        elif isinstance(private_key, str):
            hexkey = private_key.strip()
            if hexkey[:2] in ("0x", "0X"):
                hexkey = hexkey[2:]
            try:
                buf.extend(bytes.fromhex(hexkey))
            except ValueError:
                raise InvalidKey("not hex encoded") from None
        else:
            raise InvalidKey("unsupported key type")
        if len(buf) != 32:
            raise InvalidKey("expected 32 bytes")
        if not 0 < int.from_bytes(buf, "big") < _CURVE_ORDER:
            raise InvalidKey("scalar out of curve range")
        yield buf
    finally:
        for i in range(len(buf)):
            buf[i] = 0


def typed_data_digest(signable: SignableMessage) -> bytes:
    """keccak256(0x19 || 0x01 || domainSeparator || structHash)."""
    return keccak(b"\x19" + signable.version + signable.header + signable.body)


def address_for_key(private_key: KeyInput) -> str:
    """Checksummed address controlled by the key."""
    with _key_material(private_key) as key:
        try:
            return Account.from_key(key).address
        except Exception:
            raise InvalidKey() from None


def sign_typed_data(full_message: dict[str, Any], private_key: KeyInput) -> tuple[str, bytes, str]:
    """Sign an EIP-712 message. Returns (signature hex, digest, signer address).

    The signature is verified to recover to the key's address before returning.
    """
    try:
        signable = encode_typed_data(full_message=full_message)
    except Exception as e:
        raise SigningFailure(f"cannot encode typed data: {type(e).__name__}") from None
    digest = typed_data_digest(signable)
    with _key_material(private_key) as key:
        try:
            address = Account.from_key(key).address
        except Exception:
            raise InvalidKey() from None
        try:
            signed = Account.sign_message(signable, private_key=key)
        except Exception as e:
            raise SigningFailure(type(e).__name__) from None
    signature = bytes(signed.signature)
    try:
        recovered = Account.recover_message(signable, signature=signature)
    except Exception as e:
        raise SigningFailure(f"signature not recoverable: {type(e).__name__}") from None
    if recovered != address:
        raise SigningFailure("signature does not recover to signer address")
    return "0x" + signature.hex(), digest, address


def sign_order(unsigned: UnsignedOrder, private_key: KeyInput) -> SignedOrder:
    """Sign the order's canonical typed data. The key must control `unsigned.signer`."""
    signature, digest, address = sign_typed_data(unsigned.typed_data(), private_key)
    if address != unsigned.signer:
        raise SigningFailure("private key does not control the order's signer address")
    order_hash = "0x" + digest.hex()
    log.debug("order_signed", order_hash=order_hash, signer=address)
    return SignedOrder(order=unsigned, signature=signature, order_hash=order_hash)
