"""CLOB request authentication headers.

L1: EIP-712 `ClobAuth` signature by the wallet key (used to derive API keys).
L2: HMAC-SHA256 over timestamp + method + path + body with the API secret.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
from typing import Any

from polyorder.config.credentials import ApiCredentials
from polyorder.orders.signer import KeyInput, sign_typed_data

CLOB_AUTH_MESSAGE = "This message attests that I control the given wallet"


def clob_auth_typed_data(address: str, chain_id: int, timestamp: int, nonce: int = 0) -> dict[str, Any]:
    return {
        "types": {
            "EIP712Domain": [
                {"name": "name", "type": "string"},
                {"name": "version", "type": "string"},
                {"name": "chainId", "type": "uint256"},
            ],
            "ClobAuth": [
                {"name": "address", "type": "address"},
                {"name": "timestamp", "type": "string"},
                {"name": "nonce", "type": "uint256"},
                {"name": "message", "type": "string"},
            ],
        },
        "primaryType": "ClobAuth",
        "domain": {"name": "ClobAuthDomain", "version": "1", "chainId": chain_id},
        "message": {
            "address": address,
            "timestamp": str(timestamp),
            "nonce": nonce,
            "message": CLOB_AUTH_MESSAGE,
        },
    }


def l1_headers(private_key: KeyInput, address: str, chain_id: int, timestamp: int, nonce: int = 0) -> dict[str, str]:
    signature, _, signer = sign_typed_data(clob_auth_typed_data(address, chain_id, timestamp, nonce), private_key)
    return {
        "POLY_ADDRESS": signer,
        "POLY_SIGNATURE": signature,
        "POLY_TIMESTAMP": str(timestamp),
        "POLY_NONCE": str(nonce),
    }


def hmac_signature(secret: str, timestamp: int, method: str, request_path: str, body: bytes | None = None) -> str:
    """urlsafe-base64 HMAC-SHA256 of timestamp + METHOD + path (+ body)."""
    key = base64.urlsafe_b64decode(secret)
    message = f"{timestamp}{method.upper()}{request_path}"
    if body:
        message += body.decode("utf-8")
    digest = hmac.new(key, message.encode("utf-8"), hashlib.sha256).digest()
    return base64.urlsafe_b64encode(digest).decode("utf-8")


def l2_headers(
    creds: ApiCredentials,
    address: str,
    timestamp: int,
    method: str,
    request_path: str,
    body: bytes | None = None,
) -> dict[str, str]:
    return {
        "POLY_ADDRESS": address,
        "POLY_SIGNATURE": hmac_signature(creds.api_secret.get_secret_value(), timestamp, method, request_path, body),
        "POLY_TIMESTAMP": str(timestamp),
        "POLY_API_KEY": creds.api_key,
        "POLY_PASSPHRASE": creds.api_passphrase.get_secret_value(),
    }
