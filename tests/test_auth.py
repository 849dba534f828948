"""L1/L2 request authentication."""

import base64
import hashlib
import hmac

from eth_account import Account
from eth_account.messages import encode_typed_data

from conftest import TEST_ADDRESS, TEST_KEY
from polyorder.ingestion.polymarket.auth import clob_auth_typed_data, hmac_signature, l1_headers

SECRET = base64.urlsafe_b64encode(b"0123456789abcdef0123456789abcdef").decode()


def test_hmac_signature_matches_reference():
    body = b'{"a":1}'
    expected = base64.urlsafe_b64encode(
        hmac.new(b"0123456789abcdef0123456789abcdef", b'1700000000POST/order{"a":1}', hashlib.sha256).digest()
    ).decode()
    assert hmac_signature(SECRET, 1_700_000_000, "post", "/order", body) == expected


def test_hmac_signature_without_body():
    a = hmac_signature(SECRET, 1, "GET", "/orders")
    b = hmac_signature(SECRET, 1, "GET", "/orders", b"")
    assert a == b
    assert a != hmac_signature(SECRET, 2, "GET", "/orders")


def test_l1_headers_sign_clob_auth():
    headers = l1_headers(TEST_KEY, TEST_ADDRESS, 137, 1_700_000_000, nonce=3)
    assert headers["POLY_ADDRESS"] == TEST_ADDRESS
    assert headers["POLY_TIMESTAMP"] == "1700000000"
    assert headers["POLY_NONCE"] == "3"
    signable = encode_typed_data(full_message=clob_auth_typed_data(TEST_ADDRESS, 137, 1_700_000_000, 3))
    assert Account.recover_message(signable, signature=headers["POLY_SIGNATURE"]) == TEST_ADDRESS
