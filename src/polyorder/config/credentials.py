"""Credentials from the environment: signing key, funder address, L2 API creds."""

from __future__ import annotations

import os
from collections.abc import Mapping

from eth_utils import is_address, to_checksum_address
from pydantic import BaseModel, ConfigDict, SecretStr

from polyorder.errors import InvalidAddress, MissingCredentials

PRIVATE_KEY_VARS = ("PRIVATE_KEY", "POLYMARKET_PRIVATE_KEY")


class ApiCredentials(BaseModel):
    """L2 API key triple used to authenticate order submission."""

    model_config = ConfigDict(frozen=True)

    api_key: str
    api_secret: SecretStr
    api_passphrase: SecretStr


class Credentials(BaseModel):
    """Everything the environment may supply. All fields optional until needed.

    Addresses are kept as given and validated by the operation that uses them.
    """

    model_config = ConfigDict(frozen=True)

    private_key: SecretStr | None = None
    funder_address: str | None = None
    user_address: str | None = None
    api: ApiCredentials | None = None

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Credentials:
        env = os.environ if environ is None else environ
        key = next((env[name] for name in PRIVATE_KEY_VARS if env.get(name)), None)
        api = None
        if env.get("POLY_API_KEY") and env.get("POLY_API_SECRET") and env.get("POLY_PASSPHRASE"):
            api = ApiCredentials(
                api_key=env["POLY_API_KEY"],
                api_secret=SecretStr(env["POLY_API_SECRET"]),
                api_passphrase=SecretStr(env["POLY_PASSPHRASE"]),
            )
        return cls(
            private_key=SecretStr(key) if key else None,
            funder_address=env.get("FUNDER_ADDRESS") or None,
            user_address=env.get("USER_ADDRESS") or None,
            api=api,
        )

    def require_private_key(self) -> SecretStr:
        if self.private_key is None:
            raise MissingCredentials(" or ".join(PRIVATE_KEY_VARS))
        return self.private_key


def checksum_address(value: str, field: str = "address") -> str:
    """Validate and checksum a 0x-prefixed 20-byte hex address."""
    if not isinstance(value, str) or not value.startswith("0x") or not is_address(value):
        raise InvalidAddress(value, field)
    return to_checksum_address(value)
