"""TOML config loading and profiles."""

from __future__ import annotations

import logging
import sys
import tomllib
from pathlib import Path
from typing import Any

# Default config search path (project root or cwd)
_CONFIG_DIR = Path(__file__).resolve().parent.parent.parent.parent / "config"
_CWD_CONFIG = Path.cwd() / "config"

POLYGON = 137


def _load_toml(path: Path) -> dict[str, Any]:
    with open(path, "rb") as f:
        return tomllib.load(f)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge override into base. Override values take precedence."""
    result = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _find_config_dir(config_dir: Path | None = None) -> Path:
    if config_dir is not None:
        return config_dir
    if _CWD_CONFIG.exists():
        return _CWD_CONFIG
    return _CONFIG_DIR


def load_config(profile: str | None = None, config_dir: Path | None = None) -> dict[str, Any]:
    """Load merged config from default.toml and optional profile overlay."""
    directory = _find_config_dir(config_dir)
    default_path = directory / "default.toml"
    if not default_path.exists():
        return {}
    base = _load_toml(default_path)
    if profile:
        profile_path = directory / f"{profile}.toml"
        if profile_path.exists():
            overlay = _load_toml(profile_path)
            base = _deep_merge(base, overlay)
    return base


def get_settings(profile: str | None = None, config_dir: Path | None = None) -> Settings:
    """Return Settings instance from merged config."""
    raw = load_config(profile, config_dir)
    return Settings.from_dict(raw)


class Settings:
    """Application settings from TOML config. Credentials are never read from here."""

    def __init__(
        self,
        *,
        clob: dict[str, Any] | None = None,
        gamma: dict[str, Any] | None = None,
        data: dict[str, Any] | None = None,
        http: dict[str, Any] | None = None,
        contracts: dict[str, Any] | None = None,
        logging: dict[str, Any] | None = None,
    ):
        self.clob = clob or {}
        self.gamma = gamma or {}
        self.data = data or {}
        self.http = http or {}
        self.contracts = contracts or {}
        self.logging = logging or {}

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Settings:
        return cls(
            clob=raw.get("clob"),
            gamma=raw.get("gamma"),
            data=raw.get("data"),
            http=raw.get("http"),
            contracts=raw.get("contracts"),
            logging=raw.get("logging"),
        )

    # Convenience accessors with defaults
    @property
    def clob_host(self) -> str:
        return self.clob.get("host", "https://clob.polymarket.com")

    @property
    def chain_id(self) -> int:
        return int(self.clob.get("chain_id", POLYGON))

    @property
    def signature_type(self) -> int:
        """0 = EOA, 1 = Polymarket proxy, 2 = Gnosis safe."""
        return int(self.clob.get("signature_type", 0))

    @property
    def fok_window_sec(self) -> int:
        return int(self.clob.get("fok_window_sec", 60))

    @property
    def nonce(self) -> int:
        return int(self.clob.get("nonce", 0))

    @property
    def gamma_api_base(self) -> str:
        return self.gamma.get("api_base", "https://gamma-api.polymarket.com")

    @property
    def data_api_base(self) -> str:
        return self.data.get("api_base", "https://data-api.polymarket.com")

    @property
    def http_timeout_sec(self) -> float:
        return float(self.http.get("timeout_sec", 15.0))

    @property
    def max_retries(self) -> int:
        return int(self.http.get("max_retries", 3))

    @property
    def backoff_base_sec(self) -> float:
        return float(self.http.get("backoff_base_sec", 0.5))

    @property
    def backoff_max_sec(self) -> float:
        return float(self.http.get("backoff_max_sec", 8.0))

    @property
    def contract_overrides(self) -> dict[str, Any]:
        """Per-chain contract address overrides, keyed by chain id string."""
        return dict(self.contracts.get(str(self.chain_id)) or {})

    @property
    def logging_level(self) -> str:
        return self.logging.get("level", "INFO").upper()

    @property
    def logging_format(self) -> str:
        return self.logging.get("format", "console")

    @property
    def logging_level_num(self) -> int:
        return getattr(logging, self.logging_level, logging.INFO)


def configure_logging(settings: Settings) -> None:
    """Configure structlog with settings. Call once at application entry."""
    import structlog

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]
    if settings.logging_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(settings.logging_level_num),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )
