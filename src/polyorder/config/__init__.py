"""Configuration: TOML settings and environment credentials."""

from polyorder.config.credentials import ApiCredentials, Credentials
from polyorder.config.settings import Settings, configure_logging, get_settings

__all__ = ["ApiCredentials", "Credentials", "Settings", "configure_logging", "get_settings"]
