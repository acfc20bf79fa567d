"""Configuration package."""

from ledger.config.settings import (
    AppSettings,
    AuthSettings,
    DatabaseSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "AuthSettings",
    "DatabaseSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
