"""Configuration package."""

from telexpenses.config.settings import (
    AppSettings,
    GoogleSheetsSettings,
    PostgresSettings,
    Settings,
    TelegramSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "GoogleSheetsSettings",
    "PostgresSettings",
    "Settings",
    "TelegramSettings",
    "get_settings",
    "validate_all_settings",
]
