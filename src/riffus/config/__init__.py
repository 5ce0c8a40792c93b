"""Configuration module for Riffus."""

from .settings import (
    CacheSettings,
    DatabaseSettings,
    ProviderSettings,
    RetrySettings,
    Settings,
    get_settings,
)

__all__ = [
    "CacheSettings",
    "DatabaseSettings",
    "ProviderSettings",
    "RetrySettings",
    "Settings",
    "get_settings",
]
