"""Configuration module for CrateKeeper."""

from .settings import (
    DatabaseSettings,
    MatchingSettings,
    ObservabilitySettings,
    ScanSettings,
    Settings,
    StorageSettings,
    get_settings,
)

__all__ = [
    "DatabaseSettings",
    "MatchingSettings",
    "ObservabilitySettings",
    "ScanSettings",
    "Settings",
    "StorageSettings",
    "get_settings",
]
