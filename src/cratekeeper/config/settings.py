"""Application settings loaded from environment variables.

Hey future me - every section is its own BaseModel so callers read
``settings.scan.max_workers`` instead of a flat soup of prefixed names.
Environment variables use the ``CRATEKEEPER_`` prefix and ``__`` as the nested
delimiter, e.g. ``CRATEKEEPER_SCAN__MAX_WORKERS=4`` or
``CRATEKEEPER_STORAGE__ROOT_FOLDERS='["/music", "/music-lossless"]'``.
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseModel):
    """Where the library lives on disk."""

    root_folders: list[Path] = Field(
        default_factory=lambda: [Path("/music")],
        description="Configured library roots. Artist folders live directly below one of these.",
    )

    @field_validator("root_folders")
    @classmethod
    def _roots_must_be_absolute(cls, value: list[Path]) -> list[Path]:
        for root in value:
            if not root.is_absolute():
                raise ValueError(f"Root folder must be an absolute path: {root}")
        return value


class DatabaseSettings(BaseModel):
    """Database connection settings."""

    url: str = "sqlite+aiosqlite:///./cratekeeper.db"
    echo: bool = False
    pool_pre_ping: bool = True
    pool_size: int = 5
    max_overflow: int = 10
    pool_timeout: int = 30
    pool_recycle: int = 3600


class ScanSettings(BaseModel):
    """Disk scan tuning."""

    # Same heuristic as the mutagen thread pool: at least 2, at most 8.
    max_workers: int = Field(
        default_factory=lambda: min(8, max(2, os.cpu_count() or 4)),
        ge=1,
    )
    filter_mode: Literal["none", "known", "matched"] = "known"
    interval_seconds: int = Field(default=6 * 60 * 60, ge=60)
    run_on_startup: bool = False


class MatchingSettings(BaseModel):
    """Fuzzy artist lookup thresholds and catalog cache lifetime."""

    fuzz_threshold: float = Field(default=0.8, ge=0.0, le=1.0)
    fuzz_gap: float = Field(default=0.2, ge=0.0, le=1.0)
    cache_ttl_seconds: int = Field(default=30, ge=0)


class ObservabilitySettings(BaseModel):
    """Logging configuration."""

    log_level: str = "INFO"
    log_json_format: bool = False
    app_name: str = "cratekeeper"


class Settings(BaseSettings):
    """Root settings object."""

    model_config = SettingsConfigDict(
        env_prefix="CRATEKEEPER_",
        env_nested_delimiter="__",
        env_file=".env",
        extra="ignore",
    )

    storage: StorageSettings = Field(default_factory=StorageSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    scan: ScanSettings = Field(default_factory=ScanSettings)
    matching: MatchingSettings = Field(default_factory=MatchingSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)


# Cached so every module shares one instance. Tests that need different values
# build Settings(...) directly instead of going through here.
@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()
