# Copyright (c) 2026 Veritas Aequitas Holdings LLC. All rights reserved.
"""Application configuration via environment variables and .env files."""

from pathlib import Path
from typing import Annotated

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from sandworm.core.constants import (
    CACHE_TTL_SECONDS,
    DEFAULT_CSV_FEED_URL,
    DEFAULT_JSON_FEED_URL,
    FETCH_TIMEOUT_SECONDS,
)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="SANDWORM_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
    )

    # Threat-intel feeds
    csv_feed_url: str = DEFAULT_CSV_FEED_URL
    json_feed_url: str = DEFAULT_JSON_FEED_URL
    fetch_timeout: float = FETCH_TIMEOUT_SECONDS
    fallback_dir: Path | None = None  # None -> bundled snapshot

    # Cache
    cache_backend: str = "disk"  # "memory" or "disk"
    cache_ttl: int = CACHE_TTL_SECONDS
    cache_dir: Path = Path.home() / ".cache" / "sandworm"
    no_cache: bool = False

    # Scan roots (None -> platform default)
    npm_cache_dir: Path | None = None
    yarn_cache_dir: Path | None = None
    pnpm_store_dir: Path | None = None
    nvm_dir: Path | None = None

    # Extra forensic artifact filenames, added to the fixed set
    forensic_filenames: Annotated[list[str], NoDecode] = []

    @field_validator("forensic_filenames", mode="before")
    @classmethod
    def _parse_forensic_filenames(cls, v: object) -> list[str]:
        if isinstance(v, str):
            return [f.strip() for f in v.split(",") if f.strip()]
        return v if isinstance(v, list) else []

    # Report upload
    upload_url: str = ""
    upload_secret: str = ""
    upload_timeout: float = 10.0

    # Logging
    log_level: str = "WARNING"
    log_format: str = "text"


def get_settings() -> Settings:
    return Settings()
