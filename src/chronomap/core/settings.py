"""Centralized application configuration using Pydantic Settings (v2).

This module exposes a single, cached `settings` instance that reads from:
- Real environment variables (highest precedence)
- `.env` files at the repository root: .env, .env.local, .env.dev/.env.test/.env.prod

Timing and range constants (year bounds, debounce, auto-advance) are not
settings; they live next to the code that uses them in
:mod:`chronomap.core.temporal`.
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

EnvName = Literal["dev", "test", "prod"]
LogLevelName = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
LocaleName = Literal["en", "zh"]


class Settings(BaseSettings):
    """Typed application configuration loaded from env and `.env` files.

    Attributes
    ----------
    environment : EnvName
        Runtime environment flag; maps from `CHRONOMAP_ENV`.
    log_level : LogLevelName
        Global log level string; maps from `LOG_LEVEL`.
    google_api_key : Optional[str]
        Credential for the snapshot generator. When absent the generator is
        considered unconfigured and only cached data (plus the bundled year-0
        snapshot) can be shown. Maps from `GOOGLE_API_KEY`.
    google_api_base_url : Optional[str]
        Override for the Gemini endpoint; maps from `GOOGLE_API_BASE_URL`.
    cache_dir : Path
        Directory of the on-disk snapshot cache; maps from `CHRONOMAP_CACHE_DIR`.
    cache_prefix : str
        Key prefix for cache entries; maps from `CHRONOMAP_CACHE_PREFIX`.
    locale : LocaleName
        Default generator locale; maps from `CHRONOMAP_LOCALE`.
    """

    environment: EnvName = Field(default="dev", alias="CHRONOMAP_ENV")
    log_level: LogLevelName = Field(default="INFO", alias="LOG_LEVEL")
    google_api_key: str | None = Field(default=None, alias="GOOGLE_API_KEY")
    google_api_base_url: str | None = Field(default=None, alias="GOOGLE_API_BASE_URL")
    cache_dir: Path = Field(default=Path("artifacts") / "cache", alias="CHRONOMAP_CACHE_DIR")
    cache_prefix: str = Field(default="chronomap_data_", alias="CHRONOMAP_CACHE_PREFIX")
    locale: LocaleName = Field(default="en", alias="CHRONOMAP_LOCALE")

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local", ".env.dev", ".env.test", ".env.prod"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def generator_configured(self) -> bool:
        """Return True when a generator credential is available."""
        return bool(self.google_api_key)

    def log_level_numeric(self) -> int:
        """Return the numeric logging level corresponding to `self.log_level`."""
        return getattr(logging, self.log_level, logging.INFO)


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    """Create and cache a `Settings` instance.

    We keep this behind an LRU cache so tests can force a rebuild via
    `load_settings.cache_clear()` after mutating `os.environ`.
    """
    os.environ.setdefault("CHRONOMAP_ENV", "dev")
    return Settings()


# Export a ready-to-use singleton (import-time read of env / .env files).
settings: Settings = load_settings()


def get_logger(name: str = "chronomap") -> logging.Logger:
    """Return a process-global logger configured to the current `LOG_LEVEL`."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s")
        )
        logger.addHandler(handler)
    logger.setLevel(load_settings().log_level_numeric())
    logger.propagate = False
    return logger
