# config.py

"""Settings for the order processing API.

Defaults live in ``config.json`` next to this module; environment variables
(``DATABASE_URL``, ``PROMOTER_INTERVAL_SECS``, ...) take precedence over it.
"""

from __future__ import annotations

import json
import logging
import os
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

CONFIG_FILE = Path(__file__).with_name("config.json")


class Settings(BaseSettings):
    """Runtime settings for the store, the promoter and observability."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    database_url: str = "sqlite+aiosqlite:///./orders.db"
    db_slow_query_ms: int = Field(200, ge=0)
    promoter_enabled: bool = True
    promoter_interval_secs: int = Field(300, gt=0)
    load_sample_data: bool = False
    log_level: str = "INFO"
    error_dsn: str | None = None
    env: str = "dev"

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level: {value}")
        return level


@lru_cache
def get_settings() -> Settings:
    """Return settings from ``config.json`` overlaid with the environment.

    The result is cached; call ``get_settings.cache_clear()`` after changing
    the environment.
    """

    data = json.loads(CONFIG_FILE.read_text()) if CONFIG_FILE.exists() else {}
    env_override = {
        k.lower(): v
        for k, v in os.environ.items()
        if k.lower() in Settings.model_fields
    }
    return Settings(**{**data, **env_override})
