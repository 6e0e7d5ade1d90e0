# stockview/config.py
from __future__ import annotations

import json
from typing import Annotated

from pydantic import Field, AliasChoices, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


class Settings(BaseSettings):
    """
    Central app configuration.
    - Reads from .env
    - Accepts BOTH UPPERCASE and lowercase env names (AliasChoices)
    - Ignores unknown extras so new keys in .env won't crash
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ---- App basics ----
    env: str = Field("dev", validation_alias=AliasChoices("ENV", "env"))
    timezone: str = Field(
        "Asia/Seoul", validation_alias=AliasChoices("TIMEZONE", "timezone")
    )
    offline: bool = Field(False, validation_alias=AliasChoices("OFFLINE", "offline"))
    log_level: str | None = Field(
        None, validation_alias=AliasChoices("LOG_LEVEL", "log_level")
    )
    log_to_file: bool = Field(
        True, validation_alias=AliasChoices("LOG_TO_FILE", "log_to_file")
    )
    log_dir: str | None = Field(
        None, validation_alias=AliasChoices("LOG_DIR", "log_dir"),
        description="Directory for log files (default: logs/ in the project root)."
    )

    # ---- Yahoo Finance upstream ----
    yahoo_base_url: str = Field(
        "https://query1.finance.yahoo.com",
        validation_alias=AliasChoices("YAHOO_BASE_URL", "yahoo_base_url"),
    )
    yahoo_timeout: float = Field(
        10.0, validation_alias=AliasChoices("YAHOO_TIMEOUT", "yahoo_timeout")
    )
    yahoo_retries: int = Field(
        2, validation_alias=AliasChoices("YAHOO_RETRIES", "yahoo_retries"),
        description="Attempts per request on network errors (1 = no retry)."
    )
    yahoo_rpm: int = Field(
        120, validation_alias=AliasChoices("YAHOO_RPM", "yahoo_rpm"),
        description="Soft throttle for upstream requests/min."
    )
    yahoo_burst: int = Field(
        20, validation_alias=AliasChoices("YAHOO_BURST", "yahoo_burst"),
        description="Approx. burst tokens before throttling."
    )
    yahoo_user_agent: str = Field(
        DEFAULT_USER_AGENT,
        validation_alias=AliasChoices("YAHOO_USER_AGENT", "yahoo_user_agent"),
    )
    yahoo_accept_language: str = Field(
        "ko-KR,ko;q=0.9,en-US;q=0.8,en;q=0.7",
        validation_alias=AliasChoices("YAHOO_ACCEPT_LANGUAGE", "yahoo_accept_language"),
    )
    yahoo_debug: bool = Field(
        False, validation_alias=AliasChoices("YAHOO_DEBUG", "yahoo_debug")
    )

    # ---- Market conventions ----
    domestic_suffixes: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: [".KS"],
        validation_alias=AliasChoices("DOMESTIC_SUFFIXES", "domestic_suffixes"),
        description="Comma-separated (.KS,.KQ) or JSON list of domestic ticker suffixes."
    )

    # ---- Request limits ----
    chart_batch_limit: int = Field(
        20, validation_alias=AliasChoices("CHART_BATCH_LIMIT", "chart_batch_limit")
    )
    latest_prices_limit: int = Field(
        100, validation_alias=AliasChoices("LATEST_PRICES_LIMIT", "latest_prices_limit")
    )
    search_limit: int = Field(
        20, validation_alias=AliasChoices("SEARCH_LIMIT", "search_limit")
    )
    page_size: int = Field(
        20, validation_alias=AliasChoices("PAGE_SIZE", "page_size")
    )

    # ---- Batch pacing ----
    batch_chunk_delay: float = Field(
        0.3, validation_alias=AliasChoices("BATCH_CHUNK_DELAY", "batch_chunk_delay"),
        description="Seconds to pause between chart chunks."
    )
    progress_reset_delay: float = Field(
        1.0, validation_alias=AliasChoices("PROGRESS_RESET_DELAY", "progress_reset_delay")
    )
    api_base_url: str = Field(
        "http://localhost:8000",
        validation_alias=AliasChoices("API_BASE_URL", "api_base_url"),
    )

    @field_validator("domestic_suffixes", mode="before")
    @classmethod
    def _split_suffixes(cls, value):
        if isinstance(value, str):
            text = value.strip()
            if text.startswith("["):
                return json.loads(text)
            return [part.strip() for part in text.split(",") if part.strip()]
        return value


settings = Settings()
