"""Configuration loading and validation."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv


def _split_list(raw: str | None) -> tuple[str, ...]:
    """Split a comma-separated env value, dropping blanks."""
    if not raw:
        return ()
    return tuple(part.strip() for part in raw.split(",") if part.strip())


@dataclass(frozen=True)
class Config:
    """Application configuration. All values sourced from environment variables."""

    # Required
    llm_api_key: str
    telegram_bot_token: str
    telegram_chat_id: str

    # Optional — LLM
    llm_model: str = "claude-3-7-sonnet-20250219"
    llm_max_tokens: int = 4000
    llm_max_retries: int = 3
    llm_timeout_seconds: int = 120

    # Optional — Fetch services
    firecrawl_api_key: str | None = None
    firecrawl_base_url: str = "https://api.firecrawl.dev"
    apify_api_token: str | None = None
    apify_base_url: str = "https://api.apify.com"
    http_timeout_seconds: float = 60.0
    extract_poll_interval_seconds: float = 2.0
    extract_timeout_seconds: float = 180.0

    # Optional — Sources
    x_usernames: tuple[str, ...] = field(default_factory=tuple)
    x_search_terms: tuple[str, ...] = field(default_factory=tuple)
    sources_config_path: str | None = None

    # Optional — Digest
    digest_schedule_cron: str = "0 17 * * *"
    digest_timezone: str = "America/New_York"
    telegram_max_retries: int = 3

    # Optional — Application
    run_mode: str = "once"
    log_level: str = "INFO"
    log_format: str = "text"
    app_env: str = "production"


_REQUIRED_VARS = [
    "LLM_API_KEY",
    "TELEGRAM_BOT_TOKEN",
    "TELEGRAM_CHAT_ID",
]

_RUN_MODES = ("once", "schedule")


def load_config(env_path: str | Path | None = None) -> Config:
    """Load configuration from environment variables.

    Loads a .env file if present (for local development), then validates
    that all required variables are set. Raises ValueError listing any
    missing variables, or naming an invalid RUN_MODE.
    """
    load_dotenv(dotenv_path=env_path)

    missing = [var for var in _REQUIRED_VARS if not os.environ.get(var)]
    if missing:
        raise ValueError(
            f"Missing required environment variables: {', '.join(missing)}"
        )

    run_mode = os.environ.get("RUN_MODE", "once")
    if run_mode not in _RUN_MODES:
        raise ValueError(f"RUN_MODE must be one of {', '.join(_RUN_MODES)}, got '{run_mode}'")

    return Config(
        # Required
        llm_api_key=os.environ["LLM_API_KEY"],
        telegram_bot_token=os.environ["TELEGRAM_BOT_TOKEN"],
        telegram_chat_id=os.environ["TELEGRAM_CHAT_ID"],
        # Optional — LLM
        llm_model=os.environ.get("LLM_MODEL", "claude-3-7-sonnet-20250219"),
        llm_max_tokens=int(os.environ.get("LLM_MAX_TOKENS", "4000")),
        llm_max_retries=int(os.environ.get("LLM_MAX_RETRIES", "3")),
        llm_timeout_seconds=int(os.environ.get("LLM_TIMEOUT_SECONDS", "120")),
        # Optional — Fetch services
        firecrawl_api_key=os.environ.get("FIRECRAWL_API_KEY") or None,
        firecrawl_base_url=os.environ.get("FIRECRAWL_BASE_URL", "https://api.firecrawl.dev"),
        apify_api_token=os.environ.get("APIFY_API_TOKEN") or None,
        apify_base_url=os.environ.get("APIFY_BASE_URL", "https://api.apify.com"),
        http_timeout_seconds=float(os.environ.get("HTTP_TIMEOUT_SECONDS", "60")),
        extract_poll_interval_seconds=float(
            os.environ.get("EXTRACT_POLL_INTERVAL_SECONDS", "2")
        ),
        extract_timeout_seconds=float(os.environ.get("EXTRACT_TIMEOUT_SECONDS", "180")),
        # Optional — Sources
        x_usernames=_split_list(os.environ.get("X_USERNAMES")),
        x_search_terms=_split_list(os.environ.get("X_SEARCH_TERMS")),
        sources_config_path=os.environ.get("SOURCES_CONFIG_PATH") or None,
        # Optional — Digest
        digest_schedule_cron=os.environ.get("DIGEST_SCHEDULE_CRON", "0 17 * * *"),
        digest_timezone=os.environ.get("DIGEST_TIMEZONE", "America/New_York"),
        telegram_max_retries=int(os.environ.get("TELEGRAM_MAX_RETRIES", "3")),
        # Optional — Application
        run_mode=run_mode,
        log_level=os.environ.get("LOG_LEVEL", "INFO"),
        log_format=os.environ.get("LOG_FORMAT", "text"),
        app_env=os.environ.get("APP_ENV", "production"),
    )
