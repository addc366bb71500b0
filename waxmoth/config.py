"""Configuration settings for the Waxmoth aggregator."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field

logger = logging.getLogger("waxmoth.config")


def _get_bool(env_var: str, default: bool = False) -> bool:
    """Parse an environment variable into a boolean with a default."""

    value = os.getenv(env_var)
    if value is None:
        return default

    return value.lower() in {"1", "true", "yes", "on"}


def _get_limit(env_var: str, default: int | None) -> int | None:
    """Parse a size limit where ``0`` (or empty) means unbounded."""

    value = os.getenv(env_var)
    if value is None:
        return default
    if not value.strip():
        return None
    parsed = int(value)
    return parsed if parsed > 0 else None


def _get_optional_int(env_var: str) -> int | None:
    value = os.getenv(env_var)
    if value is None or not value.strip():
        return None
    return int(value)


def _get_list(env_var: str, default: str) -> list[str]:
    raw = os.getenv(env_var, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


@dataclass
class Settings:
    """Application configuration loaded from environment variables."""

    waxmoth_env: str = os.getenv("WAXMOTH_ENV", "local")
    log_level: str = os.getenv("WAXMOTH_LOG_LEVEL", "INFO")

    # Feed stations
    stations: list[str] = field(
        default_factory=lambda: _get_list("WAXMOTH_STATIONS", "localhost:30003")
    )
    enable_feeds: bool = _get_bool("ENABLE_FEEDS", default=True)
    feed_queue_size: int = int(os.getenv("FEED_QUEUE_SIZE", "10000"))
    feed_reconnect: bool = _get_bool("FEED_RECONNECT", default=True)
    feed_backoff_initial: float = float(os.getenv("FEED_BACKOFF_INITIAL", "1.0"))
    feed_backoff_max: float = float(os.getenv("FEED_BACKOFF_MAX", "60.0"))
    feed_max_retries: int | None = _get_optional_int("FEED_MAX_RETRIES")
    feed_connect_timeout: float = float(os.getenv("FEED_CONNECT_TIMEOUT", "10.0"))

    # Aggregation
    dedup_window: int | None = _get_limit("DEDUP_WINDOW", 500)
    location_history_limit: int | None = _get_limit("LOCATION_HISTORY_LIMIT", 1000)

    static_dir: str | None = os.getenv("WAXMOTH_STATIC_DIR") or None


settings = Settings()

if settings.feed_backoff_initial <= 0:
    logger.warning(
        "FEED_BACKOFF_INITIAL must be positive; got %s, using 1.0",
        settings.feed_backoff_initial,
    )
    settings.feed_backoff_initial = 1.0

__all__ = ["settings", "Settings"]
