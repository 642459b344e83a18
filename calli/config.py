"""
Centralized configuration with environment variable overrides.

Backend location, request timeouts, and booking behaviour switches are
configurable here. Nothing is hardcoded in the flows or the API client.
"""

import logging
import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

WINDOW_NOTES = ("working hours", "break")

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


def _safe_float(env_var: str, default: str) -> float:
    """Parse a float from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return float(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid float for {env_var}: {raw!r}"
        ) from None


def _safe_bool(env_var: str, default: str) -> bool:
    """Parse a boolean flag from an env var."""
    raw = os.getenv(env_var, default)
    normalized = raw.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ValueError(f"Invalid boolean for {env_var}: {raw!r}")


@dataclass(frozen=True)
class ApiConfig:
    """Location and timeouts of the booking backend."""

    base_url: str = os.getenv("API_BASE", "http://localhost:5000")
    timeout_sec: float = _safe_float("API_TIMEOUT", "10.0")


@dataclass(frozen=True)
class BookingConfig:
    """Selection and availability behaviour."""

    default_window_note: str = os.getenv("DEFAULT_WINDOW_NOTE", "working hours")
    slot_query_sequencing: bool = _safe_bool("SLOT_QUERY_SEQUENCING", "false")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    api: ApiConfig = field(default_factory=ApiConfig)
    booking: BookingConfig = field(default_factory=BookingConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    app_name: str = os.getenv("APP_NAME", "calli")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    if not config.api.base_url.startswith(("http://", "https://")):
        raise ValueError(
            f"API_BASE must be an http(s) URL, got {config.api.base_url!r}"
        )
    if config.api.timeout_sec <= 0:
        raise ValueError(
            f"API_TIMEOUT must be > 0, got {config.api.timeout_sec}"
        )
    if config.booking.default_window_note not in WINDOW_NOTES:
        raise ValueError(
            f"DEFAULT_WINDOW_NOTE must be one of {list(WINDOW_NOTES)}, "
            f"got {config.booking.default_window_note!r}"
        )


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logger.info("Configuration loaded for '%s' (backend %s)", config.app_name, config.api.base_url)
    return config


# Singleton instance
settings = load_config()
