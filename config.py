"""Application configuration module.

Reads settings from environment variables (and an optional ``.env`` file)
with sane defaults for local development.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

import pytz
from dotenv import load_dotenv

from core.constants import EventDefaults, PrizeDefaults, RateLimitDefaults, TokenDefaults
from core.exceptions import ConfigurationError

load_dotenv()


def _get_bool(name: str, default: bool = False) -> bool:
    """Get boolean from environment variable."""
    value = os.getenv(name)
    if value is None:
        return default
    return value.lower() in {"1", "true", "yes", "on"}


def _get_int(name: str, default: int) -> int:
    """Get integer from environment variable with fallback."""
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_float(name: str, default: float) -> float:
    """Get float from environment variable with fallback."""
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _get_str(name: str, default: str = "") -> str:
    """Get string from environment variable."""
    return os.getenv(name, default)


@dataclass(frozen=True)
class Config:
    environment: str
    debug: bool
    debug_tokens: bool
    web_host: str
    web_port: int
    secret_key: str
    signing_secret: str
    legacy_signatures_enabled: bool
    event_start_iso: str
    event_tz: str
    qr_base_url: str
    admin_token: str
    tokens_folder: str
    token_prefix: str
    prizes_file: Optional[str]
    log_folder: str
    rate_limit_max: int
    rate_limit_window: float
    proxy_hops: int
    retry_probability: float
    max_retries: int


def load_config() -> Config:
    """Load application configuration from environment variables.

    Returns:
        Config: Application configuration (call ``validate_config`` before
        serving traffic)
    """
    config = Config(
        environment=_get_str("ENVIRONMENT", "development"),
        debug=_get_bool("DEBUG", False),
        debug_tokens=_get_bool("DEBUG_TOKENS", False),
        web_host=_get_str("WEB_HOST", "0.0.0.0"),
        web_port=_get_int("WEB_PORT", 5000),
        secret_key=_get_str(
            "SECRET_KEY",
            "production_secret_key_must_be_changed_in_production_environment"
        ),
        signing_secret=_get_str("SIGNING_SECRET", ""),
        legacy_signatures_enabled=_get_bool("LEGACY_SIGNATURES_ENABLED", False),
        event_start_iso=_get_str("EVENT_START_ISO", ""),
        event_tz=_get_str("EVENT_TZ", EventDefaults.TIMEZONE),
        qr_base_url=_get_str("QR_BASE_URL", "http://localhost:5000/verify"),
        admin_token=_get_str("ADMIN_TOKEN", "admin-token-2025"),
        tokens_folder=_get_str("TOKENS_FOLDER", "tokens"),
        token_prefix=_get_str("TOKEN_PREFIX", TokenDefaults.PREFIX),
        prizes_file=_get_str("PRIZES_FILE", "") or None,
        log_folder=_get_str("LOG_FOLDER", "logs"),
        rate_limit_max=_get_int("RATE_LIMIT_MAX", RateLimitDefaults.MAX_REQUESTS),
        rate_limit_window=_get_float("RATE_LIMIT_WINDOW", RateLimitDefaults.WINDOW_SECONDS),
        proxy_hops=_get_int("PROXY_HOPS", RateLimitDefaults.PROXY_HOPS),
        retry_probability=_get_float("RETRY_PROBABILITY", PrizeDefaults.RETRY_PROBABILITY),
        max_retries=_get_int("MAX_RETRIES", PrizeDefaults.MAX_RETRIES),
    )

    return config


def validate_config(config: Config) -> Config:
    """Check required settings and raise a single error listing all problems.

    Raises:
        ConfigurationError: If any setting is missing or invalid
    """
    missing: List[str] = []
    invalid: List[str] = []

    if not config.signing_secret:
        missing.append("SIGNING_SECRET")
    elif len(config.signing_secret) < TokenDefaults.MIN_SECRET_LENGTH:
        invalid.append(
            f"SIGNING_SECRET: must be at least {TokenDefaults.MIN_SECRET_LENGTH} characters"
        )

    if not config.event_start_iso:
        missing.append("EVENT_START_ISO")
    else:
        try:
            datetime.fromisoformat(config.event_start_iso.replace("Z", "+00:00"))
        except ValueError:
            invalid.append("EVENT_START_ISO: must be a valid ISO date")

    if config.event_tz not in pytz.all_timezones_set:
        invalid.append(f"EVENT_TZ: unknown timezone '{config.event_tz}'")

    if not config.qr_base_url:
        missing.append("QR_BASE_URL")

    if config.rate_limit_max < 1 or config.rate_limit_window <= 0:
        invalid.append("RATE_LIMIT_MAX/RATE_LIMIT_WINDOW: must be positive")
    if config.proxy_hops < 0:
        invalid.append("PROXY_HOPS: must be zero or more")

    if missing or invalid:
        lines = ["Environment validation failed:"]
        if missing:
            lines.append(f"Missing variables: {', '.join(missing)}")
        if invalid:
            lines.append(f"Invalid variables: {', '.join(invalid)}")
        raise ConfigurationError("\n".join(lines))

    return config
