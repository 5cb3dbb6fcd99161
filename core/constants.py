"""Application-wide constants and configuration values."""

from __future__ import annotations

from enum import Enum


# Token ids
class TokenDefaults:
    """Token id and signature defaults."""
    PREFIX = "ktd"
    SEQUENCE_WIDTH = 3
    DATE_FORMAT = "%Y-%m-%d"
    CSV_HEADER = ("id", "day", "prize", "sig", "url")
    MIN_SECRET_LENGTH = 32
    SIGNATURE_HEX_LENGTH = 64
    DEBUG_HEAD_LENGTH = 16


# Prize draw
class PrizeDefaults:
    """Weighted draw and retry configuration."""
    RETRY_PROBABILITY = 0.2
    MIN_RETRY_PROBABILITY = 0.15
    MAX_RETRY_PROBABILITY = 0.25
    MAX_RETRIES = 1
    MIN_MAX_RETRIES = 1
    MAX_MAX_RETRIES = 3


# Daily token batch (104 per day)
DAILY_DISTRIBUTION = {
    "trident": 16,
    "cigarrillos": 16,
    "cerebritos": 16,
    "popcorn": 16,
    "agua": 16,
    "chupetines": 24,
}


# Event gate
class EventDefaults:
    """Event gate configuration."""
    TIMEZONE = "America/Lima"
    POLL_SECONDS = 1
    RESYNC_SECONDS = 60


# Rate limiting
class RateLimitDefaults:
    """Per-IP rate limiting configuration."""
    MAX_REQUESTS = 5  # per window
    WINDOW_SECONDS = 60.0
    # Trusted reverse proxies in front of the app; 0 means direct exposure
    PROXY_HOPS = 0


# Cookies
class CookieDefaults:
    """Operator settings cookie."""
    SETTINGS_COOKIE = "ktdlounge_settings"
    SETTINGS_SALT = "ktdlounge-operator-settings"
    MAX_AGE = 60 * 60 * 24 * 7  # 1 week
    PLAY_STATE_PREFIX = "ktdlounge:played"
    DEMO_STATE_PREFIX = "ktdlounge:demo"
    DEMO_ID_KEY = "ktdlounge:demo_id"


class EventMode(str, Enum):
    """Operator-selected event phase."""
    BEFORE = "before"
    DURING = "during"
    AFTER = "after"


class SpinOutcome(str, Enum):
    """Result kinds recorded in metrics."""
    PRIZE = "prize"
    RETRY = "retry"
    ALREADY_PLAYED = "already_played"
    NOT_STARTED = "not_started"
    INVALID = "invalid"
