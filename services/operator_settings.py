"""Operator-tunable parameters carried in a signed cookie."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, Callable, Dict, Mapping, Optional

import pytz
from itsdangerous import BadSignature, URLSafeSerializer

from core import CookieDefaults, EventDefaults, EventMode, PrizeDefaults, get_logger
from core.exceptions import ValidationError
from services.tokens import parse_day

logger = get_logger(__name__)


@dataclass(frozen=True)
class OperatorSettings:
    retry_probability: float = PrizeDefaults.RETRY_PROBABILITY
    max_retries: int = PrizeDefaults.MAX_RETRIES
    active_day: str = ""
    event_mode: str = EventMode.DURING.value

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_public(self) -> Dict[str, Any]:
        return {
            "retryProbability": self.retry_probability,
            "maxRetries": self.max_retries,
            "activeDay": self.active_day,
            "eventMode": self.event_mode,
        }


def _first(data: Mapping[str, Any], *names: str) -> Any:
    for name in names:
        if name in data and data[name] not in (None, ""):
            return data[name]
    return None


def parse_settings(data: Mapping[str, Any]) -> OperatorSettings:
    """Validate operator input (camelCase or snake_case keys).

    Raises:
        ValidationError: If any value is missing or out of range
    """
    try:
        retry_probability = float(_first(data, "retryProbability", "retry_probability"))
        max_retries = int(_first(data, "maxRetries", "max_retries"))
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Non-numeric operator setting: {e}") from e

    active_day = _first(data, "activeDay", "active_day")
    event_mode = _first(data, "eventMode", "event_mode")

    problems = []
    if not (PrizeDefaults.MIN_RETRY_PROBABILITY <= retry_probability <= PrizeDefaults.MAX_RETRY_PROBABILITY):
        problems.append("retryProbability")
    if not (PrizeDefaults.MIN_MAX_RETRIES <= max_retries <= PrizeDefaults.MAX_MAX_RETRIES):
        problems.append("maxRetries")
    try:
        parse_day(active_day)
    except ValueError:
        problems.append("activeDay")
    if event_mode not in {mode.value for mode in EventMode}:
        problems.append("eventMode")

    if problems:
        raise ValidationError(f"Invalid operator settings: {', '.join(problems)}")

    return OperatorSettings(retry_probability, max_retries, str(active_day), str(event_mode))


class SettingsCodec:
    """Signs and reads the operator settings cookie.

    When no active day is stored, the default is today's date in the event
    timezone, not the server's local date.
    """

    def __init__(
        self,
        secret_key: str,
        defaults: Optional[OperatorSettings] = None,
        event_tz: str = EventDefaults.TIMEZONE,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._serializer = URLSafeSerializer(secret_key, salt=CookieDefaults.SETTINGS_SALT)
        self.defaults = defaults or OperatorSettings()
        self.tz = pytz.timezone(event_tz)
        self._clock = clock or (lambda: datetime.now(pytz.utc))

    def today(self) -> str:
        now = self._clock()
        if now.tzinfo is None:
            now = pytz.utc.localize(now)
        return now.astimezone(self.tz).date().isoformat()

    def _with_today(self, settings: OperatorSettings) -> OperatorSettings:
        if settings.active_day:
            return settings
        return OperatorSettings(
            settings.retry_probability,
            settings.max_retries,
            self.today(),
            settings.event_mode,
        )

    def dumps(self, settings: OperatorSettings) -> str:
        return self._serializer.dumps(settings.to_dict())

    def loads(self, raw: Optional[str]) -> OperatorSettings:
        """Decode a cookie; missing or tampered values fall back to defaults."""
        if not raw:
            return self._with_today(self.defaults)
        try:
            return parse_settings(self._serializer.loads(raw))
        except BadSignature:
            logger.warning("Operator settings cookie failed signature check; using defaults")
        except ValidationError as e:
            logger.warning(f"Stored operator settings rejected: {e}")
        return self._with_today(self.defaults)
