"""Event gate: blocks play until the configured start time."""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Callable, Optional

import pytz

from core import EventDefaults
from core.exceptions import EventNotStartedError


@dataclass(frozen=True)
class TimeLeft:
    days: int
    hours: int
    minutes: int
    seconds: int
    has_started: bool

    def to_dict(self) -> dict:
        data = asdict(self)
        data["hasStarted"] = data.pop("has_started")
        return data


STARTED = TimeLeft(0, 0, 0, 0, True)


def parse_start(start_iso: str, tz: str) -> datetime:
    """Parse an ISO timestamp; naive values are local to ``tz``."""
    start = datetime.fromisoformat(start_iso.strip().replace("Z", "+00:00"))
    if start.tzinfo is None:
        start = pytz.timezone(tz).localize(start)
    return start


def time_until_event(now: datetime, start_iso: str, tz: str = EventDefaults.TIMEZONE) -> TimeLeft:
    """Remaining time until the event starts, compared in ``tz``.

    Pure function. A naive ``now`` is taken as UTC. Partial seconds round
    up, so one second before the start reports ``seconds=1``.
    """
    zone = pytz.timezone(tz)
    if now.tzinfo is None:
        now = pytz.utc.localize(now)
    now = now.astimezone(zone)
    start = parse_start(start_iso, tz).astimezone(zone)

    if now >= start:
        return STARTED

    diff = math.ceil((start - now).total_seconds())
    days, rest = divmod(diff, 86400)
    hours, rest = divmod(rest, 3600)
    minutes, seconds = divmod(rest, 60)
    return TimeLeft(days, hours, minutes, seconds, False)


def _utc_now() -> datetime:
    return datetime.now(pytz.utc)


class EventGate:
    """Binds the configured start time to a clock."""

    def __init__(
        self,
        start_iso: str,
        tz: str = EventDefaults.TIMEZONE,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        # Fail fast on a bad timestamp rather than at the first request
        parse_start(start_iso, tz)
        self.start_iso = start_iso
        self.tz = tz
        self._clock = clock or _utc_now

    def now(self) -> datetime:
        return self._clock()

    def time_left(self) -> TimeLeft:
        return time_until_event(self.now(), self.start_iso, self.tz)

    def has_started(self) -> bool:
        return self.time_left().has_started

    def ensure_started(self) -> None:
        """Raise ``EventNotStartedError`` (carrying the countdown) if closed."""
        left = self.time_left()
        if not left.has_started:
            raise EventNotStartedError(
                "Event has not started",
                details={"timeUntilEvent": left.to_dict()},
            )
