"""Fixed-window request counter keyed by client address."""

from __future__ import annotations

import threading
import time
from typing import Callable, Dict, Tuple

from core import RateLimitDefaults


class RateLimiter:
    """Per-key fixed window with lazy reset.

    State is process-local and lost on restart. It deters rapid automated
    replay from one address; it does not coordinate across instances.
    Each app builds its own instance so tests get independent limiters.
    """

    def __init__(
        self,
        max_requests: int = RateLimitDefaults.MAX_REQUESTS,
        window_seconds: float = RateLimitDefaults.WINDOW_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_requests < 1 or window_seconds <= 0:
            raise ValueError("max_requests and window_seconds must be positive")
        self.max_requests = max_requests
        self.window = window_seconds
        self._clock = clock
        # key -> (count, window_start)
        self._buckets: Dict[str, Tuple[int, float]] = {}
        self._lock = threading.Lock()

    def _cleanup(self, now: float) -> None:
        expired = [k for k, (_, start) in self._buckets.items() if now - start > self.window]
        for key in expired:
            del self._buckets[key]

    def is_allowed(self, key: str) -> bool:
        """Count a request for ``key``; False once the window is exhausted."""
        now = self._clock()
        with self._lock:
            self._cleanup(now)
            count, start = self._buckets.get(key, (0, now))
            count += 1
            self._buckets[key] = (count, start)
            return count <= self.max_requests

    def remaining(self, key: str) -> int:
        now = self._clock()
        with self._lock:
            record = self._buckets.get(key)
            if record is None or now - record[1] > self.window:
                return self.max_requests
            return max(0, self.max_requests - record[0])

    def reset(self) -> None:
        with self._lock:
            self._buckets.clear()
