"""Prize-wheel metrics using Prometheus, plus host metrics for /health."""

from __future__ import annotations

import time
from contextlib import contextmanager

import psutil
from prometheus_client import Counter, Histogram


token_verifications = Counter(
    "wheel_token_verifications_total",
    "Token verification attempts",
    labelnames=("result",),
)
spins_total = Counter(
    "wheel_spins_total",
    "Spin requests by outcome",
    labelnames=("mode", "outcome"),
)
prizes_awarded = Counter(
    "wheel_prizes_awarded_total",
    "Prizes revealed",
    labelnames=("prize",),
)
rate_limited_total = Counter(
    "wheel_rate_limited_total",
    "Requests rejected by the rate limiter",
)
spin_duration = Histogram("wheel_spin_duration_seconds", "Spin handling duration")


class PerformanceMonitor:
    @contextmanager
    def track_spin(self):
        start = time.perf_counter()
        try:
            yield
        finally:
            spin_duration.observe(time.perf_counter() - start)

    def record_verification(self, valid: bool) -> None:
        token_verifications.labels(result="valid" if valid else "invalid").inc()

    def record_spin(self, mode: str, outcome: str) -> None:
        spins_total.labels(mode=mode, outcome=outcome).inc()

    def record_prize(self, prize_key: str) -> None:
        prizes_awarded.labels(prize=prize_key).inc()

    def record_rate_limited(self) -> None:
        rate_limited_total.inc()

    def gather_host_metrics(self) -> dict:
        process = psutil.Process()
        memory_info = process.memory_info()
        return {
            "memory_rss": memory_info.rss,
            "cpu_percent": process.cpu_percent(interval=None),
        }
