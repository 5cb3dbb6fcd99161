"""Weighted roulette selection over the prize catalog."""

from __future__ import annotations

import random
from typing import Mapping, Optional, Sequence

from core import get_logger, PrizeDefaults
from core.exceptions import NoPrizesAvailableError
from services.prizes import Prize

logger = get_logger(__name__)


def clamp_probability(value: float) -> float:
    """Clamp a probability to [0, 1]; NaN becomes 0."""
    if value != value:
        return 0.0
    return max(0.0, min(1.0, float(value)))


class WeightedSelector:
    """Cumulative-weight roulette, O(n) per draw.

    Deterministic for a given ``rng`` stream, so tests and seeded batch
    runs can pass ``random.Random(seed)``.
    """

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self.rng = rng or random.SystemRandom()

    def draw(
        self,
        prizes: Sequence[Prize],
        retry_weight: float = PrizeDefaults.RETRY_PROBABILITY,
        *,
        suppress_retry: bool = False,
        weights: Optional[Mapping[int, float]] = None,
        forced_prize_id: Optional[int] = None,
    ) -> Prize:
        """Draw one prize.

        Args:
            prizes: Ordered catalog entries
            retry_weight: Probability of short-circuiting to the retry prize
            suppress_retry: Never return the retry prize on this draw
            weights: Per-id weight overrides for this draw only
            forced_prize_id: Skip the draw and return this prize

        Raises:
            NoPrizesAvailableError: If no candidate has positive weight, or
                the forced prize is not in the catalog
        """
        if forced_prize_id is not None:
            forced = next((p for p in prizes if p.id == forced_prize_id), None)
            if forced is None:
                raise NoPrizesAvailableError(f"Forced prize {forced_prize_id} is not in the catalog")
            return forced

        retry_prize = next((p for p in prizes if p.retry), None)
        if retry_prize is not None and not suppress_retry:
            if self.rng.random() < clamp_probability(retry_weight):
                return retry_prize

        weights = weights or {}
        candidates = []
        for prize in prizes:
            if prize.retry:
                continue
            weight = weights.get(prize.id, prize.weight)
            if weight > 0:
                candidates.append((prize, weight))

        if not candidates:
            raise NoPrizesAvailableError("Every prize has zero weight or stock")

        total = sum(weight for _, weight in candidates)
        remainder = self.rng.uniform(0, total)
        for prize, weight in candidates:
            remainder -= weight
            if remainder <= 0:
                return prize

        # Float rounding can leave a tiny positive remainder
        return candidates[-1][0]
