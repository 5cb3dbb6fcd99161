"""Unit tests for weighted prize selection."""

import random
from collections import Counter

import pytest

from core.exceptions import NoPrizesAvailableError
from services.prizes import DEFAULT_PRIZES, Prize
from services.selector import WeightedSelector, clamp_probability

PRIZES = list(DEFAULT_PRIZES)


def test_clamp_probability():
    assert clamp_probability(-1) == 0.0
    assert clamp_probability(2) == 1.0
    assert clamp_probability(0.2) == 0.2
    assert clamp_probability(float("nan")) == 0.0


def test_frequencies_follow_weights():
    selector = WeightedSelector(random.Random(1234))
    draws = 20000
    counts = Counter(selector.draw(PRIZES, retry_weight=0.0).key for _ in range(draws))

    total_weight = sum(p.weight for p in PRIZES if not p.retry)
    for prize in PRIZES:
        if prize.retry:
            assert counts[prize.key] == 0
            continue
        expected = prize.weight / total_weight
        assert abs(counts[prize.key] / draws - expected) < 0.02


def test_retry_probability_is_honoured():
    selector = WeightedSelector(random.Random(99))
    draws = 10000
    retries = sum(selector.draw(PRIZES, retry_weight=0.2).retry for _ in range(draws))
    assert abs(retries / draws - 0.2) < 0.02


def test_retry_weight_extremes():
    selector = WeightedSelector(random.Random(5))
    assert all(selector.draw(PRIZES, retry_weight=1.0).retry for _ in range(50))
    assert not any(selector.draw(PRIZES, retry_weight=0.0).retry for _ in range(500))


def test_suppress_retry():
    selector = WeightedSelector(random.Random(5))
    assert not any(
        selector.draw(PRIZES, retry_weight=1.0, suppress_retry=True).retry for _ in range(100)
    )


def test_weight_overrides_exclude_prizes():
    selector = WeightedSelector(random.Random(8))
    weights = {p.id: 0.0 for p in PRIZES}
    weights[4] = 1.0
    assert {selector.draw(PRIZES, 0.0, weights=weights).id for _ in range(100)} == {4}


def test_no_prizes_available_only_when_all_weights_zero():
    selector = WeightedSelector(random.Random(3))
    zero = [Prize(p.id, p.key, p.name, p.color, 0.0, p.retry) for p in PRIZES]
    with pytest.raises(NoPrizesAvailableError):
        selector.draw(zero, retry_weight=0.0)

    one_left = list(zero)
    one_left[2] = Prize(3, "cerebritos", "Cerebritos", "#4D9EFF", 0.001)
    assert selector.draw(one_left, retry_weight=0.0).key == "cerebritos"


def test_forced_mode_skips_the_draw():
    selector = WeightedSelector(random.Random(3))
    assert all(selector.draw(PRIZES, retry_weight=1.0, forced_prize_id=2).id == 2 for _ in range(20))
    with pytest.raises(NoPrizesAvailableError):
        selector.draw(PRIZES, forced_prize_id=42)


def test_same_seed_same_sequence():
    first = WeightedSelector(random.Random(7))
    second = WeightedSelector(random.Random(7))
    assert [first.draw(PRIZES).id for _ in range(30)] == [second.draw(PRIZES).id for _ in range(30)]
