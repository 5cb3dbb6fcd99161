"""Unit tests for the event gate countdown."""

from datetime import datetime, timedelta

import pytest
import pytz

from core.exceptions import EventNotStartedError
from services.event_gate import STARTED, EventGate, parse_start, time_until_event

START = "2025-08-11T18:00:00-05:00"
START_UTC = datetime(2025, 8, 11, 23, 0, tzinfo=pytz.utc)


def test_start_equal_to_now_has_started():
    assert time_until_event(START_UTC, START) == STARTED


def test_after_start_has_started():
    assert time_until_event(START_UTC + timedelta(days=3), START).has_started


def test_one_second_before_start():
    left = time_until_event(START_UTC - timedelta(seconds=1), START)
    assert (left.days, left.hours, left.minutes, left.seconds) == (0, 0, 0, 1)
    assert not left.has_started


def test_partial_seconds_round_up():
    left = time_until_event(START_UTC - timedelta(milliseconds=200), START)
    assert left.seconds == 1
    assert not left.has_started


def test_breakdown():
    now = START_UTC - timedelta(days=2, hours=3, minutes=4, seconds=5)
    left = time_until_event(now, START)
    assert left.to_dict() == {
        "days": 2, "hours": 3, "minutes": 4, "seconds": 5, "hasStarted": False,
    }


def test_naive_start_is_local_to_event_timezone():
    assert parse_start("2025-08-11T18:00:00", "America/Lima") == START_UTC
    assert time_until_event(START_UTC, "2025-08-11T18:00:00", "America/Lima").has_started


def test_naive_now_is_utc():
    left = time_until_event(datetime(2025, 8, 11, 22, 59, 0), START)
    assert left.minutes == 1 and left.seconds == 0


def test_z_suffix():
    assert parse_start("2025-08-11T23:00:00Z", "America/Lima") == START_UTC


def test_gate_uses_injected_clock():
    now = {"value": START_UTC - timedelta(minutes=1)}
    gate = EventGate(START, "America/Lima", clock=lambda: now["value"])

    assert not gate.has_started()
    with pytest.raises(EventNotStartedError) as exc_info:
        gate.ensure_started()
    assert exc_info.value.details["timeUntilEvent"]["minutes"] == 1

    now["value"] = START_UTC
    assert gate.has_started()
    gate.ensure_started()


def test_gate_rejects_bad_start():
    with pytest.raises(ValueError):
        EventGate("not-a-date", "America/Lima")
