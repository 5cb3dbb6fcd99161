"""Unit tests for batch token generation."""

from collections import Counter

import pytest

from core import DAILY_DISTRIBUTION
from core.exceptions import ValidationError
from services.signer import verify
from services.token_generator import (
    check_distribution,
    event_days,
    expand_distribution,
    generate_day,
    write_csv,
    write_qr_codes,
)
from services.token_store import read_records

from conftest import BASE_URL, DAY, SECRET


def test_daily_distribution():
    records = generate_day(DAY, SECRET, BASE_URL, seed=1)

    assert len(records) == 104
    assert Counter(r.prize for r in records) == Counter(DAILY_DISTRIBUTION)
    assert records[0].id == "ktd-2025-08-11-001"
    assert records[-1].id == "ktd-2025-08-11-104"
    assert len({r.id for r in records}) == 104


def test_records_are_signed():
    for record in generate_day(DAY, SECRET, BASE_URL, seed=1):
        assert verify(record.id, record.sig, SECRET)
        assert record.url == f"{BASE_URL}?id={record.id}&sig={record.sig}"
        assert record.day == DAY


def test_seed_is_deterministic_per_day():
    first = generate_day(DAY, SECRET, BASE_URL, seed=42)
    second = generate_day(DAY, SECRET, BASE_URL, seed=42)
    other_day = generate_day("2025-08-12", SECRET, BASE_URL, seed=42)

    assert [r.prize for r in first] == [r.prize for r in second]
    assert [r.prize for r in first] != [r.prize for r in other_day]


def test_custom_distribution_and_prefix():
    records = generate_day(DAY, SECRET, BASE_URL, {"Agua": 2, "popcorn": 1}, prefix="vip", seed=3)
    assert sorted(r.prize for r in records) == ["agua", "agua", "popcorn"]
    assert records[0].id.startswith("vip-2025-08-11-")


@pytest.mark.parametrize("day, distribution", [
    ("2025-8-11", DAILY_DISTRIBUTION),
    (DAY, {}),
    (DAY, {"agua": 0}),
])
def test_invalid_generation_input(day, distribution):
    with pytest.raises(ValidationError):
        generate_day(day, SECRET, BASE_URL, distribution)


def test_negative_count_rejected():
    with pytest.raises(ValidationError):
        expand_distribution({"agua": -1})


def test_event_days():
    assert event_days("2025-08-30", 3) == ["2025-08-30", "2025-08-31", "2025-09-01"]


def test_written_file_passes_check(tmp_path):
    records = generate_day(DAY, SECRET, BASE_URL, seed=5)
    path = write_csv(tmp_path / "out" / f"{DAY}.csv", records)

    assert read_records(path) == records
    report = check_distribution(path, secret=SECRET)
    assert report["ok"]
    assert report["total"] == report["expected_total"] == 104


def test_check_detects_tampering(tmp_path):
    records = generate_day(DAY, SECRET, BASE_URL, seed=5)
    path = write_csv(tmp_path / f"{DAY}.csv", records[:-1])

    report = check_distribution(path, secret=SECRET + "-other")
    assert not report["ok"]
    assert report["total"] == 103
    assert len(report["mismatches"]) == 1
    assert len(report["bad_signatures"]) == 103


def test_write_qr_codes(tmp_path):
    records = generate_day(DAY, SECRET, BASE_URL, {"agua": 2}, seed=5)
    assert write_qr_codes(tmp_path / "qr", records) == 2
    assert (tmp_path / "qr" / f"{records[0].id}.png").exists()
