"""Unit tests for the token id codec."""

from datetime import date

import pytest

from core.exceptions import InvalidFormatError
from services.tokens import build_token, is_token_id, parse_day, parse_token_date, token_day


def test_parse_token_date():
    assert parse_token_date("ktd-2025-08-11-001") == date(2025, 8, 11)
    assert token_day("ktd-2025-08-11-104") == "2025-08-11"


def test_prefix_is_not_fixed():
    assert parse_token_date("vip2-2025-12-31-7") == date(2025, 12, 31)


@pytest.mark.parametrize("token_id", [
    "",
    "ktd-2025-08-11",
    "ktd_2025-08-11-001",
    "ktd-2025-8-11-001",
    "ktd-2025-08-11-abc",
    " ktd-2025-08-11-001",
    "ktd-2025-13-01-001",
    "ktd-2025-02-30-001",
])
def test_malformed_ids_raise(token_id):
    with pytest.raises(InvalidFormatError):
        parse_token_date(token_id)
    assert not is_token_id(token_id)


def test_build_token_pads_sequence():
    assert build_token("ktd", "2025-08-11", 1) == "ktd-2025-08-11-001"
    assert build_token("ktd", date(2025, 8, 11), 104) == "ktd-2025-08-11-104"
    assert build_token("ktd", "2025-08-11", 1234) == "ktd-2025-08-11-1234"


def test_build_token_round_trips_through_parser():
    assert parse_token_date(build_token("ktd", date(2025, 8, 12), 5)) == date(2025, 8, 12)


def test_build_token_rejects_negative_sequence():
    with pytest.raises(ValueError):
        build_token("ktd", "2025-08-11", -1)


def test_parse_day_requires_zero_padding():
    assert parse_day("2025-08-11") == date(2025, 8, 11)
    for value in ("2025-8-11", "2025-08-1", "25-08-11", "2025-02-30", "", None):
        with pytest.raises(ValueError):
            parse_day(value)


def test_build_token_rejects_unpadded_day():
    with pytest.raises(ValueError):
        build_token("ktd", "2025-8-11", 1)
