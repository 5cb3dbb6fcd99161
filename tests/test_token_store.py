"""Unit tests for reading day token files."""

import pytest

from core.exceptions import TokenNotFoundError, ValidationError
from services.token_store import TokenStore, read_records

from conftest import DAY


def test_find_uses_day_from_id(tokens_folder, day_records):
    store = TokenStore(str(tokens_folder))
    record = store.find(day_records[10].id)
    assert record == day_records[10]
    assert store.metadata(record.id)["prize"] == record.prize


def test_unknown_and_malformed_ids(tokens_folder):
    store = TokenStore(str(tokens_folder))
    assert store.find("ktd-2025-08-11-999") is None
    assert store.find("ktd-2025-08-12-001") is None
    assert store.find("garbage") is None
    with pytest.raises(TokenNotFoundError):
        store.get("ktd-2025-08-11-999")


def test_listing(tokens_folder):
    store = TokenStore(str(tokens_folder))
    assert store.available_days() == [DAY]
    assert store.has_day(DAY)
    assert not store.has_day("2025-08-12")
    assert len(store.list_day(DAY)) == 104
    assert store.list_day("2025-08-12") == []


def test_missing_folder(tmp_path):
    store = TokenStore(str(tmp_path / "nope"))
    assert store.available_days() == []
    assert store.find("ktd-2025-08-11-001") is None


def test_new_day_file_is_picked_up(tmp_path, tokens_folder):
    store = TokenStore(str(tokens_folder))
    assert store.find("ktd-2025-08-12-001") is None

    (tokens_folder / "2025-08-12.csv").write_text(
        "id,day,prize,sig,url\nktd-2025-08-12-001,2025-08-12,Agua,abc,http://x\n",
        encoding="utf-8",
    )
    record = store.find("ktd-2025-08-12-001")
    assert record is not None
    assert record.prize == "agua"


def test_header_is_validated(tmp_path):
    path = tmp_path / "2025-08-11.csv"
    path.write_text("id,prize,sig\nktd-2025-08-11-001,agua,abc\n", encoding="utf-8")
    with pytest.raises(ValidationError):
        read_records(path)


def test_short_row_is_rejected(tmp_path):
    path = tmp_path / "2025-08-11.csv"
    path.write_text(
        "id,day,prize,sig,url\nktd-2025-08-11-001,2025-08-11,agua\n",
        encoding="utf-8",
    )
    with pytest.raises(ValidationError):
        read_records(path)


def test_invalidate_rereads_changed_file(tokens_folder):
    store = TokenStore(str(tokens_folder))
    assert len(store.list_day(DAY)) == 104

    path = tokens_folder / f"{DAY}.csv"
    lines = path.read_text(encoding="utf-8").splitlines()
    path.write_text("\n".join(lines[:3]) + "\n", encoding="utf-8")
    assert len(store.list_day(DAY)) == 104

    store.invalidate(DAY)
    assert len(store.list_day(DAY)) == 2
