"""Tests for environment loading and validation."""

import dataclasses

import pytest

from config import load_config, validate_config
from core.exceptions import ConfigurationError

from conftest import SECRET, make_config


def test_valid_config_passes(tmp_path):
    config = make_config(tmp_path)
    assert validate_config(config) is config


def test_load_config_reads_environment(monkeypatch):
    monkeypatch.setenv("SIGNING_SECRET", SECRET)
    monkeypatch.setenv("EVENT_START_ISO", "2025-08-11T18:00:00-05:00")
    monkeypatch.setenv("RATE_LIMIT_MAX", "7")
    monkeypatch.setenv("PROXY_HOPS", "1")
    monkeypatch.setenv("DEBUG_TOKENS", "true")
    monkeypatch.setenv("PRIZES_FILE", "")

    config = load_config()
    assert config.signing_secret == SECRET
    assert config.rate_limit_max == 7
    assert config.proxy_hops == 1
    assert config.debug_tokens is True
    assert config.prizes_file is None
    validate_config(config)


def test_bad_numbers_fall_back_to_defaults(monkeypatch):
    monkeypatch.setenv("RATE_LIMIT_MAX", "lots")
    assert load_config().rate_limit_max == 5


@pytest.mark.parametrize("overrides, fragment", [
    ({"signing_secret": ""}, "SIGNING_SECRET"),
    ({"signing_secret": "short"}, "at least 32"),
    ({"event_start_iso": ""}, "EVENT_START_ISO"),
    ({"event_start_iso": "tomorrow"}, "EVENT_START_ISO"),
    ({"event_tz": "Mars/Olympus"}, "EVENT_TZ"),
    ({"qr_base_url": ""}, "QR_BASE_URL"),
    ({"rate_limit_max": 0}, "RATE_LIMIT"),
    ({"proxy_hops": -1}, "PROXY_HOPS"),
])
def test_invalid_settings_are_reported(tmp_path, overrides, fragment):
    config = dataclasses.replace(make_config(tmp_path), **overrides)
    with pytest.raises(ConfigurationError, match=fragment):
        validate_config(config)


def test_all_problems_reported_together(tmp_path):
    config = dataclasses.replace(make_config(tmp_path), signing_secret="", event_tz="Nowhere")
    with pytest.raises(ConfigurationError) as exc_info:
        validate_config(config)
    message = str(exc_info.value)
    assert "SIGNING_SECRET" in message and "EVENT_TZ" in message
