"""Pytest configuration and fixtures."""

import random
from datetime import datetime
from pathlib import Path

import pytest
import pytz

from config import Config
from services.token_generator import generate_day, write_csv
from web import create_app

SECRET = "s3cr3t-32-chars-minimum-xxxxxxxx"
DAY = "2025-08-11"
BASE_URL = "https://wheel.example.com/verify"
ADMIN_TOKEN = "test-admin-token"
# 18:00 in Lima is 23:00 UTC
EVENT_START = "2025-08-11T18:00:00"
EVENT_TZ = "America/Lima"

BEFORE_START = datetime(2025, 8, 11, 22, 59, 59, tzinfo=pytz.utc)
AFTER_START = datetime(2025, 8, 12, 1, 30, tzinfo=pytz.utc)


class FixedRandom(random.Random):
    """Random source whose ``random()`` always returns the same value."""

    def __init__(self, value: float = 0.0):
        super().__init__(0)
        self.value = value

    def random(self):
        return self.value


def make_config(tokens_folder, **overrides) -> Config:
    values = dict(
        environment="testing",
        debug=False,
        debug_tokens=False,
        web_host="127.0.0.1",
        web_port=5000,
        secret_key="test-secret-key",
        signing_secret=SECRET,
        legacy_signatures_enabled=False,
        event_start_iso=EVENT_START,
        event_tz=EVENT_TZ,
        qr_base_url=BASE_URL,
        admin_token=ADMIN_TOKEN,
        tokens_folder=str(tokens_folder),
        token_prefix="ktd",
        prizes_file=None,
        log_folder="logs",
        rate_limit_max=5,
        rate_limit_window=60.0,
        proxy_hops=0,
        retry_probability=0.2,
        max_retries=1,
    )
    values.update(overrides)
    return Config(**values)


@pytest.fixture
def day_records():
    return generate_day(DAY, SECRET, BASE_URL, seed=7)


@pytest.fixture
def tokens_folder(tmp_path, day_records) -> Path:
    folder = tmp_path / "tokens"
    write_csv(folder / f"{DAY}.csv", day_records)
    return folder


@pytest.fixture
def config(tokens_folder):
    return make_config(tokens_folder)


@pytest.fixture
def app_factory(config):
    """Build a test app; keyword arguments override config fields or create_app options."""
    def build(clock=lambda: AFTER_START, rng=None, testing=True, **overrides):
        app_config = make_config(config.tokens_folder, **overrides)
        return create_app(app_config, testing=testing, clock=clock, rng=rng)
    return build


@pytest.fixture
def app(app_factory):
    return app_factory()


@pytest.fixture
def client(app):
    return app.test_client()
