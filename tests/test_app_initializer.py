"""Tests for application startup and shutdown."""

import dataclasses

import pytest

from core.app_initializer import ApplicationInitializer
from core.exceptions import ConfigurationError


@pytest.mark.asyncio
async def test_refuses_to_start_without_signing_secret(config):
    app = ApplicationInitializer(dataclasses.replace(config, signing_secret=""))
    with pytest.raises(ConfigurationError):
        await app.initialize()
    assert app.web_runner is None


@pytest.mark.asyncio
async def test_serves_and_cleans_up(config, monkeypatch):
    monkeypatch.delenv("PORT", raising=False)
    app = ApplicationInitializer(dataclasses.replace(config, web_host="127.0.0.1", web_port=0))

    await app.initialize()
    assert app.web_runner is not None
    assert app.flask_app.extensions["wheel"].catalog is not None

    await app.cleanup()
    assert app.web_runner is None
