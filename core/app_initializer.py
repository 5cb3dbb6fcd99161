"""Application initialization orchestrator."""

from __future__ import annotations

import asyncio
import os
from contextlib import suppress
from pathlib import Path
from typing import Optional

from aiohttp import web as aiohttp_web
from aiohttp_wsgi import WSGIHandler

from config import Config, load_config, validate_config
from core.logger import get_logger

logger = get_logger(__name__)


class ApplicationInitializer:
    """Validates configuration, builds the Flask app and serves it."""

    def __init__(self, config: Optional[Config] = None):
        self.config = config or load_config()
        self.flask_app = None
        self.web_runner = None

    async def initialize(self) -> None:
        """Initialize all application components."""
        # Refuse to start with a missing or short signing secret
        validate_config(self.config)
        self._check_token_files()
        await self._init_web_server()

    async def run(self) -> None:
        """Serve until cancelled."""
        try:
            logger.info("Prize wheel running...")
            while True:
                await asyncio.sleep(3600)
        except (KeyboardInterrupt, asyncio.CancelledError):
            logger.info("Shutting down...")
        finally:
            await self.cleanup()

    async def cleanup(self) -> None:
        """Cleanup resources."""
        if self.web_runner:
            with suppress(RuntimeError):
                await self.web_runner.cleanup()
            self.web_runner = None

    def _check_token_files(self) -> None:
        folder = Path(self.config.tokens_folder)
        if not folder.exists():
            logger.warning(f"Tokens folder {folder} does not exist; every wristband will be rejected")
            return
        days = sorted(p.stem for p in folder.glob("*.csv"))
        if days:
            logger.info(f"Token files found for: {', '.join(days)}")
        else:
            logger.warning(f"No token files in {folder}; run scripts/generate_tokens.py")

    async def _init_web_server(self) -> None:
        """Initialize web server."""
        from web import create_app

        self.flask_app = create_app(self.config)

        # Create WSGI handler for Flask app
        wsgi_handler = WSGIHandler(self.flask_app)

        aio_app = aiohttp_web.Application()
        aio_app.router.add_route("*", "/{path_info:.*}", wsgi_handler)

        self.web_runner = aiohttp_web.AppRunner(aio_app)
        await self.web_runner.setup()

        # Bind to PORT env var if present (Render/Heroku)
        effective_port = int(os.getenv("PORT", str(self.config.web_port)))
        effective_host = "0.0.0.0" if os.getenv("PORT") else self.config.web_host

        site = aiohttp_web.TCPSite(self.web_runner, effective_host, effective_port)
        await site.start()

        logger.info(f"Web server started on http://{effective_host}:{effective_port}")
        logger.info(f"Operator status: http://{effective_host}:{effective_port}/status?token=...")
