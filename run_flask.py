"""Direct Flask development server using environment variables."""

from __future__ import annotations

import logging

from config import load_config, validate_config
from core import setup_logger
from web import create_app

if __name__ == "__main__":
    setup_logger(name="", level=logging.DEBUG)

    config = load_config()
    validate_config(config)

    app = create_app(config)
    app.run(host=config.web_host, port=config.web_port, debug=config.debug)
