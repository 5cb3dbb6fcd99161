"""Centralized logging configuration."""

from __future__ import annotations

import copy
import logging
import re
import sys
from pathlib import Path
from typing import Optional

CONSOLE_FORMAT = '%(asctime)s | %(levelname)s | %(name)s | %(message)s'
FILE_FORMAT = '%(asctime)s | %(levelname)s | %(name)s | %(funcName)s:%(lineno)d | %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# Access logs carry full QR query strings
SIG_QUERY_RE = re.compile(r"(\bsig=)([0-9A-Fa-f]{16})[0-9A-Fa-f]+")


class SignatureRedactionFilter(logging.Filter):
    """Shortens ``sig=<hex>`` values to their 16-char head."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = SIG_QUERY_RE.sub(r"\1\2...", message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


class ColoredFormatter(logging.Formatter):
    """Colored log formatter for terminal output."""

    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
    }
    RESET = '\033[0m'

    def format(self, record: logging.LogRecord) -> str:
        # Work on a copy so the file handler still sees the plain level name
        colored = copy.copy(record)
        color = self.COLORS.get(record.levelname, self.RESET)
        colored.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(colored)


def setup_logger(
    name: str = "",
    level: int = logging.INFO,
    log_file: Optional[str] = None,
    colored: bool = True
) -> logging.Logger:
    """Configure and return a logger instance.

    Args:
        name: Logger name (use ``""`` for the root logger so module
            loggers from ``get_logger(__name__)`` share the handlers)
        level: Logging level
        log_file: Optional file path for file logging
        colored: Whether to use colored output for console

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    formatter_cls = ColoredFormatter if colored else logging.Formatter
    console_handler.setFormatter(formatter_cls(CONSOLE_FORMAT, datefmt=DATE_FORMAT))
    console_handler.addFilter(SignatureRedactionFilter())
    logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path, encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        file_handler.addFilter(SignatureRedactionFilter())
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger by name."""
    return logging.getLogger(name)


def signature_head(signature: Optional[str], length: int = 16) -> str:
    """Return a loggable prefix of a signature, never the full value."""
    if not signature:
        return "<empty>"
    return f"{signature[:length]}..."
