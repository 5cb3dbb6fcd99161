"""Web interface package."""

from web.app import create_app
from web.context import get_services

__all__ = ["create_app", "get_services"]
