"""Per-app service container and request helpers shared by the blueprints."""

from __future__ import annotations

from dataclasses import dataclass

from flask import current_app, request, session

from core import CookieDefaults
from services.operator_settings import OperatorSettings, SettingsCodec
from services.play_service import PlayService
from services.play_state import PlayStateGuard, SessionStorage
from services.prizes import PrizeCatalog
from services.rate_limiter import RateLimiter
from services.token_store import TokenStore
from services.tokens import Token
from utils.performance import PerformanceMonitor


@dataclass
class WheelServices:
    """Service instances stored in ``app.extensions["wheel"]``."""
    play: PlayService
    catalog: PrizeCatalog
    token_store: TokenStore
    rate_limiter: RateLimiter
    settings_codec: SettingsCodec
    monitor: PerformanceMonitor


def get_services() -> WheelServices:
    return current_app.extensions["wheel"]


def session_guard(prefix: str = CookieDefaults.PLAY_STATE_PREFIX) -> PlayStateGuard:
    """Play-state guard backed by the requester's session cookie."""
    session.permanent = True
    return PlayStateGuard(SessionStorage(session), prefix)


def current_settings() -> OperatorSettings:
    codec = get_services().settings_codec
    return codec.loads(request.cookies.get(CookieDefaults.SETTINGS_COOKIE))


def client_ip() -> str:
    """Rate-limit key for the requester.

    Forwarding headers are resolved by ``ProxyFix`` up to ``PROXY_HOPS``, so
    a spoofed ``X-Forwarded-For`` never changes the key.
    """
    return request.remote_addr or "unknown"


def query_token() -> Token:
    """The ``id``/``sig`` pair a QR code puts in the query string."""
    return Token(request.args.get("id", ""), request.args.get("sig", ""))
