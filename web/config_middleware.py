"""Flask application configuration and middleware setup."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

from flask import Flask, g, request
from flask_caching import Cache
from flask_wtf.csrf import CSRFProtect
from prometheus_client import Counter, Histogram
from werkzeug.middleware.proxy_fix import ProxyFix

from core import get_logger

if TYPE_CHECKING:
    from config import Config

logger = get_logger(__name__)

# Global instances
cache = Cache()
csrf = CSRFProtect()

# Prometheus metrics
REQUEST_LATENCY = Histogram(
    "http_request_latency_seconds",
    "HTTP request latency",
    ["method", "path"],
    buckets=(0.05, 0.1, 0.25, 0.5, 1, 2, 5),
)
REQUEST_ERRORS = Counter(
    "http_request_errors_total",
    "Total number of 5xx responses",
    ["method", "path"],
)

SLOW_REQUEST_SECONDS = 1.0


def configure_app(app: Flask, config: Config, testing: bool = False) -> None:
    """Configure Flask application settings.

    Args:
        app: Flask application instance
        config: Application configuration
        testing: Whether running in testing mode
    """
    app.config.update(
        SECRET_KEY=config.secret_key,
        SESSION_COOKIE_HTTPONLY=True,
        SESSION_COOKIE_SECURE=(config.environment != 'development' and not testing),
        SESSION_COOKIE_SAMESITE='Lax',
        PERMANENT_SESSION_LIFETIME=60 * 60 * 24 * 365,
        TESTING=testing,
        DEBUG_TOKENS=config.debug_tokens,
        ADMIN_TOKEN=config.admin_token,
        QR_BASE_URL=config.qr_base_url,
        TOKEN_PREFIX=config.token_prefix,
        WTF_CSRF_TIME_LIMIT=None,
        WTF_CSRF_ENABLED=not testing,
        PROXY_HOPS=config.proxy_hops,
    )

    if config.environment == 'production':
        if config.admin_token == "admin-token-2025":
            logger.warning("Default ADMIN_TOKEN in production")
        if config.secret_key.startswith("production_secret_key_must_be_changed"):
            logger.warning("Default SECRET_KEY in production")
        if config.debug_tokens:
            logger.warning("DEBUG_TOKENS is enabled in production")


def setup_proxy(app: Flask, config: Config) -> None:
    """Trust ``X-Forwarded-*`` only from the configured number of proxies.

    Without trusted hops ``request.remote_addr`` stays the socket peer and
    client-supplied forwarding headers are ignored.

    Args:
        app: Flask application instance
        config: Application configuration
    """
    if config.proxy_hops > 0:
        app.wsgi_app = ProxyFix(
            app.wsgi_app,
            x_for=config.proxy_hops,
            x_proto=config.proxy_hops,
            x_host=config.proxy_hops,
        )
        logger.info(f"Trusting {config.proxy_hops} reverse proxy hop(s) for client addresses")


def setup_extensions(
app: Flask, testing: bool = False) -> None:
    """Setup Flask extensions.

    Args:
        app: Flask application instance
        testing: Whether running in testing mode
    """
    cache.init_app(app, config={"CACHE_TYPE": "SimpleCache"})

    # CSRF guards the operator form; JSON APIs are exempted per blueprint
    if not testing:
        csrf.init_app(app)

    @app.context_processor
    def inject_csrf_token():
        def csrf_token() -> str:
            if not app.config.get("WTF_CSRF_ENABLED", True):
                return ""
            from flask_wtf.csrf import generate_csrf
            return generate_csrf()
        return {"csrf_token": csrf_token}


def setup_security_headers(app: Flask) -> None:
    """Setup security headers middleware.

    Args:
        app: Flask application instance
    """
    @app.after_request
    def add_security_headers(response):
        """Add security headers to all responses."""
        csp = (
            "default-src 'self'; "
            "img-src 'self' data: blob:; "
            "style-src 'self' 'unsafe-inline'; "
            "script-src 'self' 'unsafe-inline'"
        )
        response.headers.setdefault('Content-Security-Policy', csp)
        response.headers.setdefault('X-Content-Type-Options', 'nosniff')
        response.headers.setdefault('X-Frame-Options', 'DENY')
        # Token ids and signatures travel in query strings
        response.headers.setdefault('Referrer-Policy', 'no-referrer')
        response.headers.setdefault('Permissions-Policy', "camera=(), microphone=(), geolocation=()")
        return response


def setup_metrics(app: Flask) -> None:
    """Setup Prometheus metrics and slow-request logging.

    Args:
        app: Flask application instance
    """
    @app.before_request
    def before_metrics():
        g._metrics_start = time.time()

    @app.after_request
    def after_metrics(response):
        start = getattr(g, '_metrics_start', None)
        path = getattr(request.url_rule, 'rule', request.path)
        if start is not None:
            duration = time.time() - start
            REQUEST_LATENCY.labels(method=request.method, path=path).observe(duration)
            if duration > SLOW_REQUEST_SECONDS:
                logger.warning(f"Slow request: {request.method} {request.path} took {duration:.2f}s")
            response.headers['X-Response-Time'] = f"{duration:.3f}s"

        if response.status_code >= 500:
            REQUEST_ERRORS.labels(method=request.method, path=path).inc()
        return response
