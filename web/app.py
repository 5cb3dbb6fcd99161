"""Flask application factory with caching and security defaults."""

from __future__ import annotations

import random
from datetime import datetime
from typing import Callable, Optional

from flask import Flask, jsonify, redirect, render_template, request, url_for
from flask_wtf.csrf import CSRFError
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from werkzeug.exceptions import HTTPException

from core import get_logger
from core.exceptions import ApplicationError, AuthorizationError, TokenError
from services.event_gate import EventGate
from services.operator_settings import OperatorSettings, SettingsCodec
from services.play_service import PlayService
from services.prizes import PrizeCatalog, load_catalog
from services.rate_limiter import RateLimiter
from services.selector import WeightedSelector
from services.signer import TokenVerifier
from services.token_store import TokenStore
from utils.performance import PerformanceMonitor
from web.context import WheelServices
from web.config_middleware import (
    configure_app,
    setup_extensions,
    setup_proxy,
    setup_security_headers,
    setup_metrics,
)
from web.routes import register_routes

logger = get_logger(__name__)


def create_app(
    config,
    testing: bool = False,
    *,
    clock: Optional[Callable[[], datetime]] = None,
    rng: Optional[random.Random] = None,
    rate_limiter: Optional[RateLimiter] = None,
    catalog: Optional[PrizeCatalog] = None,
) -> Flask:
    """Create and configure Flask application.

    Args:
        config: Application configuration (already validated)
        testing: Whether running in testing mode
        clock: Replacement for "now" used by the event gate
        rng: Random source for live draws
        rate_limiter: Pre-built limiter, e.g. with a fake clock
        catalog: Prize catalog; defaults to ``PRIZES_FILE`` or built-in

    Returns:
        Configured Flask application
    """
    app = Flask(__name__)

    configure_app(app, config, testing)
    setup_proxy(app, config)
    setup_extensions(app, testing)
    setup_security_headers(app)
    setup_metrics(app)

    _init_services(app, config, clock=clock, rng=rng, rate_limiter=rate_limiter, catalog=catalog)

    register_routes(app)

    _setup_routes(app)
    _setup_error_handlers(app)

    return app


def _init_services(app: Flask, config, *, clock, rng, rate_limiter, catalog) -> None:
    token_store = TokenStore(config.tokens_folder)
    catalog = catalog or load_catalog(config.prizes_file)
    verifier = TokenVerifier(
        config.signing_secret,
        legacy_enabled=config.legacy_signatures_enabled,
        metadata_lookup=token_store.metadata,
    )
    gate = EventGate(config.event_start_iso, config.event_tz, clock=clock)
    play = PlayService(verifier, gate, token_store, catalog, WeightedSelector(rng))
    defaults = OperatorSettings(
        retry_probability=config.retry_probability,
        max_retries=config.max_retries,
    )

    app.extensions["wheel"] = WheelServices(
        play=play,
        catalog=catalog,
        token_store=token_store,
        rate_limiter=rate_limiter or RateLimiter(config.rate_limit_max, config.rate_limit_window),
        settings_codec=SettingsCodec(config.secret_key, defaults, event_tz=config.event_tz, clock=clock),
        monitor=PerformanceMonitor(),
    )
    logger.info(
        f"Wheel ready: {len(catalog)} prizes, tokens in {config.tokens_folder}, "
        f"event starts {config.event_start_iso} ({config.event_tz})"
    )


def _setup_routes(app: Flask) -> None:
    """Setup basic application routes.

    Args:
        app: Flask application instance
    """
    @app.route('/metrics')
    def metrics():
        """Expose Prometheus metrics."""
        data = generate_latest()
        return data, 200, {'Content-Type': CONTENT_TYPE_LATEST}


def _wants_json() -> bool:
    return request.path.startswith('/api/') or request.path.startswith('/admin/')


def _setup_error_handlers(app: Flask) -> None:
    """Map application errors to user-facing responses.

    Args:
        app: Flask application instance
    """
    @app.errorhandler(ApplicationError)
    def application_error(error: ApplicationError):
        if _wants_json():
            return jsonify(error.to_dict()), error.status_code
        if isinstance(error, TokenError):
            return redirect(url_for('public.access_denied'))
        if isinstance(error, AuthorizationError):
            return redirect(url_for('public.index'))
        return render_template('error.html', message=error.public_message), error.status_code

    @app.errorhandler(404)
    def not_found(error):
        if _wants_json():
            return jsonify({"success": False, "error": "No encontrado"}), 404
        return render_template('404.html'), 404

    @app.errorhandler(CSRFError)
    def csrf_error(error: CSRFError):
        logger.warning(f"CSRF check failed on {request.method} {request.path}: {error.description}")
        if _wants_json():
            return jsonify({"success": False, "error": "Token CSRF inválido"}), 400
        return render_template('error.html', message="La sesión del formulario expiró, recarga la página"), 400

    @app.errorhandler(Exception)
    def unexpected_error(error: Exception):
        if isinstance(error, HTTPException):
            if _wants_json() and error.code >= 400:
                return jsonify({"success": False, "error": error.description}), error.code
            return error
        logger.error(f"Unhandled error on {request.method} {request.path}: {error}", exc_info=True)
        generic = ApplicationError()
        if _wants_json():
            return jsonify(generic.to_dict()), 500
        return render_template('error.html', message=generic.public_message), 500
