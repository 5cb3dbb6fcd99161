"""JSON API used by the play page and the demo wheel."""

from __future__ import annotations

import secrets

from flask import Blueprint, abort, current_app, g, jsonify, request, session

from core import CookieDefaults, EventDefaults, SpinOutcome, get_logger
from core.exceptions import (
    AlreadyPlayedError,
    EventNotStartedError,
    RateLimitError,
    SignatureMismatchError,
    TokenError,
)
from services.tokens import Token
from web.config_middleware import cache, csrf
from web.context import (
    WheelServices,
    client_ip,
    current_settings,
    get_services,
    query_token,
    session_guard,
)

logger = get_logger(__name__)

api_bp = Blueprint("api", __name__, url_prefix="/api")
# Called from page scripts with JSON bodies; no form token to carry
csrf.exempt(api_bp)


@api_bp.after_request
def add_rate_limit_header(response):
    remaining = g.get("rate_limit_remaining")
    if remaining is not None:
        response.headers["X-RateLimit-Remaining"] = str(remaining)
    return response


def _enforce_rate_limit(services: WheelServices) -> None:
    key = client_ip()
    allowed = services.rate_limiter.is_allowed(key)
    g.rate_limit_remaining = services.rate_limiter.remaining(key)
    if not allowed:
        services.monitor.record_rate_limited()
        logger.warning(f"Rate limit exceeded for {key} on {request.path}")
        raise RateLimitError(f"Too many requests from {key}")


def _payload() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


@api_bp.route("/event-time")
def event_time():
    gate = get_services().play.gate
    return jsonify({
        "eventTZ": gate.tz,
        "timeUntilEvent": gate.time_left().to_dict(),
        "serverTime": gate.now().isoformat(),
        "pollSeconds": EventDefaults.POLL_SECONDS,
        "resyncSeconds": EventDefaults.RESYNC_SECONDS,
    })


@api_bp.route("/verify")
def verify():
    services = get_services()
    token = query_token()

    valid = services.play.is_valid(token.id, token.signature)
    services.monitor.record_verification(valid)
    if not valid:
        raise SignatureMismatchError(f"Verification failed for {token.id!r}")
    return jsonify({"success": True, "id": token.id})


@api_bp.route("/spin", methods=["POST"])
def spin():
    """Reveal the prize bound to a wristband, once."""
    services = get_services()
    _enforce_rate_limit(services)

    payload = _payload()
    token = Token(
        str(payload.get("id") or ""),
        str(payload.get("signature") or payload.get("sig") or ""),
    )

    with services.monitor.track_spin():
        try:
            result = services.play.play(token.id, token.signature, session_guard())
        except TokenError:
            services.monitor.record_spin("live", SpinOutcome.INVALID.value)
            raise
        except EventNotStartedError:
            services.monitor.record_spin("live", SpinOutcome.NOT_STARTED.value)
            raise
        except AlreadyPlayedError:
            services.monitor.record_spin("live", SpinOutcome.ALREADY_PLAYED.value)
            raise

    services.monitor.record_spin("live", SpinOutcome.PRIZE.value)
    services.monitor.record_prize(result.prize.key)
    return jsonify(result.to_dict())


@api_bp.route("/demo/spin", methods=["POST"])
def demo_spin():
    """Live weighted draw with the operator's retry settings."""
    services = get_services()
    _enforce_rate_limit(services)

    demo_id = str(_payload().get("id") or "")
    if not demo_id:
        demo_id = session.get(CookieDefaults.DEMO_ID_KEY) or f"demo-{secrets.token_hex(6)}"
        session[CookieDefaults.DEMO_ID_KEY] = demo_id

    with services.monitor.track_spin():
        try:
            result = services.play.demo_spin(
                demo_id,
                session_guard(CookieDefaults.DEMO_STATE_PREFIX),
                current_settings(),
            )
        except AlreadyPlayedError:
            services.monitor.record_spin("demo", SpinOutcome.ALREADY_PLAYED.value)
            raise

    outcome = SpinOutcome.RETRY if result.is_retry else SpinOutcome.PRIZE
    services.monitor.record_spin("demo", outcome.value)
    return jsonify(result.to_dict())


@api_bp.route("/prizes")
@cache.cached(timeout=300)
def prizes():
    catalog = get_services().catalog
    return jsonify({"success": True, "prizes": [prize.to_dict() for prize in catalog]})


@api_bp.route("/debug-token")
def debug_token():
    """Signature diagnostics for operators; hidden unless DEBUG_TOKENS is on."""
    if not current_app.config.get("DEBUG_TOKENS"):
        abort(404)
    token = query_token()
    return jsonify(get_services().play.verifier.explain(token.id, token.signature))
