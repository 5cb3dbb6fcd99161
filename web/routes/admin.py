"""Operator endpoints guarded by the static admin token."""

from __future__ import annotations

from flask import (
    Blueprint,
    abort,
    current_app,
    jsonify,
    redirect,
    render_template,
    request,
    url_for,
)

from core import CookieDefaults, get_logger
from core.exceptions import ValidationError
from services.operator_settings import parse_settings
from services.tokens import is_token_id, parse_day
from web.auth import admin_token_required
from web.config_middleware import csrf
from web.context import current_settings, get_services

logger = get_logger(__name__)

admin_bp = Blueprint("admin", __name__)


@admin_bp.route("/admin/config", methods=["GET"])
def get_config():
    # Read-only; the play page needs the retry settings
    return jsonify({"success": True, "settings": current_settings().to_public()})


@admin_bp.route("/admin/config", methods=["POST"])
@csrf.exempt
@admin_token_required
def update_config():
    """Store validated operator settings in the signed settings cookie.

    Accepts a JSON body or the status page form. Form posts must carry the
    CSRF token and are sent back to the status page. JSON writes are checked
    against the admin token only.
    """
    if not request.is_json and current_app.config.get("WTF_CSRF_ENABLED", False):
        csrf.protect()
    services = get_services()
    data = request.get_json(silent=True) if request.is_json else request.form
    settings = parse_settings(data or {})

    if request.is_json:
        response = jsonify({"success": True, "settings": settings.to_public()})
    else:
        response = redirect(url_for("admin.status", token=request.args.get("token") or request.form.get("token")))

    response.set_cookie(
        CookieDefaults.SETTINGS_COOKIE,
        services.settings_codec.dumps(settings),
        max_age=CookieDefaults.MAX_AGE,
        httponly=True,
        samesite="Strict",
        secure=current_app.config.get("SESSION_COOKIE_SECURE", False),
    )
    logger.info(
        f"Operator settings updated: retry={settings.retry_probability} "
        f"max_retries={settings.max_retries} day={settings.active_day} mode={settings.event_mode}"
    )
    return response


@admin_bp.route("/admin/tokens")
@admin_token_required
def list_tokens():
    """List one day's tokens; ``refresh=1`` rereads the CSV after regeneration."""
    store = get_services().token_store
    day = request.args.get("day") or current_settings().active_day
    try:
        parse_day(day)
    except ValueError as e:
        raise ValidationError(f"Malformed day {day!r}") from e
    if request.args.get("refresh") == "1":
        store.invalidate(day)
        logger.info(f"Token cache for {day} invalidated by operator")
    if not store.has_day(day):
        abort(404)

    records = store.list_day(day)
    return jsonify({
        "success": True,
        "day": day,
        "count": len(records),
        "tokens": [record.to_dict() for record in records],
    })


@admin_bp.route("/admin/generate-token")
@admin_token_required
def generate_token():
    token_id = request.args.get("id", "")
    if not is_token_id(token_id):
        raise ValidationError(f"Malformed token id {token_id!r}")

    verifier = get_services().play.verifier
    return jsonify({
        "success": True,
        "id": token_id,
        "sig": verifier.sign(token_id),
        "playUrl": verifier.signed_url(token_id, current_app.config["QR_BASE_URL"]),
    })


@admin_bp.route("/status")
@admin_token_required
def status():
    services = get_services()
    store = services.token_store
    days = store.available_days()
    return render_template(
        "status.html",
        token=request.args.get("token"),
        settings=current_settings(),
        time_left=services.play.gate.time_left().to_dict(),
        event_tz=services.play.gate.tz,
        days=[{"day": day, "count": len(store.list_day(day))} for day in days],
        prizes=list(services.catalog),
    )
