"""Wristband-facing pages: landing, QR entry point, play page."""

from __future__ import annotations

from flask import Blueprint, redirect, render_template, url_for

from core import EventDefaults
from web.context import get_services, query_token, session_guard


public_bp = Blueprint("public", __name__)


@public_bp.route("/")
def index():
    return render_template("index.html")


@public_bp.route("/verify")
def verify():
    """QR entry point: valid tokens continue to the play page.

    Every failure redirects to the same page so a visitor cannot tell a
    malformed id from a wrong signature.
    """
    services = get_services()
    token = query_token()

    valid = services.play.is_valid(token.id, token.signature)
    services.monitor.record_verification(valid)
    if not valid:
        return redirect(url_for("public.access_denied"))
    return redirect(url_for("public.play", id=token.id, sig=token.signature))


@public_bp.route("/play")
def play():
    services = get_services()
    token = query_token()

    # Raises SignatureMismatchError, rendered as a redirect to access-denied
    services.play.authenticate(token.id, token.signature)

    gate = services.play.gate
    time_left = gate.time_left()
    if session_guard().has_played(token.id):
        state = "played"
    elif not time_left.has_started:
        state = "waiting"
    else:
        state = "ready"

    return render_template(
        "play.html",
        token_id=token.id,
        signature=token.signature,
        state=state,
        time_left=time_left.to_dict(),
        event_tz=gate.tz,
        prizes=[prize.to_dict() for prize in services.catalog],
        poll_seconds=EventDefaults.POLL_SECONDS,
        resync_seconds=EventDefaults.RESYNC_SECONDS,
    )


@public_bp.route("/access-denied")
def access_denied():
    return render_template("access_denied.html"), 403
