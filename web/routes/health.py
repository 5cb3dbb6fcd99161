"""Health check blueprint."""

from __future__ import annotations

from flask import Blueprint, jsonify

from web.context import get_services


health_bp = Blueprint("health", __name__)


@health_bp.route("/health")
def health_check():
    services = get_services()
    gate = services.play.gate

    data = {
        "status": "ok",
        "host": services.monitor.gather_host_metrics(),
        "token_days": services.token_store.available_days(),
        "prizes": len(services.catalog),
        "event_started": gate.has_started(),
    }
    return jsonify(data)
