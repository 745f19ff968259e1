"""Healthcheck con el estado del almacén."""

from __future__ import annotations

import time
from datetime import datetime, timezone

from flask import Blueprint, current_app, jsonify

from soporte.services.store import EXTENSION_KEY

bp = Blueprint("health", __name__, url_prefix="/api")


@bp.get("/health")
def health():
    store = current_app.extensions.get(EXTENSION_KEY)
    conectada = bool(store and store.ping())
    started = current_app.config.get("STARTED_AT", time.monotonic())
    payload = {
        "status": "ok" if conectada else "error",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "database": "connected" if conectada else "disconnected",
        "uptime": round(time.monotonic() - started, 3),
        "mode": "soporte_tecnico",
    }
    return jsonify(payload), 200 if conectada else 500
