"""Centraliza el registro de blueprints de la aplicación."""

from __future__ import annotations

from flask import Blueprint, Flask

from soporte.api.health import bp as health_bp
from soporte.api.metrics import bp as metrics_bp
from soporte.blueprints.computadores import bp as computadores_bp
from soporte.blueprints.uploads import bp as uploads_bp


def register_blueprints(app: Flask) -> dict[str, Blueprint]:
    """Registra todos los blueprints conocidos y devuelve un índice por nombre."""

    entries: list[tuple[Blueprint, dict[str, object]]] = [
        (health_bp, {}),
        (computadores_bp, {}),
        (uploads_bp, {}),
        (metrics_bp, {}),
    ]

    registry: dict[str, Blueprint] = {}
    for blueprint, options in entries:
        app.register_blueprint(blueprint, **options)
        registry[blueprint.name] = blueprint

    return registry
