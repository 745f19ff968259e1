"""Exposición Prometheus de los contadores de soporte."""

from __future__ import annotations

import logging
import os

from flask import Blueprint, Response
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    REGISTRY,
    generate_latest,
    multiprocess,
)

logger = logging.getLogger(__name__)

bp = Blueprint("metrics", __name__)


def _registro() -> CollectorRegistry:
    # Con varios workers los valores viven en el directorio multiproceso
    if not os.getenv("PROMETHEUS_MULTIPROC_DIR"):
        return REGISTRY
    registro = CollectorRegistry()
    multiprocess.MultiProcessCollector(registro)
    return registro


@bp.get("/metrics")
def metrics() -> Response:
    try:
        salida = generate_latest(_registro()) or generate_latest(REGISTRY)
    except Exception as exc:  # pragma: no cover
        logger.warning("No se pudieron generar las métricas: %s", exc)
        return Response(f"# metrics unavailable: {exc}\n", mimetype="text/plain", status=503)
    return Response(salida, headers={"Content-Type": CONTENT_TYPE_LATEST})
