"""Configuración centralizada de logging para la aplicación."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

from flask import g, has_request_context


class RequestIdFilter(logging.Filter):
    """Adjunta el `request_id` actual (si existe) a cada registro."""

    def filter(self, record: logging.LogRecord) -> bool:  # pragma: no cover
        if has_request_context():
            record.request_id = getattr(g, "request_id", "-")
        else:
            record.request_id = "-"
        return True


class JsonFormatter(logging.Formatter):
    """Renderiza cada registro como una línea JSON."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(timespec="seconds"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            "request_id": getattr(record, "request_id", "-"),
        }
        for key in ("computador_id", "equipo_id", "slot", "ruta"):
            value = getattr(record, key, None)
            if value is not None:
                payload[key] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def setup_logging(app) -> None:
    """Inicializa el logger de la app y el del paquete con el filtro de request id."""

    level_name = str(app.config.get("LOG_LEVEL", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.addFilter(RequestIdFilter())
    if str(app.config.get("LOG_FORMAT", "text")).lower() == "json":
        handler.setFormatter(JsonFormatter())
    else:
        fmt = "%(asctime)s %(levelname)s %(request_id)s %(name)s: %(message)s"
        handler.setFormatter(logging.Formatter(fmt))

    # app.logger es el logger "soporte": los módulos de servicios
    # (logging.getLogger(__name__)) heredan este handler.
    app.logger.handlers.clear()
    app.logger.addHandler(handler)
    app.logger.setLevel(level)
