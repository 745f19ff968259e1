from __future__ import annotations

import logging
import os
import sys
import threading
import uuid
from typing import Any

from flask import g, jsonify, request
from werkzeug.exceptions import HTTPException


class SoporteError(Exception):
    """Error de dominio con código HTTP y código legible por máquina."""

    status = 500
    code = "internal_error"
    message = "Error interno del servidor"

    def __init__(self, message: str | None = None, *, details: str | None = None, **extra: Any):
        self.message = message or self.message
        self.details = details
        self.extra = extra
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "code": self.status,
            "type": self.code,
            "message": self.message,
        }
        if self.details:
            payload["details"] = self.details
        payload.update(self.extra)
        return payload


class ValidationError(SoporteError):
    status = 400
    code = "validation_error"
    message = "Datos inválidos"


class ConstraintViolation(SoporteError):
    status = 400
    code = "constraint_violation"
    message = "Error de validación de datos"

    def __init__(self, message: str | None = None, *, kind: str = "constraint", **kwargs: Any):
        self.kind = kind
        super().__init__(message, kind=kind, **kwargs)


class NotFound(SoporteError):
    status = 404
    code = "not_found"
    message = "Registro no encontrado"


class UnsupportedMediaType(SoporteError):
    status = 400
    code = "unsupported_media_type"
    message = "Solo se permiten archivos de imagen"


class PayloadTooLarge(SoporteError):
    status = 400
    code = "payload_too_large"
    message = "Archivo demasiado grande"


class StoreUnavailable(SoporteError):
    status = 500
    code = "store_unavailable"
    message = "Base de datos no disponible"


class InternalError(SoporteError):
    status = 500
    code = "internal_error"
    message = "Error interno del servidor"


def _json_error(error: SoporteError):
    body = error.to_dict()
    body["path"] = request.path
    body["request_id"] = getattr(g, "request_id", None)
    return jsonify(error=body), error.status


def register_instrumentation(app):
    @app.before_request
    def _assign_request_id():
        g.request_id = request.headers.get("X-Request-Id") or uuid.uuid4().hex
        app.logger.info("%s %s", request.method, request.path)

    @app.after_request
    def _attach_request_id(resp):
        rid = getattr(g, "request_id", None)
        if rid:
            resp.headers["X-Request-Id"] = rid
        return resp


def register_error_handlers(app):
    register_instrumentation(app)

    @app.errorhandler(SoporteError)
    def _soporte_error(e: SoporteError):
        if e.status >= 500:
            app.logger.error("%s: %s", e.code, e.message)
        else:
            app.logger.info("%s: %s", e.code, e.message)
        return _json_error(e)

    @app.errorhandler(400)
    def _400(e):
        return _json_error(ValidationError(getattr(e, "description", None) or "Bad Request"))

    @app.errorhandler(404)
    def _404(e):
        return _json_error(
            NotFound("Ruta no encontrada", method=request.method)
        )

    @app.errorhandler(413)
    def _413(e):
        return _json_error(
            PayloadTooLarge(details="La petición supera el tamaño máximo permitido")
        )

    @app.errorhandler(Exception)
    def _500(e):
        if isinstance(e, HTTPException):
            # 405 y demás errores HTTP sin manejador propio
            err = SoporteError(e.description or e.name)
            err.status = e.code or 500
            err.code = e.name.lower().replace(" ", "_")
            return _json_error(err)
        app.logger.exception("Unhandled exception", exc_info=e)
        return _json_error(InternalError(details=str(e)))


def install_fatal_handlers(logger: logging.Logger) -> None:
    """Termina el proceso ante excepciones no capturadas fuera de una petición."""

    def _fatal(exc_type, exc_value, exc_tb) -> None:
        logger.critical(
            "Excepción no capturada, terminando el proceso",
            exc_info=(exc_type, exc_value, exc_tb),
        )
        for handler in logger.handlers:
            handler.flush()
        os._exit(1)

    def _sys_hook(exc_type, exc_value, exc_tb) -> None:
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc_value, exc_tb)
            return
        _fatal(exc_type, exc_value, exc_tb)

    def _thread_hook(args: threading.ExceptHookArgs) -> None:
        if args.exc_type is SystemExit:
            return
        _fatal(args.exc_type, args.exc_value, args.exc_traceback)

    sys.excepthook = _sys_hook
    threading.excepthook = _thread_hook
