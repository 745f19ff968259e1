"""Cabeceras de seguridad para las respuestas de la API."""

from __future__ import annotations

from flask import Flask

# La página de captura del celular usa la cámara y la geolocalización, y
# las fotos se previsualizan como data: o blob: antes de subirlas.
CABECERAS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Permissions-Policy": "geolocation=(self), microphone=(), camera=(self)",
    "Content-Security-Policy": "default-src 'self'; img-src 'self' data: blob:",
}


def set_security_headers(app: Flask) -> None:
    """Registra un ``after_request`` que añade :data:`CABECERAS` si faltan."""

    @app.after_request  # type: ignore[misc]
    def _headers(resp):
        for nombre, valor in CABECERAS.items():
            resp.headers.setdefault(nombre, valor)
        return resp
