"""Prometheus metrics used across the soporte application."""

from __future__ import annotations

import os
from pathlib import Path

_prom_dir = os.getenv("PROMETHEUS_MULTIPROC_DIR")
if not _prom_dir:
    default_dir = Path(os.getenv("PROMETHEUS_MULTIPROC_DIR_DEFAULT", "/tmp/soporte-prom"))
    default_dir.mkdir(parents=True, exist_ok=True)
    os.environ["PROMETHEUS_MULTIPROC_DIR"] = str(default_dir)
    _prom_dir = str(default_dir)
else:
    Path(_prom_dir).mkdir(parents=True, exist_ok=True)

from prometheus_client import Counter

computadores_creados_total = Counter(
    "computadores_creados_total",
    "Total number of equipment records created.",
)
computadores_actualizados_total = Counter(
    "computadores_actualizados_total",
    "Total number of equipment records updated.",
)
computadores_eliminados_total = Counter(
    "computadores_eliminados_total",
    "Total number of equipment records deleted.",
)
fotos_guardadas_total = Counter(
    "fotos_guardadas_total",
    "Total number of photos written to the uploads directory.",
)
fotos_rechazadas_total = Counter(
    "fotos_rechazadas_total",
    "Total number of photo payloads rejected (type, size or encoding).",
)
fotos_eliminacion_fallida_total = Counter(
    "fotos_eliminacion_fallida_total",
    "Total number of photo files that could not be removed on record deletion.",
)


def cleanup_multiprocess_directory() -> None:
    """Remove leftover metric shard files when using multiprocess mode."""

    prom_path = Path(_prom_dir or "")
    if not prom_path.exists():  # pragma: no cover
        return

    for child in prom_path.iterdir():
        if not child.is_file():
            continue
        try:
            child.unlink()
        except FileNotFoundError:  # pragma: no cover
            continue


__all__ = [
    "computadores_creados_total",
    "computadores_actualizados_total",
    "computadores_eliminados_total",
    "fotos_guardadas_total",
    "fotos_rechazadas_total",
    "fotos_eliminacion_fallida_total",
    "cleanup_multiprocess_directory",
]
