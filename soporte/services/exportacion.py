from __future__ import annotations

import csv
import logging
from datetime import datetime
from pathlib import Path
from typing import Iterable

import pytz

from soporte.models.computador import Computador

logger = logging.getLogger(__name__)

COLUMNAS = [
    "ID EQUIPO",
    "SERIAL",
    "PLACA/ML",
    "RESPONSABLE",
    "CARGO",
    "ESTADO",
    "WINDOWS UPDATE",
    "UBICACIÓN",
    "PROBLEMAS",
    "OBSERVACIONES",
    "REVISOR",
    "FECHA REVISIÓN",
    "HORA REVISIÓN",
    "TIENE FOTOS",
]


def _local(valor: datetime | None, tz: pytz.BaseTzInfo) -> datetime | None:
    if valor is None:
        return None
    if valor.tzinfo is None:
        valor = pytz.utc.localize(valor)
    return valor.astimezone(tz)


def formatear_fecha(valor: datetime | None) -> str:
    # d/m/aaaa, formato es-ES
    return f"{valor.day}/{valor.month}/{valor.year}" if valor else ""


def formatear_hora(valor: datetime | None) -> str:
    return f"{valor.hour}:{valor.minute:02d}:{valor.second:02d}" if valor else ""


def fila_exportacion(registro: Computador, tz: pytz.BaseTzInfo = pytz.utc) -> dict[str, str]:
    revision = _local(registro.fecha_revision, tz)
    return {
        "ID EQUIPO": registro.equipo_id,
        "SERIAL": registro.serial_number,
        "PLACA/ML": registro.placa_ml or "NO ASIGNADO",
        "RESPONSABLE": registro.responsable,
        "CARGO": registro.cargo,
        "ESTADO": (registro.estado or "").upper(),
        "WINDOWS UPDATE": "SÍ" if registro.windows_update == "si" else "NO",
        "UBICACIÓN": registro.direccion_automatica
        or registro.ubicacion_manual
        or "NO ESPECIFICADA",
        "PROBLEMAS": registro.problemas_detectados or "NINGUNO",
        "OBSERVACIONES": registro.observaciones or "SIN OBSERVACIONES",
        "REVISOR": registro.revisor or "NO ESPECIFICADO",
        "FECHA REVISIÓN": formatear_fecha(revision),
        "HORA REVISIÓN": formatear_hora(revision),
        "TIENE FOTOS": "SÍ" if registro.fotos else "NO",
    }


def filas_exportacion(registros: Iterable[Computador], tz: pytz.BaseTzInfo = pytz.utc) -> list[dict[str, str]]:
    filas = [fila_exportacion(registro, tz) for registro in registros]
    logger.info("Datos de soporte preparados para exportar: %s registros", len(filas))
    return filas


def escribir_csv(filas: Iterable[dict[str, str]], destino: str | Path) -> Path:
    out_path = Path(destino)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    with open(out_path, "w", newline="", encoding="utf-8") as handle:
        writer = csv.DictWriter(handle, fieldnames=COLUMNAS)
        writer.writeheader()
        for fila in filas:
            writer.writerow(fila)
    return out_path
