"""Estadísticas de soporte técnico."""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta

import pytz
from sqlalchemy import and_, func, select

from soporte.models.computador import Computador

logger = logging.getLogger(__name__)


def ventana_del_dia(tz: pytz.BaseTzInfo, hoy: date | None = None) -> tuple[datetime, datetime]:
    """Inicio y fin (UTC sin tzinfo) del día calendario actual en ``tz``."""

    if hoy is None:
        hoy = datetime.now(tz).date()
    inicio = tz.localize(datetime.combine(hoy, time.min))
    fin = tz.localize(datetime.combine(hoy + timedelta(days=1), time.min))
    return (
        inicio.astimezone(pytz.utc).replace(tzinfo=None),
        fin.astimezone(pytz.utc).replace(tzinfo=None),
    )


def _conteos(tz: pytz.BaseTzInfo) -> dict[str, object]:
    inicio, fin = ventana_del_dia(tz)
    return {
        "total": None,
        "operativos": Computador.estado == "operativo",
        "mantenimiento": Computador.estado == "mantenimiento",
        "dañados": Computador.estado == "dañado",
        "windows_si": Computador.windows_update == "si",
        "windows_no": Computador.windows_update == "no",
        "revisiones_hoy": and_(
            Computador.fecha_revision >= inicio, Computador.fecha_revision < fin
        ),
        "con_problemas": and_(
            Computador.problemas_detectados.is_not(None),
            Computador.problemas_detectados != "",
        ),
        "con_ubicacion": and_(
            Computador.latitud.is_not(None), Computador.longitud.is_not(None)
        ),
    }


def calcular_estadisticas(session, tz: pytz.BaseTzInfo = pytz.utc) -> dict[str, int]:
    """Ejecuta los nueve conteos en una sola sentencia.

    Cada conteo es una subconsulta escalar del mismo SELECT, así que todos ven
    la misma foto de la tabla y un fallo en cualquiera hace fallar el total:
    nunca se devuelve un objeto parcial.
    """

    columnas = []
    for clave, predicado in _conteos(tz).items():
        sub = select(func.count(Computador.id))
        if predicado is not None:
            sub = sub.where(predicado)
        columnas.append(sub.scalar_subquery().label(clave))

    fila = session.execute(select(*columnas)).one()
    stats = {clave: int(valor or 0) for clave, valor in fila._mapping.items()}
    logger.info("Estadísticas de soporte generadas: %s", stats)
    return stats
