"""Construcción del predicado de búsqueda de computadores.

Los valores se pasan siempre como parámetros enlazados de SQLAlchemy, nunca
se concatenan en el texto de la consulta.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from sqlalchemy import Select, select
from sqlalchemy.sql.elements import ColumnElement

from soporte.models.computador import Computador

logger = logging.getLogger(__name__)

FILTRO_EXACTO = ("estado",)
FILTROS_PARCIALES = ("responsable", "equipo_id", "serial_number", "revisor")
FILTROS = FILTRO_EXACTO + FILTROS_PARCIALES


def construir_filtros(args: Mapping[str, Any]) -> list[ColumnElement[bool]]:
    """Traduce los filtros reconocidos a predicados; ignora el resto."""

    predicados: list[ColumnElement[bool]] = []
    for clave in FILTROS:
        valor = args.get(clave)
        if valor is None:
            continue
        valor = str(valor)
        if not valor:
            continue
        columna = getattr(Computador, clave)
        if clave in FILTRO_EXACTO:
            predicados.append(columna == valor)
        else:
            predicados.append(columna.contains(valor, autoescape=True))
        logger.debug("Filtro por %s: %s", clave, valor)
    return predicados


def consulta_computadores(args: Mapping[str, Any] | None = None) -> Select:
    """SELECT base con los filtros aplicados, lo más reciente primero."""

    stmt = select(Computador)
    predicados = construir_filtros(args or {})
    if predicados:
        stmt = stmt.where(*predicados)
    return stmt.order_by(Computador.fecha_revision.desc(), Computador.id.desc())
