"""Tipos explícitos para los datos de un computador y sus cambios."""

from __future__ import annotations

import math
from dataclasses import dataclass, field, fields
from typing import Any, Mapping

from soporte.errors import ValidationError
from soporte.models.computador import CAMPOS_OPCIONALES, CAMPOS_REQUERIDOS


class _Omitido:
    """Marca un campo que el cliente no envió (distinto de enviarlo en null)."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "OMITIDO"

    def __bool__(self) -> bool:
        return False


OMITIDO: Any = _Omitido()

CAMPOS_NUMERICOS = ("latitud", "longitud")


@dataclass
class DatosComputador:
    """Valores no fotográficos de un registro completo (alta o PUT)."""

    equipo_id: str | None = None
    serial_number: str | None = None
    responsable: str | None = None
    cargo: str | None = None
    estado: str | None = None
    windows_update: str | None = None
    placa_ml: str | None = None
    latitud: float | None = None
    longitud: float | None = None
    direccion_automatica: str | None = None
    ubicacion_manual: str | None = None
    observaciones: str | None = None
    problemas_detectados: str | None = None
    revisor: str | None = None
    recibidos: list[str] = field(default_factory=list, repr=False, compare=False)

    def faltantes(self) -> list[str]:
        return [campo for campo in CAMPOS_REQUERIDOS if not getattr(self, campo)]

    def validar_requeridos(self) -> None:
        faltan = self.faltantes()
        if faltan:
            raise ValidationError(
                "Campos requeridos faltantes",
                required=list(CAMPOS_REQUERIDOS),
                missing=faltan,
                received=list(self.recibidos),
            )

    def valores(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self) if f.name != "recibidos"}


@dataclass
class CambiosComputador:
    """Parche: cada campo es un valor, ``None`` explícito u ``OMITIDO``."""

    valores: dict[str, Any]
    recibidos: list[str] = field(default_factory=list)

    def get(self, campo: str) -> Any:
        return self.valores.get(campo, OMITIDO)

    def presentes(self) -> dict[str, Any]:
        return {k: v for k, v in self.valores.items() if v is not OMITIDO}

    def como_reemplazo(self) -> DatosComputador:
        """Interpreta el parche como reemplazo total: lo omitido pasa a null."""

        datos = {campo: self.valores.get(campo) for campo in CAMPOS_REQUERIDOS + CAMPOS_OPCIONALES}
        datos = {k: (None if v is OMITIDO else v) for k, v in datos.items()}
        return DatosComputador(recibidos=list(self.recibidos), **datos)


@dataclass
class FotosAsignadas:
    """Rutas resueltas para cada slot; ``None`` conserva el valor guardado."""

    foto_frontal: str | None = None
    foto_serial: str | None = None
    foto_placa: str | None = None

    def asignadas(self) -> dict[str, str]:
        return {
            campo: ruta
            for campo, ruta in (
                ("foto_frontal", self.foto_frontal),
                ("foto_serial", self.foto_serial),
                ("foto_placa", self.foto_placa),
            )
            if ruta
        }

    def rutas(self) -> list[str]:
        return list(self.asignadas().values())


def _limpiar(campo: str, valor: Any) -> Any:
    if valor is None:
        return None
    if isinstance(valor, str):
        valor = valor.strip()
        if valor == "":
            return None
    if campo in CAMPOS_NUMERICOS:
        try:
            numero = float(valor)
        except (TypeError, ValueError):
            numero = math.nan
        if not math.isfinite(numero):
            raise ValidationError(
                "Coordenadas inválidas",
                details=f"El campo '{campo}' debe ser un número finito",
            )
        return numero
    if not isinstance(valor, str):
        return str(valor)
    return valor


def parse_cambios(data: Mapping[str, Any]) -> CambiosComputador:
    """Construye un parche desde un formulario o JSON, conservando lo omitido."""

    valores: dict[str, Any] = {}
    for campo in CAMPOS_REQUERIDOS + CAMPOS_OPCIONALES:
        if campo in data:
            valores[campo] = _limpiar(campo, data.get(campo))
        else:
            valores[campo] = OMITIDO
    return CambiosComputador(valores=valores, recibidos=list(data.keys()))


def parse_datos(data: Mapping[str, Any]) -> DatosComputador:
    return parse_cambios(data).como_reemplazo()
