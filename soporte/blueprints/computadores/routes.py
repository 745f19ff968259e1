from __future__ import annotations

from typing import Any, Callable

import pytz
from flask import current_app, jsonify, request

from soporte.services.estadisticas import calcular_estadisticas
from soporte.services.exportacion import filas_exportacion
from soporte.services.fotos import get_fotos
from soporte.services.store import get_store
from soporte.services.tipos import FotosAsignadas, parse_cambios, parse_datos

from . import bp


def _payload() -> tuple[dict[str, Any], Any]:
    """Campos y archivos de la petición, sea multipart, urlencoded o JSON."""

    if request.is_json:
        data = request.get_json(silent=True)
        return (data if isinstance(data, dict) else {}), {}
    return request.form, request.files


def _tz():
    return pytz.timezone(current_app.config.get("APP_TZ", "UTC"))


def _con_fotos(actualizacion: bool, escribir: Callable[[FotosAsignadas], Any]) -> Any:
    """Resuelve las fotos antes de escribir en el almacén.

    Si la escritura falla, los archivos recién guardados se eliminan para no
    dejar fotos huérfanas.
    """

    data, files = _payload()
    fotos = get_fotos()
    asignadas = fotos.procesar(files, data, actualizacion=actualizacion)
    try:
        return escribir(asignadas)
    except Exception:
        fotos.eliminar(asignadas.rutas())
        raise


@bp.get("/computadores")
def listar():
    registros = get_store().list(request.args)
    return jsonify([registro.to_dict() for registro in registros])


@bp.get("/computadores/<int:computador_id>")
def detalle(computador_id: int):
    return jsonify(get_store().get(computador_id).to_dict())


@bp.post("/computadores")
def crear():
    data, _ = _payload()
    datos = parse_datos(data)
    # Sin campos requeridos no se escribe ninguna foto
    datos.validar_requeridos()
    creado = _con_fotos(False, lambda asignadas: get_store().create(datos, asignadas))
    creado["message"] = "Registro de soporte técnico creado exitosamente"
    return jsonify(creado), 201


@bp.put("/computadores/<int:computador_id>")
def actualizar(computador_id: int):
    data, _ = _payload()
    cambios = parse_cambios(data)
    cambios.como_reemplazo().validar_requeridos()
    _con_fotos(True, lambda asignadas: get_store().update(computador_id, cambios, asignadas))
    return jsonify(message="Registro de soporte actualizado exitosamente")


@bp.patch("/computadores/<int:computador_id>")
def actualizar_parcial(computador_id: int):
    data, _ = _payload()
    cambios = parse_cambios(data)
    _con_fotos(True, lambda asignadas: get_store().patch(computador_id, cambios, asignadas))
    return jsonify(message="Registro de soporte actualizado exitosamente")


@bp.delete("/computadores/<int:computador_id>")
def eliminar(computador_id: int):
    rutas = get_store().delete(computador_id)
    fallidas = get_fotos().eliminar(rutas)
    body: dict[str, Any] = {"message": "Registro de soporte eliminado exitosamente"}
    if fallidas:
        body["fotos_no_eliminadas"] = fallidas
    return jsonify(body)


@bp.get("/estadisticas")
def estadisticas():
    return jsonify(calcular_estadisticas(get_store().session, _tz()))


@bp.get("/export/excel")
def exportar_excel():
    registros = get_store().list()
    return jsonify(filas_exportacion(registros, _tz()))
