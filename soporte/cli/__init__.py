"""Comandos personalizados para la CLI de Flask."""

from __future__ import annotations

import json

import click
import pytz
from flask import current_app
from flask.cli import with_appcontext

from soporte.errors import ConstraintViolation
from soporte.extensions import db
from soporte.services.estadisticas import calcular_estadisticas
from soporte.services.exportacion import escribir_csv, filas_exportacion
from soporte.services.store import get_store
from soporte.services.tipos import DatosComputador

DEMO = [
    {
        "equipo_id": "PC-001",
        "serial_number": "5CG1234ABC",
        "placa_ml": "ML-7781",
        "responsable": "Ana Gómez",
        "cargo": "Contadora",
        "estado": "operativo",
        "windows_update": "si",
        "ubicacion_manual": "Oficina 201",
        "revisor": "Soporte TI",
    },
    {
        "equipo_id": "PC-002",
        "serial_number": "5CG9876XYZ",
        "responsable": "Julián Rojas",
        "cargo": "Auxiliar administrativo",
        "estado": "mantenimiento",
        "windows_update": "no",
        "problemas_detectados": "Disco con sectores dañados",
        "revisor": "Soporte TI",
    },
    {
        "equipo_id": "PC-003",
        "serial_number": "MXL4455QRS",
        "responsable": "Diana Herrera",
        "cargo": "Recepción",
        "estado": "dañado",
        "windows_update": "no",
        "latitud": 4.6097,
        "longitud": -74.0817,
        "observaciones": "No enciende",
    },
]


@click.command("init-db")
@with_appcontext
def init_db() -> None:
    """Crear la tabla de computadores si no existe."""

    db.create_all()
    click.echo("Tabla computadores: OK")


@click.command("seed-computadores")
@with_appcontext
def seed_computadores() -> None:
    """Cargar computadores de demostración si no existen."""

    store = get_store()
    creados = 0
    for payload in DEMO:
        try:
            store.create(DatosComputador(**payload))
        except ConstraintViolation:
            continue
        creados += 1
    click.echo(f"Computadores seed: {creados} nuevos")


@click.command("estadisticas")
@with_appcontext
def estadisticas() -> None:
    """Imprimir las estadísticas de soporte en JSON."""

    tz = pytz.timezone(current_app.config.get("APP_TZ", "UTC"))
    stats = calcular_estadisticas(get_store().session, tz)
    click.echo(json.dumps(stats, ensure_ascii=False))


@click.command("export-csv")
@click.option("--output", "output", default="computadores.csv", show_default=True)
@with_appcontext
def export_csv(output: str) -> None:
    """Exportar los registros a CSV con las columnas de la exportación a Excel."""

    tz = pytz.timezone(current_app.config.get("APP_TZ", "UTC"))
    filas = filas_exportacion(get_store().list(), tz)
    path = escribir_csv(filas, output)
    click.echo(f"Exportados {len(filas)} registros a {path}")


def register_cli(app):
    for command in (init_db, seed_computadores, estadisticas, export_csv):
        if command.name not in app.cli.commands:
            app.cli.add_command(command)
    return app
