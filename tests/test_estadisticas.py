from datetime import date, datetime, timedelta

import pytz
from sqlalchemy import text, update

from soporte.extensions import db
from soporte.models import Computador
from soporte.models.computador import utcnow
from soporte.services.estadisticas import calcular_estadisticas, ventana_del_dia

CLAVES = {
    "total",
    "operativos",
    "mantenimiento",
    "dañados",
    "windows_si",
    "windows_no",
    "revisiones_hoy",
    "con_problemas",
    "con_ubicacion",
}


def test_empty_table_gives_zeros(client):
    data = client.get("/api/estadisticas").get_json()
    assert set(data) == CLAVES
    assert all(valor == 0 for valor in data.values())


def test_counts(client, make_computador):
    make_computador(equipo_id="PC-1", estado="operativo", windows_update="si", problemas_detectados="Lento")
    make_computador(equipo_id="PC-2", estado="mantenimiento", windows_update="no", latitud=4.6, longitud=-74.1)
    make_computador(equipo_id="PC-3", estado="dañado", windows_update="no", latitud=4.6)
    borrar = make_computador(equipo_id="PC-4", estado="operativo")
    assert client.delete(f"/api/computadores/{borrar}").status_code == 200

    data = client.get("/api/estadisticas").get_json()

    assert data["total"] == 3
    assert data["operativos"] + data["mantenimiento"] + data["dañados"] == data["total"]
    assert data["windows_si"] + data["windows_no"] == data["total"]
    assert data["windows_no"] == 2
    assert data["con_problemas"] == 1
    # solo latitud no cuenta como ubicación
    assert data["con_ubicacion"] == 1
    assert data["revisiones_hoy"] == 3


def test_revisiones_hoy_ignores_older_reviews(app, make_computador):
    viejo = make_computador(equipo_id="PC-OLD")
    make_computador(equipo_id="PC-NEW")
    db.session.execute(
        update(Computador)
        .where(Computador.id == viejo)
        .values(fecha_revision=utcnow() - timedelta(days=3))
    )
    db.session.commit()

    stats = calcular_estadisticas(db.session)

    assert stats["total"] == 2
    assert stats["revisiones_hoy"] == 1


def test_ventana_del_dia_uses_local_calendar_day():
    bogota = pytz.timezone("America/Bogota")
    inicio, fin = ventana_del_dia(bogota, hoy=date(2026, 10, 19))
    assert inicio == datetime(2026, 10, 19, 5, 0)
    assert fin == datetime(2026, 10, 20, 5, 0)
    assert inicio.tzinfo is None


def test_failing_count_fails_the_whole_request(client, make_computador):
    make_computador(problemas_detectados="Lento")
    # la subconsulta de con_problemas deja de encontrar su columna
    db.session.execute(
        text("ALTER TABLE computadores RENAME COLUMN problemas_detectados TO problemas")
    )
    db.session.commit()

    res = client.get("/api/estadisticas")

    assert res.status_code == 500
    body = res.get_json()
    assert set(body) == {"error"}
    assert body["error"]["type"] == "internal_error"
    assert not CLAVES & set(body["error"])
