from __future__ import annotations

from soporte.services.filtros import construir_filtros, consulta_computadores


def _seed(make_computador):
    make_computador(equipo_id="PC-1", responsable="Juan Pérez", estado="operativo", revisor="Marta")
    make_computador(equipo_id="PC-2", responsable="Ana Gómez", estado="mantenimiento")
    make_computador(equipo_id="LAP-3", responsable="Santiago", estado="operativo", serial_number="XYZ-9")
    make_computador(equipo_id="PC-4", responsable="Luis", estado="dañado")


def test_no_filters_returns_everything(store, make_computador):
    _seed(make_computador)
    assert len(store.list({})) == 4


def test_estado_is_exact_match(store, make_computador):
    _seed(make_computador)
    result = store.list({"estado": "operativo"})
    assert {c.equipo_id for c in result} == {"PC-1", "LAP-3"}
    assert store.list({"estado": "operativ"}) == []


def test_responsable_is_substring_match(store, make_computador):
    _seed(make_computador)
    result = store.list({"responsable": "an"})
    # Juan, Ana (sin distinguir mayúsculas en SQLite) y Santiago
    assert {c.equipo_id for c in result} == {"PC-1", "PC-2", "LAP-3"}


def test_filters_are_combined(store, make_computador):
    _seed(make_computador)
    result = store.list({"estado": "operativo", "equipo_id": "PC"})
    assert [c.equipo_id for c in result] == ["PC-1"]
    assert [c.equipo_id for c in store.list({"serial_number": "YZ"})] == ["LAP-3"]
    assert [c.equipo_id for c in store.list({"revisor": "art"})] == ["PC-1"]


def test_unknown_and_empty_keys_are_ignored():
    assert construir_filtros({"color": "rojo", "estado": "", "responsable": None}) == []


def test_wildcards_are_literal(store, make_computador):
    _seed(make_computador)
    assert store.list({"responsable": "%"}) == []
    assert store.list({"equipo_id": "PC_"}) == []


def test_values_are_bound_parameters():
    hostil = "x' OR '1'='1"
    stmt = consulta_computadores({"estado": hostil, "responsable": hostil})
    compiled = stmt.compile()

    assert hostil not in str(compiled)
    assert hostil in compiled.params.values()
    assert "ORDER BY computadores.fecha_revision DESC" in str(compiled)


def test_injection_attempt_matches_nothing(store, make_computador):
    _seed(make_computador)
    assert store.list({"estado": "operativo' OR '1'='1"}) == []
