import csv
import json

from soporte.models import Computador


def test_init_db(runner):
    res = runner.invoke(args=["init-db"])
    assert res.exit_code == 0
    assert "OK" in res.output


def test_seed_computadores_is_idempotent(runner, app):
    res = runner.invoke(args=["seed-computadores"])
    assert res.exit_code == 0
    assert "3 nuevos" in res.output
    assert Computador.query.count() == 3

    res2 = runner.invoke(args=["seed-computadores"])
    assert res2.exit_code == 0
    assert "0 nuevos" in res2.output
    assert Computador.query.count() == 3


def test_estadisticas_prints_json(runner):
    runner.invoke(args=["seed-computadores"])

    res = runner.invoke(args=["estadisticas"])

    assert res.exit_code == 0
    stats = json.loads(res.stdout)
    assert stats["total"] == 3
    assert stats["dañados"] == 1
    assert stats["con_ubicacion"] == 1


def test_export_csv(runner, tmp_path):
    runner.invoke(args=["seed-computadores"])
    destino = tmp_path / "export.csv"

    res = runner.invoke(args=["export-csv", "--output", str(destino)])

    assert res.exit_code == 0
    assert "Exportados 3 registros" in res.output
    with open(destino, newline="", encoding="utf-8") as handle:
        rows = list(csv.DictReader(handle))
    assert {row["ID EQUIPO"] for row in rows} == {"PC-001", "PC-002", "PC-003"}
