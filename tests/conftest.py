import io
import sys
from pathlib import Path

import pytest


PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from soporte import create_app
from soporte.extensions import db
from soporte.services.fotos import get_fotos
from soporte.services.store import get_store
from soporte.services.tipos import DatosComputador, FotosAsignadas

# PNG de 1x1 px
PNG_BYTES = (
    b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01\x08\x06"
    b"\x00\x00\x00\x1f\x15\xc4\x89\x00\x00\x00\rIDATx\x9cc\xf8\x0f\x00\x00\x01\x01"
    b"\x00\x05\x18\xd8N\x00\x00\x00\x00IEND\xaeB`\x82"
)

BASE = {
    "equipo_id": "PC-100",
    "serial_number": "SN-100",
    "responsable": "Ana Gómez",
    "cargo": "Contadora",
    "estado": "operativo",
    "windows_update": "si",
}


@pytest.fixture()
def upload_dir(tmp_path):
    return tmp_path / "uploads"


@pytest.fixture()
def app(tmp_path, upload_dir):
    flask_app = create_app(
        "testing",
        overrides={
            "DATA_DIR": str(tmp_path),
            "UPLOAD_DIR": str(upload_dir),
            "LOG_LEVEL": "DEBUG",
        },
    )

    with flask_app.app_context():
        try:
            yield flask_app
        finally:
            db.session.remove()
            db.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def runner(app):
    return app.test_cli_runner()


@pytest.fixture()
def store(app):
    return get_store(app)


@pytest.fixture()
def fotos(app):
    return get_fotos(app)


@pytest.fixture()
def make_computador(store):
    def _mk(fotos: FotosAsignadas | None = None, **overrides) -> int:
        payload = {**BASE, **overrides}
        creado = store.create(DatosComputador(**payload), fotos)
        return creado["id"]

    return _mk


@pytest.fixture()
def png():
    def _png(nombre: str = "foto.png", contenido: bytes = PNG_BYTES, mimetype: str = "image/png"):
        return (io.BytesIO(contenido), nombre, mimetype)

    return _png


@pytest.fixture()
def base():
    return dict(BASE)


@pytest.fixture()
def png_bytes():
    return PNG_BYTES


@pytest.fixture()
def app_aislada(tmp_path):
    """App con su propio motor en memoria; cerrar su almacén no toca el de ``app``."""

    aislada = tmp_path / "aislada"
    flask_app = create_app(
        "testing",
        overrides={"DATA_DIR": str(aislada), "UPLOAD_DIR": str(aislada / "uploads")},
    )
    yield flask_app
    get_store(flask_app).close(flask_app)
