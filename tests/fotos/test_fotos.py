from __future__ import annotations

import base64
import io
import os
from datetime import datetime, timedelta, timezone

import pytest
from werkzeug.datastructures import FileStorage, MultiDict

from soporte.errors import NotFound, PayloadTooLarge, UnsupportedMediaType, ValidationError
from soporte.services.fotos import (
    PhotoAssociator,
    content_type_para,
    decodificar_base64,
    formatear_tamano,
)


@pytest.fixture()
def associator(tmp_path):
    return PhotoAssociator(tmp_path / "subidas", max_bytes=1024)


def _archivo(contenido: bytes, nombre: str = "foto.png", mimetype: str = "image/png") -> FileStorage:
    return FileStorage(stream=io.BytesIO(contenido), filename=nombre, content_type=mimetype)


@pytest.mark.parametrize(
    "num_bytes,esperado",
    [(0, "0 Bytes"), (512, "512 Bytes"), (1024, "1 KB"), (1536, "1.5 KB"), (5 * 1024 * 1024, "5 MB")],
)
def test_formatear_tamano(num_bytes, esperado):
    assert formatear_tamano(num_bytes) == esperado


def test_content_type_by_extension():
    assert content_type_para("a.PNG") == "image/png"
    assert content_type_para("a.gif") == "image/gif"
    assert content_type_para("a.webp") == "image/webp"
    assert content_type_para("a.jpg") == "image/jpeg"
    assert content_type_para("sin_extension") == "image/jpeg"


def test_decodificar_base64_with_and_without_header(png_bytes):
    crudo = base64.b64encode(png_bytes).decode()

    contenido, mime = decodificar_base64(f"data:image/png;base64,{crudo}")
    assert contenido == png_bytes
    assert mime == "image/png"

    contenido, mime = decodificar_base64(crudo)
    assert contenido == png_bytes
    assert mime is None


def test_decodificar_base64_rejects_garbage():
    with pytest.raises(ValidationError):
        decodificar_base64("data:image/jpeg;base64,no-es-base64!!")
    with pytest.raises(ValidationError):
        decodificar_base64("data:image/jpeg;base64,")


def test_binary_upload_takes_precedence(associator, png_bytes):
    files = {"foto_frontal": _archivo(png_bytes)}
    form = {"foto_frontal_base64": "data:image/png;base64,@@@"}

    pendientes = associator.validar(files, form)

    assert len(pendientes) == 1
    assert pendientes[0].archivo is not None


def test_procesar_writes_each_slot(associator, png_bytes):
    form = MultiDict(
        {
            "foto_serial_base64": "data:image/jpeg;base64," + base64.b64encode(b"jpeg").decode(),
        }
    )
    files = MultiDict({"foto_placa": _archivo(png_bytes, "placa 1.png")})

    fotos = associator.procesar(files, form)

    assert fotos.foto_frontal is None
    assert fotos.foto_serial.startswith("uploads/") and fotos.foto_serial.endswith("-serial.jpg")
    assert fotos.foto_placa.endswith("-placa-placa_1.png")
    nombre = fotos.foto_serial.split("/", 1)[1]
    assert (associator.upload_dir / nombre).read_bytes() == b"jpeg"


def test_update_names_carry_suffix(associator, png_bytes):
    form = {"foto_frontal_base64": base64.b64encode(png_bytes).decode()}
    fotos = associator.procesar({}, form, actualizacion=True)
    assert fotos.foto_frontal.endswith("-frontal-update.jpg")


def test_colliding_names_get_new_timestamp(associator, monkeypatch):
    monkeypatch.setattr("soporte.services.fotos.time.time", lambda: 1_700_000_000.0)
    form = {"foto_frontal_base64": base64.b64encode(b"uno").decode()}

    primera = associator.procesar({}, form).foto_frontal
    segunda = associator.procesar({}, form).foto_frontal

    assert primera == "uploads/1700000000000-frontal.jpg"
    assert segunda == "uploads/1700000000001-frontal.jpg"


def test_non_image_is_rejected(associator):
    with pytest.raises(UnsupportedMediaType):
        associator.validar({"foto_frontal": _archivo(b"%PDF", "doc.pdf", "application/pdf")}, {})
    with pytest.raises(UnsupportedMediaType):
        associator.validar({}, {"foto_placa_base64": "data:text/plain;base64,aG9sYQ=="})


def test_oversize_is_rejected_before_writing(associator):
    grande = b"x" * 2048
    with pytest.raises(PayloadTooLarge):
        associator.validar({"foto_frontal": _archivo(grande)}, {})
    with pytest.raises(PayloadTooLarge):
        associator.validar({}, {"foto_serial_base64": base64.b64encode(grande).decode()})
    assert list(associator.upload_dir.iterdir()) == []


def test_eliminar_reports_failures_and_continues(associator, monkeypatch):
    for nombre in ("a.jpg", "b.jpg"):
        (associator.upload_dir / nombre).write_bytes(b"x")

    real_unlink = os.unlink

    def _unlink(path, *args, **kwargs):
        if os.fspath(path).endswith("a.jpg"):
            raise OSError("ocupado")
        return real_unlink(path, *args, **kwargs)

    monkeypatch.setattr("soporte.services.fotos.os.unlink", _unlink)

    fallidas = associator.eliminar(["uploads/a.jpg", None, "uploads/b.jpg", "uploads/no-existe.jpg"])

    assert fallidas == ["uploads/a.jpg"]
    assert (associator.upload_dir / "a.jpg").exists()
    assert not (associator.upload_dir / "b.jpg").exists()


def test_resolver_rejects_traversal_and_missing(associator):
    with pytest.raises(NotFound):
        associator.resolver("../secreto.txt")
    with pytest.raises(NotFound):
        associator.resolver("no-existe.jpg")


def test_resolver_describes_file(associator, png_bytes):
    (associator.upload_dir / "1-frontal.png").write_bytes(png_bytes)

    info = associator.resolver("1-frontal.png")

    assert info.size == len(png_bytes)
    assert info.content_type == "image/png"
    data = info.to_dict()
    assert data["filename"] == "1-frontal.png"
    assert data["sizeFormatted"] == f"{len(png_bytes)} Bytes"


def test_no_modificada_compares_whole_seconds(associator, png_bytes):
    (associator.upload_dir / "x.png").write_bytes(png_bytes)
    info = associator.resolver("x.png")
    segundo = info.modified.replace(microsecond=0)

    assert PhotoAssociator.no_modificada(info, None) is False
    assert PhotoAssociator.no_modificada(info, segundo) is True
    assert PhotoAssociator.no_modificada(info, segundo.replace(tzinfo=None)) is True
    assert PhotoAssociator.no_modificada(info, segundo - timedelta(seconds=1)) is False
    assert PhotoAssociator.no_modificada(info, datetime.now(timezone.utc) + timedelta(days=1)) is True


def test_decodificar_base64_accepts_line_wrapped_payload(png_bytes):
    contenido = png_bytes * 4
    envuelto = base64.encodebytes(contenido).decode()

    decodificado, _ = decodificar_base64(f"data:image/png;base64,{envuelto}")

    assert decodificado == contenido
