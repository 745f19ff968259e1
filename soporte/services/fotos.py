"""Asociación de fotos a registros de computadores.

El ``PhotoAssociator`` es el único componente que escribe o borra archivos en
el directorio de subidas. Cada foto llega por uno de dos canales por slot: un
archivo subido (``foto_<slot>``) o un data URI en base64
(``foto_<slot>_base64``); el archivo subido tiene prioridad.
"""

from __future__ import annotations

import base64
import binascii
import logging
import os
import re
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Mapping

from flask import current_app
from werkzeug.datastructures import FileStorage
from werkzeug.security import safe_join
from werkzeug.utils import secure_filename

from soporte import metrics
from soporte.errors import NotFound, PayloadTooLarge, UnsupportedMediaType, ValidationError
from soporte.services.tipos import FotosAsignadas

logger = logging.getLogger(__name__)

EXTENSION_KEY = "soporte.fotos"

# slot -> campo del registro
SLOTS = {
    "frontal": "foto_frontal",
    "serial": "foto_serial",
    "placa": "foto_placa",
}
PREFIJO_RUTA = "uploads"

CONTENT_TYPES = {
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
}
DEFAULT_CONTENT_TYPE = "image/jpeg"
EXTENSIONES = {
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
}

_DATA_URI_RE = re.compile(r"^data:(?P<mime>[^;,]*)(?P<params>(;[^;,]*)*),", re.IGNORECASE)


@dataclass
class FotoPendiente:
    slot: str
    contenido: bytes | None = None
    archivo: FileStorage | None = None
    extension: str = ".jpg"


@dataclass
class ImagenInfo:
    filename: str
    path: Path
    content_type: str
    size: int
    created: datetime
    modified: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "filename": self.filename,
            "size": self.size,
            "created": self.created.isoformat(),
            "modified": self.modified.isoformat(),
            "sizeFormatted": formatear_tamano(self.size),
        }


def formatear_tamano(num_bytes: int) -> str:
    """Tamaño legible: ``0 Bytes``, ``512 Bytes``, ``1.5 KB``, ``2 MB``..."""

    if not num_bytes:
        return "0 Bytes"
    unidades = ["Bytes", "KB", "MB", "GB"]
    size = float(num_bytes)
    idx = 0
    while size >= 1024 and idx < len(unidades) - 1:
        size /= 1024
        idx += 1
    valor = f"{round(size, 2):.2f}".rstrip("0").rstrip(".")
    return f"{valor} {unidades[idx]}"


def content_type_para(filename: str) -> str:
    return CONTENT_TYPES.get(Path(filename).suffix.lower(), DEFAULT_CONTENT_TYPE)


def _tamano_stream(archivo: FileStorage) -> int:
    stream = archivo.stream
    stream.seek(0, os.SEEK_END)
    size = stream.tell()
    stream.seek(0)
    return size


def decodificar_base64(valor: str) -> tuple[bytes, str | None]:
    """Decodifica un data URI (o base64 sin cabecera); devuelve bytes y mime."""

    mime = None
    datos = valor.strip()
    match = _DATA_URI_RE.match(datos)
    if match:
        mime = (match.group("mime") or "").lower() or None
        datos = datos[match.end():]
    # base64 MIME (RFC 2045) llega partido en líneas
    datos = re.sub(r"\s+", "", datos)
    try:
        contenido = base64.b64decode(datos, validate=True)
    except (binascii.Error, ValueError):
        raise ValidationError(
            "Error procesando las fotos", details="La foto en base64 no es válida"
        ) from None
    if not contenido:
        raise ValidationError("Error procesando las fotos", details="La foto está vacía")
    return contenido, mime


class PhotoAssociator:
    """Guarda, resuelve y elimina las fotos del directorio de subidas."""

    def __init__(self, upload_dir: str | os.PathLike[str], max_bytes: int) -> None:
        self.upload_dir = Path(upload_dir).resolve()
        self.max_bytes = max_bytes
        self.upload_dir.mkdir(parents=True, exist_ok=True)

    # -- ingreso --------------------------------------------------------

    def _rechazar(self, error: Exception) -> Exception:
        metrics.fotos_rechazadas_total.inc()
        return error

    def _validar_archivo(self, slot: str, archivo: FileStorage) -> FotoPendiente:
        mimetype = (archivo.mimetype or "").lower()
        if not mimetype.startswith("image/"):
            raise self._rechazar(
                UnsupportedMediaType(details=f"La foto '{slot}' no es una imagen ({mimetype or 'desconocido'})")
            )
        if _tamano_stream(archivo) > self.max_bytes:
            raise self._rechazar(
                PayloadTooLarge(details=self._detalle_limite())
            )
        return FotoPendiente(slot=slot, archivo=archivo)

    def _validar_base64(self, slot: str, valor: str) -> FotoPendiente:
        try:
            contenido, mime = decodificar_base64(valor)
        except ValidationError as exc:
            raise self._rechazar(exc)
        if mime and not mime.startswith("image/"):
            raise self._rechazar(
                UnsupportedMediaType(details=f"La foto '{slot}' no es una imagen ({mime})")
            )
        if len(contenido) > self.max_bytes:
            raise self._rechazar(PayloadTooLarge(details=self._detalle_limite()))
        return FotoPendiente(slot=slot, contenido=contenido, extension=EXTENSIONES.get(mime or "", ".jpg"))

    def _detalle_limite(self) -> str:
        return f"El tamaño máximo permitido es {self.max_bytes // (1024 * 1024)}MB"

    def validar(self, files: Mapping[str, FileStorage], form: Mapping[str, Any]) -> list[FotoPendiente]:
        """Valida todas las fotos de la petición antes de escribir nada."""

        pendientes: list[FotoPendiente] = []
        for slot, campo in SLOTS.items():
            archivo = files.get(campo)
            if archivo is not None and archivo.filename:
                pendientes.append(self._validar_archivo(slot, archivo))
                continue
            valor = form.get(f"{campo}_base64")
            if isinstance(valor, str) and valor.strip():
                pendientes.append(self._validar_base64(slot, valor))
        return pendientes

    def _nombre(self, foto: FotoPendiente, actualizacion: bool, marca: int) -> str:
        if foto.archivo is not None:
            original = (foto.archivo.filename or "").replace(" ", "_")
            limpio = secure_filename(original) or f"{foto.slot}.jpg"
            return f"{marca}-{foto.slot}-{limpio}"
        sufijo = "-update" if actualizacion else ""
        return f"{marca}-{foto.slot}{sufijo}{foto.extension}"

    def _escribir(self, foto: FotoPendiente, actualizacion: bool) -> str:
        marca = int(time.time() * 1000)
        while True:
            nombre = self._nombre(foto, actualizacion, marca)
            destino = self.upload_dir / nombre
            try:
                # "xb": falla si otra petición ya creó el mismo nombre
                with open(destino, "xb") as handle:
                    if foto.archivo is not None:
                        foto.archivo.stream.seek(0)
                        foto.archivo.save(handle)
                    else:
                        handle.write(foto.contenido or b"")
            except FileExistsError:
                marca += 1
                continue
            metrics.fotos_guardadas_total.inc()
            logger.info("Foto %s guardada: %s", foto.slot, nombre, extra={"slot": foto.slot, "ruta": nombre})
            return f"{PREFIJO_RUTA}/{nombre}"

    def guardar(self, pendientes: Iterable[FotoPendiente], actualizacion: bool = False) -> FotosAsignadas:
        fotos = FotosAsignadas()
        escritas: list[str] = []
        try:
            for foto in pendientes:
                ruta = self._escribir(foto, actualizacion)
                escritas.append(ruta)
                setattr(fotos, SLOTS[foto.slot], ruta)
        except OSError as exc:
            self.eliminar(escritas)
            raise ValidationError("Error procesando las fotos", details=str(exc)) from exc
        return fotos

    def procesar(
        self,
        files: Mapping[str, FileStorage],
        form: Mapping[str, Any],
        actualizacion: bool = False,
    ) -> FotosAsignadas:
        """Valida y guarda las fotos de una petición; devuelve sus rutas."""

        return self.guardar(self.validar(files, form), actualizacion=actualizacion)

    # -- eliminación ----------------------------------------------------

    def _ruta_local(self, ruta: str) -> Path | None:
        nombre = Path(ruta).name
        if not nombre:
            return None
        seguro = safe_join(str(self.upload_dir), nombre)
        return Path(seguro) if seguro else None

    def eliminar(self, rutas: Iterable[str | None]) -> list[str]:
        """Borra cada archivo; los fallos se registran y se devuelven, nunca se lanzan."""

        fallidas: list[str] = []
        for ruta in rutas:
            if not ruta:
                continue
            destino = self._ruta_local(ruta)
            if destino is None or not destino.exists():
                continue
            try:
                os.unlink(destino)
            except OSError as exc:
                metrics.fotos_eliminacion_fallida_total.inc()
                logger.warning("Error eliminando foto %s: %s", ruta, exc, extra={"ruta": ruta})
                fallidas.append(ruta)
            else:
                logger.info("Foto eliminada: %s", ruta, extra={"ruta": ruta})
        return fallidas

    # -- lectura --------------------------------------------------------

    def resolver(self, filename: str) -> ImagenInfo:
        seguro = safe_join(str(self.upload_dir), filename)
        if not seguro or not os.path.isfile(seguro):
            raise NotFound("Archivo no encontrado")
        path = Path(seguro)
        stat = path.stat()
        return ImagenInfo(
            filename=filename,
            path=path,
            content_type=content_type_para(filename),
            size=stat.st_size,
            created=datetime.fromtimestamp(
                getattr(stat, "st_birthtime", stat.st_ctime), tz=timezone.utc
            ),
            modified=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
        )

    @staticmethod
    def no_modificada(info: ImagenInfo, if_modified_since: datetime | None) -> bool:
        """True si la copia del cliente no es más antigua que el archivo."""

        if if_modified_since is None:
            return False
        if if_modified_since.tzinfo is None:
            if_modified_since = if_modified_since.replace(tzinfo=timezone.utc)
        # Las fechas HTTP tienen precisión de segundos
        return if_modified_since >= info.modified.replace(microsecond=0)


def init_fotos(app) -> PhotoAssociator:
    fotos = PhotoAssociator(app.config["UPLOAD_DIR"], int(app.config["MAX_PHOTO_BYTES"]))
    app.extensions[EXTENSION_KEY] = fotos
    app.logger.info("UPLOAD_DIR=%s", fotos.upload_dir)
    return fotos


def get_fotos(app=None) -> PhotoAssociator:
    return (app or current_app).extensions[EXTENSION_KEY]
