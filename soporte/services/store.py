"""Almacén de registros de computadores.

``RecordStore`` es el único dueño de la tabla ``computadores``. Se crea en
``create_app`` y se recupera con :func:`get_store`; cada operación comprueba
que el almacén esté listo antes de tocar la base de datos.
"""

from __future__ import annotations

import enum
import logging
from typing import Any, Mapping

from flask import Flask, current_app
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import delete as sa_delete
from sqlalchemy import select, text, update as sa_update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from soporte import metrics
from soporte.errors import ConstraintViolation, NotFound, StoreUnavailable, ValidationError
from soporte.models.computador import (
    CAMPOS_FOTO,
    CAMPOS_REQUERIDOS,
    Computador,
    utcnow,
)
from soporte.services.filtros import consulta_computadores
from soporte.services.tipos import (
    CambiosComputador,
    DatosComputador,
    FotosAsignadas,
)

logger = logging.getLogger(__name__)

EXTENSION_KEY = "soporte.store"


class EstadoStore(enum.Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"
    CLOSED = "closed"


def traducir_integridad(exc: IntegrityError) -> Exception:
    """Convierte un IntegrityError del motor en un error de dominio."""

    mensaje = str(getattr(exc, "orig", exc))
    bajo = mensaje.lower()
    if "unique" in bajo or "duplicate" in bajo:
        if "equipo_id" in bajo:
            return ConstraintViolation(
                "El ID del equipo ya existe",
                kind="duplicate-asset-tag",
                details="El identificador del equipo debe ser único",
            )
        return ConstraintViolation("Valor duplicado", kind="duplicate", details=mensaje)
    if "not null" in bajo or "null value" in bajo:
        return ValidationError("Campos requeridos faltantes", details=mensaje)
    if "check" in bajo:
        return ConstraintViolation(
            "Error de validación de datos",
            kind="check",
            details="estado debe ser operativo, mantenimiento o dañado; "
            "windows_update debe ser si o no",
        )
    return ConstraintViolation(details=mensaje)


class RecordStore:
    """Operaciones CRUD, búsqueda filtrada y conteos sobre ``computadores``."""

    def __init__(self, db: SQLAlchemy) -> None:
        self._db = db
        self.estado = EstadoStore.UNINITIALIZED

    @property
    def session(self):
        return self._db.session

    @property
    def listo(self) -> bool:
        return self.estado is EstadoStore.READY

    # -- ciclo de vida -------------------------------------------------

    def initialize(self, app: Flask) -> None:
        if self.estado is EstadoStore.CLOSED:
            raise StoreUnavailable(details="El almacén ya fue cerrado")
        with app.app_context():
            try:
                if app.config.get("AUTO_CREATE_TABLES", True):
                    self._db.create_all()
                self.session.execute(text("SELECT 1"))
            except SQLAlchemyError as exc:
                logger.error("No se pudo inicializar la base de datos: %s", exc)
                raise StoreUnavailable(
                    details="La base de datos no se ha inicializado correctamente"
                ) from exc
            finally:
                self.session.remove()
        self.estado = EstadoStore.READY
        logger.info("Tabla de soporte técnico creada/verificada")

    def close(self, app: Flask) -> None:
        if self.estado is EstadoStore.CLOSED:
            return
        with app.app_context():
            self.session.remove()
            self._db.engine.dispose()
        self.estado = EstadoStore.CLOSED
        logger.info("Conexión a la base de datos cerrada")

    def ensure_ready(self) -> None:
        if not self.listo:
            raise StoreUnavailable(
                details="La base de datos no se ha inicializado correctamente"
            )

    def ping(self) -> bool:
        if not self.listo:
            return False
        try:
            self.session.execute(text("SELECT 1"))
        except SQLAlchemyError:
            self.session.rollback()
            return False
        return True

    # -- operaciones ----------------------------------------------------

    def _commit(self) -> None:
        try:
            self.session.commit()
        except IntegrityError as exc:
            self.session.rollback()
            raise traducir_integridad(exc) from exc

    def create(self, datos: DatosComputador, fotos: FotosAsignadas | None = None) -> dict[str, Any]:
        self.ensure_ready()
        datos.validar_requeridos()
        ahora = utcnow()
        computador = Computador(
            **datos.valores(),
            **(fotos.asignadas() if fotos else {}),
            fecha_revision=ahora,
            fecha_actualizacion=ahora,
        )
        self.session.add(computador)
        self._commit()
        metrics.computadores_creados_total.inc()
        logger.info(
            "Registro de soporte creado con ID: %s",
            computador.id,
            extra={"computador_id": computador.id, "equipo_id": computador.equipo_id},
        )
        return {
            "id": computador.id,
            "equipo_id": computador.equipo_id,
            "serial_number": computador.serial_number,
        }

    def get(self, computador_id: int) -> Computador:
        self.ensure_ready()
        computador = self.session.get(Computador, computador_id)
        if computador is None:
            raise NotFound("Computador no encontrado")
        return computador

    def list(self, filtros: Mapping[str, Any] | None = None) -> list[Computador]:
        self.ensure_ready()
        registros = list(self.session.scalars(consulta_computadores(filtros)))
        logger.info("Se encontraron %s computadores", len(registros))
        return registros

    def _aplicar(self, computador_id: int, valores: dict[str, Any], fotos: FotosAsignadas | None) -> None:
        valores = dict(valores)
        # Las fotos solo se sobrescriben cuando llega una nueva
        valores.update(fotos.asignadas() if fotos else {})
        valores["fecha_actualizacion"] = utcnow()
        stmt = (
            sa_update(Computador)
            .where(Computador.id == computador_id)
            .values(**valores)
            .execution_options(synchronize_session=False)
        )
        try:
            result = self.session.execute(stmt)
        except IntegrityError as exc:
            self.session.rollback()
            raise traducir_integridad(exc) from exc
        if result.rowcount == 0:
            self.session.rollback()
            raise NotFound("Registro no encontrado")
        self._commit()
        self.session.expire_all()
        metrics.computadores_actualizados_total.inc()
        logger.info(
            "Registro ID %s actualizado", computador_id, extra={"computador_id": computador_id}
        )

    def update(self, computador_id: int, cambios: CambiosComputador, fotos: FotosAsignadas | None = None) -> None:
        """Reemplazo total de los campos no fotográficos (PUT)."""

        self.ensure_ready()
        datos = cambios.como_reemplazo()
        datos.validar_requeridos()
        self._aplicar(computador_id, datos.valores(), fotos)

    def patch(self, computador_id: int, cambios: CambiosComputador, fotos: FotosAsignadas | None = None) -> None:
        """Actualización parcial: solo se escriben los campos enviados."""

        self.ensure_ready()
        presentes = cambios.presentes()
        anulados = [c for c in CAMPOS_REQUERIDOS if c in presentes and not presentes[c]]
        if anulados:
            raise ValidationError(
                "Campos requeridos no pueden quedar vacíos",
                required=list(CAMPOS_REQUERIDOS),
                missing=anulados,
                received=list(cambios.recibidos),
            )
        self._aplicar(computador_id, presentes, fotos)

    def delete(self, computador_id: int) -> list[str]:
        """Elimina el registro y devuelve las rutas de sus fotos."""

        self.ensure_ready()
        fila = self.session.execute(
            select(*(getattr(Computador, c) for c in CAMPOS_FOTO)).where(
                Computador.id == computador_id
            )
        ).first()
        result = self.session.execute(
            sa_delete(Computador)
            .where(Computador.id == computador_id)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            self.session.rollback()
            raise NotFound("Registro no encontrado")
        self._commit()
        self.session.expire_all()
        metrics.computadores_eliminados_total.inc()
        logger.info("Registro ID %s eliminado", computador_id, extra={"computador_id": computador_id})
        return [ruta for ruta in (fila or ()) if ruta]


def init_store(app: Flask, db: SQLAlchemy) -> RecordStore:
    store = RecordStore(db)
    app.extensions[EXTENSION_KEY] = store
    store.initialize(app)
    return store


def get_store(app: Flask | None = None) -> RecordStore:
    target = app or current_app
    store = target.extensions.get(EXTENSION_KEY)
    if store is None:
        raise StoreUnavailable(details="El almacén no fue configurado")
    return store
