from __future__ import annotations

from datetime import datetime, timezone

from soporte.extensions import db

ESTADOS = ("operativo", "mantenimiento", "dañado")
WINDOWS_UPDATE = ("si", "no")

CAMPOS_REQUERIDOS = (
    "equipo_id",
    "serial_number",
    "responsable",
    "cargo",
    "estado",
    "windows_update",
)
CAMPOS_OPCIONALES = (
    "placa_ml",
    "latitud",
    "longitud",
    "direccion_automatica",
    "ubicacion_manual",
    "observaciones",
    "problemas_detectados",
    "revisor",
)
CAMPOS_FOTO = ("foto_frontal", "foto_serial", "foto_placa")


def utcnow() -> datetime:
    """Hora UTC sin tzinfo, como la guarda SQLite."""

    return datetime.now(timezone.utc).replace(tzinfo=None)


def _in_list(column: str, values: tuple[str, ...]) -> str:
    quoted = ", ".join(f"'{value}'" for value in values)
    return f"{column} IN ({quoted})"


class Computador(db.Model):
    __tablename__ = "computadores"
    __table_args__ = (
        db.CheckConstraint(_in_list("estado", ESTADOS), name="ck_computadores_estado"),
        db.CheckConstraint(
            _in_list("windows_update", WINDOWS_UPDATE),
            name="ck_computadores_windows_update",
        ),
    )

    # Identificación
    id = db.Column(db.Integer, primary_key=True)
    equipo_id = db.Column(db.String(120), unique=True, nullable=False, index=True)
    serial_number = db.Column(db.String(120), nullable=False, index=True)
    placa_ml = db.Column(db.String(120))

    # Ubicación
    latitud = db.Column(db.Float)
    longitud = db.Column(db.Float)
    direccion_automatica = db.Column(db.Text)
    ubicacion_manual = db.Column(db.Text)

    # Responsable
    responsable = db.Column(db.String(160), nullable=False)
    cargo = db.Column(db.String(160), nullable=False)

    # Estado técnico
    estado = db.Column(db.String(20), nullable=False, index=True)
    windows_update = db.Column(db.String(2), nullable=False)

    # Fotos: rutas "uploads/<archivo>"
    foto_frontal = db.Column(db.String(255))
    foto_serial = db.Column(db.String(255))
    foto_placa = db.Column(db.String(255))

    observaciones = db.Column(db.Text)
    problemas_detectados = db.Column(db.Text)

    fecha_revision = db.Column(db.DateTime, nullable=False, default=utcnow, index=True)
    fecha_actualizacion = db.Column(db.DateTime, nullable=False, default=utcnow)
    revisor = db.Column(db.String(160), index=True)

    @property
    def fotos(self) -> list[str]:
        return [ruta for ruta in (self.foto_frontal, self.foto_serial, self.foto_placa) if ruta]

    def to_dict(self) -> dict[str, object]:
        data: dict[str, object] = {"id": self.id}
        for campo in CAMPOS_REQUERIDOS + CAMPOS_OPCIONALES + CAMPOS_FOTO:
            data[campo] = getattr(self, campo)
        data["fecha_revision"] = self.fecha_revision.isoformat() if self.fecha_revision else None
        data["fecha_actualizacion"] = (
            self.fecha_actualizacion.isoformat() if self.fecha_actualizacion else None
        )
        return data

    def __repr__(self) -> str:
        return f"<Computador {self.id} {self.equipo_id}>"
