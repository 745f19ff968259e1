"""create computadores table"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


revision = "20261019_computadores"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "computadores",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("equipo_id", sa.String(length=120), nullable=False),
        sa.Column("serial_number", sa.String(length=120), nullable=False),
        sa.Column("placa_ml", sa.String(length=120), nullable=True),
        sa.Column("latitud", sa.Float(), nullable=True),
        sa.Column("longitud", sa.Float(), nullable=True),
        sa.Column("direccion_automatica", sa.Text(), nullable=True),
        sa.Column("ubicacion_manual", sa.Text(), nullable=True),
        sa.Column("responsable", sa.String(length=160), nullable=False),
        sa.Column("cargo", sa.String(length=160), nullable=False),
        sa.Column("estado", sa.String(length=20), nullable=False),
        sa.Column("windows_update", sa.String(length=2), nullable=False),
        sa.Column("foto_frontal", sa.String(length=255), nullable=True),
        sa.Column("foto_serial", sa.String(length=255), nullable=True),
        sa.Column("foto_placa", sa.String(length=255), nullable=True),
        sa.Column("observaciones", sa.Text(), nullable=True),
        sa.Column("problemas_detectados", sa.Text(), nullable=True),
        sa.Column(
            "fecha_revision",
            sa.DateTime(),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "fecha_actualizacion",
            sa.DateTime(),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column("revisor", sa.String(length=160), nullable=True),
        sa.CheckConstraint(
            "estado IN ('operativo', 'mantenimiento', 'dañado')",
            name="ck_computadores_estado",
        ),
        sa.CheckConstraint(
            "windows_update IN ('si', 'no')",
            name="ck_computadores_windows_update",
        ),
    )
    op.create_index("ix_computadores_equipo_id", "computadores", ["equipo_id"], unique=True)
    op.create_index("ix_computadores_serial_number", "computadores", ["serial_number"])
    op.create_index("ix_computadores_estado", "computadores", ["estado"])
    op.create_index("ix_computadores_revisor", "computadores", ["revisor"])
    op.create_index("ix_computadores_fecha_revision", "computadores", ["fecha_revision"])


def downgrade() -> None:
    op.drop_index("ix_computadores_fecha_revision", table_name="computadores")
    op.drop_index("ix_computadores_revisor", table_name="computadores")
    op.drop_index("ix_computadores_estado", table_name="computadores")
    op.drop_index("ix_computadores_serial_number", table_name="computadores")
    op.drop_index("ix_computadores_equipo_id", table_name="computadores")
    op.drop_table("computadores")
