from __future__ import annotations

import sys
from logging.config import fileConfig
from pathlib import Path

from alembic import context
from sqlalchemy import engine_from_config, pool

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from soporte import create_app  # noqa: E402
from soporte.extensions import db  # noqa: E402

config = context.config
if config.config_file_name:
    fileConfig(config.config_file_name)

# Las tablas las crea Alembic, no el arranque de la app
flask_app = create_app(overrides={"AUTO_CREATE_TABLES": False})
db_uri = flask_app.config.get("SQLALCHEMY_DATABASE_URI")
if not db_uri:
    raise RuntimeError("SQLALCHEMY_DATABASE_URI no está definido en la app.")

# Misma URL que la app; "%" se escapa para configparser
config.set_main_option("sqlalchemy.url", db_uri.replace("%", "%%"))
target_metadata = db.metadata

# render_as_batch: SQLite no soporta ALTER TABLE completo
OPCIONES = {"target_metadata": target_metadata, "compare_type": True, "render_as_batch": True}


def run_migrations_offline() -> None:
    context.configure(url=config.get_main_option("sqlalchemy.url"), literal_binds=True, **OPCIONES)
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    engine = engine_from_config(
        config.get_section(config.config_ini_section),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with engine.connect() as connection:
        context.configure(connection=connection, **OPCIONES)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
