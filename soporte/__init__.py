"""Fábrica de la app Flask de soporte técnico de computadores."""

from __future__ import annotations

import os
import time
from typing import Any, Mapping
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from flask import Flask

from .config import load_config
from .errors import install_fatal_handlers, register_error_handlers
from .extensions import db
from .logging_cfg import setup_logging
from .metrics import cleanup_multiprocess_directory
from .migrate_ext import init_migrations
from .registry import register_blueprints
from .security_headers import set_security_headers
from .services.fotos import init_fotos
from .services.store import init_store
from .storage import ensure_dirs


def _normalize_db_url(raw: str | None) -> str:
    """
    Normaliza la DATABASE_URL para evitar errores:
    - Convierte postgres:// -> postgresql+psycopg://
    - Si es SQLite, elimina cualquier query (?sslmode=...)
    - Si es Postgres, asegura sslmode=require (si no está presente)
    """

    if not raw:
        return "sqlite:///soporte_computadores.db"

    if raw.startswith("postgres://"):
        raw = raw.replace("postgres://", "postgresql+psycopg://", 1)
    elif raw.startswith("postgresql://"):
        raw = raw.replace("postgresql://", "postgresql+psycopg://", 1)

    parts = urlsplit(raw)
    scheme = parts.scheme

    if scheme.startswith("sqlite"):
        base = raw.split("?", 1)[0]
        base = base.split("#", 1)[0]
        fragment = f"#{parts.fragment}" if parts.fragment else ""
        return f"{base}{fragment}"

    if scheme.startswith("postgresql"):
        query_params = dict(parse_qsl(parts.query))
        query_params.setdefault("sslmode", "require")
        return urlunsplit(
            (
                scheme,
                parts.netloc,
                parts.path,
                urlencode(query_params),
                parts.fragment,
            )
        )

    return raw


def create_app(config_name: str | None = None, overrides: Mapping[str, Any] | None = None) -> Flask:
    app = Flask(__name__)
    app.config.from_object(load_config(config_name))
    if overrides:
        app.config.update(overrides)
    app.config["STARTED_AT"] = time.monotonic()

    uri = _normalize_db_url(str(app.config.get("SQLALCHEMY_DATABASE_URI", "")))
    app.config["SQLALCHEMY_DATABASE_URI"] = uri

    setup_logging(app)
    app.logger.info("DB URI -> %s", uri)

    if app.config.get("FATAL_ON_UNCAUGHT"):
        install_fatal_handlers(app.logger)

    if os.getenv("PROMETHEUS_MULTIPROC_CLEAN_ON_START", "0").lower() in (
        "1",
        "true",
        "yes",
    ):
        cleanup_multiprocess_directory()

    ensure_dirs(app)

    db.init_app(app)
    init_migrations(app, db)
    init_fotos(app)

    set_security_headers(app)
    register_error_handlers(app)

    from . import models  # noqa: F401

    register_blueprints(app)

    from .cli import register_cli

    register_cli(app)

    # Si la base no se puede inicializar, create_app falla y el proceso no arranca
    init_store(app, db)

    return app
