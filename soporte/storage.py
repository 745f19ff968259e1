from __future__ import annotations

from pathlib import Path

from flask import Flask


def ensure_dirs(app: Flask) -> Path:
    """Crea DATA_DIR, el directorio de subidas y el de la base SQLite."""

    data_dir = Path(app.config["DATA_DIR"]).expanduser().resolve()
    upload_dir = Path(app.config["UPLOAD_DIR"]).expanduser().resolve()
    for path in (data_dir, upload_dir):
        path.mkdir(parents=True, exist_ok=True)

    uri = str(app.config.get("SQLALCHEMY_DATABASE_URI", ""))
    if uri.startswith("sqlite:///") and not uri.endswith(":memory:"):
        sqlite_path = Path(uri.replace("sqlite:///", "", 1)).expanduser().resolve()
        sqlite_path.parent.mkdir(parents=True, exist_ok=True)
        app.logger.info("SQLite file -> %s", sqlite_path)

    app.config["UPLOAD_DIR"] = str(upload_dir)
    app.logger.info("DATA_DIR=%s", data_dir)
    return data_dir
