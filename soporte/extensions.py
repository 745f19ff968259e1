"""Extensiones compartidas de la aplicación."""

from __future__ import annotations

from flask_sqlalchemy import SQLAlchemy

# Base de datos
db = SQLAlchemy()
