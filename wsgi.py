"""Entrada WSGI (gunicorn wsgi:app)."""

from soporte import create_app

app = create_app()
