from __future__ import annotations

from flask import Blueprint

from soporte.services.store import get_store

bp = Blueprint("computadores", __name__, url_prefix="/api")


@bp.before_request
def _store_listo():
    # Ninguna operación se despacha si el almacén no está listo
    get_store().ensure_ready()


from . import routes  # noqa: E402,F401
