from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request, send_file
from werkzeug.http import http_date, parse_date

from soporte.services.fotos import get_fotos

bp = Blueprint("uploads", __name__)


@bp.get("/uploads/<path:filename>")
def servir(filename: str):
    fotos = get_fotos()
    info = fotos.resolver(filename)
    max_age = int(current_app.config.get("IMAGE_CACHE_SECONDS", 86400))
    headers = {
        "Cache-Control": f"public, max-age={max_age}",
        "Last-Modified": http_date(info.modified),
    }

    if fotos.no_modificada(info, parse_date(request.headers.get("If-Modified-Since"))):
        return "", 304, headers

    resp = send_file(
        info.path,
        mimetype=info.content_type,
        conditional=False,
        etag=False,
        max_age=max_age,
    )
    resp.headers.update(headers)
    resp.headers["Content-Length"] = str(info.size)
    return resp


@bp.get("/api/image-info/<path:filename>")
def image_info(filename: str):
    info = get_fotos().resolver(filename)
    return jsonify(info.to_dict())
