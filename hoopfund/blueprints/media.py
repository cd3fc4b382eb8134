# hoopfund/blueprints/media.py
# Serves the sponsor-logo bucket at LOGO_PUBLIC_BASE_URL when no front proxy does.
from __future__ import annotations

from flask import Blueprint, abort, send_file

from hoopfund.config.settings import get_settings
from hoopfund.domain.errors import ValidationError
from hoopfund.services.storage import LogoStorage

bp = Blueprint("media", __name__)


@bp.get("/media/logos/<key>")
def logo(key: str):
    storage = LogoStorage.from_settings(get_settings())
    try:
        path = storage.path_for(key)
    except ValidationError:
        abort(404)
    if not path.is_file():
        abort(404)
    resp = send_file(path, max_age=60 * 60 * 24 * 30)
    resp.headers["X-Content-Type-Options"] = "nosniff"
    return resp
