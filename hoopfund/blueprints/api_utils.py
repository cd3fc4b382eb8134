# hoopfund/blueprints/api_utils.py
# ─────────────────────────────────────────────────────────────────────────────
# JSON response + request helpers shared by the API blueprints
# ─────────────────────────────────────────────────────────────────────────────
from __future__ import annotations

from typing import Any, Dict, Optional, Type, TypeVar, cast

from flask import g, jsonify, request
from flask_wtf import FlaskForm

from hoopfund.domain.errors import FundraiserError, ValidationError
from hoopfund.forms.validators import json_formdata

F = TypeVar("F", bound=FlaskForm)


def json_response(payload: Dict[str, Any], status: int = 200):
    resp = jsonify(payload)
    resp.status_code = int(status)
    resp.headers.setdefault("Cache-Control", "no-store, no-cache, must-revalidate, max-age=0")
    resp.headers.setdefault("Pragma", "no-cache")
    resp.headers.setdefault("Expires", "0")
    return resp


def json_ok(payload: Optional[Dict[str, Any]] = None, status: int = 200):
    payload = dict(payload or {})
    payload.setdefault("ok", True)
    return json_response(payload, status)


def request_payload() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return cast(Dict[str, Any], data)
    if request.form:
        return cast(Dict[str, Any], request.form.to_dict(flat=True))
    return {}


def bind_form(form_cls: Type[F], aliases: Optional[Dict[str, str]] = None) -> F:
    """Build a form from a JSON body, or let FlaskForm read request.form/files.

    ``aliases`` maps legacy JSON keys onto form field names.
    """
    if request.is_json:
        payload = dict(request_payload())
        for old, new in (aliases or {}).items():
            if old in payload and new not in payload:
                payload[new] = payload.pop(old)
        return form_cls(formdata=json_formdata(payload))
    return form_cls()


def validated(form: F) -> F:
    if not form.validate():
        raise ValidationError.from_form_errors(form.errors)
    return form


def error_payload(code: int, message: str, **extra: Any) -> Dict[str, Any]:
    """The one JSON error shape every surface returns."""
    err: Dict[str, Any] = {"code": int(code), "message": message, "request_id": getattr(g, "request_id", None)}
    err.update(extra)
    return {"ok": False, "error": err}


def fundraiser_error_payload(e: FundraiserError) -> Dict[str, Any]:
    return error_payload(e.http_status, e.message, **e.details())
