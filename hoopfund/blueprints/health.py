from __future__ import annotations

import os
import socket
import time
from datetime import datetime, timezone
from typing import Any, Dict

from flask import Blueprint, current_app, jsonify
from sqlalchemy import text

from hoopfund.config.settings import get_settings
from hoopfund.extensions import db

bp = Blueprint("health", __name__)

APP_STARTED_AT = time.time()
HOSTNAME = socket.gethostname()

BUILD_VERSION = (
    os.getenv("BUILD_VERSION") or os.getenv("RELEASE") or os.getenv("VERSION") or "dev"
)
GIT_SHA = os.getenv("GIT_SHA", "")[:12]


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def _overall_status(parts: Dict[str, Dict[str, Any]]) -> str:
    states = [p.get("status", "ok") for p in parts.values()]
    if any(s == "fail" for s in states):
        return "fail"
    if any(s == "degraded" for s in states):
        return "degraded"
    return "ok"


def _db_check() -> Dict[str, Any]:
    try:
        db.session.execute(text("SELECT 1"))
        return {"status": "ok", "ok": True}
    except Exception as e:
        db.session.rollback()
        current_app.logger.warning("health: database check failed: %s", e)
        return {"status": "fail", "ok": False, "error": type(e).__name__}


def _paypal_check() -> Dict[str, Any]:
    s = get_settings()
    # PayPal is optional; manual payments keep working without it
    if not s.paypal_enabled:
        return {"status": "degraded", "ok": False, "reason": "not-configured", "mode": s.paypal_mode}
    return {
        "status": "ok",
        "ok": True,
        "mode": s.paypal_mode,
        "webhook_verification": s.verify_webhooks,
    }


def _summary_payload() -> Dict[str, Any]:
    parts = {"database": _db_check(), "paypal": _paypal_check()}
    # PayPal being unconfigured never fails the check
    overall = _overall_status({"database": parts["database"]})
    return {
        "status": overall,
        "version": BUILD_VERSION,
        "git": GIT_SHA,
        "hostname": HOSTNAME,
        "started_at": datetime.fromtimestamp(APP_STARTED_AT, tz=timezone.utc).isoformat(timespec="seconds"),
        "uptime_s": int(time.time() - APP_STARTED_AT),
        "now": _now_iso(),
        "parts": parts,
    }


@bp.get("/health")
def health():
    p = _summary_payload()
    code = 200 if p["status"] != "fail" else 503
    return jsonify(p), code


@bp.get("/healthz")
def healthz():
    return jsonify({"status": "ok", "now": _now_iso(), "uptime_s": int(time.time() - APP_STARTED_AT)})
