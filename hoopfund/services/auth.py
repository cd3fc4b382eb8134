# hoopfund/services/auth.py
# ─────────────────────────────────────────────────────────────────────────────
# Admin auth: password login -> short-lived HS256 bearer token (PyJWT)
# ─────────────────────────────────────────────────────────────────────────────
from __future__ import annotations

import hmac
import logging
from datetime import datetime, timedelta, timezone
from functools import wraps
from typing import Any, Dict, Optional

import jwt
from flask import g, request
from werkzeug.exceptions import ServiceUnavailable, Unauthorized

from hoopfund.config.settings import Settings, get_settings

log = logging.getLogger(__name__)

TOKEN_AUDIENCE = "hoopfund-admin"
TOKEN_ALG = "HS256"


def check_password(settings: Settings, candidate: Optional[str]) -> bool:
    if not settings.admin_password:
        raise ServiceUnavailable("Admin login is not configured.")
    return hmac.compare_digest(
        str(candidate or "").encode("utf-8"),
        settings.admin_password.encode("utf-8"),
    )


def issue_token(settings: Settings, subject: str = "admin", now: Optional[datetime] = None) -> Dict[str, Any]:
    now = now or datetime.now(timezone.utc)
    exp = now + timedelta(minutes=settings.admin_token_ttl_minutes)
    claims = {
        "sub": subject,
        "aud": TOKEN_AUDIENCE,
        "iat": int(now.timestamp()),
        "exp": int(exp.timestamp()),
        "scope": "admin",
    }
    token = jwt.encode(claims, settings.jwt_secret, algorithm=TOKEN_ALG)
    return {"token": token, "token_type": "Bearer", "expires_at": exp.isoformat()}


def verify_token(settings: Settings, token: str) -> Dict[str, Any]:
    try:
        return jwt.decode(token, settings.jwt_secret, algorithms=[TOKEN_ALG], audience=TOKEN_AUDIENCE)
    except jwt.ExpiredSignatureError:
        raise Unauthorized("Admin token expired.") from None
    except jwt.InvalidTokenError:
        raise Unauthorized("Invalid admin token.") from None


def _bearer_token() -> Optional[str]:
    """Extract bearer token from request headers."""
    h = request.headers.get("Authorization", "")
    return h.split(" ", 1)[1].strip() if h.lower().startswith("bearer ") else None


def require_admin(fn):
    """Decorator: 401 unless the request carries a valid admin bearer token."""

    @wraps(fn)
    def wrapped(*args, **kwargs):
        tok = _bearer_token()
        if not tok:
            raise Unauthorized("Missing bearer token.")
        claims = verify_token(get_settings(), tok)
        if claims.get("scope") != "admin":
            raise Unauthorized("Insufficient scope.")
        g.admin_subject = str(claims.get("sub") or "admin")
        return fn(*args, **kwargs)

    return wrapped
