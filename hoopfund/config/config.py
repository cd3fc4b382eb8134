# hoopfund/config/config.py
# Canonical hoopfund configuration (env-first, production-safe)

from __future__ import annotations

import os
from datetime import timedelta
from typing import Optional


# ----------------------------
# Env helpers
# ----------------------------
_TRUTHY = {"1", "true", "yes", "on", "y"}
_FALSY = {"0", "false", "no", "off", "n"}

DEV_SECRET_KEY = "dev-change-me"


def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    v = os.getenv(name)
    if v is None:
        return default
    s = str(v).strip()
    return s if s else default


def _bool(name: str, default: bool = False) -> bool:
    v = _env(name)
    if v is None:
        return default
    s = v.strip().lower()
    if s in _TRUTHY:
        return True
    if s in _FALSY:
        return False
    return default


def _int(name: str, default: int) -> int:
    v = _env(name)
    if v is None:
        return default
    try:
        return int(str(v).strip())
    except ValueError:
        return default


def _clean_base_url(v: Optional[str]) -> str:
    return (v or "").strip().rstrip("/")


# ----------------------------
# Config classes
# ----------------------------
class BaseConfig:
    """
    Env-first config:
    - all important settings can be overridden via environment variables
    - safe defaults for local dev
    """

    ENV = (_env("APP_ENV") or _env("ENV") or _env("FLASK_ENV") or "base").strip().lower()

    DEBUG = _bool("FLASK_DEBUG", False)
    TESTING = _bool("TESTING", False)

    # Security
    SECRET_KEY = _env("SECRET_KEY", DEV_SECRET_KEY)
    JWT_SECRET = _env("JWT_SECRET")
    ADMIN_PASSWORD = _env("ADMIN_PASSWORD")
    ADMIN_TOKEN_TTL_MINUTES = _int("ADMIN_TOKEN_TTL_MINUTES", 480)

    # JSON API only: CSRF tokens are not used, forms are validated explicitly
    WTF_CSRF_ENABLED = False

    PUBLIC_BASE_URL = _clean_base_url(_env("PUBLIC_BASE_URL", ""))
    TRUST_PROXY = _bool("TRUST_PROXY", False)

    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = _env("SESSION_COOKIE_SAMESITE", "Lax")
    SESSION_COOKIE_SECURE = True
    PERMANENT_SESSION_LIFETIME = timedelta(days=_int("SESSION_DAYS", 31))

    # Uploads: sponsor logos are capped at 5 MiB; leave room for form fields
    MAX_CONTENT_LENGTH = 6 * 1024 * 1024

    # flask-restx: keep the common error shape on /api 404s
    RESTX_ERROR_404_HELP = False
    ERROR_404_HELP = False
    RESTX_MASK_SWAGGER = False
    ERROR_INCLUDE_MESSAGE = False

    # SQLAlchemy
    SQLALCHEMY_DATABASE_URI = _env("SQLALCHEMY_DATABASE_URI", _env("DATABASE_URL", "sqlite:///hoopfund-dev.db"))
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {"pool_pre_ping": True}
    AUTO_CREATE_SQLITE = _bool("AUTO_CREATE_SQLITE", True)

    # Event
    EVENT_NAME = _env("EVENT_NAME", "3-on-3 Basketball Tournament")
    FUNDRAISING_GOAL = _env("FUNDRAISING_GOAL", "400")
    DEFAULT_CURRENCY = (_env("DEFAULT_CURRENCY", "USD") or "USD").upper()

    # Manual payment handles shown to registrants
    VENMO_HANDLE = _env("VENMO_HANDLE", "")
    CASHAPP_HANDLE = _env("CASHAPP_HANDLE", "")

    # Sponsor logo bucket
    LOGO_STORAGE_DIR = _env("LOGO_STORAGE_DIR", "instance/sponsor-logos")
    LOGO_PUBLIC_BASE_URL = _clean_base_url(_env("LOGO_PUBLIC_BASE_URL", "/media/logos"))

    # PayPal
    PAYPAL_CLIENT_ID = _env("PAYPAL_CLIENT_ID", "")
    PAYPAL_CLIENT_SECRET = _env("PAYPAL_CLIENT_SECRET", "")
    PAYPAL_MODE = (_env("PAYPAL_MODE", "sandbox") or "sandbox").lower()
    PAYPAL_WEBHOOK_ID = _env("PAYPAL_WEBHOOK_ID", "")
    PAYPAL_TIMEOUT = _int("PAYPAL_TIMEOUT", 10)

    # Logging / observability
    LOG_LEVEL = _env("LOG_LEVEL", "INFO")
    WERKZEUG_LOG_LEVEL = _env("WERKZEUG_LOG_LEVEL", "WARNING")
    SENTRY_DSN = _env("SENTRY_DSN", "")

    @classmethod
    def init_app(cls, app) -> None:
        """
        Factory boot hardening, called from create_app() after
        app.config.from_object(...)
        """
        uri = str(app.config.get("SQLALCHEMY_DATABASE_URI") or "")

        # SQLite tuning (better concurrency behavior than default)
        if uri.startswith("sqlite:"):
            opts = dict(app.config.get("SQLALCHEMY_ENGINE_OPTIONS") or {})
            connect_args = dict(opts.get("connect_args") or {})
            connect_args.setdefault("check_same_thread", False)
            opts["connect_args"] = connect_args
            opts.setdefault("pool_pre_ping", True)
            app.config["SQLALCHEMY_ENGINE_OPTIONS"] = opts


class DevelopmentConfig(BaseConfig):
    ENV = "development"
    DEBUG = True

    SESSION_COOKIE_SECURE = False


class TestingConfig(BaseConfig):
    ENV = "testing"
    TESTING = True
    DEBUG = False

    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SESSION_COOKIE_SECURE = False
    AUTO_CREATE_SQLITE = True

    SECRET_KEY = "testing-secret-key"
    ADMIN_PASSWORD = "testing-admin-password"
    PAYPAL_WEBHOOK_ID = ""
    SENTRY_DSN = ""
    LOG_LEVEL = "WARNING"


class ProductionConfig(BaseConfig):
    ENV = "production"
    DEBUG = False

    SESSION_COOKIE_SECURE = True
    TRUST_PROXY = _bool("TRUST_PROXY", True)
    AUTO_CREATE_SQLITE = _bool("AUTO_CREATE_SQLITE", False)

    @classmethod
    def init_app(cls, app) -> None:
        super().init_app(app)

        # ---- Production guardrails (fail fast) ----
        sk = app.config.get("SECRET_KEY")
        if not sk or sk == DEV_SECRET_KEY:
            raise RuntimeError("SECRET_KEY must be set to a strong random value in production.")

        if not app.config.get("ADMIN_PASSWORD"):
            raise RuntimeError("ADMIN_PASSWORD must be set in production.")

        if not app.config.get("PAYPAL_WEBHOOK_ID"):
            raise RuntimeError("PAYPAL_WEBHOOK_ID must be set in production so webhooks can be verified.")

        base = (app.config.get("PUBLIC_BASE_URL") or "").strip()
        if base and base.startswith("http://"):
            raise RuntimeError("PUBLIC_BASE_URL must be https:// in production.")
