# hoopfund/__init__.py
# hoopfund: Flask app factory for the tournament fundraiser
# Goals:
# - env-first config, fail fast in production
# - one JSON error shape on every surface
# - request-id stamped on every log line

from __future__ import annotations

import logging
import os
import time
from typing import Any, Optional, Type, Union
from uuid import uuid4

import sentry_sdk
from dotenv import load_dotenv
from flask import Flask, g, jsonify, request
from sentry_sdk.integrations.flask import FlaskIntegration
from sentry_sdk.integrations.logging import LoggingIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration
from werkzeug.exceptions import HTTPException
from werkzeug.middleware.proxy_fix import ProxyFix

from hoopfund.config import CONFIG_BY_NAME, init_settings
from hoopfund.domain.errors import FundraiserError
from hoopfund.extensions import db, init_all_extensions

# IMPORTANT: never override real env vars in prod
load_dotenv(override=False)

ConfigLike = Union[str, Type[Any]]

__version__ = "1.0.0"


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------
def _resolve_config(target: Optional[ConfigLike]) -> Type[Any]:
    """
    Choose the config class.
    - If explicitly provided (class or name), respect it.
    - Else FLASK_CONFIG / APP_ENV pick a name from CONFIG_BY_NAME.
    - Else DevelopmentConfig.
    """
    if target is not None and not isinstance(target, str):
        return target

    name = (target or os.getenv("FLASK_CONFIG") or os.getenv("APP_ENV") or "development").strip().lower()
    name = {"prod": "production", "dev": "development", "test": "testing"}.get(name, name)
    try:
        return CONFIG_BY_NAME[name]
    except KeyError:
        raise RuntimeError(f"Unknown config {name!r}; expected one of {sorted(CONFIG_BY_NAME)}") from None


def _json_error(message: str, status: int, **extra: Any):
    payload = {"ok": False, "error": {"code": int(status), "message": str(message)}}
    payload["error"]["request_id"] = getattr(g, "request_id", None)
    if extra:
        payload["error"].update(extra)

    resp = jsonify(payload)
    resp.status_code = int(status)
    return resp


# -----------------------------------------------------------------------------
# Logging with request_id
# -----------------------------------------------------------------------------
class _RequestIDFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        try:
            record.request_id = getattr(g, "request_id", "-")
        except RuntimeError:
            # outside an app/request context
            record.request_id = "-"
        return True


def _configure_logging(app: Flask) -> None:
    fmt = "%(asctime)s [%(levelname)s] %(name)s [rid=%(request_id)s]: %(message)s"
    root = logging.getLogger()

    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(fmt))
        handler.addFilter(_RequestIDFilter())
        root.addHandler(handler)
    else:
        for h in root.handlers:
            if not any(isinstance(f, _RequestIDFilter) for f in h.filters):
                h.addFilter(_RequestIDFilter())
            if not getattr(h, "formatter", None) or "%(request_id)s" not in getattr(h.formatter, "_fmt", ""):
                h.setFormatter(logging.Formatter(fmt))

    root.setLevel(str(app.config.get("LOG_LEVEL", "INFO")).upper())
    logging.getLogger("werkzeug").setLevel(str(app.config.get("WERKZEUG_LOG_LEVEL", "WARNING")).upper())
    app.logger.info("Loaded config: ENV=%s DEBUG=%s", app.config.get("ENV", "?"), app.debug)


# -----------------------------------------------------------------------------
# Integrations
# -----------------------------------------------------------------------------
def _init_sentry(app: Flask) -> None:
    dsn = (app.config.get("SENTRY_DSN") or "").strip()
    if not dsn:
        return
    sentry_sdk.init(
        dsn=dsn,
        integrations=[
            FlaskIntegration(),
            LoggingIntegration(level=logging.INFO, event_level=logging.ERROR),
            SqlalchemyIntegration(),
        ],
        traces_sample_rate=float(os.getenv("SENTRY_TRACES_SAMPLE_RATE", "0.0")),
        send_default_pii=False,
        environment=app.config.get("ENV", "development"),
        release=os.getenv("GIT_COMMIT") or __version__,
    )
    app.logger.info("Sentry initialized")


def _maybe_create_sqlite_tables(app: Flask) -> None:
    uri = (app.config.get("SQLALCHEMY_DATABASE_URI") or "").strip()
    if not uri.startswith("sqlite"):
        return
    if app.config.get("AUTO_CREATE_SQLITE", True) is not True:
        return
    with app.app_context():
        db.create_all()


def _apply_proxyfix(app: Flask) -> None:
    if not app.config.get("TRUST_PROXY"):
        return
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1, x_prefix=1)
    app.logger.info("ProxyFix enabled (trusting X-Forwarded-* headers).")
    app.config["PREFERRED_URL_SCHEME"] = "https"


# -----------------------------------------------------------------------------
# Request lifecycle + errors
# -----------------------------------------------------------------------------
def _register_request_lifecycle(app: Flask) -> None:
    @app.before_request
    def _bootstrap_request():
        g.request_id = (request.headers.get("X-Request-ID") or "").strip()[:64] or uuid4().hex
        g._start_ts = time.perf_counter()

    @app.after_request
    def _attach_request_headers(resp):
        resp.headers["X-Request-ID"] = getattr(g, "request_id", "-")
        start = getattr(g, "_start_ts", None)
        if start:
            resp.headers["X-Response-Time-ms"] = str(int((time.perf_counter() - start) * 1000))
        return resp


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(FundraiserError)
    def _domain_err(err: FundraiserError):
        if err.http_status == 409:
            app.logger.warning("%s %s: %s", request.method, request.path, err.message)
        return _json_error(err.message, err.http_status, **err.details())

    @app.errorhandler(HTTPException)
    def _http_err(err: HTTPException):
        return _json_error(err.description or err.name, err.code or 500)

    @app.errorhandler(Exception)
    def _uncaught(err: Exception):
        db.session.rollback()
        app.logger.exception("Unhandled error")
        return _json_error("Internal Server Error", 500)


# -----------------------------------------------------------------------------
# App Factory
# -----------------------------------------------------------------------------
def create_app(config_class: Optional[ConfigLike] = None, **overrides: Any) -> Flask:
    app = Flask(__name__, instance_relative_config=True)

    cfg = _resolve_config(config_class)
    app.config.from_object(cfg)
    app.config.update(overrides)
    app.config.setdefault("JSON_SORT_KEYS", False)
    cfg.init_app(app)

    app.url_map.strict_slashes = False

    _configure_logging(app)
    _apply_proxyfix(app)
    _init_sentry(app)

    init_all_extensions(app)
    settings = init_settings(app)

    # tables must be known to the metadata before create_all
    from hoopfund import models  # noqa: F401

    _maybe_create_sqlite_tables(app)

    _register_request_lifecycle(app)
    _register_error_handlers(app)

    from hoopfund.blueprints import register_blueprints

    register_blueprints(app)

    from hoopfund.cli import register_cli

    register_cli(app)

    app.logger.info(
        "hoopfund ready: event=%r paypal=%s webhook_verification=%s",
        settings.event_name,
        "on" if settings.paypal_enabled else "off",
        "on" if settings.verify_webhooks else "off",
    )
    return app


__all__ = ["create_app", "__version__"]
