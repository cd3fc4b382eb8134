import logging
import time
from typing import Any, Callable

from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from flask_wtf.csrf import CSRFProtect
from sqlalchemy.exc import OperationalError

log = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────
# Core singletons
# ─────────────────────────────────────────────────────────────
db = SQLAlchemy()
migrate = Migrate()
csrf = CSRFProtect()


# ─────────────────────────────────────────────────────────────
# Safe DB helpers
# ─────────────────────────────────────────────────────────────
def with_db_retry(retries: int = 2, backoff: float = 0.2):
    """Retry a unit of work on transient connection errors (locked SQLite, dropped socket)."""

    def _wrap(fn: Callable[..., Any]) -> Callable[..., Any]:
        def _inner(*args: Any, **kwargs: Any):
            attempt = 0
            while True:
                try:
                    return fn(*args, **kwargs)
                except OperationalError:
                    db.session.rollback()
                    attempt += 1
                    if attempt > retries:
                        raise
                    log.warning("DB operation failed, retrying (%s/%s)", attempt, retries)
                    time.sleep(float(backoff) * attempt)

        _inner.__name__ = getattr(fn, "__name__", "_inner")
        _inner.__doc__ = getattr(fn, "__doc__", None)
        return _inner

    return _wrap


# ─────────────────────────────────────────────────────────────
# Init all extensions
# ─────────────────────────────────────────────────────────────
def init_all_extensions(app: Any) -> None:
    db.init_app(app)
    migrate.init_app(app, db, compare_type=True, render_as_batch=True)
    csrf.init_app(app)


__all__ = [
    "db",
    "migrate",
    "csrf",
    "with_db_retry",
    "init_all_extensions",
]
