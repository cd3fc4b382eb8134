# hoopfund/models/mixins.py
"""Shared SQLAlchemy mixins and column helpers (timestamps, cents)."""

from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional

from sqlalchemy import event

from hoopfund.extensions import db

_CENT = Decimal("0.01")


def utcnow_naive() -> datetime:
    """Timestamps are stored naive, always in UTC."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(ts: Optional[datetime]) -> Optional[datetime]:
    if ts is None or ts.tzinfo is None:
        return ts
    return ts.astimezone(timezone.utc).replace(tzinfo=None)


def as_aware(ts: Optional[datetime]) -> Optional[datetime]:
    """Reattach UTC to a value read back from the database."""
    if ts is None:
        return None
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def to_cents(amount: Any) -> int:
    return int((Decimal(str(amount)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def from_cents(cents: Optional[int]) -> Decimal:
    return (Decimal(int(cents or 0)) / 100).quantize(_CENT)


class TimestampMixin:
    """Adds created_at and updated_at columns with auto-refresh behavior."""

    created_at = db.Column(db.DateTime, default=utcnow_naive, nullable=False, index=True)
    updated_at = db.Column(
        db.DateTime,
        default=utcnow_naive,
        onupdate=utcnow_naive,
        nullable=False,
        index=True,
    )

    @staticmethod
    def _set_updated_at(mapper, connection, target):
        """Ensure updated_at is always refreshed before update."""
        target.updated_at = utcnow_naive()

    @classmethod
    def __declare_last__(cls):
        event.listen(cls, "before_update", cls._set_updated_at)

    @property
    def created_at_utc(self) -> Optional[datetime]:
        return as_aware(self.created_at)

    @property
    def updated_at_utc(self) -> Optional[datetime]:
        return as_aware(self.updated_at)
