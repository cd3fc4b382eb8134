from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import Index
from sqlalchemy.orm import Mapped, mapped_column

from hoopfund.extensions import db
from hoopfund.models.mixins import TimestampMixin


class WebhookEvent(db.Model, TimestampMixin):
    __tablename__ = "webhook_events"
    __table_args__ = (
        Index("ix_webhook_events_type_created", "event_type", "created_at"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)

    event_id: Mapped[str] = mapped_column(
        db.String(120),
        unique=True,
        index=True,
        nullable=False,
        doc="Provider event id (WH-...), or the capture id when absent",
    )

    event_type: Mapped[str] = mapped_column(
        db.String(120),
        index=True,
        nullable=False,
        doc="Provider event type (PAYMENT.CAPTURE.COMPLETED, etc)",
    )

    transaction_id: Mapped[Optional[str]] = mapped_column(
        db.String(120),
        nullable=True,
        index=True,
    )

    registration_id: Mapped[Optional[int]] = mapped_column(
        db.Integer,
        nullable=True,
        index=True,
    )

    outcome: Mapped[Optional[str]] = mapped_column(
        db.String(64),
        nullable=True,
        doc="applied / duplicate / ignored / rejected",
    )

    processed_at: Mapped[Optional[datetime]] = mapped_column(db.DateTime, nullable=True)

    payload: Mapped[Optional[str]] = mapped_column(db.Text, nullable=True)

    def __repr__(self) -> str:  # pragma: no cover
        return f"<WebhookEvent {self.event_id} type={self.event_type} outcome={self.outcome}>"
