from __future__ import annotations

from typing import Any, Dict, Optional

from sqlalchemy import ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from hoopfund import domain
from hoopfund.extensions import db

from .mixins import as_aware, to_naive_utc, utcnow_naive


class StatusChange(db.Model):
    """Append-only audit trail of registration status transitions."""

    __tablename__ = "status_changes"
    __table_args__ = (Index("ix_status_changes_reg_at", "registration_id", "created_at"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    registration_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("teams.id", ondelete="CASCADE"),
        nullable=False,
    )
    from_state: Mapped[str] = mapped_column(String(32), nullable=False)
    to_state: Mapped[str] = mapped_column(String(32), nullable=False)
    event: Mapped[str] = mapped_column(String(32), nullable=False)
    actor: Mapped[str] = mapped_column(String(16), nullable=False)
    note: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow_naive)

    @classmethod
    def from_record(cls, registration_id: int, record: domain.TransitionRecord) -> "StatusChange":
        return cls(
            registration_id=registration_id,
            from_state=record.from_state.value,
            to_state=record.to_state.value,
            event=record.event.value,
            actor=record.actor.value,
            note=record.note,
            created_at=to_naive_utc(record.at),
        )

    def to_record(self) -> domain.TransitionRecord:
        return domain.TransitionRecord(
            from_state=domain.RegistrationStatus(self.from_state),
            to_state=domain.RegistrationStatus(self.to_state),
            event=domain.RegistrationEvent(self.event),
            actor=domain.Actor(self.actor),
            at=as_aware(self.created_at),
            note=self.note,
        )

    def as_dict(self) -> Dict[str, Any]:
        return self.to_record().as_dict()
