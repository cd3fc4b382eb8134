# ──────────────────────────────────────────────────────────────────────────────
# Payment model: one attempt to pay a registration's fee (PayPal or manual).
# Amounts are integer cents; status follows the payment state machine.
# ──────────────────────────────────────────────────────────────────────────────
from __future__ import annotations

from typing import Any, Dict, Optional

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hoopfund import domain
from hoopfund.domain.records import payment_to_record
from hoopfund.extensions import db

from .mixins import TimestampMixin, as_aware, from_cents, to_cents, to_naive_utc


class Payment(db.Model, TimestampMixin):
    __tablename__ = "payments"

    __table_args__ = (
        CheckConstraint("amount_cents >= 0", name="ck_payments_amount_nonneg"),
        Index("ix_payments_status_created", "status", "created_at"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)

    registration_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("teams.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    team: Mapped["Team"] = relationship("Team", back_populates="payments")

    payment_method: Mapped[str] = mapped_column(String(32), nullable=False)
    amount_cents: Mapped[int] = mapped_column(Integer, nullable=False, default=0, doc="Amount in cents (int)")
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")
    status: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=domain.PaymentStatus.PENDING.value,
        index=True,
    )
    transaction_id: Mapped[Optional[str]] = mapped_column(
        String(120),
        nullable=True,
        unique=True,
        doc="Provider capture id or manual reference",
    )

    def __repr__(self) -> str:  # pragma: no cover
        return f"<Payment id={self.id} reg={self.registration_id} {self.payment_method} {self.status}>"

    @property
    def amount_decimal(self):
        return from_cents(self.amount_cents)

    @classmethod
    def from_domain(cls, p: domain.Payment) -> "Payment":
        return cls(
            registration_id=p.registration_id,
            payment_method=p.method.value,
            amount_cents=to_cents(p.amount),
            currency=p.currency,
            status=p.status.value,
            transaction_id=p.transaction_id,
            created_at=to_naive_utc(p.created_at),
            updated_at=to_naive_utc(p.updated_at),
        )

    def to_domain(self) -> domain.Payment:
        return domain.Payment(
            id=self.id,
            registration_id=self.registration_id,
            method=domain.PaymentMethod(self.payment_method),
            amount=self.amount_decimal,
            currency=self.currency,
            status=domain.PaymentStatus(self.status),
            transaction_id=self.transaction_id,
            created_at=as_aware(self.created_at),
            updated_at=as_aware(self.updated_at),
        )

    def as_dict(self) -> Dict[str, Any]:
        return payment_to_record(self.to_domain())
