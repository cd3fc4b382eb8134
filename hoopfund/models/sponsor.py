# ──────────────────────────────────────────────────────────────────────────────
# Sponsor model: a business or person donating toward the event.
# Cents-based amounts (integer, non-negative); tier is always derived.
# ──────────────────────────────────────────────────────────────────────────────
from typing import Any, Dict, Optional

from sqlalchemy import Boolean, CheckConstraint, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from hoopfund import domain
from hoopfund.domain.records import sponsor_to_record
from hoopfund.domain.tiers import TIER_BENEFITS
from hoopfund.extensions import db

from .mixins import TimestampMixin, as_aware, from_cents, to_cents, to_naive_utc


class Sponsor(db.Model, TimestampMixin):
    __tablename__ = "sponsors"

    __table_args__ = (
        CheckConstraint("donation_amount_cents >= 0", name="ck_sponsors_amount_nonneg"),
        Index("ix_sponsors_approved_amount", "approved", "donation_amount_cents"),
    )

    # ── Identifiers ────────────────────────────────────────────────
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False, index=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    website: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    logo_url: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    contact_name: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)

    # ── Financials ────────────────────────────────────────────────
    donation_amount_cents: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
        doc="Donation amount in cents (int)",
    )

    approved: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, index=True)

    def __repr__(self) -> str:
        return (
            f"<Sponsor id={self.id} name={self.name!r} "
            f"amount=${self.amount:.2f} tier={self.tier.value}>"
        )

    @property
    def amount(self):
        return from_cents(self.donation_amount_cents)

    @property
    def tier(self) -> domain.SponsorTier:
        return domain.classify_sponsor_tier(self.amount)

    @classmethod
    def from_domain(cls, s: domain.Sponsor) -> "Sponsor":
        return cls(
            name=s.name.strip(),
            email=s.email.strip(),
            website=s.website,
            logo_url=s.logo_url,
            donation_amount_cents=to_cents(s.donation_amount),
            approved=s.approved,
            created_at=to_naive_utc(s.created_at),
        )

    def to_domain(self) -> domain.Sponsor:
        return domain.Sponsor(
            id=self.id,
            name=self.name,
            email=self.email,
            donation_amount=self.amount,
            website=self.website,
            logo_url=self.logo_url,
            approved=bool(self.approved),
            created_at=as_aware(self.created_at),
        )

    def as_dict(self) -> Dict[str, Any]:
        data = sponsor_to_record(self.to_domain())
        data["tier"] = self.tier.value
        data["benefits"] = TIER_BENEFITS[self.tier]
        data["contact_name"] = self.contact_name
        data["phone"] = self.phone
        return data
