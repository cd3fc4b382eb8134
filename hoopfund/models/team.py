# ──────────────────────────────────────────────────────────────────────────────
# Team registration model: one row per team or individual registration, with
# its players as child rows. Donation amounts are stored in cents and always
# derived from the registration type and player count.
# ──────────────────────────────────────────────────────────────────────────────
from __future__ import annotations

from typing import Any, Dict, List, Optional

from sqlalchemy import (Boolean, CheckConstraint, ForeignKey, Index, Integer,
                        String, event)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hoopfund import domain
from hoopfund.domain.records import team_to_record
from hoopfund.domain.workflow import allowed_events
from hoopfund.extensions import db

from .mixins import (TimestampMixin, as_aware, from_cents, to_cents,
                     to_naive_utc)


class Team(db.Model, TimestampMixin):
    __tablename__ = "teams"

    __table_args__ = (
        CheckConstraint("donation_amount_cents >= 0", name="ck_teams_amount_nonneg"),
        Index("ix_teams_status_created", "status", "created_at"),
    )

    # ── Identifiers ────────────────────────────────────────────────
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[Optional[str]] = mapped_column(String(120), nullable=True, index=True)
    registration_type: Mapped[str] = mapped_column(String(16), nullable=False, index=True)

    # ── Financials ────────────────────────────────────────────────
    donation_amount_cents: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        doc="Registration fee in cents (derived, never edited)",
    )
    transaction_id: Mapped[Optional[str]] = mapped_column(String(120), nullable=True, index=True)

    # ── Workflow ──────────────────────────────────────────────────
    status: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=domain.RegistrationStatus.PENDING_PAYMENT.value,
        index=True,
    )
    approved: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    medical_consent: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # ── Relationships ─────────────────────────────────────────────
    players: Mapped[List["Player"]] = relationship(
        "Player",
        back_populates="team",
        cascade="all, delete-orphan",
        order_by="Player.id",
        lazy="selectin",
    )
    payments: Mapped[List["Payment"]] = relationship(
        "Payment",
        back_populates="team",
        cascade="all, delete-orphan",
        order_by="Payment.id",
        lazy="selectin",
    )

    def __repr__(self) -> str:  # pragma: no cover
        return f"<Team id={self.id} type={self.registration_type} status={self.status}>"

    # ── Conversion ────────────────────────────────────────────────
    @classmethod
    def from_domain(cls, team: domain.Team) -> "Team":
        row = cls(
            name=team.name,
            registration_type=team.kind.value,
            donation_amount_cents=to_cents(team.donation_amount),
            status=team.status.value,
            approved=team.approved,
            transaction_id=team.transaction_id,
            created_at=to_naive_utc(team.created_at),
        )
        row.players = [Player.from_domain(p) for p in team.players]
        return row

    def to_domain(self) -> domain.Team:
        return domain.Team(
            id=self.id,
            name=self.name,
            kind=domain.RegistrationKind(self.registration_type),
            players=tuple(p.to_domain() for p in self.players),
            status=domain.RegistrationStatus(self.status),
            transaction_id=self.transaction_id,
            created_at=as_aware(self.created_at),
        )

    @property
    def donation_amount_decimal(self):
        return from_cents(self.donation_amount_cents)

    def as_dict(self, include_payments: bool = False) -> Dict[str, Any]:
        team = self.to_domain()
        data = team_to_record(team)
        data["display_name"] = team.display_name
        data["player_count"] = team.player_count
        data["allowed_events"] = [e.value for e in allowed_events(team.status)]
        data["medical_treatment_consent"] = bool(self.medical_consent)
        data["updated_at"] = self.updated_at_utc.isoformat() if self.updated_at else None
        if include_payments:
            data["payments"] = [p.as_dict() for p in self.payments]
        return data


class Player(db.Model, TimestampMixin):
    """A player on a team registration."""

    __tablename__ = "players"

    # ── Identity ────────────────────────────────────────────────
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    team_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("teams.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    player_name: Mapped[str] = mapped_column(String(120), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    age: Mapped[int] = mapped_column(Integer, nullable=False)
    age_category: Mapped[str] = mapped_column(String(32), nullable=False)
    emergency_contact_name: Mapped[str] = mapped_column(String(120), nullable=False, default="")
    emergency_contact_phone: Mapped[str] = mapped_column(String(32), nullable=False, default="")
    parent_consent: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    team: Mapped["Team"] = relationship("Team", back_populates="players")

    def __repr__(self) -> str:  # pragma: no cover
        return f"<Player {self.player_name} ({self.age_category})>"

    @classmethod
    def from_domain(cls, p: domain.Player) -> "Player":
        return cls(
            player_name=p.name,
            email=p.email,
            age=p.age,
            age_category=p.age_category.value,
            emergency_contact_name=p.emergency_contact,
            emergency_contact_phone=p.emergency_contact_phone,
            parent_consent=p.parental_consent,
        )

    def to_domain(self) -> domain.Player:
        return domain.Player(
            id=self.id,
            name=self.player_name,
            email=self.email,
            age=self.age,
            emergency_contact=self.emergency_contact_name or "",
            emergency_contact_phone=self.emergency_contact_phone or "",
            parental_consent=bool(self.parent_consent),
        )


# ──────────────────────────────────────────────────────────────────────────────
# Event Listeners
# ──────────────────────────────────────────────────────────────────────────────


@event.listens_for(Team, "before_insert")
def _team_before_insert(mapper, connection, target: Team) -> None:
    """Derive the fee from the roster; it is never taken from input."""
    fee = domain.compute_registration_fee(target.registration_type, len(target.players))
    target.donation_amount_cents = to_cents(fee)
    target.approved = target.status == domain.RegistrationStatus.APPROVED.value


@event.listens_for(Team, "before_update")
def _team_before_update(mapper, connection, target: Team) -> None:
    target.approved = target.status == domain.RegistrationStatus.APPROVED.value
