from __future__ import annotations

from typing import Any, Dict

from hoopfund import domain
from hoopfund.domain.records import volunteer_to_record
from hoopfund.extensions import db

from .mixins import TimestampMixin, as_aware, to_naive_utc


class Volunteer(db.Model, TimestampMixin):
    """A volunteer sign-up; role eligibility is derived from age_or_rank."""

    __tablename__ = "volunteers"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False, index=True)
    email = db.Column(db.String(255), nullable=False)
    phone = db.Column(db.String(32), nullable=False, default="")
    age_or_rank = db.Column(db.String(64), nullable=False)
    availability = db.Column(db.Text, nullable=False, default="")
    skills = db.Column(db.Text, nullable=False, default="")
    role_preference = db.Column(db.String(64), nullable=True)
    guardian_supervision = db.Column(db.Boolean, nullable=False, default=False)
    approved = db.Column(db.Boolean, nullable=False, default=False, index=True)

    def __repr__(self) -> str:  # pragma: no cover
        return f"<Volunteer {self.name} ({self.age_or_rank})>"

    @classmethod
    def from_domain(cls, v: domain.Volunteer) -> "Volunteer":
        return cls(
            name=v.name.strip(),
            email=v.email.strip(),
            phone=v.phone.strip(),
            age_or_rank=v.age_or_rank.strip(),
            availability=v.availability,
            skills=v.skills,
            role_preference=v.role_preference,
            guardian_supervision=v.guardian_supervision,
            approved=v.approved,
            created_at=to_naive_utc(v.created_at),
        )

    def to_domain(self) -> domain.Volunteer:
        return domain.Volunteer(
            id=self.id,
            name=self.name,
            email=self.email,
            phone=self.phone or "",
            age_or_rank=self.age_or_rank,
            availability=self.availability or "",
            skills=self.skills or "",
            role_preference=self.role_preference,
            guardian_supervision=bool(self.guardian_supervision),
            approved=bool(self.approved),
            created_at=as_aware(self.created_at),
        )

    def as_dict(self) -> Dict[str, Any]:
        vol = self.to_domain()
        data = volunteer_to_record(vol)
        data["eligible_roles"] = sorted(r.value for r in vol.eligible_roles)
        return data
