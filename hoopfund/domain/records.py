# hoopfund/domain/records.py
"""Persistence-shape (row dict) conversion for the domain value types.

Row shapes follow the hosted tables: ``teams`` (with embedded ``players``),
``sponsors``, ``volunteers`` and ``payments``. Currency travels as an exact
decimal string and timestamps as ISO-8601 with an explicit UTC offset, so a
record survives a round trip unchanged.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Mapping, Optional

from .errors import ValidationError
from .pricing import compute_registration_fee
from .types import (
    Payment,
    PaymentMethod,
    PaymentStatus,
    Player,
    RegistrationKind,
    RegistrationStatus,
    Sponsor,
    Team,
    Volunteer,
)

Record = Dict[str, Any]


# ──────────────────────────────────────────────────────────────────────────────
# Scalars
# ──────────────────────────────────────────────────────────────────────────────


def money_to_str(amount: Decimal) -> str:
    return format(Decimal(amount), "f")


def money_from(raw: Any, field: str = "amount") -> Decimal:
    try:
        value = Decimal(str(raw).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError(field, f"{field} must be a decimal amount") from None
    if not value.is_finite():
        raise ValidationError(field, f"{field} must be a finite amount")
    return value


def ts_to_str(ts: datetime) -> str:
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc).isoformat()


def ts_from(raw: Any, field: str = "created_at") -> datetime:
    if isinstance(raw, datetime):
        ts = raw
    else:
        s = str(raw or "").strip()
        if s.endswith("Z"):
            s = s[:-1] + "+00:00"
        try:
            ts = datetime.fromisoformat(s)
        except ValueError:
            raise ValidationError(field, f"{field} must be an ISO-8601 timestamp") from None
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def _opt_str(v: Any) -> Optional[str]:
    return None if v is None else str(v)


# ──────────────────────────────────────────────────────────────────────────────
# Players / Teams
# ──────────────────────────────────────────────────────────────────────────────


def player_to_record(p: Player) -> Record:
    return {
        "id": p.id,
        "player_name": p.name,
        "email": p.email,
        "age": p.age,
        "age_category": p.age_category.value,
        "emergency_contact_name": p.emergency_contact,
        "emergency_contact_phone": p.emergency_contact_phone,
        "parent_consent": p.parental_consent,
    }


def player_from_record(row: Mapping[str, Any]) -> Player:
    return Player(
        id=row.get("id"),
        name=str(row.get("player_name") or ""),
        email=str(row.get("email") or ""),
        age=int(row["age"]),
        emergency_contact=str(row.get("emergency_contact_name") or ""),
        emergency_contact_phone=str(row.get("emergency_contact_phone") or ""),
        parental_consent=bool(row.get("parent_consent")),
    )


def team_to_record(t: Team) -> Record:
    return {
        "id": t.id,
        "name": t.name,
        "registration_type": t.kind.value,
        "donation_amount": money_to_str(t.donation_amount),
        "status": t.status.value,
        "approved": t.approved,
        "transaction_id": t.transaction_id,
        "created_at": ts_to_str(t.created_at),
        "players": [player_to_record(p) for p in t.players],
    }


def team_from_record(row: Mapping[str, Any]) -> Team:
    try:
        kind = RegistrationKind(row["registration_type"])
        status = RegistrationStatus(row["status"])
    except (KeyError, ValueError) as e:
        raise ValidationError("registration_type", f"Malformed team record: {e}") from None

    team = Team(
        id=row.get("id"),
        name=row.get("name"),
        kind=kind,
        players=tuple(player_from_record(p) for p in row.get("players") or ()),
        status=status,
        transaction_id=_opt_str(row.get("transaction_id")),
        created_at=ts_from(row.get("created_at")),
    )

    stored = row.get("donation_amount")
    if stored is not None and money_from(stored, "donation_amount") != compute_registration_fee(kind, team.player_count):
        raise ValidationError(
            "donation_amount",
            f"Stored donation_amount {stored} does not match the fee for {kind.value} x {team.player_count}",
        )
    return team


# ──────────────────────────────────────────────────────────────────────────────
# Sponsors / Volunteers / Payments
# ──────────────────────────────────────────────────────────────────────────────


def sponsor_to_record(s: Sponsor) -> Record:
    return {
        "id": s.id,
        "name": s.name,
        "email": s.email,
        "donation_amount": money_to_str(s.donation_amount),
        "website": s.website,
        "approved": s.approved,
        "created_at": ts_to_str(s.created_at),
        "logo_url": s.logo_url,
    }


def sponsor_from_record(row: Mapping[str, Any]) -> Sponsor:
    return Sponsor(
        id=row.get("id"),
        name=str(row.get("name") or ""),
        email=str(row.get("email") or ""),
        donation_amount=money_from(row.get("donation_amount", "0"), "donation_amount"),
        website=_opt_str(row.get("website")),
        approved=bool(row.get("approved")),
        created_at=ts_from(row.get("created_at")),
        logo_url=_opt_str(row.get("logo_url")),
    )


def volunteer_to_record(v: Volunteer) -> Record:
    return {
        "id": v.id,
        "name": v.name,
        "email": v.email,
        "phone": v.phone,
        "age_or_rank": v.age_or_rank,
        "availability": v.availability,
        "skills": v.skills,
        "role_preference": v.role_preference,
        "guardian_supervision": v.guardian_supervision,
        "approved": v.approved,
        "created_at": ts_to_str(v.created_at),
    }


def volunteer_from_record(row: Mapping[str, Any]) -> Volunteer:
    return Volunteer(
        id=row.get("id"),
        name=str(row.get("name") or ""),
        email=str(row.get("email") or ""),
        phone=str(row.get("phone") or ""),
        age_or_rank=str(row.get("age_or_rank") or ""),
        availability=str(row.get("availability") or ""),
        skills=str(row.get("skills") or ""),
        role_preference=_opt_str(row.get("role_preference")),
        guardian_supervision=bool(row.get("guardian_supervision")),
        approved=bool(row.get("approved")),
        created_at=ts_from(row.get("created_at")),
    )


def payment_to_record(p: Payment) -> Record:
    return {
        "id": p.id,
        "registration_id": p.registration_id,
        "payment_method": p.method.value,
        "amount": money_to_str(p.amount),
        "currency": p.currency,
        "status": p.status.value,
        "transaction_id": p.transaction_id,
        "created_at": ts_to_str(p.created_at),
        "updated_at": ts_to_str(p.updated_at),
    }


def payment_from_record(row: Mapping[str, Any]) -> Payment:
    try:
        method = PaymentMethod(row["payment_method"])
        status = PaymentStatus(row["status"])
    except (KeyError, ValueError) as e:
        raise ValidationError("payment_method", f"Malformed payment record: {e}") from None
    return Payment(
        id=row.get("id"),
        registration_id=int(row["registration_id"]),
        method=method,
        amount=money_from(row.get("amount", "0")),
        currency=str(row.get("currency") or "USD"),
        status=status,
        transaction_id=_opt_str(row.get("transaction_id")),
        created_at=ts_from(row.get("created_at")),
        updated_at=ts_from(row.get("updated_at"), "updated_at"),
    )


__all__ = [
    "money_to_str",
    "money_from",
    "ts_to_str",
    "ts_from",
    "player_to_record",
    "player_from_record",
    "team_to_record",
    "team_from_record",
    "sponsor_to_record",
    "sponsor_from_record",
    "volunteer_to_record",
    "volunteer_from_record",
    "payment_to_record",
    "payment_from_record",
]
