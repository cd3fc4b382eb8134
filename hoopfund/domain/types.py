# hoopfund/domain/types.py
# ──────────────────────────────────────────────────────────────────────────────
# Shared vocabulary: immutable value shapes for registrations, players,
# sponsors, volunteers and payments, plus the closed enumerations every
# status/category field draws from.
# ──────────────────────────────────────────────────────────────────────────────
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Final, FrozenSet, Optional, Tuple

from .errors import ValidationError

MAX_TEAM_SIZE: Final[int] = 4
ADULT_AGE: Final[int] = 18


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ──────────────────────────────────────────────────────────────────────────────
# Enumerations
# ──────────────────────────────────────────────────────────────────────────────


class RegistrationKind(str, Enum):
    INDIVIDUAL = "individual"
    TEAM = "team"


class AgeCategory(str, Enum):
    ELEMENTARY = "elementary"
    MIDDLE_SCHOOL = "middle-school"
    HIGH_SCHOOL_ADULT = "high-school-adult"

    @classmethod
    def for_age(cls, age: int) -> "AgeCategory":
        """Bracket a player by age: 10 and under, 11-13, 14 and up."""
        if age <= 10:
            return cls.ELEMENTARY
        if age <= 13:
            return cls.MIDDLE_SCHOOL
        return cls.HIGH_SCHOOL_ADULT


class RegistrationStatus(str, Enum):
    PENDING_PAYMENT = "pending_payment"
    PAYMENT_PROCESSING = "payment_processing"
    PAYMENT_COMPLETED = "payment_completed"
    PAYMENT_FAILED = "payment_failed"
    APPROVED = "approved"
    REJECTED = "rejected"

    @property
    def is_terminal(self) -> bool:
        return self in (RegistrationStatus.APPROVED, RegistrationStatus.REJECTED)


class PaymentMethod(str, Enum):
    PAYPAL = "paypal"
    VENMO = "venmo"
    CASHAPP = "cashapp"
    CASH = "cash"
    OTHER_MANUAL = "other-manual"

    @property
    def is_manual(self) -> bool:
        return self is not PaymentMethod.PAYPAL


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"

    @property
    def is_settled(self) -> bool:
        return self in (PaymentStatus.COMPLETED, PaymentStatus.FAILED, PaymentStatus.REFUNDED)


class SponsorTier(str, Enum):
    GOLD = "Gold"
    SILVER = "Silver"
    BRONZE = "Bronze"
    SUPPORTER = "Supporter"


class Actor(str, Enum):
    SYSTEM = "system"
    PROVIDER = "provider"
    ADMIN = "admin"


class RoleName(str, Enum):
    REFEREE_SCOREKEEPER = "Referee/Scorekeeper"
    SAFETY_FIRST_AID = "Safety/First Aid"
    FOOD_SERVICE = "Food Service"
    PHOTOGRAPHY_SOCIAL = "Photography/Social Media"
    SETUP_CLEANUP = "Setup/Cleanup"
    GENERAL_SUPPORT = "General Support"


# ──────────────────────────────────────────────────────────────────────────────
# Value shapes
# ──────────────────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Player:
    name: str
    email: str
    age: int
    emergency_contact: str
    parental_consent: bool = False
    emergency_contact_phone: str = ""
    id: Optional[int] = None

    def __post_init__(self) -> None:
        if not (self.name or "").strip():
            raise ValidationError("name", "Player name is required.")
        if self.is_minor and not self.parental_consent:
            raise ValidationError("parent_consent", "Parental consent is required for players under 18.")

    @property
    def age_category(self) -> AgeCategory:
        return AgeCategory.for_age(self.age)

    @property
    def is_minor(self) -> bool:
        return self.age < ADULT_AGE


@dataclass(frozen=True)
class Team:
    """A team or individual registration; owns its players."""

    kind: RegistrationKind
    players: Tuple[Player, ...]
    name: Optional[str] = None
    status: RegistrationStatus = RegistrationStatus.PENDING_PAYMENT
    transaction_id: Optional[str] = None
    created_at: datetime = field(default_factory=utcnow)
    id: Optional[int] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "players", tuple(self.players))
        count = len(self.players)
        if count < 1 or count > MAX_TEAM_SIZE:
            raise ValidationError("players", f"A registration needs between 1 and {MAX_TEAM_SIZE} players.")
        if self.kind is RegistrationKind.INDIVIDUAL and count != 1:
            raise ValidationError("players", "Individual registrations have exactly one player.")

    @property
    def player_count(self) -> int:
        return len(self.players)

    @property
    def donation_amount(self) -> Decimal:
        from .pricing import compute_registration_fee  # pricing imports types

        return compute_registration_fee(self.kind, self.player_count)

    @property
    def approved(self) -> bool:
        return self.status is RegistrationStatus.APPROVED

    @property
    def display_name(self) -> str:
        if self.name and self.name.strip():
            return self.name.strip()
        return f"{self.players[0].name}'s Team"


@dataclass(frozen=True)
class Sponsor:
    name: str
    email: str
    donation_amount: Decimal
    logo_url: Optional[str] = None
    website: Optional[str] = None
    approved: bool = False
    created_at: datetime = field(default_factory=utcnow)
    id: Optional[int] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "donation_amount", Decimal(str(self.donation_amount)))
        if self.donation_amount < 0:
            raise ValidationError("donation_amount", "Donation amount cannot be negative.")

    @property
    def tier(self) -> SponsorTier:
        from .tiers import classify_sponsor_tier

        return classify_sponsor_tier(self.donation_amount)


@dataclass(frozen=True)
class Volunteer:
    name: str
    email: str
    phone: str
    age_or_rank: str
    availability: str = ""
    skills: str = ""
    role_preference: Optional[str] = None
    guardian_supervision: bool = False
    approved: bool = False
    created_at: datetime = field(default_factory=utcnow)
    id: Optional[int] = None

    @property
    def age(self) -> Optional[int]:
        from .volunteers import parse_age

        return parse_age(self.age_or_rank)

    @property
    def eligible_roles(self) -> FrozenSet[RoleName]:
        from .volunteers import eligible_roles

        age = self.age
        # rank-only entries (no number) are treated as adults
        return eligible_roles(ADULT_AGE if age is None else age)


@dataclass(frozen=True)
class Payment:
    registration_id: int
    method: PaymentMethod
    amount: Decimal
    currency: str = "USD"
    status: PaymentStatus = PaymentStatus.PENDING
    transaction_id: Optional[str] = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    id: Optional[int] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "amount", Decimal(str(self.amount)))
        object.__setattr__(self, "currency", (self.currency or "USD").upper())


__all__ = [
    "MAX_TEAM_SIZE",
    "ADULT_AGE",
    "utcnow",
    "RegistrationKind",
    "AgeCategory",
    "RegistrationStatus",
    "PaymentMethod",
    "PaymentStatus",
    "SponsorTier",
    "Actor",
    "RoleName",
    "Player",
    "Team",
    "Sponsor",
    "Volunteer",
    "Payment",
]
