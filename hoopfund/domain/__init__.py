# hoopfund/domain/__init__.py
"""Pure business rules: no Flask, no database, no I/O."""

from __future__ import annotations

from .errors import (DuplicateSignal, FundraiserError, InvalidTransition,
                     NotFound, UnsupportedEvent, ValidationError)
from .pricing import PER_PERSON_FEE, compute_registration_fee
from .tiers import classify_sponsor_tier, group_by_tier
from .types import (Actor, AgeCategory, Payment, PaymentMethod, PaymentStatus,
                    Player, RegistrationKind, RegistrationStatus, RoleName,
                    Sponsor, SponsorTier, Team, Volunteer)
from .validation import (validate_age, validate_email, validate_email_or_phone,
                         validate_name, validate_phone, validate_us_phone)
from .volunteers import eligible_roles, requires_guardian
from .workflow import (PaymentEvent, RegistrationEvent, RegistrationWorkflow,
                       TransitionRecord, next_payment_status, next_status)

__all__ = [
    "DuplicateSignal",
    "FundraiserError",
    "InvalidTransition",
    "NotFound",
    "UnsupportedEvent",
    "ValidationError",
    "PER_PERSON_FEE",
    "compute_registration_fee",
    "classify_sponsor_tier",
    "group_by_tier",
    "Actor",
    "AgeCategory",
    "Payment",
    "PaymentMethod",
    "PaymentStatus",
    "Player",
    "RegistrationKind",
    "RegistrationStatus",
    "RoleName",
    "Sponsor",
    "SponsorTier",
    "Team",
    "Volunteer",
    "validate_age",
    "validate_email",
    "validate_email_or_phone",
    "validate_name",
    "validate_phone",
    "validate_us_phone",
    "eligible_roles",
    "requires_guardian",
    "PaymentEvent",
    "RegistrationEvent",
    "RegistrationWorkflow",
    "TransitionRecord",
    "next_payment_status",
    "next_status",
]
