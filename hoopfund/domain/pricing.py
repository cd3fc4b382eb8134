# hoopfund/domain/pricing.py
"""Registration fee computation."""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Final

from .types import MAX_TEAM_SIZE, RegistrationKind

PER_PERSON_FEE: Final[Decimal] = Decimal("20")


def _coerce_kind(kind: Any):
    if isinstance(kind, RegistrationKind):
        return kind
    try:
        return RegistrationKind(str(kind).strip().lower())
    except ValueError:
        return None


def compute_registration_fee(kind: Any, party_size: int = 1) -> Decimal:
    """Fee for a registration.

    Individuals always pay the per-person fee. Teams pay per player, capped
    at ``MAX_TEAM_SIZE`` players. Unknown kinds price at zero; callers turn
    that into a validation error.
    """
    k = _coerce_kind(kind)
    if k is RegistrationKind.INDIVIDUAL:
        return PER_PERSON_FEE
    if k is RegistrationKind.TEAM:
        size = max(1, int(party_size or 1))
        return PER_PERSON_FEE * min(size, MAX_TEAM_SIZE)
    return Decimal("0")


__all__ = ["PER_PERSON_FEE", "compute_registration_fee"]
