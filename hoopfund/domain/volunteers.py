# hoopfund/domain/volunteers.py
"""Age-based volunteer role eligibility."""

from __future__ import annotations

import re
from typing import Any, Final, FrozenSet, Optional

from .types import ADULT_AGE, RoleName

YOUTH_MIN_AGE: Final[int] = 14

ADULT_ROLES: Final[FrozenSet[RoleName]] = frozenset(
    {RoleName.REFEREE_SCOREKEEPER, RoleName.SAFETY_FIRST_AID, RoleName.FOOD_SERVICE}
)
YOUTH_ROLES: Final[FrozenSet[RoleName]] = frozenset(
    {RoleName.PHOTOGRAPHY_SOCIAL, RoleName.SETUP_CLEANUP, RoleName.GENERAL_SUPPORT}
)
SUPERVISED_ROLES: Final[FrozenSet[RoleName]] = frozenset({RoleName.GENERAL_SUPPORT})

_LEADING_INT = re.compile(r"^\s*(\d{1,3})\b")


def eligible_roles(age: int) -> FrozenSet[RoleName]:
    if age >= ADULT_AGE:
        return ADULT_ROLES | YOUTH_ROLES
    if age >= YOUTH_MIN_AGE:
        return YOUTH_ROLES
    return SUPERVISED_ROLES


def requires_guardian(age: int) -> bool:
    """Under-14 volunteers need a recorded guardian-supervision flag."""
    return age < YOUTH_MIN_AGE


def parse_age(age_or_rank: Any) -> Optional[int]:
    """Pull a leading age out of free text ("16", "16 - sophomore").

    Rank-only values ("Eagle Scout", "Parent") yield None.
    """
    if isinstance(age_or_rank, int):
        return age_or_rank
    m = _LEADING_INT.match(str(age_or_rank or ""))
    return int(m.group(1)) if m else None


__all__ = [
    "YOUTH_MIN_AGE",
    "ADULT_ROLES",
    "YOUTH_ROLES",
    "SUPERVISED_ROLES",
    "eligible_roles",
    "requires_guardian",
    "parse_age",
]
