# hoopfund/domain/validation.py
"""Pure field-shape predicates. No side effects, no exceptions."""

from __future__ import annotations

import re
from typing import Any, Optional, Tuple

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_PHONE_RE = re.compile(r"^\(?([0-9]{3})\)?[-. ]?([0-9]{3})[-. ]?([0-9]{4})$")
_US_10_RE = re.compile(r"^[2-9]\d{2}[2-9]\d{6}$")
_US_11_RE = re.compile(r"^1[2-9]\d{2}[2-9]\d{6}$")

MIN_AGE = 10
MAX_AGE = 100


def validate_email(s: Any) -> bool:
    return isinstance(s, str) and bool(_EMAIL_RE.match(s))


def validate_phone(s: Any) -> bool:
    """North-American 10 digits; optional parens around the area code and
    one of ``-``, ``.`` or space between groups."""
    return isinstance(s, str) and bool(_PHONE_RE.match(s))


def validate_us_phone(s: Any) -> bool:
    """Stricter check: real area code/exchange, optional leading country code 1."""
    if not isinstance(s, str):
        return False
    digits = re.sub(r"\D", "", s)
    if len(digits) == 10:
        return bool(_US_10_RE.match(digits))
    if len(digits) == 11:
        return bool(_US_11_RE.match(digits))
    return False


def validate_age(n: Any) -> bool:
    try:
        age = int(n)
    except (TypeError, ValueError):
        return False
    if isinstance(n, float) and n != age:
        return False
    return MIN_AGE <= age <= MAX_AGE


def validate_name(s: Any) -> bool:
    return isinstance(s, str) and len(s.strip()) >= 2


def validate_email_or_phone(email: Optional[str], phone: Optional[str]) -> Tuple[bool, Optional[str]]:
    has_email = bool(email and email.strip())
    has_phone = bool(phone and phone.strip())

    if not has_email and not has_phone:
        return False, "Either email or phone number is required"
    if has_email and not validate_email(email):
        return False, "Please enter a valid email address"
    if has_phone and not validate_us_phone(phone):
        return False, "Please enter a valid US phone number"
    return True, None


__all__ = [
    "MIN_AGE",
    "MAX_AGE",
    "validate_email",
    "validate_phone",
    "validate_us_phone",
    "validate_age",
    "validate_name",
    "validate_email_or_phone",
]
