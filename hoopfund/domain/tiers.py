# hoopfund/domain/tiers.py
"""Sponsor tier classification. Tier is always derived, never stored."""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Callable, Dict, Final, Iterable, List, Tuple, TypeVar

from .types import SponsorTier

T = TypeVar("T")

# Highest first; first match wins.
TIER_THRESHOLDS: Final[Tuple[Tuple[Decimal, SponsorTier], ...]] = (
    (Decimal("250"), SponsorTier.GOLD),
    (Decimal("100"), SponsorTier.SILVER),
    (Decimal("50"), SponsorTier.BRONZE),
)

TIER_ORDER: Final[Tuple[SponsorTier, ...]] = (
    SponsorTier.GOLD,
    SponsorTier.SILVER,
    SponsorTier.BRONZE,
    SponsorTier.SUPPORTER,
)

TIER_BENEFITS: Final[Dict[SponsorTier, str]] = {
    SponsorTier.GOLD: "Logo on website + social media + tournament materials",
    SponsorTier.SILVER: "Logo on website + social media",
    SponsorTier.BRONZE: "Logo on website",
    SponsorTier.SUPPORTER: "Name on supporters list",
}


def classify_sponsor_tier(donation_amount: Any) -> SponsorTier:
    amount = Decimal(str(donation_amount))
    for threshold, tier in TIER_THRESHOLDS:
        if amount >= threshold:
            return tier
    return SponsorTier.SUPPORTER


def tier_sort_key(donation_amount: Any) -> Tuple[int, Decimal]:
    """Sort key: tier rank first, then larger donations first."""
    amount = Decimal(str(donation_amount))
    return TIER_ORDER.index(classify_sponsor_tier(amount)), -amount


def group_by_tier(items: Iterable[T], amount_of: Callable[[T], Any]) -> List[Tuple[SponsorTier, List[T]]]:
    """Group items by derived tier, highest tier first, omitting empty tiers."""
    buckets: Dict[SponsorTier, List[T]] = {tier: [] for tier in TIER_ORDER}
    for item in sorted(items, key=lambda i: tier_sort_key(amount_of(i))):
        buckets[classify_sponsor_tier(amount_of(item))].append(item)
    return [(tier, buckets[tier]) for tier in TIER_ORDER if buckets[tier]]


__all__ = [
    "TIER_THRESHOLDS",
    "TIER_ORDER",
    "TIER_BENEFITS",
    "classify_sponsor_tier",
    "tier_sort_key",
    "group_by_tier",
]
