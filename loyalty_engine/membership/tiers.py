"""Membership tier ladder and member discounts.

Tiers are derived from lifetime spend only:

    GREEN    : spend < 500
    SILVER   : 500 <= spend < 1500
    GOLD     : 1500 <= spend < 5000
    PLATINUM : spend >= 5000
"""

from decimal import Decimal
from typing import Dict, Optional, Union

from .. import MEMBERSHIP_TIERS, LOYALTY_PROGRAM
from ..core.models import CENTS, MembershipTier, TierInfo, to_decimal

TierLike = Union[MembershipTier, str]

# Highest threshold first so ties resolve to the higher tier
_TIER_LADDER = sorted(
    ((MembershipTier[name], Decimal(str(config['threshold'])))
     for name, config in MEMBERSHIP_TIERS.items()),
    key=lambda item: item[1],
    reverse=True
)


def calculate_tier(lifetime_value) -> MembershipTier:
    """Map lifetime spend to a membership tier"""
    value = to_decimal(lifetime_value, "lifetime_value")
    if value < 0:
        raise ValueError(f"Lifetime value cannot be negative, got {value}")

    for tier, threshold in _TIER_LADDER:
        if value >= threshold:
            return tier
    return MembershipTier.GREEN


def discount_rate(tier: TierLike) -> Decimal:
    tier = MembershipTier.parse(tier)
    return Decimal(str(MEMBERSHIP_TIERS[tier.value]['discount']))


def apply_member_discount(price, tier: TierLike) -> Decimal:
    """Price after the member discount for the given tier.

    Unknown tiers raise ValueError instead of falling back to no discount.
    """
    amount = to_decimal(price, "price")
    if amount < 0:
        raise ValueError(f"Price cannot be negative, got {amount}")
    return amount * (1 - discount_rate(tier))


def calculate_discount(price, tier: TierLike) -> Decimal:
    """Discount amount a member of the given tier saves on a price"""
    amount = to_decimal(price, "price")
    if amount < 0:
        raise ValueError(f"Price cannot be negative, got {amount}")
    return amount * discount_rate(tier)


def get_tier_info(tier: TierLike) -> TierInfo:
    tier = MembershipTier.parse(tier)
    config = MEMBERSHIP_TIERS[tier.value]
    return TierInfo(
        tier=tier,
        name=config['name'],
        threshold=Decimal(str(config['threshold'])),
        discount=Decimal(str(config['discount'])),
        benefits=list(config['benefits'])
    )


def next_tier(tier: TierLike) -> Optional[MembershipTier]:
    """Tier above the given one, None for the top tier"""
    order = list(MembershipTier)
    index = order.index(MembershipTier.parse(tier))
    return order[index + 1] if index + 1 < len(order) else None


def tier_progress(lifetime_value) -> Dict:
    """Progress of a lifetime spend towards the next tier"""
    value = to_decimal(lifetime_value, "lifetime_value")
    current = calculate_tier(value)
    upcoming = next_tier(current)

    if upcoming is None:
        return {
            'current_tier': current,
            'next_tier': None,
            'amount_to_next_tier': Decimal('0'),
            'progress_pct': 100.0
        }

    floor = get_tier_info(current).threshold
    ceiling = get_tier_info(upcoming).threshold
    progress = (value - floor) / (ceiling - floor) * 100

    return {
        'current_tier': current,
        'next_tier': upcoming,
        'amount_to_next_tier': (ceiling - value).quantize(CENTS),
        'progress_pct': round(float(progress), 1)
    }


def tier_upgrade_bonus(tier: TierLike, bonus_table: Optional[Dict[str, int]] = None) -> int:
    """Bonus points awarded on reaching a tier"""
    table = bonus_table or LOYALTY_PROGRAM['tier_upgrade_bonus']
    return int(table.get(MembershipTier.parse(tier).value, 0))
