"""Membership tiers, loyalty points and customer segmentation."""

from .tiers import (
    calculate_tier, apply_member_discount, calculate_discount,
    get_tier_info, tier_progress, tier_upgrade_bonus
)
from .points import calculate_points, calculate_points_earned
from .segmentation import calculate_customer_segment, days_since
from .service import MembershipService, generate_referral_code

__all__ = [
    'calculate_tier',
    'apply_member_discount',
    'calculate_discount',
    'get_tier_info',
    'tier_progress',
    'tier_upgrade_bonus',
    'calculate_points',
    'calculate_points_earned',
    'calculate_customer_segment',
    'days_since',
    'MembershipService',
    'generate_referral_code'
]
