"""Loyalty point accrual"""

from decimal import ROUND_FLOOR

from .. import LOYALTY_PROGRAM
from ..core.models import MembershipTier, to_decimal


def calculate_points(order_total, points_per_dollar: int = None) -> int:
    """One point per whole currency unit of the order total"""
    total = to_decimal(order_total, "order_total")
    if total < 0:
        raise ValueError(f"Order total cannot be negative, got {total}")

    rate = LOYALTY_PROGRAM['points_per_dollar'] if points_per_dollar is None else points_per_dollar
    return int(total.to_integral_value(rounding=ROUND_FLOOR)) * rate


def calculate_points_earned(order_total, tier, double_platinum: bool = False,
                            points_per_dollar: int = None) -> int:
    """Points for an order, doubled for Platinum members when enabled"""
    points = calculate_points(order_total, points_per_dollar)
    if double_platinum and MembershipTier.parse(tier) == MembershipTier.PLATINUM:
        return points * 2
    return points
