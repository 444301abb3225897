"""Tests for the membership tier, points and segmentation rules"""

from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from loyalty_engine.core.models import CustomerSegment, MembershipTier
from loyalty_engine.membership import (
    apply_member_discount, calculate_customer_segment, calculate_discount,
    calculate_points, calculate_points_earned, calculate_tier, days_since,
    get_tier_info, tier_progress, tier_upgrade_bonus
)

NOW = datetime(2026, 10, 17, 12, 0, 0)


@pytest.mark.parametrize("lifetime_value, expected", [
    (0, MembershipTier.GREEN),
    (499.99, MembershipTier.GREEN),
    (500, MembershipTier.SILVER),
    (1499.99, MembershipTier.SILVER),
    (1500, MembershipTier.GOLD),
    (4999.99, MembershipTier.GOLD),
    (5000, MembershipTier.PLATINUM),
    (250000, MembershipTier.PLATINUM),
])
def test_tier_ladder(lifetime_value, expected):
    assert calculate_tier(lifetime_value) == expected


def test_tier_is_monotonic_in_lifetime_value():
    order = list(MembershipTier)
    values = [Decimal(v) / 4 for v in range(0, 24000, 7)]
    ranks = [order.index(calculate_tier(v)) for v in values]
    assert ranks == sorted(ranks)


def test_tier_rejects_negative_lifetime_value():
    with pytest.raises(ValueError):
        calculate_tier(-1)


def test_gold_discount():
    assert apply_member_discount(100, 'GOLD') == 85
    assert apply_member_discount(Decimal('100'), MembershipTier.GOLD) == Decimal('85')


@pytest.mark.parametrize("tier, expected", [
    ('GREEN', Decimal('95')),
    ('SILVER', Decimal('90')),
    ('PLATINUM', Decimal('80')),
    ('platinum', Decimal('80')),
])
def test_discount_rates(tier, expected):
    assert apply_member_discount(100, tier) == expected


def test_unknown_tier_is_rejected():
    with pytest.raises(ValueError, match="Unknown membership tier"):
        apply_member_discount(100, 'DIAMOND')


def test_calculate_discount_amount():
    assert calculate_discount(200, 'SILVER') == Decimal('20')


def test_points_floor():
    assert calculate_points(29.99) == 29
    assert calculate_points(30) == 30
    assert calculate_points(0) == 0


def test_points_reject_negative_total():
    with pytest.raises(ValueError):
        calculate_points(-5)


def test_platinum_double_points_only_when_enabled():
    assert calculate_points_earned(100, 'PLATINUM') == 100
    assert calculate_points_earned(100, 'PLATINUM', double_platinum=True) == 200
    assert calculate_points_earned(100, 'GOLD', double_platinum=True) == 100


def test_segment_new_customer():
    assert calculate_customer_segment(0, 0, None) == CustomerSegment.NEW


def test_segment_vip_dominates_recent_activity():
    assert calculate_customer_segment(5, 2500, NOW, now=NOW) == CustomerSegment.VIP


def test_segment_vip_even_without_orders():
    assert calculate_customer_segment(0, 2000, None) == CustomerSegment.VIP


def test_segment_dormant_after_ninety_days():
    assert calculate_customer_segment(3, 100, NOW - timedelta(days=100), now=NOW) == CustomerSegment.DORMANT


def test_segment_boundary_at_ninety_days_is_regular():
    assert calculate_customer_segment(3, 100, NOW - timedelta(days=90), now=NOW) == CustomerSegment.REGULAR


def test_segment_missing_last_order_is_dormant():
    assert calculate_customer_segment(2, 100, None, now=NOW) == CustomerSegment.DORMANT


def test_days_since_uses_whole_days():
    assert days_since(NOW - timedelta(days=3, hours=23), now=NOW) == 3
    assert days_since(None) == 999


def test_tier_info():
    info = get_tier_info('SILVER')
    assert info.name == 'Silver Member'
    assert info.threshold == Decimal('500')
    assert info.discount == Decimal('0.10')
    assert info.benefits


def test_tier_progress_mid_band():
    progress = tier_progress(1000)
    assert progress['current_tier'] == MembershipTier.SILVER
    assert progress['next_tier'] == MembershipTier.GOLD
    assert progress['amount_to_next_tier'] == Decimal('500.00')
    assert progress['progress_pct'] == 50.0


def test_tier_progress_at_top_tier():
    progress = tier_progress(7500)
    assert progress['next_tier'] is None
    assert progress['progress_pct'] == 100.0


def test_tier_upgrade_bonus_table():
    assert tier_upgrade_bonus('GREEN') == 0
    assert tier_upgrade_bonus('SILVER') == 250
    assert tier_upgrade_bonus(MembershipTier.PLATINUM) == 1000
