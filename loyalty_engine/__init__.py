"""Cannabis Storefront Loyalty Engine - Core Module"""

from typing import Dict, Any

__version__ = "1.0.0"

# Membership tiers, ordered lowest to highest
MEMBERSHIP_TIERS = {
    'GREEN': {
        'name': 'Green Member',
        'threshold': 0,
        'discount': 0.05,
        'benefits': [
            '5% discount on all products',
            'Free shipping on orders over $100',
            'Birthday discount',
            'Monthly newsletter'
        ]
    },
    'SILVER': {
        'name': 'Silver Member',
        'threshold': 500,
        'discount': 0.10,
        'benefits': [
            '10% discount on all products',
            'Free shipping on orders over $75',
            'Early access to sales',
            'Monthly strain recommendations'
        ]
    },
    'GOLD': {
        'name': 'Gold Member',
        'threshold': 1500,
        'discount': 0.15,
        'benefits': [
            '15% discount on all products',
            'Free shipping on all orders',
            'Priority customer support',
            'Exclusive strain previews'
        ]
    },
    'PLATINUM': {
        'name': 'Platinum Member',
        'threshold': 5000,
        'discount': 0.20,
        'benefits': [
            '20% discount on all products',
            'Free express shipping',
            'Personal budtender',
            'Exclusive events invitations'
        ]
    }
}

# Thresholds must ascend with the tier order
_thresholds = [tier['threshold'] for tier in MEMBERSHIP_TIERS.values()]
assert _thresholds == sorted(_thresholds), "Tier thresholds must be ascending"

# Customer segmentation
SEGMENT_RULES = {
    'vip_lifetime_value': 2000,  # VIP overrides order count and recency
    'dormant_after_days': 90,
    'missing_order_days': 999   # no last order date on record
}

# Points accrual and bonuses
LOYALTY_PROGRAM = {
    'points_per_dollar': 1,
    'platinum_double_points': False,
    'award_tier_upgrade_bonus': False,
    'max_order_total': None,  # no upper bound by default
    'tier_upgrade_bonus': {
        'GREEN': 0,
        'SILVER': 250,
        'GOLD': 500,
        'PLATINUM': 1000
    }
}

REFERRAL_BONUSES: Dict[str, Any] = {
    'referrer_points': 100,
    'new_customer_points': 50
}
