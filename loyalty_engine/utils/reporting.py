from typing import Dict, List, Any, Optional
from datetime import datetime
import numpy as np
import pandas as pd

from ..core.models import Customer, CustomerSegment, MembershipTier
from ..membership.segmentation import calculate_customer_segment
from ..membership.tiers import tier_progress


class MembershipReport:
    """Tier, segment and points reports over a customer base"""

    COLUMNS = [
        'customer_id', 'membership_tier', 'segment', 'lifetime_value',
        'total_orders', 'average_order_value', 'loyalty_points', 'last_order_date'
    ]

    def __init__(self, customers: List[Customer], now: Optional[datetime] = None):
        self.report_timestamp = now or datetime.now()
        self.df = self._build_frame(customers)

    def _build_frame(self, customers: List[Customer]) -> pd.DataFrame:
        rows = []
        for customer in customers:
            profile = customer.profile
            if profile is None:
                continue
            # segment drifts with time, so recompute against the report date
            segment = calculate_customer_segment(
                profile.total_orders, profile.lifetime_value,
                profile.last_order_date, now=self.report_timestamp
            )
            rows.append({
                'customer_id': customer.customer_id,
                'membership_tier': profile.membership_tier.value,
                'segment': segment.value,
                'lifetime_value': float(profile.lifetime_value),
                'total_orders': profile.total_orders,
                'average_order_value': float(profile.average_order_value),
                'loyalty_points': profile.loyalty_points,
                'last_order_date': profile.last_order_date
            })
        return pd.DataFrame(rows, columns=self.COLUMNS)

    def tier_distribution(self) -> Dict[str, int]:
        """Customer count per tier, every tier present"""
        counts = self.df['membership_tier'].value_counts()
        return {tier.value: int(counts.get(tier.value, 0)) for tier in MembershipTier}

    def segment_distribution(self) -> Dict[str, int]:
        counts = self.df['segment'].value_counts()
        return {segment.value: int(counts.get(segment.value, 0)) for segment in CustomerSegment}

    def points_summary(self) -> Dict[str, Any]:
        """Outstanding loyalty point liability"""
        if self.df.empty:
            return {'total_points': 0, 'mean_points': 0.0, 'median_points': 0.0, 'p90_points': 0.0}

        points = self.df['loyalty_points'].to_numpy()
        return {
            'total_points': int(points.sum()),
            'mean_points': round(float(np.mean(points)), 2),
            'median_points': float(np.median(points)),
            'p90_points': float(np.percentile(points, 90))
        }

    def revenue_by_tier(self) -> Dict[str, Dict[str, float]]:
        if self.df.empty:
            return {}

        grouped = self.df.groupby('membership_tier').agg(
            customers=('customer_id', 'count'),
            lifetime_value=('lifetime_value', 'sum'),
            average_order_value=('average_order_value', 'mean')
        )
        return {
            tier: {
                'customers': int(row['customers']),
                'lifetime_value': round(float(row['lifetime_value']), 2),
                'average_order_value': round(float(row['average_order_value']), 2)
            }
            for tier, row in grouped.iterrows()
        }

    def upgrade_candidates(self, limit: int = 10) -> List[Dict[str, Any]]:
        """Customers closest to the next tier by amount remaining"""
        candidates = []
        for _, row in self.df.iterrows():
            progress = tier_progress(row['lifetime_value'])
            if progress['next_tier'] is None:
                continue
            candidates.append({
                'customer_id': row['customer_id'],
                'current_tier': progress['current_tier'].value,
                'next_tier': progress['next_tier'].value,
                'amount_to_next_tier': float(progress['amount_to_next_tier']),
                'progress_pct': progress['progress_pct']
            })

        candidates.sort(key=lambda c: c['amount_to_next_tier'])
        return candidates[:limit]

    def generate_report(self) -> Dict[str, Any]:
        return {
            'generated_at': self.report_timestamp.isoformat(),
            'total_customers': int(len(self.df)),
            'tier_distribution': self.tier_distribution(),
            'segment_distribution': self.segment_distribution(),
            'points_summary': self.points_summary(),
            'revenue_by_tier': self.revenue_by_tier(),
            'upgrade_candidates': self.upgrade_candidates()
        }
