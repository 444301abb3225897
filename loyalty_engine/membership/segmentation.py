"""Customer segmentation for marketing and analytics.

Segments are checked in priority order: VIP spend first, then brand new
customers, then recency of the last order.
"""

from datetime import date, datetime
from typing import Dict, Optional, Union

from .. import SEGMENT_RULES
from ..core.models import CustomerSegment, to_decimal


def days_since(moment: Optional[Union[datetime, date]], now: Optional[datetime] = None,
               missing_days: int = SEGMENT_RULES['missing_order_days']) -> int:
    """Whole days elapsed since a moment, or missing_days when there is none"""
    if moment is None:
        return missing_days

    now = now or datetime.now()
    if not isinstance(moment, datetime):
        moment = datetime.combine(moment, datetime.min.time())
    if moment.tzinfo is not None and now.tzinfo is None:
        now = now.replace(tzinfo=moment.tzinfo)
    elif moment.tzinfo is None and now.tzinfo is not None:
        moment = moment.replace(tzinfo=now.tzinfo)

    # floor of elapsed days, same as timedelta.days
    return (now - moment).days


def calculate_customer_segment(total_orders: int,
                               lifetime_value,
                               last_order_date: Optional[Union[datetime, date]],
                               now: Optional[datetime] = None,
                               rules: Optional[Dict] = None) -> CustomerSegment:
    rules = rules or SEGMENT_RULES
    value = to_decimal(lifetime_value, "lifetime_value")

    if value >= to_decimal(rules['vip_lifetime_value']):
        return CustomerSegment.VIP
    if total_orders == 0:
        return CustomerSegment.NEW

    elapsed = days_since(last_order_date, now, rules['missing_order_days'])
    if elapsed > rules['dormant_after_days']:
        return CustomerSegment.DORMANT
    return CustomerSegment.REGULAR
