from typing import Any, Dict, List, Optional, Tuple
from datetime import date, datetime
import logging
import re

from ..core.models import MembershipTier, to_decimal

logger = logging.getLogger(__name__)


class MembershipValidator:
    """Input validation for membership operations"""

    # no upper bound unless max_order_total is configured
    ORDER_TOTAL_LIMITS = {
        'min': 0.0,
        'max': None
    }

    EMAIL_PATTERN = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')

    VALID_TIERS = [tier.value for tier in MembershipTier]

    def __init__(self, max_order_total=None):
        self.order_total_limits = dict(self.ORDER_TOTAL_LIMITS)
        if max_order_total is not None:
            self.order_total_limits['max'] = max_order_total
        self.validation_errors: List[str] = []
        self.validation_stats = {
            'total_validated': 0,
            'passed': 0,
            'failed': 0
        }

    def _record(self, is_valid: bool, error: Optional[str]) -> Tuple[bool, Optional[str]]:
        self.validation_stats['total_validated'] += 1
        if is_valid:
            self.validation_stats['passed'] += 1
        else:
            self.validation_stats['failed'] += 1
            self.validation_errors.append(error)
        return is_valid, error

    def validate_order_total(self, order_total: Any) -> Tuple[bool, Optional[str]]:
        """Order totals must be numeric and within limits"""
        if order_total is None:
            return self._record(False, "Order total is missing")

        try:
            total = to_decimal(order_total, "order_total")
        except ValueError as e:
            return self._record(False, str(e))

        limits = self.order_total_limits
        if total < to_decimal(limits['min']):
            return self._record(False, f"Order total ${total} below minimum ${limits['min']}")

        if limits['max'] is not None and total > to_decimal(limits['max']):
            return self._record(False, f"Order total ${total} above maximum ${limits['max']}")

        return self._record(True, None)

    def validate_tier(self, tier: Any) -> Tuple[bool, Optional[str]]:
        """Tier must be one of the closed set of membership tiers"""
        try:
            MembershipTier.parse(tier)
        except ValueError:
            return self._record(False, f"Invalid tier {tier!r}, expected one of {self.VALID_TIERS}")
        return self._record(True, None)

    def validate_registration(self, customer_id: str, first_name: str, last_name: str,
                              email: str, date_of_birth: Optional[date] = None,
                              today: Optional[date] = None) -> Tuple[bool, List[str]]:
        """Validate registration fields, returning every problem found"""
        errors = []

        if not customer_id or not str(customer_id).strip():
            errors.append("Customer id is required")
        if not first_name or not first_name.strip():
            errors.append("First name is required")
        if not last_name or not last_name.strip():
            errors.append("Last name is required")
        if not email or not self.EMAIL_PATTERN.match(email):
            errors.append(f"Invalid email address: {email!r}")
        today = today or date.today()
        if isinstance(today, datetime):
            today = today.date()
        if isinstance(date_of_birth, datetime):
            date_of_birth = date_of_birth.date()
        if date_of_birth is not None and date_of_birth > today:
            errors.append("Date of birth cannot be in the future")

        self.validation_stats['total_validated'] += 1
        if errors:
            self.validation_stats['failed'] += 1
            self.validation_errors.extend(errors)
        else:
            self.validation_stats['passed'] += 1

        return len(errors) == 0, errors

    def get_validation_summary(self) -> Dict[str, Any]:
        total = self.validation_stats['total_validated']
        return {
            **self.validation_stats,
            'pass_rate': (self.validation_stats['passed'] / total * 100) if total > 0 else 0,
            'recent_errors': self.validation_errors[-10:]
        }
