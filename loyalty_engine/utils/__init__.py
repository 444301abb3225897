"""Loyalty Engine Utilities"""

from .validation import MembershipValidator
from .audit_logger import LoyaltyAuditLogger
from .reporting import MembershipReport

__all__ = [
    'MembershipValidator',
    'LoyaltyAuditLogger',
    'MembershipReport'
]
