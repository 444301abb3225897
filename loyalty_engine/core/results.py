"""Typed outcomes returned by membership service operations."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .models import CustomerProfile, LoyaltyTransaction, MembershipTier


class ErrorKind(Enum):
    NOT_FOUND = "not_found"
    INVALID_INPUT = "invalid_input"


@dataclass
class ProfileUpdate:
    """Profile state after a completed order was applied"""
    customer_id: str
    profile: CustomerProfile
    previous_tier: MembershipTier
    points_earned: int
    transactions: List[LoyaltyTransaction] = field(default_factory=list)

    @property
    def tier_changed(self) -> bool:
        return self.profile.membership_tier != self.previous_tier


@dataclass
class OperationResult:
    """Success flag plus payload, or the kind of failure"""
    success: bool
    data: Any = None
    error: Optional[ErrorKind] = None
    message: str = ""

    @classmethod
    def ok(cls, data: Any = None, message: str = "") -> "OperationResult":
        return cls(success=True, data=data, message=message)

    @classmethod
    def not_found(cls, message: str) -> "OperationResult":
        return cls(success=False, error=ErrorKind.NOT_FOUND, message=message)

    @classmethod
    def invalid_input(cls, message: str) -> "OperationResult":
        return cls(success=False, error=ErrorKind.INVALID_INPUT, message=message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'success': self.success,
            'error': self.error.value if self.error else None,
            'message': self.message
        }
