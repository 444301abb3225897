from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, List
from enum import Enum

CENTS = Decimal('0.01')


def to_decimal(value, field_name: str = "amount") -> Decimal:
    """Convert a money amount to Decimal, going through str() for floats"""
    if isinstance(value, bool):
        raise ValueError(f"{field_name} must be numeric, got {value!r}")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float, str)):
        try:
            result = Decimal(str(value))
        except ArithmeticError:
            raise ValueError(f"{field_name} must be numeric, got {value!r}")
    else:
        raise ValueError(f"{field_name} must be numeric, got {value!r}")
    if not result.is_finite():
        raise ValueError(f"{field_name} must be finite, got {value!r}")
    return result


class MembershipTier(Enum):
    GREEN = "GREEN"
    SILVER = "SILVER"
    GOLD = "GOLD"
    PLATINUM = "PLATINUM"

    @classmethod
    def parse(cls, value) -> "MembershipTier":
        """Resolve a tier from an enum member or its name (case-insensitive)"""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls[value.strip().upper()]
            except KeyError:
                pass
        raise ValueError(f"Unknown membership tier: {value!r}")


class CustomerSegment(Enum):
    NEW = "New"
    REGULAR = "Regular"
    VIP = "VIP"
    DORMANT = "Dormant"


class TransactionType(Enum):
    EARNED = "EARNED"
    REDEEMED = "REDEEMED"
    BONUS = "BONUS"


@dataclass(frozen=True)
class TierInfo:
    """Display details for a membership tier"""
    tier: MembershipTier
    name: str
    threshold: Decimal
    discount: Decimal
    benefits: List[str]


@dataclass
class CustomerProfile:
    """Loyalty aggregates for a customer. Tier and segment are derived views."""
    lifetime_value: Decimal = Decimal('0')
    total_orders: int = 0
    average_order_value: Decimal = Decimal('0')
    membership_tier: MembershipTier = MembershipTier.GREEN
    segment: CustomerSegment = CustomerSegment.NEW
    loyalty_points: int = 0
    last_order_date: Optional[datetime] = None
    total_referrals: int = 0

    def __post_init__(self):
        if self.lifetime_value < 0:
            raise ValueError(f"Lifetime value cannot be negative, got {self.lifetime_value}")
        if self.total_orders < 0:
            raise ValueError(f"Total orders cannot be negative, got {self.total_orders}")
        if self.loyalty_points < 0:
            raise ValueError(f"Loyalty points cannot be negative, got {self.loyalty_points}")

    def to_dict(self) -> dict:
        return {
            'lifetime_value': str(self.lifetime_value),
            'total_orders': self.total_orders,
            'average_order_value': str(self.average_order_value),
            'membership_tier': self.membership_tier.value,
            'segment': self.segment.value,
            'loyalty_points': self.loyalty_points,
            'last_order_date': self.last_order_date.isoformat() if self.last_order_date else None,
            'total_referrals': self.total_referrals
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CustomerProfile":
        last_order = data.get('last_order_date')
        return cls(
            lifetime_value=Decimal(str(data.get('lifetime_value', '0'))),
            total_orders=int(data.get('total_orders', 0)),
            average_order_value=Decimal(str(data.get('average_order_value', '0'))),
            membership_tier=MembershipTier(data.get('membership_tier', 'GREEN')),
            segment=CustomerSegment(data.get('segment', 'New')),
            loyalty_points=int(data.get('loyalty_points', 0)),
            last_order_date=datetime.fromisoformat(last_order) if last_order else None,
            total_referrals=int(data.get('total_referrals', 0))
        )


@dataclass
class Customer:
    """Registered storefront customer"""
    customer_id: str
    first_name: str
    last_name: str
    email: str
    state: Optional[str] = None
    date_of_birth: Optional[date] = None
    referral_code: Optional[str] = None
    profile: Optional[CustomerProfile] = None
    created_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict:
        return {
            'customer_id': self.customer_id,
            'first_name': self.first_name,
            'last_name': self.last_name,
            'email': self.email,
            'state': self.state,
            'date_of_birth': self.date_of_birth.isoformat() if self.date_of_birth else None,
            'referral_code': self.referral_code,
            'profile': self.profile.to_dict() if self.profile else None,
            'created_at': self.created_at.isoformat()
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Customer":
        dob = data.get('date_of_birth')
        profile = data.get('profile')
        return cls(
            customer_id=data['customer_id'],
            first_name=data.get('first_name', ''),
            last_name=data.get('last_name', ''),
            email=data.get('email', ''),
            state=data.get('state'),
            date_of_birth=date.fromisoformat(dob) if dob else None,
            referral_code=data.get('referral_code'),
            profile=CustomerProfile.from_dict(profile) if profile else None,
            created_at=datetime.fromisoformat(data['created_at']) if data.get('created_at') else datetime.now()
        )


@dataclass(frozen=True)
class LoyaltyTransaction:
    """Immutable loyalty ledger entry"""
    customer_id: str
    type: TransactionType
    points: int
    description: str
    created_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict:
        return {
            'customer_id': self.customer_id,
            'type': self.type.value,
            'points': self.points,
            'description': self.description,
            'created_at': self.created_at.isoformat()
        }

    @classmethod
    def from_dict(cls, data: dict) -> "LoyaltyTransaction":
        return cls(
            customer_id=data['customer_id'],
            type=TransactionType(data['type']),
            points=int(data['points']),
            description=data.get('description', ''),
            created_at=datetime.fromisoformat(data['created_at'])
        )
