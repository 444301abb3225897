"""Per-state shipping and product restrictions for hemp-derived cannabis products."""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Optional
import logging

logger = logging.getLogger(__name__)

PRODUCT_TYPES = ('hemp', 'cbd', 'delta8', 'delta9')
RESTRICTED_PRODUCTS = ('hemp', 'cbd')
DEFAULT_AGE_REQUIREMENT = 21

# THCA flower cannot ship to these states at all
THCA_BLOCKED_STATES = ('ID', 'KS', 'NE', 'NC', 'SC', 'TN', 'TX', 'WY')
DEFAULT_THCA_MESSAGE = "We cannot ship THCA products to your state due to local regulations."


@dataclass(frozen=True)
class StateRestriction:
    """Regulatory profile of a single state"""
    code: str
    name: str
    is_restricted: bool
    tax_rate: Decimal
    age_requirement: int = DEFAULT_AGE_REQUIREMENT
    allowed_products: tuple = field(default=PRODUCT_TYPES)

    @property
    def shipping_restrictions(self) -> Dict[str, bool]:
        return {product: product in self.allowed_products for product in PRODUCT_TYPES}


@dataclass(frozen=True)
class ShippingCheck:
    state: str
    is_restricted: bool
    message: str = ""


# code: (name, restricted, sales tax rate)
_STATE_TABLE = {
    'AL': ('Alabama', True, '0.04'),
    'AK': ('Alaska', False, '0.00'),
    'AZ': ('Arizona', False, '0.056'),
    'AR': ('Arkansas', True, '0.065'),
    'CA': ('California', False, '0.0725'),
    'CO': ('Colorado', False, '0.029'),
    'CT': ('Connecticut', False, '0.0635'),
    'DE': ('Delaware', True, '0.00'),
    'FL': ('Florida', True, '0.06'),
    'GA': ('Georgia', True, '0.04'),
    'HI': ('Hawaii', True, '0.04'),
    'ID': ('Idaho', True, '0.06'),
    'IL': ('Illinois', False, '0.0625'),
    'IN': ('Indiana', True, '0.07'),
    'IA': ('Iowa', True, '0.06'),
    'KS': ('Kansas', True, '0.065'),
    'KY': ('Kentucky', True, '0.06'),
    'LA': ('Louisiana', True, '0.0445'),
    'ME': ('Maine', False, '0.055'),
    'MD': ('Maryland', False, '0.06'),
    'MA': ('Massachusetts', False, '0.0625'),
    'MI': ('Michigan', False, '0.06'),
    'MN': ('Minnesota', False, '0.06875'),
    'MS': ('Mississippi', True, '0.07'),
    'MO': ('Missouri', False, '0.04225'),
    'MT': ('Montana', False, '0.00'),
    'NE': ('Nebraska', True, '0.055'),
    'NV': ('Nevada', False, '0.0685'),
    'NH': ('New Hampshire', True, '0.00'),
    'NJ': ('New Jersey', False, '0.06625'),
    'NM': ('New Mexico', False, '0.05125'),
    'NY': ('New York', False, '0.08'),
    'NC': ('North Carolina', True, '0.0475'),
    'ND': ('North Dakota', True, '0.05'),
    'OH': ('Ohio', False, '0.0575'),
    'OK': ('Oklahoma', True, '0.045'),
    'OR': ('Oregon', False, '0.00'),
    'PA': ('Pennsylvania', True, '0.06'),
    'RI': ('Rhode Island', False, '0.07'),
    'SC': ('South Carolina', True, '0.06'),
    'SD': ('South Dakota', True, '0.045'),
    'TN': ('Tennessee', True, '0.07'),
    'TX': ('Texas', True, '0.0625'),
    'UT': ('Utah', True, '0.0485'),
    'VT': ('Vermont', False, '0.06'),
    'VA': ('Virginia', False, '0.053'),
    'WA': ('Washington', False, '0.065'),
    'WV': ('West Virginia', True, '0.06'),
    'WI': ('Wisconsin', True, '0.05'),
    'WY': ('Wyoming', True, '0.04'),
}

STATE_RESTRICTIONS: Dict[str, StateRestriction] = {
    code: StateRestriction(
        code=code,
        name=name,
        is_restricted=restricted,
        tax_rate=Decimal(rate),
        allowed_products=RESTRICTED_PRODUCTS if restricted else PRODUCT_TYPES
    )
    for code, (name, restricted, rate) in _STATE_TABLE.items()
}


def _normalize(state_code: Optional[str]) -> str:
    return (state_code or '').strip().upper()


def get_state_restriction(state_code: Optional[str]) -> Optional[StateRestriction]:
    return STATE_RESTRICTIONS.get(_normalize(state_code))


def is_product_allowed_in_state(state_code: str, product_category: str) -> bool:
    restriction = get_state_restriction(state_code)
    if restriction is None:
        return False
    return product_category.strip().lower() in restriction.allowed_products


def can_ship_to_state(state_code: str, product_type: str) -> bool:
    """Unknown states and unknown product types cannot be shipped to"""
    restriction = get_state_restriction(state_code)
    if restriction is None:
        return False
    return restriction.shipping_restrictions.get(product_type.strip().lower(), False)


def get_state_tax_rate(state_code: str) -> Decimal:
    restriction = get_state_restriction(state_code)
    return restriction.tax_rate if restriction else Decimal('0')


def get_state_age_requirement(state_code: Optional[str]) -> int:
    restriction = get_state_restriction(state_code)
    return restriction.age_requirement if restriction else DEFAULT_AGE_REQUIREMENT


def get_restricted_states() -> List[StateRestriction]:
    return [state for state in STATE_RESTRICTIONS.values() if state.is_restricted]


def get_allowed_states() -> List[StateRestriction]:
    return [state for state in STATE_RESTRICTIONS.values() if not state.is_restricted]


def check_thca_shipping(state_code: Optional[str]) -> ShippingCheck:
    """Shipping gate for THCA products; a blank state is not blocked"""
    code = _normalize(state_code)
    if not code:
        return ShippingCheck(state='UNKNOWN', is_restricted=False)

    if code in THCA_BLOCKED_STATES:
        restriction = STATE_RESTRICTIONS.get(code)
        if restriction:
            message = f"We cannot ship THCA products to {restriction.name} due to state regulations."
        else:
            message = DEFAULT_THCA_MESSAGE
        logger.info(f"THCA shipping blocked for state {code}")
        return ShippingCheck(state=code, is_restricted=True, message=message)

    return ShippingCheck(state=code, is_restricted=False)
