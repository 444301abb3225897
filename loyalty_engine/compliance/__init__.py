"""Age and state compliance gates."""

from .state_restrictions import (
    StateRestriction, ShippingCheck, STATE_RESTRICTIONS,
    get_state_restriction, is_product_allowed_in_state, can_ship_to_state,
    get_state_tax_rate, get_state_age_requirement, get_restricted_states,
    get_allowed_states, check_thca_shipping
)
from .age_verification import AgeVerifier, AgeVerificationResult, calculate_age

__all__ = [
    'StateRestriction',
    'ShippingCheck',
    'STATE_RESTRICTIONS',
    'get_state_restriction',
    'is_product_allowed_in_state',
    'can_ship_to_state',
    'get_state_tax_rate',
    'get_state_age_requirement',
    'get_restricted_states',
    'get_allowed_states',
    'check_thca_shipping',
    'AgeVerifier',
    'AgeVerificationResult',
    'calculate_age'
]
