"""Tests for the state restriction and age verification gates"""

from datetime import date
from decimal import Decimal

import pytest

from loyalty_engine.compliance import (
    STATE_RESTRICTIONS, AgeVerifier, calculate_age, can_ship_to_state,
    check_thca_shipping, get_allowed_states, get_restricted_states,
    get_state_age_requirement, get_state_restriction, get_state_tax_rate,
    is_product_allowed_in_state
)


def test_table_covers_fifty_states():
    assert len(STATE_RESTRICTIONS) == 50
    assert len(get_restricted_states()) + len(get_allowed_states()) == 50


def test_lookup_is_case_insensitive():
    assert get_state_restriction('ca').name == 'California'
    assert get_state_restriction(' Tx ').is_restricted
    assert get_state_restriction('ZZ') is None


def test_restricted_state_only_allows_hemp_and_cbd():
    assert is_product_allowed_in_state('TX', 'CBD')
    assert not is_product_allowed_in_state('TX', 'delta9')
    assert is_product_allowed_in_state('CO', 'delta9')
    assert not is_product_allowed_in_state('ZZ', 'hemp')


def test_shipping_flags():
    assert can_ship_to_state('FL', 'hemp')
    assert not can_ship_to_state('FL', 'delta8')
    assert can_ship_to_state('NY', 'delta8')
    assert not can_ship_to_state('ZZ', 'hemp')


def test_tax_and_age_defaults():
    assert get_state_tax_rate('CA') == Decimal('0.0725')
    assert get_state_tax_rate('ZZ') == Decimal('0')
    assert get_state_age_requirement('MA') == 21
    assert get_state_age_requirement(None) == 21


@pytest.mark.parametrize("state", ['TX', 'tn', 'WY'])
def test_thca_blocked_states(state):
    check = check_thca_shipping(state)
    assert check.is_restricted
    assert "due to state regulations" in check.message


def test_thca_allowed_and_unknown_states():
    assert not check_thca_shipping('CA').is_restricted
    unknown = check_thca_shipping('')
    assert unknown.state == 'UNKNOWN'
    assert not unknown.is_restricted


def test_calculate_age_before_and_after_birthday():
    assert calculate_age(date(2005, 10, 17), today=date(2026, 10, 17)) == 21
    assert calculate_age(date(2005, 10, 18), today=date(2026, 10, 17)) == 20


def test_calculate_age_rejects_future_birth_date():
    with pytest.raises(ValueError):
        calculate_age(date(2030, 1, 1), today=date(2026, 10, 17))


def test_age_verifier():
    verifier = AgeVerifier()
    today = date(2026, 10, 17)

    adult = verifier.verify(date(1990, 1, 1), 'CA', today=today)
    assert adult.is_verified
    assert adult.age == 36

    minor = verifier.verify(date(2006, 1, 1), 'CA', today=today)
    assert not minor.is_verified
    assert minor.required_age == 21
    assert "21 years or older" in minor.reason

    assert not verifier.verify(None).is_verified
    assert not verifier.verify(date(2030, 1, 1), today=today).is_verified
