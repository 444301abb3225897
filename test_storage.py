"""Tests for the customer repositories"""

import json
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from decimal import Decimal

import pytest

from loyalty_engine.core.models import LoyaltyTransaction, MembershipTier, TransactionType
from loyalty_engine.membership.service import MembershipService
from loyalty_engine.storage import InMemoryCustomerRepository, JsonFileCustomerRepository


@pytest.fixture(params=["memory", "json"])
def any_repository(request, tmp_path):
    if request.param == "memory":
        return InMemoryCustomerRepository()
    return JsonFileCustomerRepository(str(tmp_path / "store"))


def test_create_and_fetch(any_repository, make_customer):
    assert any_repository.create_customer(make_customer("A1"))
    assert not any_repository.create_customer(make_customer("A1"))

    customer = any_repository.get_customer_with_profile("A1")
    assert customer.first_name == "Mary"
    assert customer.profile.membership_tier == MembershipTier.GREEN
    assert any_repository.get_customer_with_profile("B2") is None


def test_update_and_increment(any_repository, make_customer):
    any_repository.create_customer(make_customer("A1"))

    assert any_repository.update_customer_profile("A1", {
        'lifetime_value': Decimal('750.50'),
        'membership_tier': MembershipTier.SILVER
    })
    assert any_repository.increment_loyalty_points("A1", 40)
    assert any_repository.increment_loyalty_points("A1", 2)

    profile = any_repository.get_customer_with_profile("A1").profile
    assert profile.lifetime_value == Decimal('750.50')
    assert profile.membership_tier == MembershipTier.SILVER
    assert profile.loyalty_points == 42


def test_missing_customer_operations_report_failure(any_repository):
    assert not any_repository.update_customer_profile("X", {'total_orders': 1})
    assert not any_repository.increment_loyalty_points("X", 5)


def test_unknown_profile_field_is_rejected(any_repository, make_customer):
    any_repository.create_customer(make_customer("A1"))
    with pytest.raises(ValueError, match="Unknown profile fields"):
        any_repository.update_customer_profile("A1", {'membershipTier': 'GOLD'})


def test_ledger_is_per_customer(any_repository):
    created = datetime(2026, 10, 1, 9, 30)
    any_repository.create_loyalty_transaction(
        LoyaltyTransaction("A1", TransactionType.EARNED, 10, "order", created))
    any_repository.create_loyalty_transaction(
        LoyaltyTransaction("B2", TransactionType.BONUS, 50, "welcome", created))

    ledger = any_repository.get_loyalty_transactions("A1")
    assert ledger == [LoyaltyTransaction("A1", TransactionType.EARNED, 10, "order", created)]


def test_in_memory_repository_returns_copies(make_customer):
    repository = InMemoryCustomerRepository()
    repository.create_customer(make_customer("A1"))

    fetched = repository.get_customer_with_profile("A1")
    fetched.profile.loyalty_points = 9999

    assert repository.get_customer_with_profile("A1").profile.loyalty_points == 0


def test_json_repository_persists_across_instances(tmp_path, make_customer, now):
    storage_dir = str(tmp_path / "store")
    first = JsonFileCustomerRepository(storage_dir)
    first.create_customer(make_customer("A1"))
    MembershipService(first, clock=lambda: now).update_customer_profile("A1", 1500)

    second = JsonFileCustomerRepository(storage_dir)
    customer = second.get_customer_with_profile("A1")
    assert customer.profile.membership_tier == MembershipTier.GOLD
    assert customer.profile.loyalty_points == 1500
    assert customer.profile.last_order_date == now
    assert len(second.get_loyalty_transactions("A1")) == 1

    with open(tmp_path / "store" / "customers.json", encoding="utf-8") as f:
        raw = json.load(f)
    assert raw["A1"]["profile"]["lifetime_value"] == "1500"


def test_list_customers(any_repository, make_customer):
    for customer_id in ("A1", "B2", "C3"):
        any_repository.create_customer(make_customer(customer_id))
    assert sorted(c.customer_id for c in any_repository.list_customers()) == ["A1", "B2", "C3"]


def test_concurrent_orders_do_not_lose_updates(any_repository, make_customer, now):
    any_repository.create_customer(make_customer("A1"))
    service = MembershipService(any_repository, clock=lambda: now)

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(lambda _: service.update_customer_profile("A1", 10), range(40)))

    assert all(r.success for r in results)
    profile = any_repository.get_customer_with_profile("A1").profile
    assert profile.total_orders == 40
    assert profile.lifetime_value == Decimal('400')
    assert profile.loyalty_points == 400
    assert len(any_repository.get_loyalty_transactions("A1")) == 40


def test_customer_locks_are_released(any_repository, make_customer, now):
    any_repository.create_customer(make_customer("A1"))
    service = MembershipService(any_repository, clock=lambda: now)

    service.update_customer_profile("A1", 25)
    service.update_customer_profile("GHOST", 25)
    any_repository.update_customer_profile("X", {'total_orders': 1})
    any_repository.increment_loyalty_points("Y", 5)
    with any_repository.transaction("A1"):
        with any_repository.transaction("A1"):
            assert "A1" in any_repository._locks

    assert any_repository._locks == {}


def test_duplicate_email_is_rejected(any_repository, make_customer):
    first = make_customer("A1")
    second = make_customer("B2")
    second.email = "  A1@Example.COM "

    assert any_repository.create_customer(first)
    assert not any_repository.create_customer(second)
    assert any_repository.get_customer_with_profile("B2") is None
