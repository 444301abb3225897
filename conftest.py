"""Shared pytest fixtures for the loyalty engine tests."""

from datetime import datetime, date

import pytest

from loyalty_engine.core.models import Customer, CustomerProfile
from loyalty_engine.membership.service import MembershipService
from loyalty_engine.storage.repository import InMemoryCustomerRepository

FIXED_NOW = datetime(2026, 10, 17, 12, 0, 0)


@pytest.fixture
def now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def repository() -> InMemoryCustomerRepository:
    return InMemoryCustomerRepository()


@pytest.fixture
def service(repository) -> MembershipService:
    return MembershipService(repository, clock=lambda: FIXED_NOW)


@pytest.fixture
def make_customer():
    """Factory for customers with a zeroed profile"""
    def _make(customer_id: str = "CUST001", **profile_fields) -> Customer:
        return Customer(
            customer_id=customer_id,
            first_name="Mary",
            last_name="Jane",
            email=f"{customer_id.lower()}@example.com",
            state="CA",
            date_of_birth=date(1990, 4, 20),
            profile=CustomerProfile(**profile_fields),
            created_at=FIXED_NOW
        )
    return _make


@pytest.fixture
def registered(repository, make_customer) -> Customer:
    customer = make_customer()
    repository.create_customer(customer)
    return customer
