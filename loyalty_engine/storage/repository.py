"""Persistence collaborator for customer profiles and the loyalty ledger."""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import fields, replace
import copy
import logging
import threading
from typing import Dict, Iterator, List, Optional

from ..core.models import Customer, CustomerProfile, LoyaltyTransaction

logger = logging.getLogger(__name__)

PROFILE_FIELDS = {f.name for f in fields(CustomerProfile)}


class _LockEntry:
    """Per-customer lock plus the number of blocks holding or waiting on it"""

    def __init__(self):
        self.lock = threading.RLock()
        self.users = 0


class CustomerRepository(ABC):
    """Base class for customer stores.

    Implementations must make `transaction` serialize all work for one
    customer and make `increment_loyalty_points` atomic on its own, so that
    read-modify-write sequences run under the transaction never lose updates.
    `create_customer` must check id and email uniqueness atomically.
    """

    def __init__(self):
        # entries live only while some block is using them
        self._locks: Dict[str, _LockEntry] = {}
        self._locks_guard = threading.Lock()

    @contextmanager
    def transaction(self, customer_id: str) -> Iterator[None]:
        """Hold the per-customer lock for the duration of the block"""
        with self._locks_guard:
            entry = self._locks.get(customer_id)
            if entry is None:
                entry = self._locks[customer_id] = _LockEntry()
            entry.users += 1
        try:
            with entry.lock:
                yield
        finally:
            with self._locks_guard:
                entry.users -= 1
                if entry.users == 0:
                    del self._locks[customer_id]

    @staticmethod
    def _normalize_email(email: Optional[str]) -> str:
        return (email or '').strip().lower()

    @abstractmethod
    def create_customer(self, customer: Customer) -> bool:
        """Store a new customer, False if the id or email is taken"""
        pass

    @abstractmethod
    def get_customer_with_profile(self, customer_id: str) -> Optional[Customer]:
        """Customer with its profile, None when absent"""
        pass

    @abstractmethod
    def update_customer_profile(self, customer_id: str, updates: Dict) -> bool:
        """Overwrite profile fields, False when the customer or profile is absent"""
        pass

    @abstractmethod
    def create_loyalty_transaction(self, record: LoyaltyTransaction) -> bool:
        pass

    @abstractmethod
    def increment_loyalty_points(self, customer_id: str, delta: int) -> bool:
        pass

    @abstractmethod
    def get_loyalty_transactions(self, customer_id: str) -> List[LoyaltyTransaction]:
        pass

    @abstractmethod
    def list_customers(self) -> List[Customer]:
        pass

    @staticmethod
    def _apply_updates(profile: CustomerProfile, updates: Dict) -> CustomerProfile:
        unknown = set(updates) - PROFILE_FIELDS
        if unknown:
            raise ValueError(f"Unknown profile fields: {sorted(unknown)}")
        return replace(profile, **updates)


class InMemoryCustomerRepository(CustomerRepository):
    """Dict-backed store; callers always receive copies"""

    def __init__(self):
        super().__init__()
        self._customers: Dict[str, Customer] = {}
        self._transactions: List[LoyaltyTransaction] = []
        self._ledger_lock = threading.Lock()
        self._registration_lock = threading.Lock()

    def create_customer(self, customer: Customer) -> bool:
        email = self._normalize_email(customer.email)
        with self._registration_lock:
            if customer.customer_id in self._customers:
                return False
            if email and any(self._normalize_email(c.email) == email for c in self._customers.values()):
                return False
            self._customers[customer.customer_id] = copy.deepcopy(customer)
            return True

    def get_customer_with_profile(self, customer_id: str) -> Optional[Customer]:
        with self.transaction(customer_id):
            customer = self._customers.get(customer_id)
            return copy.deepcopy(customer) if customer else None

    def update_customer_profile(self, customer_id: str, updates: Dict) -> bool:
        with self.transaction(customer_id):
            customer = self._customers.get(customer_id)
            if customer is None or customer.profile is None:
                return False
            customer.profile = self._apply_updates(customer.profile, updates)
            return True

    def create_loyalty_transaction(self, record: LoyaltyTransaction) -> bool:
        with self._ledger_lock:
            self._transactions.append(record)
        return True

    def increment_loyalty_points(self, customer_id: str, delta: int) -> bool:
        with self.transaction(customer_id):
            customer = self._customers.get(customer_id)
            if customer is None or customer.profile is None:
                return False
            customer.profile.loyalty_points += delta
            return True

    def get_loyalty_transactions(self, customer_id: str) -> List[LoyaltyTransaction]:
        with self._ledger_lock:
            return [t for t in self._transactions if t.customer_id == customer_id]

    def list_customers(self) -> List[Customer]:
        customer_ids = list(self._customers)
        customers = (self.get_customer_with_profile(cid) for cid in customer_ids)
        return [c for c in customers if c is not None]
