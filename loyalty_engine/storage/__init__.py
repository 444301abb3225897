"""Customer and loyalty ledger storage."""

from .repository import CustomerRepository, InMemoryCustomerRepository
from .json_repository import JsonFileCustomerRepository

__all__ = [
    'CustomerRepository',
    'InMemoryCustomerRepository',
    'JsonFileCustomerRepository'
]
