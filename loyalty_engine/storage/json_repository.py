"""JSON file store for customers and the loyalty ledger."""

import json
import logging
import threading
from pathlib import Path
from typing import Dict, List, Optional

from ..core.models import Customer, LoyaltyTransaction
from .repository import CustomerRepository

logger = logging.getLogger(__name__)


class JsonFileCustomerRepository(CustomerRepository):
    """Customers in customers.json keyed by id, ledger in loyalty_transactions.json"""

    CUSTOMERS_FILE = "customers.json"
    TRANSACTIONS_FILE = "loyalty_transactions.json"

    def __init__(self, storage_dir: str = "loyalty_data"):
        super().__init__()
        self.storage_dir = Path(storage_dir)
        self.storage_dir.mkdir(parents=True, exist_ok=True)
        # whole files are rewritten, so every file access is serialized
        self._file_lock = threading.RLock()

    def _file_path(self, filename: str) -> Path:
        return self.storage_dir / filename

    def _read_json(self, filename: str, default):
        path = self._file_path(filename)
        if not path.exists():
            return default

        with open(path, "r", encoding="utf-8") as f:
            text = f.read().strip()
        if text == "":
            return default
        return json.loads(text)

    def _write_json(self, filename: str, data) -> None:
        path = self._file_path(filename)
        tmp_path = path.with_suffix(path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        tmp_path.replace(path)

    def _load_customers(self) -> Dict[str, dict]:
        data = self._read_json(self.CUSTOMERS_FILE, {})
        if not isinstance(data, dict):
            raise ValueError(f"{self.CUSTOMERS_FILE} must hold an object keyed by customer id")
        return data

    def create_customer(self, customer: Customer) -> bool:
        with self.transaction(customer.customer_id), self._file_lock:
            customers = self._load_customers()
            if customer.customer_id in customers:
                return False
            email = self._normalize_email(customer.email)
            if email and any(self._normalize_email(r.get('email')) == email for r in customers.values()):
                return False
            customers[customer.customer_id] = customer.to_dict()
            self._write_json(self.CUSTOMERS_FILE, customers)
            return True

    def get_customer_with_profile(self, customer_id: str) -> Optional[Customer]:
        with self._file_lock:
            record = self._load_customers().get(customer_id)
        return Customer.from_dict(record) if record else None

    def update_customer_profile(self, customer_id: str, updates: Dict) -> bool:
        with self.transaction(customer_id), self._file_lock:
            customers = self._load_customers()
            record = customers.get(customer_id)
            if record is None or record.get('profile') is None:
                return False

            customer = Customer.from_dict(record)
            customer.profile = self._apply_updates(customer.profile, updates)
            customers[customer_id] = customer.to_dict()
            self._write_json(self.CUSTOMERS_FILE, customers)
            return True

    def create_loyalty_transaction(self, record: LoyaltyTransaction) -> bool:
        with self._file_lock:
            ledger = self._read_json(self.TRANSACTIONS_FILE, [])
            ledger.append(record.to_dict())
            self._write_json(self.TRANSACTIONS_FILE, ledger)
        return True

    def increment_loyalty_points(self, customer_id: str, delta: int) -> bool:
        with self.transaction(customer_id), self._file_lock:
            customers = self._load_customers()
            record = customers.get(customer_id)
            if record is None or record.get('profile') is None:
                return False

            record['profile']['loyalty_points'] = int(record['profile'].get('loyalty_points', 0)) + delta
            self._write_json(self.CUSTOMERS_FILE, customers)
            return True

    def get_loyalty_transactions(self, customer_id: str) -> List[LoyaltyTransaction]:
        with self._file_lock:
            ledger = self._read_json(self.TRANSACTIONS_FILE, [])
        return [LoyaltyTransaction.from_dict(entry) for entry in ledger
                if entry.get('customer_id') == customer_id]

    def list_customers(self) -> List[Customer]:
        with self._file_lock:
            customers = self._load_customers()
        return [Customer.from_dict(record) for record in customers.values()]
