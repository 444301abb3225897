"""Audit Logger for Loyalty Activity

Creates audit trails for profile updates and loyalty point awards.
"""

import itertools
import json
import threading
from datetime import datetime, timedelta
from typing import Dict, List, Optional
from pathlib import Path
import csv


class LoyaltyAuditLogger:
    """Manages audit logging for membership profile updates"""

    LEDGER_COLUMNS = [
        'timestamp', 'customer_id', 'transaction_type', 'points',
        'order_total', 'lifetime_value', 'previous_tier', 'new_tier', 'segment'
    ]

    def __init__(self, log_directory: str = "loyalty_logs"):
        """Initialize audit logger with log directory"""
        self.log_directory = Path(log_directory)
        self.log_directory.mkdir(parents=True, exist_ok=True)

        self.updates_dir = self.log_directory / "profile_updates"
        self.ledger_dir = self.log_directory / "points_ledger"

        for dir_path in [self.updates_dir, self.ledger_dir]:
            dir_path.mkdir(exist_ok=True)

        self._write_lock = threading.Lock()
        self._sequence = itertools.count(1)

    def _update_log(self, day: datetime) -> Path:
        return self.updates_dir / f"updates_{day.strftime('%Y-%m-%d')}.jsonl"

    def _ledger_log(self, day: datetime) -> Path:
        return self.ledger_dir / f"ledger_{day.strftime('%Y-%m-%d')}.csv"

    def log_profile_update(self, update_data: Dict, now: Optional[datetime] = None) -> str:
        """Log a completed-order profile update and its point awards.

        `now` should be the time the update was applied, so the audit entry
        and the ledger transactions carry the same timestamp.
        """
        now = now or datetime.now()
        log_entry = {
            'log_id': self._generate_log_id(now),
            'timestamp': now.isoformat(),
            'version': '1.0',
            **update_data
        }

        with self._write_lock:
            with open(self._update_log(now), 'a') as f:
                f.write(json.dumps(log_entry, default=str) + '\n')

            for transaction in update_data.get('transactions', []):
                self._log_ledger_row(now, update_data, transaction)

        return log_entry['log_id']

    def _log_ledger_row(self, now: datetime, update_data: Dict, transaction: Dict):
        ledger = self._ledger_log(now)
        is_new = not ledger.exists()

        with open(ledger, 'a', newline='') as f:
            writer = csv.writer(f)
            if is_new:
                writer.writerow(self.LEDGER_COLUMNS)
            writer.writerow([
                now.isoformat(),
                update_data.get('customer_id', ''),
                transaction.get('type', ''),
                transaction.get('points', 0),
                update_data.get('order_total', 0),
                update_data.get('lifetime_value', 0),
                update_data.get('previous_tier', ''),
                update_data.get('new_tier', ''),
                update_data.get('segment', '')
            ])

    def _generate_log_id(self, now: Optional[datetime] = None, prefix: str = 'UPD') -> str:
        """Generate unique log ID"""
        timestamp = (now or datetime.now()).strftime("%Y%m%d%H%M%S%f")
        return f"{prefix}_{timestamp}_{next(self._sequence):06d}"

    def query_logs(self,
                   customer_id: Optional[str] = None,
                   start_date: Optional[datetime] = None,
                   end_date: Optional[datetime] = None) -> List[Dict]:
        """Query historical profile updates"""
        results = []

        if not start_date:
            start_date = datetime.now().replace(hour=0, minute=0, second=0, microsecond=0)
        if not end_date:
            end_date = datetime.now()

        current_date = start_date
        while current_date.date() <= end_date.date():
            log_file = self._update_log(current_date)

            if log_file.exists():
                with open(log_file, 'r') as f:
                    for line in f:
                        entry = json.loads(line)
                        if customer_id and entry.get('customer_id') != customer_id:
                            continue
                        results.append(entry)

            current_date += timedelta(days=1)

        return results

    def generate_daily_report(self, date: Optional[datetime] = None) -> Dict:
        """Generate daily loyalty activity report"""
        if not date:
            date = datetime.now()

        report_date = date.strftime("%Y-%m-%d")

        ledger_file = self._ledger_log(date)
        if not ledger_file.exists():
            return {'date': report_date, 'total_transactions': 0, 'points_awarded': 0}

        with open(ledger_file, 'r') as f:
            rows = list(csv.DictReader(f))

        by_type = {}
        for row in rows:
            by_type[row['transaction_type']] = by_type.get(row['transaction_type'], 0) + int(row['points'])

        upgrades = sum(1 for row in rows
                       if row['transaction_type'] == 'EARNED' and row['previous_tier'] != row['new_tier'])

        return {
            'date': report_date,
            'total_transactions': len(rows),
            'points_awarded': sum(int(row['points']) for row in rows),
            'points_by_type': by_type,
            'customers': len({row['customer_id'] for row in rows}),
            'tier_upgrades': upgrades
        }
