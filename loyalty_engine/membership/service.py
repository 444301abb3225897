"""Membership Service

Applies completed orders to customer profiles: lifetime value, order count,
tier and segment are recomputed, and the points award is written to the
loyalty ledger. Every step for a customer runs under the repository's
per-customer transaction.
"""

from contextlib import ExitStack
from datetime import date, datetime
from typing import Callable, Dict, Optional
import copy
import logging
import random
import string

from .. import LOYALTY_PROGRAM, SEGMENT_RULES, REFERRAL_BONUSES
from ..compliance.age_verification import AgeVerifier
from ..core.models import (
    CENTS, Customer, CustomerProfile, LoyaltyTransaction, MembershipTier,
    TransactionType, to_decimal
)
from ..core.results import OperationResult, ProfileUpdate
from ..storage.repository import CustomerRepository
from ..utils.audit_logger import LoyaltyAuditLogger
from ..utils.validation import MembershipValidator
from .points import calculate_points_earned
from .segmentation import calculate_customer_segment
from .tiers import calculate_tier, get_tier_info, tier_progress, tier_upgrade_bonus

logger = logging.getLogger(__name__)

_TIER_ORDER = list(MembershipTier)
_REFERRAL_ALPHABET = string.digits + string.ascii_uppercase


def generate_referral_code(first_name: str, last_name: str, customer_id: str,
                           rng: Optional[random.Random] = None) -> str:
    """Name prefix + id suffix + two random base-36 characters"""
    if not all(isinstance(v, str) and v for v in (first_name, last_name, customer_id)):
        logger.warning("generate_referral_code called with invalid parameters")
        return 'INVALID'

    rng = rng or random
    name_prefix = (first_name[:2] + last_name[:2]).upper()
    id_suffix = customer_id[-4:].upper()
    random_suffix = ''.join(rng.choice(_REFERRAL_ALPHABET) for _ in range(2))
    return f"{name_prefix}{id_suffix}{random_suffix}"


class MembershipService:
    """Membership lifecycle over an injected customer repository"""

    def __init__(self,
                 repository: CustomerRepository,
                 config: Optional[Dict] = None,
                 clock: Optional[Callable[[], datetime]] = None,
                 audit_logger: Optional[LoyaltyAuditLogger] = None):
        self.repository = repository
        self.config = config or {}
        self.loyalty_program = copy.deepcopy(LOYALTY_PROGRAM)
        self.segment_rules = SEGMENT_RULES.copy()
        self.referral_bonuses = REFERRAL_BONUSES.copy()

        # Update with any custom configuration
        if 'loyalty_program' in self.config:
            self.loyalty_program.update(self.config['loyalty_program'])
        if 'segment_rules' in self.config:
            self.segment_rules.update(self.config['segment_rules'])
        if 'referral_bonuses' in self.config:
            self.referral_bonuses.update(self.config['referral_bonuses'])

        self.clock = clock or datetime.now
        self.audit_logger = audit_logger
        self.validator = MembershipValidator(self.loyalty_program.get('max_order_total'))
        self.age_verifier = AgeVerifier()

    def register_customer(self,
                          customer_id: str,
                          first_name: str,
                          last_name: str,
                          email: str,
                          state: Optional[str] = None,
                          date_of_birth: Optional[date] = None) -> OperationResult:
        """Create a customer with a zeroed GREEN profile"""
        if isinstance(date_of_birth, datetime):
            date_of_birth = date_of_birth.date()

        is_valid, errors = self.validator.validate_registration(
            customer_id, first_name, last_name, email, date_of_birth, today=self.clock().date()
        )
        if not is_valid:
            logger.warning(f"Registration rejected for {customer_id!r}: {'; '.join(errors)}")
            return OperationResult.invalid_input('; '.join(errors))

        if date_of_birth is not None:
            verification = self.age_verifier.verify(date_of_birth, state, today=self.clock().date())
            if not verification.is_verified:
                logger.warning(f"Registration rejected for {customer_id}: {verification.reason}")
                return OperationResult.invalid_input(verification.reason)

        normalized_email = email.strip().lower()
        customer = Customer(
            customer_id=customer_id,
            first_name=first_name.strip(),
            last_name=last_name.strip(),
            email=normalized_email,
            state=state.strip().upper() if state else None,
            date_of_birth=date_of_birth,
            referral_code=generate_referral_code(first_name, last_name, customer_id),
            profile=CustomerProfile(),
            created_at=self.clock()
        )

        # id and email uniqueness are checked atomically by the repository
        if not self.repository.create_customer(customer):
            if self.repository.get_customer_with_profile(customer_id) is not None:
                return OperationResult.invalid_input(f"Customer already exists: {customer_id}")
            return OperationResult.invalid_input(f"Email already registered: {email}")

        logger.info(f"Registered customer {customer_id} with referral code {customer.referral_code}")
        return OperationResult.ok(customer, "Registration successful")

    def update_customer_profile(self, customer_id: str, order_total) -> OperationResult:
        """Apply a completed order to the customer's profile and ledger.

        Not idempotent: applying the same order twice counts it twice.
        """
        is_valid, error = self.validator.validate_order_total(order_total)
        if not is_valid:
            logger.warning(f"Rejected order total for {customer_id}: {error}")
            return OperationResult.invalid_input(error)

        total = to_decimal(order_total, "order_total")

        with self.repository.transaction(customer_id):
            customer = self.repository.get_customer_with_profile(customer_id)
            if customer is None or customer.profile is None:
                logger.warning(f"Profile update skipped, customer {customer_id} not found")
                return OperationResult.not_found(f"Customer or profile not found: {customer_id}")

            profile = customer.profile
            now = self.clock()
            previous_tier = profile.membership_tier

            new_lifetime_value = profile.lifetime_value + total
            new_total_orders = profile.total_orders + 1
            new_average_order_value = (new_lifetime_value / new_total_orders).quantize(CENTS)
            new_tier = calculate_tier(new_lifetime_value)
            new_segment = calculate_customer_segment(
                new_total_orders, new_lifetime_value, now, now=now, rules=self.segment_rules
            )

            updated = self.repository.update_customer_profile(customer_id, {
                'lifetime_value': new_lifetime_value,
                'total_orders': new_total_orders,
                'average_order_value': new_average_order_value,
                'last_order_date': now,
                'membership_tier': new_tier,
                'segment': new_segment
            })
            if not updated:
                return OperationResult.not_found(f"Customer or profile not found: {customer_id}")

            points_earned = calculate_points_earned(
                total, previous_tier,
                double_platinum=self.loyalty_program['platinum_double_points'],
                points_per_dollar=self.loyalty_program['points_per_dollar']
            )
            transactions = [self._award_points(
                customer_id, TransactionType.EARNED, points_earned,
                f"Points earned from ${total.quantize(CENTS)} order", now
            )]

            if (self.loyalty_program['award_tier_upgrade_bonus']
                    and _TIER_ORDER.index(new_tier) > _TIER_ORDER.index(previous_tier)):
                bonus = tier_upgrade_bonus(new_tier, self.loyalty_program['tier_upgrade_bonus'])
                if bonus > 0:
                    transactions.append(self._award_points(
                        customer_id, TransactionType.BONUS, bonus,
                        f"Tier upgrade bonus: Welcome to {new_tier.value} membership!", now
                    ))

            final_profile = self.repository.get_customer_with_profile(customer_id).profile

        update = ProfileUpdate(
            customer_id=customer_id,
            profile=final_profile,
            previous_tier=previous_tier,
            points_earned=points_earned,
            transactions=transactions
        )

        if update.tier_changed:
            logger.info(f"Customer {customer_id} moved from {previous_tier.value} to {new_tier.value}")
        logger.info(
            f"Applied ${total} order to {customer_id}: lifetime value ${new_lifetime_value}, "
            f"{points_earned} points earned"
        )

        if self.audit_logger:
            self.audit_logger.log_profile_update({
                'customer_id': customer_id,
                'order_total': str(total),
                'lifetime_value': str(new_lifetime_value),
                'total_orders': new_total_orders,
                'previous_tier': previous_tier.value,
                'new_tier': new_tier.value,
                'segment': new_segment.value,
                'transactions': [t.to_dict() for t in transactions]
            }, now=now)

        return OperationResult.ok(update)

    def _award_points(self, customer_id: str, transaction_type: TransactionType,
                      points: int, description: str, now: datetime) -> LoyaltyTransaction:
        record = LoyaltyTransaction(
            customer_id=customer_id,
            type=transaction_type,
            points=points,
            description=description,
            created_at=now
        )
        self.repository.create_loyalty_transaction(record)
        self.repository.increment_loyalty_points(customer_id, points)
        return record

    def process_referral(self, referrer_id: str, new_customer_id: str) -> OperationResult:
        """Award referral bonuses to both sides of a referral"""
        if referrer_id == new_customer_id:
            return OperationResult.invalid_input("A customer cannot refer themselves")

        # fixed lock order so two referrals between the same pair cannot deadlock
        with ExitStack() as stack:
            for customer_id in sorted((referrer_id, new_customer_id)):
                stack.enter_context(self.repository.transaction(customer_id))

            referrer = self.repository.get_customer_with_profile(referrer_id)
            new_customer = self.repository.get_customer_with_profile(new_customer_id)
            for customer_id, customer in ((referrer_id, referrer), (new_customer_id, new_customer)):
                if customer is None or customer.profile is None:
                    logger.warning(f"Referral skipped, customer {customer_id} not found")
                    return OperationResult.not_found(f"Customer or profile not found: {customer_id}")

            now = self.clock()
            transactions = [
                self._award_points(
                    referrer_id, TransactionType.BONUS, self.referral_bonuses['referrer_points'],
                    "Referral bonus: Friend successfully registered!", now
                ),
                self._award_points(
                    new_customer_id, TransactionType.BONUS, self.referral_bonuses['new_customer_points'],
                    "Welcome bonus: Thanks for joining through a referral!", now
                )
            ]
            self.repository.update_customer_profile(referrer_id, {
                'total_referrals': referrer.profile.total_referrals + 1
            })

        logger.info(f"Processed referral of {new_customer_id} by {referrer_id}")
        return OperationResult.ok(transactions)

    def get_membership_summary(self, customer_id: str) -> OperationResult:
        """Tier, progress, points and current segment for a customer"""
        customer = self.repository.get_customer_with_profile(customer_id)
        if customer is None or customer.profile is None:
            return OperationResult.not_found(f"Customer or profile not found: {customer_id}")

        profile = customer.profile
        segment = calculate_customer_segment(
            profile.total_orders, profile.lifetime_value, profile.last_order_date,
            now=self.clock(), rules=self.segment_rules
        )

        return OperationResult.ok({
            'customer_id': customer_id,
            'tier': get_tier_info(profile.membership_tier),
            'progress': tier_progress(profile.lifetime_value),
            'loyalty_points': profile.loyalty_points,
            'segment': segment,
            'lifetime_value': profile.lifetime_value,
            'total_orders': profile.total_orders,
            'referral_code': customer.referral_code
        })
