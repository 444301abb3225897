"""Age gate for storefront access and registration."""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Union
import logging

from .state_restrictions import get_state_age_requirement

logger = logging.getLogger(__name__)


@dataclass
class AgeVerificationResult:
    is_verified: bool
    age: Optional[int]
    required_age: int
    reason: str = ""


def calculate_age(date_of_birth: Union[date, datetime], today: Optional[date] = None) -> int:
    """Age in whole years as of today"""
    today = today or date.today()
    if isinstance(today, datetime):
        today = today.date()
    if isinstance(date_of_birth, datetime):
        date_of_birth = date_of_birth.date()

    if date_of_birth > today:
        raise ValueError(f"Date of birth {date_of_birth} is in the future")

    age = today.year - date_of_birth.year
    # birthday not reached yet this year
    if (today.month, today.day) < (date_of_birth.month, date_of_birth.day):
        age -= 1
    return age


class AgeVerifier:
    """Verify a customer meets the minimum age of their state"""

    def verify(self, date_of_birth: Optional[Union[date, datetime]],
               state_code: Optional[str] = None,
               today: Optional[date] = None) -> AgeVerificationResult:
        required_age = get_state_age_requirement(state_code)

        if date_of_birth is None:
            return AgeVerificationResult(
                is_verified=False, age=None, required_age=required_age,
                reason="Date of birth is required"
            )

        try:
            age = calculate_age(date_of_birth, today)
        except ValueError as e:
            logger.warning(f"Age verification rejected: {e}")
            return AgeVerificationResult(
                is_verified=False, age=None, required_age=required_age, reason=str(e)
            )

        if age < required_age:
            return AgeVerificationResult(
                is_verified=False, age=age, required_age=required_age,
                reason=f"You must be {required_age} years or older to purchase cannabis products"
            )

        return AgeVerificationResult(is_verified=True, age=age, required_age=required_age)
