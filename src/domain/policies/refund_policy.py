"""Tiered refund policy.

    days_till_event >= full_refund_days                      -> 100%
    partial_refund_days <= days_till_event < full_refund_days -> 50%
    days_till_event < partial_refund_days                     -> rejected

``days_till_event`` is measured in fractional days, so a request exactly
7.0 days before the start gets the full refund and one at 6.99 days gets
half.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal

from src.core.enums import ErrorCode
from src.core.errors import ValidationError
from src.core.result import Failure, Result, Success
from src.domain.errors import RefundError

_SECONDS_PER_DAY = 86_400
_CENT = Decimal("0.01")


@dataclass(frozen=True, slots=True, kw_only=True)
class RefundPolicy:
    """Refund percentage tiers.

    Attributes:
        full_refund_days: Minimum days before start for 100%.
        partial_refund_days: Minimum days before start for 50%.
    """

    full_refund_days: float = 7.0
    partial_refund_days: float = 3.0

    def __post_init__(self) -> None:
        """Validate tier ordering.

        Raises:
            ValueError: If the tiers are negative or out of order.
        """
        if self.partial_refund_days < 0 or self.full_refund_days < self.partial_refund_days:
            raise ValueError("Refund tiers must satisfy 0 <= partial <= full")

    @staticmethod
    def days_till_event(start_date_time: datetime, now: datetime) -> float:
        """Fractional days between ``now`` and the event start."""
        return (start_date_time - now).total_seconds() / _SECONDS_PER_DAY

    def percentage_for(
        self,
        start_date_time: datetime,
        now: datetime,
    ) -> Result[int, ValidationError]:
        """Refund percentage for a request made at ``now``.

        Returns:
            Success(100 | 50): Refund allowed at this tier.
            Failure(ValidationError): Too close to the event.
        """
        days = self.days_till_event(start_date_time, now)
        if days >= self.full_refund_days:
            return Success(value=100)
        if days >= self.partial_refund_days:
            return Success(value=50)
        return Failure(
            error=ValidationError(
                code=ErrorCode.REFUND_WINDOW_CLOSED,
                message=RefundError.TOO_CLOSE_TO_EVENT,
                field="start_date_time",
                details={"days_till_event": f"{days:.2f}"},
            )
        )

    @staticmethod
    def refund_amount(amount: Decimal, percentage: int) -> Decimal:
        """``amount * percentage / 100`` rounded to cents."""
        if not 0 <= percentage <= 100:
            raise ValueError(RefundError.INVALID_PERCENTAGE)
        return (amount * Decimal(percentage) / Decimal(100)).quantize(
            _CENT, rounding=ROUND_HALF_UP
        )
