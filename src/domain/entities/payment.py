"""Payment domain entity.

One settlement attempt for one registration. For team registrations the
leader's payment stands for the whole team. A completed payment is
immutable except for its refund bookkeeping.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from decimal import Decimal
from typing import ClassVar
from uuid import UUID

from uuid_extensions import uuid7

from src.core.result import Failure, Result, Success
from src.domain.enums import PaymentGateway, PaymentStatus
from src.domain.errors import PaymentError
from src.domain.state_machine import PAYMENT_TRANSITIONS, TransitionTable, attempt_transition


@dataclass
class Payment:
    """A payment attempt.

    Attributes:
        user_id: Paying user.
        event_id: Event paid for.
        registration_id: Registration paid for (the leader's for teams).
        amount: Amount charged.
        currency: ISO currency code.
        gateway: Gateway handling the payment.
        order_id: Gateway order identifier.
        id: Unique identifier.
        status: PENDING, COMPLETED or FAILED.
        transaction_id: Gateway transaction identifier once settled.
        paid_at: Settlement time.
        failure_reason: Why settlement failed.
        refund_amount: Amount refunded, if any.
        refunded_at: When the refund was paid out.
        created_at: Record creation timestamp.
        updated_at: Last modification timestamp.
    """

    TRANSITIONS: ClassVar[TransitionTable[PaymentStatus]] = PAYMENT_TRANSITIONS

    user_id: UUID
    event_id: UUID
    registration_id: UUID
    amount: Decimal
    currency: str
    gateway: PaymentGateway
    order_id: str
    id: UUID = field(default_factory=uuid7)
    status: PaymentStatus = PaymentStatus.PENDING
    transaction_id: str | None = None
    paid_at: datetime | None = None
    failure_reason: str | None = None
    refund_amount: Decimal | None = None
    refunded_at: datetime | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __post_init__(self) -> None:
        """Validate payment after initialization.

        Raises:
            ValueError: Non-positive amount.
        """
        if self.amount <= 0:
            raise ValueError(PaymentError.INVALID_AMOUNT)

    def is_completed(self) -> bool:
        """Settled successfully."""
        return self.status == PaymentStatus.COMPLETED

    def mark_completed(self, transaction_id: str | None, now: datetime) -> Result[None, str]:
        """Transition PENDING → COMPLETED.

        Returns:
            Success(None): Settled.
            Failure(str): Already verified or not pending.
        """
        if self.status == PaymentStatus.COMPLETED:
            return Failure(error=PaymentError.ALREADY_VERIFIED)
        if isinstance(attempt_transition(self, PaymentStatus.COMPLETED, now=now), Failure):
            return Failure(error=PaymentError.NOT_PENDING)
        self.transaction_id = transaction_id
        self.paid_at = now
        return Success(value=None)

    def mark_failed(self, reason: str | None, now: datetime) -> Result[None, str]:
        """Transition PENDING → FAILED."""
        if self.status == PaymentStatus.COMPLETED:
            return Failure(error=PaymentError.ALREADY_VERIFIED)
        if isinstance(attempt_transition(self, PaymentStatus.FAILED, now=now), Failure):
            return Failure(error=PaymentError.NOT_PENDING)
        self.failure_reason = reason
        return Success(value=None)

    def record_refund(self, amount: Decimal, now: datetime) -> Result[None, str]:
        """Record a refund payout on a completed payment."""
        if not self.is_completed():
            return Failure(error=PaymentError.NOT_COMPLETED)
        if amount <= 0 or amount > self.amount:
            return Failure(error=PaymentError.INVALID_AMOUNT)
        self.refund_amount = amount
        self.refunded_at = now
        self.updated_at = now
        return Success(value=None)
