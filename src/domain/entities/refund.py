"""Refund domain entity.

Derived from a completed payment. The percentage comes from the refund
policy at request time; the organizer (or an admin) approves or rejects it.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from decimal import Decimal
from typing import ClassVar
from uuid import UUID

from uuid_extensions import uuid7

from src.core.errors import ConflictError
from src.core.result import Failure, Result, Success
from src.domain.enums import RefundStatus
from src.domain.errors import RefundError
from src.domain.state_machine import REFUND_TRANSITIONS, TransitionTable, attempt_transition


@dataclass
class Refund:
    """A refund request.

    Attributes:
        payment_id: Refunded payment.
        registration_id: Registration the payment was for.
        event_id: Event of the registration.
        user_id: Requesting user (the payer).
        amount: Amount to refund.
        original_amount: Payment amount.
        refund_percentage: Tier percentage (0..100).
        reason: User-supplied reason.
        requested_at: Request time.
        id: Unique identifier.
        status: PENDING, REJECTED, COMPLETED or FAILED.
        processed_by: Organizer/admin who decided.
        processed_at: Decision time.
        rejection_reason: Why it was rejected.
        refund_transaction_id: Gateway refund identifier.
        notes: Processor notes or gateway error text.
        updated_at: Last modification timestamp.
    """

    TRANSITIONS: ClassVar[TransitionTable[RefundStatus]] = REFUND_TRANSITIONS

    payment_id: UUID
    registration_id: UUID
    event_id: UUID
    user_id: UUID
    amount: Decimal
    original_amount: Decimal
    refund_percentage: int
    reason: str
    requested_at: datetime
    id: UUID = field(default_factory=uuid7)
    status: RefundStatus = RefundStatus.PENDING
    processed_by: UUID | None = None
    processed_at: datetime | None = None
    rejection_reason: str | None = None
    refund_transaction_id: str | None = None
    notes: str | None = None
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __post_init__(self) -> None:
        """Validate refund after initialization.

        Raises:
            ValueError: Percentage outside 0..100 or amount above original.
        """
        if not 0 <= self.refund_percentage <= 100:
            raise ValueError(RefundError.INVALID_PERCENTAGE)
        if self.amount < 0 or self.amount > self.original_amount:
            raise ValueError("Refund amount must be between 0 and the original amount")

    def is_pending(self) -> bool:
        """Awaiting a decision."""
        return self.status == RefundStatus.PENDING

    def _close(
        self,
        target: RefundStatus,
        processed_by: UUID,
        now: datetime,
    ) -> Result[None, ConflictError]:
        result = attempt_transition(self, target, now=now)
        if isinstance(result, Failure):
            return result
        self.processed_by = processed_by
        self.processed_at = now
        return Success(value=None)

    def complete(
        self,
        transaction_id: str,
        processed_by: UUID,
        now: datetime,
        notes: str | None = None,
    ) -> Result[None, ConflictError]:
        """PENDING → COMPLETED after the gateway paid out."""
        result = self._close(RefundStatus.COMPLETED, processed_by, now)
        if isinstance(result, Success):
            self.refund_transaction_id = transaction_id
            self.notes = notes
        return result

    def reject(
        self,
        rejection_reason: str | None,
        processed_by: UUID,
        now: datetime,
        notes: str | None = None,
    ) -> Result[None, ConflictError]:
        """PENDING → REJECTED."""
        result = self._close(RefundStatus.REJECTED, processed_by, now)
        if isinstance(result, Success):
            self.rejection_reason = rejection_reason
            self.notes = notes
        return result

    def fail(
        self, error_message: str, processed_by: UUID, now: datetime
    ) -> Result[None, ConflictError]:
        """PENDING → FAILED when the gateway refused the payout."""
        result = self._close(RefundStatus.FAILED, processed_by, now)
        if isinstance(result, Success):
            self.notes = error_message
        return result
