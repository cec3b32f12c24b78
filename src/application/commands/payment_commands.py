"""Payment and refund commands (CQRS write operations)."""

from dataclasses import dataclass
from uuid import UUID

from src.domain.value_objects import Actor


@dataclass(frozen=True, kw_only=True)
class InitiatePayment:
    """Create a pending payment for the actor's registration.

    For team registrations only the leader may pay; the payment covers the
    whole team.
    """

    actor: Actor
    registration_id: UUID


@dataclass(frozen=True, kw_only=True)
class SettlePayment:
    """Settlement outcome reported by the payment collaborator.

    Attributes:
        payment_id: Payment being settled.
        success: Whether the gateway captured the payment.
        transaction_id: Gateway transaction identifier (success).
        failure_reason: Gateway failure text (failure).
    """

    payment_id: UUID
    success: bool
    transaction_id: str | None = None
    failure_reason: str | None = None


@dataclass(frozen=True, kw_only=True)
class RequestRefund:
    """Request a refund of a completed payment (payer only)."""

    actor: Actor
    payment_id: UUID
    reason: str


@dataclass(frozen=True, kw_only=True)
class ProcessRefund:
    """Approve or reject a pending refund.

    Attributes:
        approve: True pays the refund out through the gateway.
        rejection_reason: Why the refund is rejected (approve=False).
        notes: Free-form processor notes.
    """

    actor: Actor
    refund_id: UUID
    approve: bool
    rejection_reason: str | None = None
    notes: str | None = None
