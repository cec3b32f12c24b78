"""Transition tables and the single guarded transition entry point.

Every status change in the lifecycle engine goes through
``attempt_transition``: the scheduler sweep and the command handlers call the
same function, so a transition that is illegal for one is illegal for the
other. Nothing changes status implicitly on save.

Tables:
    EVENT_TRANSITIONS: draft → published → ongoing → completed, cancel from any
        non-terminal state
    ROUND_TRANSITIONS: upcoming → active → completed
    REGISTRATION_TRANSITIONS: pending/waitlisted/confirmed lifecycle
    REGISTRATION_PAYMENT_TRANSITIONS: payment state carried on a registration
    PAYMENT_TRANSITIONS: pending → completed | failed
    REFUND_TRANSITIONS: pending → completed | rejected | failed

Usage:
    from src.domain.state_machine import attempt_transition

    match attempt_transition(event, EventStatus.PUBLISHED, now=now):
        case Success(value=event):
            await event_repo.save(event)
        case Failure(error=error):
            return Failure(error=error)
"""

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import Any, ClassVar, Generic, Protocol, TypeVar

from src.core.enums import ErrorCode
from src.core.errors import ConflictError
from src.core.result import Failure, Result, Success
from src.domain.enums import (
    EventStatus,
    PaymentStatus,
    RefundStatus,
    RegistrationPaymentStatus,
    RegistrationStatus,
    RoundStatus,
)

S = TypeVar("S", bound=Enum)


@dataclass(frozen=True)
class TransitionTable(Generic[S]):
    """Allowed transitions for one status enum.

    Attributes:
        resource_type: Name used in conflict errors ("Event", "Registration").
        field: Name of the status field guarded by this table.
        edges: Map of state to the states reachable in one transition.
    """

    resource_type: str
    field: str
    edges: Mapping[S, frozenset[S]]

    def allowed_targets(self, current: S) -> frozenset[S]:
        """States reachable from ``current`` in one transition."""
        return self.edges.get(current, frozenset())

    def can_transition(self, current: S, target: S) -> bool:
        """Check whether ``current -> target`` is a legal edge."""
        return target in self.allowed_targets(current)

    def sources_of(self, target: S) -> frozenset[S]:
        """States from which ``target`` is reachable in one transition.

        Used as the precondition of compare-and-set updates in the stores.
        """
        return frozenset(state for state, targets in self.edges.items() if target in targets)

    def is_terminal(self, state: S) -> bool:
        """Check whether ``state`` has no outgoing transitions."""
        return not self.allowed_targets(state)

    def check(self, current: S, target: S) -> Result[None, ConflictError]:
        """Validate a transition without applying it.

        Returns:
            Success(None): Edge is legal.
            Failure(ConflictError): Edge is illegal; details name both states.
        """
        if self.can_transition(current, target):
            return Success(value=None)
        allowed = sorted(state.value for state in self.allowed_targets(current))
        return Failure(
            error=ConflictError(
                code=ErrorCode.INVALID_STATE_TRANSITION,
                message=(
                    f"Cannot transition {self.resource_type} {self.field} "
                    f"from '{current.value}' to '{target.value}'"
                ),
                resource_type=self.resource_type,
                conflicting_field=self.field,
                details={
                    "current": current.value,
                    "attempted": target.value,
                    "allowed": ", ".join(allowed) if allowed else "none (terminal)",
                },
            )
        )


EVENT_TRANSITIONS: TransitionTable[EventStatus] = TransitionTable(
    resource_type="Event",
    field="status",
    edges={
        EventStatus.DRAFT: frozenset({EventStatus.PUBLISHED, EventStatus.CANCELLED}),
        EventStatus.PUBLISHED: frozenset({EventStatus.ONGOING, EventStatus.CANCELLED}),
        EventStatus.ONGOING: frozenset({EventStatus.COMPLETED, EventStatus.CANCELLED}),
        EventStatus.COMPLETED: frozenset(),
        EventStatus.CANCELLED: frozenset(),
    },
)

ROUND_TRANSITIONS: TransitionTable[RoundStatus] = TransitionTable(
    resource_type="Round",
    field="status",
    edges={
        RoundStatus.UPCOMING: frozenset({RoundStatus.ACTIVE}),
        RoundStatus.ACTIVE: frozenset({RoundStatus.COMPLETED}),
        RoundStatus.COMPLETED: frozenset(),
    },
)

REGISTRATION_TRANSITIONS: TransitionTable[RegistrationStatus] = TransitionTable(
    resource_type="Registration",
    field="status",
    edges={
        RegistrationStatus.PENDING: frozenset(
            {
                RegistrationStatus.CONFIRMED,
                RegistrationStatus.CANCELLED,
                RegistrationStatus.REJECTED,
            }
        ),
        RegistrationStatus.WAITLISTED: frozenset(
            {
                RegistrationStatus.PENDING,
                RegistrationStatus.CONFIRMED,
                RegistrationStatus.CANCELLED,
                RegistrationStatus.REJECTED,
            }
        ),
        RegistrationStatus.CONFIRMED: frozenset(
            {RegistrationStatus.CANCELLED, RegistrationStatus.REJECTED}
        ),
        RegistrationStatus.CANCELLED: frozenset(),
        RegistrationStatus.REJECTED: frozenset(),
    },
)

REGISTRATION_PAYMENT_TRANSITIONS: TransitionTable[RegistrationPaymentStatus] = (
    TransitionTable(
        resource_type="Registration",
        field="payment_status",
        edges={
            RegistrationPaymentStatus.NOT_REQUIRED: frozenset(),
            RegistrationPaymentStatus.PENDING: frozenset(
                {RegistrationPaymentStatus.PAID, RegistrationPaymentStatus.FAILED}
            ),
            RegistrationPaymentStatus.FAILED: frozenset(
                {RegistrationPaymentStatus.PENDING, RegistrationPaymentStatus.PAID}
            ),
            RegistrationPaymentStatus.PAID: frozenset(
                {RegistrationPaymentStatus.REFUND_PENDING}
            ),
            RegistrationPaymentStatus.REFUND_PENDING: frozenset(
                {RegistrationPaymentStatus.PAID, RegistrationPaymentStatus.REFUNDED}
            ),
            RegistrationPaymentStatus.REFUNDED: frozenset(),
        },
    )
)

PAYMENT_TRANSITIONS: TransitionTable[PaymentStatus] = TransitionTable(
    resource_type="Payment",
    field="status",
    edges={
        PaymentStatus.PENDING: frozenset({PaymentStatus.COMPLETED, PaymentStatus.FAILED}),
        PaymentStatus.COMPLETED: frozenset(),
        PaymentStatus.FAILED: frozenset(),
    },
)

REFUND_TRANSITIONS: TransitionTable[RefundStatus] = TransitionTable(
    resource_type="Refund",
    field="status",
    edges={
        RefundStatus.PENDING: frozenset(
            {RefundStatus.COMPLETED, RefundStatus.REJECTED, RefundStatus.FAILED}
        ),
        RefundStatus.COMPLETED: frozenset(),
        RefundStatus.REJECTED: frozenset(),
        RefundStatus.FAILED: frozenset(),
    },
)


class StatefulEntity(Protocol):
    """Entity with a ``status`` guarded by a class-level transition table."""

    TRANSITIONS: ClassVar[TransitionTable[Any]]
    status: Any
    updated_at: datetime


E = TypeVar("E", bound=StatefulEntity)


def attempt_transition(
    entity: E,
    target: Enum,
    *,
    now: datetime | None = None,
) -> Result[E, ConflictError]:
    """Move ``entity.status`` to ``target`` if the table allows it.

    Args:
        entity: Event, Round, Registration, Payment or Refund.
        target: Desired status.
        now: Timestamp recorded in ``updated_at`` (defaults to current UTC).

    Returns:
        Success(entity): Status changed in place.
        Failure(ConflictError): Illegal edge; entity untouched.
    """
    table = type(entity).TRANSITIONS
    check = table.check(entity.status, target)
    if isinstance(check, Failure):
        return check
    entity.status = target
    entity.updated_at = now or datetime.now(UTC)
    return Success(value=entity)
