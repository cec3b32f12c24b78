"""RegistrationRepository protocol (port).

Port (interface) for hexagonal architecture.

Two primitives carry the concurrency guarantees:

- ``add`` inserts one or more registrations (a whole team at once) after
  checking, atomically with the insert, that no user already holds an
  active registration for the event and that enough capacity is left.
- ``transition`` is a compare-and-set on the persisted status/payment status.
  The adapter derives the ``registered_count`` delta from
  ``holds_counted_spot`` before and after the write and applies it in the
  same atomic step.
"""

from collections.abc import Collection, Sequence
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Protocol
from uuid import UUID

from src.domain.entities.registration import Registration
from src.domain.enums import RegistrationPaymentStatus, RegistrationStatus


class AddOutcome(str, Enum):
    """Result of a guarded insert."""

    ADDED = "added"
    DUPLICATE_ACTIVE = "duplicate_active"
    NO_CAPACITY = "no_capacity"


@dataclass(frozen=True, slots=True, kw_only=True)
class RegistrationChange:
    """Field updates applied by ``transition``. None leaves a field as is."""

    status: RegistrationStatus | None = None
    payment_status: RegistrationPaymentStatus | None = None
    payment_id: UUID | None = None
    payment_window_started_at: datetime | None = None
    cancelled_at: datetime | None = None
    cancellation_reason: str | None = None


class RegistrationRepository(Protocol):
    """Registration persistence port."""

    async def find_by_id(self, registration_id: UUID) -> Registration | None:
        """Find registration by ID."""
        ...

    async def find_active_for_user(self, event_id: UUID, user_id: UUID) -> Registration | None:
        """The user's pending/confirmed/waitlisted registration for the event."""
        ...

    async def find_by_event(
        self,
        event_id: UUID,
        statuses: Collection[RegistrationStatus] | None = None,
    ) -> list[Registration]:
        """Registrations of an event ordered by (registration_date, id)."""
        ...

    async def find_by_team(self, team_id: UUID, event_id: UUID) -> list[Registration]:
        """Registrations of a team for an event, any status."""
        ...

    async def find_waitlisted(self, event_id: UUID, limit: int) -> list[Registration]:
        """Oldest ``limit`` waitlisted registrations, FIFO by
        (registration_date, id)."""
        ...

    async def find_event_ids_with_waitlist(self) -> list[UUID]:
        """Events having at least one waitlisted registration."""
        ...

    async def find_overdue_payments(self, cutoff: datetime) -> list[Registration]:
        """Pending registrations with payment due (pending or failed) whose
        payment window started strictly before ``cutoff``."""
        ...

    async def count_counted(self, event_id: UUID) -> int:
        """Registrations holding a counted spot (reconciliation oracle)."""
        ...

    async def count_awaiting_payment(self, event_id: UUID) -> int:
        """Pending registrations with payment due (pending or failed)."""
        ...

    async def count_active(self, event_id: UUID) -> int:
        """Pending, confirmed or waitlisted registrations."""
        ...

    async def add(
        self,
        registrations: Sequence[Registration],
        *,
        capacity: int | None,
    ) -> AddOutcome:
        """Insert registrations of one event, all or nothing.

        Args:
            registrations: New registrations (same event).
            capacity: Event capacity, None for unlimited. Registrations that
                will hold or reserve a spot need
                ``registered_count + awaiting_payment + n <= capacity``.

        Returns:
            ADDED, DUPLICATE_ACTIVE or NO_CAPACITY. Nothing is written
            unless ADDED.
        """
        ...

    async def transition(
        self,
        registration_id: UUID,
        *,
        expected_statuses: Collection[RegistrationStatus],
        change: RegistrationChange,
        expected_payment_statuses: Collection[RegistrationPaymentStatus] | None = None,
        capacity: int | None = None,
    ) -> Registration | None:
        """Compare-and-set update with counter maintenance.

        When ``capacity`` is given and the change makes the registration
        occupy a spot it did not occupy before, the write also requires
        ``registered_count + awaiting_payment < capacity``.

        Returns:
            The updated registration, or None if it does not exist, its
            persisted state did not match the expectations, or the capacity
            guard refused the write.
        """
        ...

    async def link_payment(
        self,
        registration_id: UUID,
        *,
        payment_id: UUID,
        previous_payment_id: UUID | None,
    ) -> Registration | None:
        """Point an awaiting-payment registration at a new pending payment.

        Compare-and-set on the stored ``payment_id``: the write happens only
        while it still equals ``previous_payment_id``, so of two concurrent
        initiations for the same registration exactly one is linked.

        Returns:
            The updated registration, or None if it is no longer awaiting
            payment or another payment was linked first.
        """
        ...

    async def update_progress(
        self,
        registration_id: UUID,
        *,
        current_round: int,
        advanced_to_rounds: list[int],
        eliminated_in_round: int | None,
    ) -> None:
        """Persist round progression fields only."""
        ...
