"""EventRepository protocol (port).

Port (interface) for hexagonal architecture. Infrastructure provides the
in-memory and SQLAlchemy adapters.

Fields with a dedicated write path are never touched by ``save`` on an
existing event: ``registered_count`` belongs to the registration store,
``status`` changes through ``transition_status`` (compare-and-set) and rounds
through ``add_round``, ``update_round`` and ``transition_round``, which each
write a single round row.
"""

from datetime import datetime
from typing import Protocol
from uuid import UUID

from src.domain.entities.event import Event
from src.domain.entities.round import Round
from src.domain.enums import EventStatus, RoundStatus


class EventRepository(Protocol):
    """Event persistence port.

    Methods:
        find_by_id: Load one event with its rounds
        find_ids: All event identifiers
        find_due_to_start / find_due_to_complete / find_with_due_rounds:
            scheduler candidate queries
        save: Create, or update the organizer-editable fields
        add_round / update_round: Write a single round row
        transition_round: Compare-and-set round status change
        transition_status: Compare-and-set status change
        recount: Recompute counter from registrations (reconciliation only)
        delete: Remove an event
    """

    async def find_by_id(self, event_id: UUID) -> Event | None:
        """Find event by ID.

        Args:
            event_id: Event identifier.

        Returns:
            Event with rounds if found, None otherwise.
        """
        ...

    async def find_ids(self) -> list[UUID]:
        """Return identifiers of every event."""
        ...

    async def find_due_to_start(self, now: datetime) -> list[Event]:
        """Published events with ``start <= now < end``."""
        ...

    async def find_due_to_complete(self, now: datetime) -> list[Event]:
        """Ongoing events with ``end <= now``."""
        ...

    async def find_with_due_rounds(self, now: datetime) -> list[Event]:
        """Events having an upcoming round with ``start <= now`` or an active
        round with ``end <= now``."""
        ...

    async def save(self, event: Event) -> None:
        """Create an event, or update its organizer-editable fields.

        ``status``, ``registered_count``, ``rounds`` and ``current_round`` are
        written on insert only.
        """
        ...

    async def add_round(self, event_id: UUID, round_: Round) -> int | None:
        """Append one round after the event's existing rounds.

        Other rounds are left untouched, so a concurrent sweep or edit is
        never overwritten.

        Returns:
            The new round's 1-based number, or None if the event is missing.
        """
        ...

    async def update_round(
        self,
        event_id: UUID,
        round_: Round,
        *,
        expected_status: RoundStatus,
    ) -> bool:
        """Write a round's name, description, window and cap.

        Applied only if the stored round still has ``expected_status``;
        ``status`` itself is never written here.

        Returns:
            True if the round was updated, False otherwise.
        """
        ...

    async def transition_round(
        self,
        event_id: UUID,
        round_id: UUID,
        *,
        expected: RoundStatus,
        target: RoundStatus,
        now: datetime,
    ) -> bool:
        """Set a round's ``status = target`` only if it is ``expected``.

        Activating a round also raises the event's ``current_round`` to the
        round's number when it is lower, in the same atomic step.

        Returns:
            True if this call changed the status, False otherwise.
        """
        ...

    async def transition_status(
        self,
        event_id: UUID,
        *,
        expected: EventStatus,
        target: EventStatus,
        now: datetime,
    ) -> bool:
        """Set ``status = target`` only if the stored status is ``expected``.

        Returns:
            True if this call changed the status, False otherwise.
        """
        ...

    async def recount(self, event_id: UUID) -> tuple[int, int] | None:
        """Recompute ``registered_count`` from the registration set.

        Count and write happen in one atomic step so no concurrent counter
        delta is lost.

        Returns:
            (previous, current) counter values, or None if the event is missing.
        """
        ...

    async def delete(self, event_id: UUID) -> None:
        """Remove an event."""
        ...
