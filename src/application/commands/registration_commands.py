"""Registration commands (CQRS write operations)."""

from dataclasses import dataclass
from uuid import UUID

from src.domain.value_objects import Actor


@dataclass(frozen=True, kw_only=True)
class RegisterForEvent:
    """Register the actor (solo) or the actor's team for an event.

    Attributes:
        actor: Registering user (the team leader for team events).
        event_id: Event to register for.
        team_id: Locked team of the same event, for team events.
        join_waitlist: When the event is full, create waitlisted
            registrations instead of failing.
    """

    actor: Actor
    event_id: UUID
    team_id: UUID | None = None
    join_waitlist: bool = False


@dataclass(frozen=True, kw_only=True)
class CancelRegistration:
    """Cancel a registration (owner or event manager)."""

    actor: Actor
    registration_id: UUID
    reason: str | None = None


@dataclass(frozen=True, kw_only=True)
class ApproveRegistration:
    """Confirm a pending registration that is not waiting for payment."""

    actor: Actor
    registration_id: UUID


@dataclass(frozen=True, kw_only=True)
class RejectRegistration:
    """Reject a pending, waitlisted or confirmed registration."""

    actor: Actor
    registration_id: UUID
    reason: str | None = None
