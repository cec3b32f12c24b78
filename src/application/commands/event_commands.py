"""Event and round commands (CQRS write operations).

Commands represent organizer intent to change event state.
All commands are immutable (frozen=True) and use keyword-only arguments
(kw_only=True). Every command carries the acting caller; handlers check
capability and ownership before touching state.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from src.domain.value_objects import Actor


@dataclass(frozen=True, kw_only=True)
class RoundSpec:
    """Round definition supplied when creating or adding rounds.

    Attributes:
        name: Display name.
        start_date: Round start.
        end_date: Round end.
        description: Free text.
        max_participants: Optional cap for the round.
    """

    name: str
    start_date: datetime
    end_date: datetime
    description: str = ""
    max_participants: int | None = None


@dataclass(frozen=True, kw_only=True)
class CreateEvent:
    """Create a draft event owned by the actor.

    Example:
        >>> command = CreateEvent(
        ...     actor=organizer,
        ...     title="Hackathon",
        ...     event_type="competition",
        ...     registration_deadline=deadline,
        ...     start_date_time=start,
        ...     end_date_time=end,
        ...     max_participants=100,
        ... )
        >>> result = await handler.handle(command)
    """

    actor: Actor
    title: str
    event_type: str
    registration_deadline: datetime
    start_date_time: datetime
    end_date_time: datetime
    description: str = ""
    max_participants: int | None = None
    is_paid: bool = False
    amount: Decimal = Decimal("0")
    currency: str | None = None
    min_team_size: int = 1
    max_team_size: int = 1
    requires_approval: bool = False
    eligibility: str = "all"
    eligible_years: tuple[int, ...] = ()
    eligible_departments: tuple[str, ...] = ()
    allow_external_students: bool = False
    rounds: tuple[RoundSpec, ...] = ()


@dataclass(frozen=True, kw_only=True)
class UpdateEvent:
    """Edit event fields.

    Attributes:
        actor: Organizer or event manager.
        event_id: Event to edit.
        changes: Field name to new value. Unchanged values (lists compared
            ignoring order) are not treated as edits.
    """

    actor: Actor
    event_id: UUID
    changes: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, kw_only=True)
class PublishEvent:
    """Move a draft event to published."""

    actor: Actor
    event_id: UUID


@dataclass(frozen=True, kw_only=True)
class CancelEvent:
    """Cancel an event from any non-terminal status."""

    actor: Actor
    event_id: UUID
    reason: str | None = None


@dataclass(frozen=True, kw_only=True)
class DeleteEvent:
    """Delete an event with no active registrations."""

    actor: Actor
    event_id: UUID


@dataclass(frozen=True, kw_only=True)
class AddRound:
    """Append a round to an event."""

    actor: Actor
    event_id: UUID
    round: RoundSpec


@dataclass(frozen=True, kw_only=True)
class UpdateRound:
    """Edit an upcoming round.

    Attributes:
        round_id: Round to edit.
        name/description/start_date/end_date/max_participants: New values,
            None keeps the current value.
    """

    actor: Actor
    event_id: UUID
    round_id: UUID
    name: str | None = None
    description: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    max_participants: int | None = None


@dataclass(frozen=True, kw_only=True)
class AdvanceParticipants:
    """Advance chosen registrations from round ``from_round`` to the next.

    Confirmed, non-eliminated registrations in ``from_round`` that are not
    selected are eliminated in ``from_round``.
    """

    actor: Actor
    event_id: UUID
    from_round: int
    registration_ids: frozenset[UUID]
