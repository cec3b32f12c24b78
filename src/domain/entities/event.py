"""Event domain entity.

Top-level schedulable activity with its own status lifecycle, optional
payment requirement, optional capacity and an ordered list of rounds.

Architecture:
    - Pure domain entity (no infrastructure dependencies)
    - Status changes go through ``attempt_transition`` (state_machine)
    - ``registered_count`` is a denormalized counter owned by the store;
      the entity never increments it

Usage:
    from uuid_extensions import uuid7
    from src.domain.entities import Event

    event = Event(
        organizer_id=organizer.id,
        title="Hackathon",
        event_type="competition",
        registration_deadline=deadline,
        start_date_time=start,
        end_date_time=end,
    )
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from decimal import Decimal
from typing import ClassVar
from uuid import UUID

from uuid_extensions import uuid7

from src.core.errors import ConflictError
from src.core.result import Failure, Result, Success
from src.domain.entities.round import Round
from src.domain.enums import ApprovalStatus, EventStatus, RoundStatus
from src.domain.errors import EventError
from src.domain.policies.capacity import spots_available
from src.domain.state_machine import EVENT_TRANSITIONS, TransitionTable, attempt_transition


@dataclass
class Event:
    """An event participants register for.

    Scheduling window:
        registration_deadline < start_date_time < end_date_time

    Capacity:
        ``max_participants`` None means unlimited. ``registered_count`` counts
        registrations holding a counted spot (see policies.capacity).

    Attributes:
        organizer_id: Owning organizer.
        title: Display title.
        event_type: Free-form category (competition, workshop, ...).
        registration_deadline: Registrations close after this instant.
        start_date_time: Event start.
        end_date_time: Event end.
        id: Unique identifier.
        description: Free text.
        status: Lifecycle status.
        approval_status: Administrative approval.
        is_paid: Whether registration requires payment.
        amount: Price per registration (paid events).
        currency: ISO currency code.
        max_participants: Capacity, None for unlimited.
        registered_count: Counted spots.
        min_team_size: Minimum team size (1 for solo).
        max_team_size: Maximum team size (1 for solo).
        requires_approval: Registrations wait for organizer approval.
        eligibility: Eligibility label.
        eligible_years: Study years allowed (1..5), empty for all.
        eligible_departments: Departments allowed, empty for all.
        allow_external_students: Whether external students may register.
        rounds: Ordered rounds (1-based numbering by position).
        current_round: Round number in progress (0 before the first).
        created_at: Record creation timestamp.
        updated_at: Last modification timestamp.
    """

    TRANSITIONS: ClassVar[TransitionTable[EventStatus]] = EVENT_TRANSITIONS

    organizer_id: UUID
    title: str
    event_type: str
    registration_deadline: datetime
    start_date_time: datetime
    end_date_time: datetime
    id: UUID = field(default_factory=uuid7)
    description: str = ""
    status: EventStatus = EventStatus.DRAFT
    approval_status: ApprovalStatus = ApprovalStatus.PENDING
    is_paid: bool = False
    amount: Decimal = Decimal("0")
    currency: str = "INR"
    max_participants: int | None = None
    registered_count: int = 0
    min_team_size: int = 1
    max_team_size: int = 1
    requires_approval: bool = False
    eligibility: str = "all"
    eligible_years: list[int] = field(default_factory=list)
    eligible_departments: list[str] = field(default_factory=list)
    allow_external_students: bool = False
    rounds: list[Round] = field(default_factory=list)
    current_round: int = 0
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __post_init__(self) -> None:
        """Validate event after initialization.

        Raises:
            ValueError: If construction values break an invariant.

        Note:
            Command handlers validate input first and return ValidationError;
            this only guards against programming errors.
        """
        if not self.title or not self.title.strip():
            raise ValueError(EventError.EMPTY_TITLE)
        if self.end_date_time <= self.start_date_time:
            raise ValueError(EventError.END_BEFORE_START)
        if self.registration_deadline >= self.start_date_time:
            raise ValueError(EventError.DEADLINE_NOT_BEFORE_START)
        if self.max_participants is not None and self.max_participants < 1:
            raise ValueError(EventError.INVALID_MAX_PARTICIPANTS)
        if self.registered_count < 0:
            raise ValueError(EventError.NEGATIVE_REGISTERED_COUNT)

    # -------------------------------------------------------------------------
    # Query Methods (Read-Only)
    # -------------------------------------------------------------------------

    def has_started(self, now: datetime) -> bool:
        """Start time reached (structural fields are locked from here)."""
        return now >= self.start_date_time

    def is_registration_open(self, now: datetime) -> bool:
        """Published and the deadline has not passed."""
        return self.status == EventStatus.PUBLISHED and now <= self.registration_deadline

    def is_unlimited(self) -> bool:
        """No capacity limit."""
        return self.max_participants is None

    def is_team_event(self) -> bool:
        """Registration must be done as a team."""
        return self.min_team_size > 1

    def allows_teams(self) -> bool:
        """Registration may be done as a team."""
        return self.max_team_size > 1

    def spots_available(self, awaiting_payment: int = 0) -> int | None:
        """Free spots, None when unlimited."""
        return spots_available(self.max_participants, self.registered_count, awaiting_payment)

    def is_due_to_start(self, now: datetime) -> bool:
        """Published event whose window contains ``now``."""
        return (
            self.status == EventStatus.PUBLISHED
            and self.start_date_time <= now < self.end_date_time
        )

    def is_due_to_complete(self, now: datetime) -> bool:
        """Ongoing event whose end has been reached."""
        return self.status == EventStatus.ONGOING and now >= self.end_date_time

    def has_due_rounds(self, now: datetime) -> bool:
        """Any round due to activate or complete."""
        return any(
            r.is_due_to_activate(now) or r.is_due_to_complete(now) for r in self.rounds
        )

    def round_by_number(self, number: int) -> Round | None:
        """Round by 1-based position, None if out of range."""
        if 1 <= number <= len(self.rounds):
            return self.rounds[number - 1]
        return None

    def round_by_id(self, round_id: UUID) -> Round | None:
        """Round by identifier."""
        return next((r for r in self.rounds if r.id == round_id), None)

    # -------------------------------------------------------------------------
    # State Transition Methods (Return Result)
    # -------------------------------------------------------------------------

    def transition_to(self, target: EventStatus, now: datetime) -> Result["Event", ConflictError]:
        """Apply a status transition through the event transition table."""
        return attempt_transition(self, target, now=now)

    def activate_due_rounds(self, now: datetime) -> list[Round]:
        """Move every due UPCOMING round to ACTIVE.

        Returns:
            Rounds that changed (empty if none were due).
        """
        changed = [
            r
            for r in self.rounds
            if r.is_due_to_activate(now)
            and isinstance(attempt_transition(r, RoundStatus.ACTIVE, now=now), Success)
        ]
        if changed:
            self.current_round = max(self.rounds.index(r) + 1 for r in changed)
            self.updated_at = now
        return changed

    def complete_due_rounds(self, now: datetime) -> list[Round]:
        """Move every due ACTIVE round to COMPLETED.

        Returns:
            Rounds that changed (empty if none were due).
        """
        changed = [
            r
            for r in self.rounds
            if r.is_due_to_complete(now)
            and isinstance(attempt_transition(r, RoundStatus.COMPLETED, now=now), Success)
        ]
        if changed:
            self.updated_at = now
        return changed

    def apply_changes(self, changes: dict[str, object], now: datetime) -> Result[None, str]:
        """Assign already validated field values.

        Returns:
            Success(None): Fields assigned.
            Failure(str): A field name is not an attribute of Event.
        """
        for name in changes:
            if not hasattr(self, name):
                return Failure(error=f"{EventError.UNKNOWN_FIELD}: {name}")
        for name, value in changes.items():
            setattr(self, name, value)
        self.updated_at = now
        return Success(value=None)
