"""Round domain entity.

A time-boxed phase of a multi-stage event (preliminary, final, ...). Rounds
are embedded in their Event and persisted with it. Their status moves only
forward and only with time, driven by the scheduler sweep.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import ClassVar
from uuid import UUID

from uuid_extensions import uuid7

from src.domain.enums import RoundStatus
from src.domain.errors import EventError
from src.domain.state_machine import ROUND_TRANSITIONS, TransitionTable


@dataclass
class Round:
    """One round of an event.

    Attributes:
        name: Display name.
        start_date: Round start (inside the event window).
        end_date: Round end (inside the event window, after start).
        id: Unique identifier.
        description: Free text.
        max_participants: Optional cap for the round.
        status: Current status.
        updated_at: Last status change.
    """

    TRANSITIONS: ClassVar[TransitionTable[RoundStatus]] = ROUND_TRANSITIONS

    name: str
    start_date: datetime
    end_date: datetime
    id: UUID = field(default_factory=uuid7)
    description: str = ""
    max_participants: int | None = None
    status: RoundStatus = RoundStatus.UPCOMING
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __post_init__(self) -> None:
        """Validate round after initialization.

        Raises:
            ValueError: Empty name or end not after start.
        """
        if not self.name or not self.name.strip():
            raise ValueError("Round name is required")
        if self.end_date <= self.start_date:
            raise ValueError(EventError.ROUND_END_BEFORE_START)

    def is_due_to_activate(self, now: datetime) -> bool:
        """Upcoming round whose start has been reached."""
        return self.status == RoundStatus.UPCOMING and now >= self.start_date

    def is_due_to_complete(self, now: datetime) -> bool:
        """Active round whose end has been reached."""
        return self.status == RoundStatus.ACTIVE and now >= self.end_date
