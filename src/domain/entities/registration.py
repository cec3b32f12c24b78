"""Registration domain entity.

Links one user (optionally as a member of a team) to one event. A
registration is never deleted; it ends in CANCELLED or REJECTED, after which
the same user may register again.

Status changes on persisted registrations happen through the repository's
compare-and-set ``transition`` so the capacity counter moves in the same
atomic step. The entity methods here build new registrations and answer
questions about them.
"""

import secrets
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import ClassVar
from uuid import UUID

from uuid_extensions import uuid7

from src.domain.enums import RegistrationPaymentStatus, RegistrationStatus
from src.domain.policies.capacity import holds_counted_spot, is_awaiting_payment
from src.domain.state_machine import REGISTRATION_TRANSITIONS, TransitionTable


def generate_registration_number(now: datetime) -> str:
    """Human-readable registration number.

    Format: ``REG-{year}-{last 6 digits of epoch millis}{4 random digits}``.
    """
    millis = int(now.timestamp() * 1000)
    return f"REG-{now.year}-{millis % 1_000_000:06d}{secrets.randbelow(10_000):04d}"


@dataclass
class Registration:
    """A user's enrollment in an event.

    Attributes:
        event_id: Event registered for.
        user_id: Registered user.
        registration_date: When the registration was created (FIFO key).
        status: Lifecycle status.
        payment_status: Payment state for this registration.
        id: Unique identifier (FIFO tie-breaker).
        registration_number: Human-readable number.
        team_id: Team the user registered with, if any.
        payment_id: Latest payment attempt.
        payment_window_started_at: Start of the current payment window;
            equals ``registration_date`` for new registrations and is reset
            when a waitlisted registration is promoted.
        cancelled_at: When the registration was cancelled.
        cancellation_reason: Why it was cancelled.
        current_round: Round the participant is in (0 before progression).
        eliminated_in_round: Round the participant was eliminated in.
        advanced_to_rounds: Rounds the participant advanced to.
        created_at: Record creation timestamp.
        updated_at: Last modification timestamp.
    """

    TRANSITIONS: ClassVar[TransitionTable[RegistrationStatus]] = REGISTRATION_TRANSITIONS

    event_id: UUID
    user_id: UUID
    registration_date: datetime
    status: RegistrationStatus
    payment_status: RegistrationPaymentStatus
    id: UUID = field(default_factory=uuid7)
    registration_number: str = ""
    team_id: UUID | None = None
    payment_id: UUID | None = None
    payment_window_started_at: datetime | None = None
    cancelled_at: datetime | None = None
    cancellation_reason: str | None = None
    current_round: int = 0
    eliminated_in_round: int | None = None
    advanced_to_rounds: list[int] = field(default_factory=list)
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __post_init__(self) -> None:
        """Fill derived defaults."""
        if not self.registration_number:
            self.registration_number = generate_registration_number(self.registration_date)
        if (
            self.payment_window_started_at is None
            and self.payment_status == RegistrationPaymentStatus.PENDING
        ):
            self.payment_window_started_at = self.registration_date

    # -------------------------------------------------------------------------
    # Query Methods (Read-Only)
    # -------------------------------------------------------------------------

    def is_active(self) -> bool:
        """Pending, confirmed or waitlisted."""
        return self.status in RegistrationStatus.active_states()

    def holds_counted_spot(self) -> bool:
        """Included in the event's ``registered_count``."""
        return holds_counted_spot(self.status, self.payment_status)

    def is_awaiting_payment(self) -> bool:
        """Pending with payment still due."""
        return is_awaiting_payment(self.status, self.payment_status)

    def is_payment_overdue(self, now: datetime, window: timedelta) -> bool:
        """Awaiting payment for longer than ``window``; exactly ``window`` is not yet overdue."""
        started = self.payment_window_started_at or self.registration_date
        return self.is_awaiting_payment() and started < now - window

    def is_eliminated(self) -> bool:
        """Eliminated in some round."""
        return self.eliminated_in_round is not None
