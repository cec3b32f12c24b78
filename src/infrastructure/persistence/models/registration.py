"""Registration database model.

Indexes:
    - idx_registrations_one_active: partial unique index on (event_id,
      user_id) over pending/confirmed/waitlisted rows. Backs the
      one-active-registration rule at the database level.
    - idx_registrations_event_status_date: (event_id, status,
      registration_date) for FIFO waitlist reads and counting
    - idx_registrations_payment_window: (status, payment_status,
      payment_window_started_at) for the payment timeout step
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import JSON, ForeignKey, Index, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column

from src.infrastructure.persistence.base import BaseMutableModel, UTCDateTime

_ACTIVE_PREDICATE = text("status IN ('pending', 'confirmed', 'waitlisted')")


class RegistrationModel(BaseMutableModel):
    """Registration row."""

    __tablename__ = "registrations"

    event_id: Mapped[UUID] = mapped_column(
        ForeignKey("events.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id: Mapped[UUID] = mapped_column(nullable=False, index=True)
    team_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("teams.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    registration_number: Mapped[str] = mapped_column(String(30), nullable=False, unique=True)
    registration_date: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        comment="pending, confirmed, waitlisted, cancelled, rejected",
    )
    payment_status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        comment="not_required, pending, paid, refund_pending, refunded, failed",
    )
    payment_id: Mapped[UUID | None] = mapped_column(nullable=True)
    payment_window_started_at: Mapped[datetime | None] = mapped_column(
        UTCDateTime, nullable=True
    )

    cancelled_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    cancellation_reason: Mapped[str | None] = mapped_column(String(500), nullable=True)

    current_round: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    eliminated_in_round: Mapped[int | None] = mapped_column(Integer, nullable=True)
    advanced_to_rounds: Mapped[list[int]] = mapped_column(JSON, nullable=False, default=list)

    __table_args__ = (
        Index(
            "idx_registrations_one_active",
            "event_id",
            "user_id",
            unique=True,
            postgresql_where=_ACTIVE_PREDICATE,
            sqlite_where=_ACTIVE_PREDICATE,
        ),
        Index(
            "idx_registrations_event_status_date",
            "event_id",
            "status",
            "registration_date",
        ),
        Index(
            "idx_registrations_payment_window",
            "status",
            "payment_status",
            "payment_window_started_at",
        ),
    )
