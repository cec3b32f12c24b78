"""Event and round database models.

Rounds live in their own table keyed by (event_id, position). Each round row
is written on its own (insert, edit, status compare-and-set), so the sweep and
an organizer never overwrite each other's rounds.
"""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import JSON, Boolean, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.infrastructure.persistence.base import BaseMutableModel, UTCDateTime


class EventModel(BaseMutableModel):
    """Event row.

    Indexes:
        - idx_events_status_start: (status, start_date_time) for the start step
        - idx_events_status_end: (status, end_date_time) for the completion step
    """

    __tablename__ = "events"

    organizer_id: Mapped[UUID] = mapped_column(nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    event_type: Mapped[str] = mapped_column(String(50), nullable=False)

    registration_deadline: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    start_date_time: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    end_date_time: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        comment="draft, published, ongoing, completed, cancelled",
    )
    approval_status: Mapped[str] = mapped_column(String(20), nullable=False)

    is_paid: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    currency: Mapped[str] = mapped_column(String(3), nullable=False)

    max_participants: Mapped[int | None] = mapped_column(Integer, nullable=True)
    registered_count: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        comment="Registrations holding a counted spot (store-maintained)",
    )

    min_team_size: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    max_team_size: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    requires_approval: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    eligibility: Mapped[str] = mapped_column(String(50), nullable=False, default="all")
    eligible_years: Mapped[list[int]] = mapped_column(JSON, nullable=False, default=list)
    eligible_departments: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    allow_external_students: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )

    current_round: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    rounds: Mapped[list["EventRoundModel"]] = relationship(
        back_populates="event",
        order_by="EventRoundModel.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    __table_args__ = (
        Index("idx_events_status_start", "status", "start_date_time"),
        Index("idx_events_status_end", "status", "end_date_time"),
    )


class EventRoundModel(BaseMutableModel):
    """Round row (1-based ``position`` within its event)."""

    __tablename__ = "event_rounds"

    event_id: Mapped[UUID] = mapped_column(
        ForeignKey("events.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    start_date: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    end_date: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    max_participants: Mapped[int | None] = mapped_column(Integer, nullable=True)
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        comment="upcoming, active, completed",
    )

    event: Mapped[EventModel] = relationship(back_populates="rounds")

    __table_args__ = (
        Index("idx_event_rounds_event_position", "event_id", "position", unique=True),
    )
