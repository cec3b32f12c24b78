"""Team database model."""

from uuid import UUID

from sqlalchemy import JSON, Boolean, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from src.infrastructure.persistence.base import BaseMutableModel


class TeamModel(BaseMutableModel):
    """Team row. ``member_ids`` holds UUID strings, leader first."""

    __tablename__ = "teams"

    event_id: Mapped[UUID] = mapped_column(
        ForeignKey("events.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    leader_id: Mapped[UUID] = mapped_column(nullable=False)
    max_size: Mapped[int] = mapped_column(Integer, nullable=False)
    member_ids: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    invite_code: Mapped[str] = mapped_column(String(6), nullable=False, unique=True)
    round: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    eliminated: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
