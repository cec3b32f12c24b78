"""SQL building blocks shared by the lifecycle repositories.

The counting predicates mirror ``src.domain.policies.capacity`` so the
database and the domain agree on what holds or reserves a spot.
"""

from uuid import UUID

from sqlalchemy import ColumnElement, and_, case, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.domain.enums import RegistrationStatus
from src.domain.policies import PAYMENT_DUE_STATES
from src.infrastructure.persistence.models import EventModel, RegistrationModel

_DUE = [state.value for state in PAYMENT_DUE_STATES]


def counted_clause() -> ColumnElement[bool]:
    """Registration holds a counted spot."""
    return or_(
        RegistrationModel.status == RegistrationStatus.CONFIRMED.value,
        and_(
            RegistrationModel.status == RegistrationStatus.PENDING.value,
            RegistrationModel.payment_status.not_in(_DUE),
        ),
    )


def awaiting_clause() -> ColumnElement[bool]:
    """Registration reserves a spot while its payment is due."""
    return and_(
        RegistrationModel.status == RegistrationStatus.PENDING.value,
        RegistrationModel.payment_status.in_(_DUE),
    )


def active_clause() -> ColumnElement[bool]:
    """Registration is pending, confirmed or waitlisted."""
    return RegistrationModel.status.in_(
        [status.value for status in RegistrationStatus.active_states()]
    )


async def count_registrations(
    session: AsyncSession,
    event_id: UUID,
    clause: ColumnElement[bool],
) -> int:
    stmt = (
        select(func.count())
        .select_from(RegistrationModel)
        .where(RegistrationModel.event_id == event_id, clause)
    )
    return (await session.execute(stmt)).scalar_one()


async def lock_event(session: AsyncSession, event_id: UUID) -> int | None:
    """Lock the event row for the rest of the transaction.

    Every write that changes ``registered_count`` takes this lock first, so
    capacity checks and counter deltas for one event are serialized.

    Returns:
        Current ``registered_count``, or None if the event does not exist.
    """
    stmt = (
        select(EventModel.registered_count)
        .where(EventModel.id == event_id)
        .with_for_update()
    )
    return (await session.execute(stmt)).scalar_one_or_none()


async def shift_registered_count(session: AsyncSession, event_id: UUID, delta: int) -> None:
    """Add ``delta`` to ``registered_count`` in SQL, never going below zero."""
    if not delta:
        return
    shifted = EventModel.registered_count + delta
    await session.execute(
        update(EventModel)
        .where(EventModel.id == event_id)
        .values(registered_count=case((shifted < 0, 0), else_=shifted))
    )
