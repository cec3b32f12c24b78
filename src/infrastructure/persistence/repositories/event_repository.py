"""EventRepository - SQLAlchemy implementation.

Adapter for hexagonal architecture.
Maps between domain Event/Round entities and EventModel/EventRoundModel.

Writes are split by owner:
    - save: organizer-editable fields (insert writes everything)
    - add_round / update_round: one round row (round handlers)
    - transition_round: one round status, compare-and-set (the sweep)
    - transition_status: status, compare-and-set
    - recount: registered_count, under the event row lock
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import ColumnElement, and_, func, or_, select, update

from src.domain.entities import Event, Round
from src.domain.enums import ApprovalStatus, EventStatus, RoundStatus
from src.domain.validators import EDITABLE_FIELDS
from src.infrastructure.persistence.database import SessionFactory
from src.infrastructure.persistence.models import EventModel, EventRoundModel
from src.infrastructure.persistence.repositories.queries import (
    count_registrations,
    counted_clause,
    lock_event,
)


class EventRepository:
    """SQLAlchemy implementation of EventRepository protocol.

    This class does NOT inherit from the protocol (Protocol uses structural typing).
    Each method runs in its own transaction.

    Example:
        >>> repo = EventRepository(database.get_session)
        >>> event = await repo.find_by_id(event_id)
    """

    def __init__(self, session_factory: SessionFactory) -> None:
        """Initialize repository with a session factory.

        Args:
            session_factory: Opens one transactional session per call.
        """
        self._session = session_factory

    async def find_by_id(self, event_id: UUID) -> Event | None:
        """Find event by ID, rounds included."""
        async with self._session() as session:
            model = await session.get(EventModel, event_id)
            return _to_domain(model) if model is not None else None

    async def find_ids(self) -> list[UUID]:
        async with self._session() as session:
            result = await session.execute(select(EventModel.id).order_by(EventModel.id))
            return list(result.scalars().all())

    async def find_due_to_start(self, now: datetime) -> list[Event]:
        return await self._select(
            EventModel.status == EventStatus.PUBLISHED.value,
            EventModel.start_date_time <= now,
            EventModel.end_date_time > now,
        )

    async def find_due_to_complete(self, now: datetime) -> list[Event]:
        return await self._select(
            EventModel.status == EventStatus.ONGOING.value,
            EventModel.end_date_time <= now,
        )

    async def find_with_due_rounds(self, now: datetime) -> list[Event]:
        due = select(EventRoundModel.event_id).where(
            or_(
                and_(
                    EventRoundModel.status == RoundStatus.UPCOMING.value,
                    EventRoundModel.start_date <= now,
                ),
                and_(
                    EventRoundModel.status == RoundStatus.ACTIVE.value,
                    EventRoundModel.end_date <= now,
                ),
            )
        )
        return await self._select(EventModel.id.in_(due))

    async def _select(self, *criteria: ColumnElement[bool]) -> list[Event]:
        async with self._session() as session:
            stmt = (
                select(EventModel)
                .where(*criteria)
                .order_by(EventModel.start_date_time, EventModel.id)
            )
            result = await session.execute(stmt)
            return [_to_domain(model) for model in result.scalars().all()]

    async def save(self, event: Event) -> None:
        """Create an event, or update its organizer-editable fields."""
        async with self._session() as session:
            model = await session.get(EventModel, event.id)
            if model is None:
                session.add(_to_model(event))
                return
            for name in EDITABLE_FIELDS:
                value = getattr(event, name)
                setattr(model, name, list(value) if isinstance(value, list) else value)
            model.approval_status = event.approval_status.value
            model.updated_at = event.updated_at

    async def add_round(self, event_id: UUID, round_: Round) -> int | None:
        """Insert one round row at the next position, under the event lock."""
        async with self._session() as session:
            if await lock_event(session, event_id) is None:
                return None
            last = await session.execute(
                select(func.coalesce(func.max(EventRoundModel.position), 0)).where(
                    EventRoundModel.event_id == event_id
                )
            )
            position = last.scalar_one() + 1
            round_model = EventRoundModel(id=round_.id, event_id=event_id)
            _fill_round(round_model, round_, position)
            session.add(round_model)
            await session.execute(
                update(EventModel)
                .where(EventModel.id == event_id)
                .values(updated_at=round_.updated_at)
            )
            return position

    async def update_round(
        self,
        event_id: UUID,
        round_: Round,
        *,
        expected_status: RoundStatus,
    ) -> bool:
        async with self._session() as session:
            stmt = (
                update(EventRoundModel)
                .where(
                    EventRoundModel.id == round_.id,
                    EventRoundModel.event_id == event_id,
                    EventRoundModel.status == expected_status.value,
                )
                .values(
                    name=round_.name,
                    description=round_.description,
                    start_date=round_.start_date,
                    end_date=round_.end_date,
                    max_participants=round_.max_participants,
                    updated_at=round_.updated_at,
                )
            )
            result = await session.execute(stmt)
            return result.rowcount == 1

    async def transition_round(
        self,
        event_id: UUID,
        round_id: UUID,
        *,
        expected: RoundStatus,
        target: RoundStatus,
        now: datetime,
    ) -> bool:
        async with self._session() as session:
            stmt = (
                update(EventRoundModel)
                .where(
                    EventRoundModel.id == round_id,
                    EventRoundModel.event_id == event_id,
                    EventRoundModel.status == expected.value,
                )
                .values(status=target.value, updated_at=now)
                .returning(EventRoundModel.position)
            )
            position = (await session.execute(stmt)).scalar_one_or_none()
            if position is None:
                return False
            if target == RoundStatus.ACTIVE:
                await session.execute(
                    update(EventModel)
                    .where(EventModel.id == event_id, EventModel.current_round < position)
                    .values(current_round=position)
                )
            return True

    async def transition_status(
        self,
        event_id: UUID,
        *,
        expected: EventStatus,
        target: EventStatus,
        now: datetime,
    ) -> bool:
        async with self._session() as session:
            stmt = (
                update(EventModel)
                .where(EventModel.id == event_id, EventModel.status == expected.value)
                .values(status=target.value, updated_at=now)
            )
            result = await session.execute(stmt)
            return result.rowcount == 1

    async def recount(self, event_id: UUID) -> tuple[int, int] | None:
        async with self._session() as session:
            previous = await lock_event(session, event_id)
            if previous is None:
                return None
            current = await count_registrations(session, event_id, counted_clause())
            if current != previous:
                await session.execute(
                    update(EventModel)
                    .where(EventModel.id == event_id)
                    .values(registered_count=current)
                )
            return previous, current

    async def delete(self, event_id: UUID) -> None:
        async with self._session() as session:
            model = await session.get(EventModel, event_id)
            if model is not None:
                await session.delete(model)


def _fill_round(model: EventRoundModel, round_: Round, position: int) -> None:
    model.position = position
    model.name = round_.name
    model.description = round_.description
    model.start_date = round_.start_date
    model.end_date = round_.end_date
    model.max_participants = round_.max_participants
    model.status = round_.status.value
    model.updated_at = round_.updated_at


def _to_model(event: Event) -> EventModel:
    model = EventModel(
        id=event.id,
        organizer_id=event.organizer_id,
        title=event.title,
        description=event.description,
        event_type=event.event_type,
        registration_deadline=event.registration_deadline,
        start_date_time=event.start_date_time,
        end_date_time=event.end_date_time,
        status=event.status.value,
        approval_status=event.approval_status.value,
        is_paid=event.is_paid,
        amount=event.amount,
        currency=event.currency,
        max_participants=event.max_participants,
        registered_count=event.registered_count,
        min_team_size=event.min_team_size,
        max_team_size=event.max_team_size,
        requires_approval=event.requires_approval,
        eligibility=event.eligibility,
        eligible_years=list(event.eligible_years),
        eligible_departments=list(event.eligible_departments),
        allow_external_students=event.allow_external_students,
        current_round=event.current_round,
        created_at=event.created_at,
        updated_at=event.updated_at,
        rounds=[],
    )
    for position, round_ in enumerate(event.rounds, start=1):
        round_model = EventRoundModel(id=round_.id, event_id=event.id)
        _fill_round(round_model, round_, position)
        model.rounds.append(round_model)
    return model


def _to_domain(model: EventModel) -> Event:
    return Event(
        id=model.id,
        organizer_id=model.organizer_id,
        title=model.title,
        description=model.description,
        event_type=model.event_type,
        registration_deadline=model.registration_deadline,
        start_date_time=model.start_date_time,
        end_date_time=model.end_date_time,
        status=EventStatus(model.status),
        approval_status=ApprovalStatus(model.approval_status),
        is_paid=model.is_paid,
        amount=model.amount,
        currency=model.currency,
        max_participants=model.max_participants,
        registered_count=model.registered_count,
        min_team_size=model.min_team_size,
        max_team_size=model.max_team_size,
        requires_approval=model.requires_approval,
        eligibility=model.eligibility,
        eligible_years=list(model.eligible_years or []),
        eligible_departments=list(model.eligible_departments or []),
        allow_external_students=model.allow_external_students,
        rounds=[
            Round(
                id=r.id,
                name=r.name,
                description=r.description,
                start_date=r.start_date,
                end_date=r.end_date,
                max_participants=r.max_participants,
                status=RoundStatus(r.status),
                updated_at=r.updated_at,
            )
            for r in model.rounds
        ],
        current_round=model.current_round,
        created_at=model.created_at,
        updated_at=model.updated_at,
    )
