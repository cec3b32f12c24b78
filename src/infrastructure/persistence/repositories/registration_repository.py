"""RegistrationRepository - SQLAlchemy implementation.

Adapter for hexagonal architecture.
Maps between domain Registration entity and RegistrationModel.

``add``, ``transition`` and ``link_payment`` lock the event row before
reading, so capacity checks, ``registered_count`` deltas and payment links
of one event never interleave. The partial unique index on active
(event_id, user_id) pairs backs the duplicate check.
"""

from collections.abc import Collection, Sequence
from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy import ColumnElement, func, select, update
from sqlalchemy.exc import IntegrityError

from src.domain.entities import Registration
from src.domain.enums import RegistrationPaymentStatus, RegistrationStatus
from src.domain.policies import holds_counted_spot, is_awaiting_payment, occupies_capacity
from src.domain.protocols import AddOutcome, RegistrationChange
from src.infrastructure.persistence.database import SessionFactory
from src.infrastructure.persistence.models import RegistrationModel
from src.infrastructure.persistence.repositories.queries import (
    active_clause,
    awaiting_clause,
    count_registrations,
    counted_clause,
    lock_event,
    shift_registered_count,
)

_FIFO = (RegistrationModel.registration_date, RegistrationModel.id)


class RegistrationRepository:
    """SQLAlchemy implementation of RegistrationRepository protocol.

    This class does NOT inherit from the protocol (Protocol uses structural typing).

    Example:
        >>> repo = RegistrationRepository(database.get_session)
        >>> outcome = await repo.add([registration], capacity=event.max_participants)
    """

    def __init__(self, session_factory: SessionFactory) -> None:
        self._session = session_factory

    async def find_by_id(self, registration_id: UUID) -> Registration | None:
        async with self._session() as session:
            model = await session.get(RegistrationModel, registration_id)
            return _to_domain(model) if model is not None else None

    async def find_active_for_user(self, event_id: UUID, user_id: UUID) -> Registration | None:
        found = await self._select(
            RegistrationModel.event_id == event_id,
            RegistrationModel.user_id == user_id,
            active_clause(),
        )
        return found[0] if found else None

    async def find_by_event(
        self,
        event_id: UUID,
        statuses: Collection[RegistrationStatus] | None = None,
    ) -> list[Registration]:
        criteria = [RegistrationModel.event_id == event_id]
        if statuses is not None:
            criteria.append(RegistrationModel.status.in_([s.value for s in statuses]))
        return await self._select(*criteria)

    async def find_by_team(self, team_id: UUID, event_id: UUID) -> list[Registration]:
        return await self._select(
            RegistrationModel.team_id == team_id,
            RegistrationModel.event_id == event_id,
        )

    async def find_waitlisted(self, event_id: UUID, limit: int) -> list[Registration]:
        return await self._select(
            RegistrationModel.event_id == event_id,
            RegistrationModel.status == RegistrationStatus.WAITLISTED.value,
            limit=limit,
        )

    async def find_event_ids_with_waitlist(self) -> list[UUID]:
        async with self._session() as session:
            stmt = (
                select(RegistrationModel.event_id)
                .where(RegistrationModel.status == RegistrationStatus.WAITLISTED.value)
                .group_by(RegistrationModel.event_id)
                .order_by(func.min(RegistrationModel.registration_date))
            )
            result = await session.execute(stmt)
            return list(result.scalars().all())

    async def find_overdue_payments(self, cutoff: datetime) -> list[Registration]:
        window_start = func.coalesce(
            RegistrationModel.payment_window_started_at,
            RegistrationModel.registration_date,
        )
        return await self._select(awaiting_clause(), window_start < cutoff)

    async def _select(
        self,
        *criteria: ColumnElement[bool],
        limit: int | None = None,
    ) -> list[Registration]:
        async with self._session() as session:
            stmt = select(RegistrationModel).where(*criteria).order_by(*_FIFO)
            if limit is not None:
                stmt = stmt.limit(limit)
            result = await session.execute(stmt)
            return [_to_domain(model) for model in result.scalars().all()]

    async def count_counted(self, event_id: UUID) -> int:
        async with self._session() as session:
            return await count_registrations(session, event_id, counted_clause())

    async def count_awaiting_payment(self, event_id: UUID) -> int:
        async with self._session() as session:
            return await count_registrations(session, event_id, awaiting_clause())

    async def count_active(self, event_id: UUID) -> int:
        async with self._session() as session:
            return await count_registrations(session, event_id, active_clause())

    async def add(
        self,
        registrations: Sequence[Registration],
        *,
        capacity: int | None,
    ) -> AddOutcome:
        if not registrations:
            return AddOutcome.ADDED
        event_id = registrations[0].event_id

        async with self._session() as session:
            registered = await lock_event(session, event_id)

            duplicates = await session.execute(
                select(RegistrationModel.id)
                .where(
                    RegistrationModel.event_id == event_id,
                    RegistrationModel.user_id.in_([r.user_id for r in registrations]),
                    active_clause(),
                )
                .limit(1)
            )
            if duplicates.first() is not None:
                return AddOutcome.DUPLICATE_ACTIVE

            occupying = sum(
                1 for r in registrations if occupies_capacity(r.status, r.payment_status)
            )
            if capacity is not None and occupying:
                awaiting = await count_registrations(session, event_id, awaiting_clause())
                if (registered or 0) + awaiting + occupying > capacity:
                    return AddOutcome.NO_CAPACITY

            session.add_all([_to_model(r) for r in registrations])
            try:
                await session.flush()
            except IntegrityError:
                await session.rollback()
                return AddOutcome.DUPLICATE_ACTIVE

            counted = sum(
                1 for r in registrations if holds_counted_spot(r.status, r.payment_status)
            )
            if registered is not None:
                await shift_registered_count(session, event_id, counted)
            return AddOutcome.ADDED

    async def transition(
        self,
        registration_id: UUID,
        *,
        expected_statuses: Collection[RegistrationStatus],
        change: RegistrationChange,
        expected_payment_statuses: Collection[RegistrationPaymentStatus] | None = None,
        capacity: int | None = None,
    ) -> Registration | None:
        async with self._session() as session:
            model = await session.get(RegistrationModel, registration_id)
            if model is None:
                return None
            registered = await lock_event(session, model.event_id)
            await session.refresh(model, with_for_update=True)

            before_status = RegistrationStatus(model.status)
            before_payment = RegistrationPaymentStatus(model.payment_status)
            if before_status not in expected_statuses:
                return None
            if (
                expected_payment_statuses is not None
                and before_payment not in expected_payment_statuses
            ):
                return None

            status = change.status or before_status
            payment_status = change.payment_status or before_payment
            if (
                capacity is not None
                and occupies_capacity(status, payment_status)
                and not occupies_capacity(before_status, before_payment)
            ):
                awaiting = await count_registrations(session, model.event_id, awaiting_clause())
                if (registered or 0) + awaiting >= capacity:
                    return None

            model.status = status.value
            model.payment_status = payment_status.value
            if change.payment_id is not None:
                model.payment_id = change.payment_id
            if change.payment_window_started_at is not None:
                model.payment_window_started_at = change.payment_window_started_at
            if change.cancelled_at is not None:
                model.cancelled_at = change.cancelled_at
            if change.cancellation_reason is not None:
                model.cancellation_reason = change.cancellation_reason
            model.updated_at = datetime.now(UTC)

            delta = int(holds_counted_spot(status, payment_status)) - int(
                holds_counted_spot(before_status, before_payment)
            )
            if registered is not None:
                await shift_registered_count(session, model.event_id, delta)
            await session.flush()
            return _to_domain(model)

    async def link_payment(
        self,
        registration_id: UUID,
        *,
        payment_id: UUID,
        previous_payment_id: UUID | None,
    ) -> Registration | None:
        async with self._session() as session:
            model = await session.get(RegistrationModel, registration_id)
            if model is None:
                return None
            await lock_event(session, model.event_id)
            await session.refresh(model, with_for_update=True)

            awaiting = is_awaiting_payment(
                RegistrationStatus(model.status),
                RegistrationPaymentStatus(model.payment_status),
            )
            if not awaiting or model.payment_id != previous_payment_id:
                return None
            model.payment_id = payment_id
            model.payment_status = RegistrationPaymentStatus.PENDING.value
            model.updated_at = datetime.now(UTC)
            await session.flush()
            return _to_domain(model)

    async def update_progress(
        self,
        registration_id: UUID,
        *,
        current_round: int,
        advanced_to_rounds: list[int],
        eliminated_in_round: int | None,
    ) -> None:
        async with self._session() as session:
            await session.execute(
                update(RegistrationModel)
                .where(RegistrationModel.id == registration_id)
                .values(
                    current_round=current_round,
                    advanced_to_rounds=list(advanced_to_rounds),
                    eliminated_in_round=eliminated_in_round,
                    updated_at=datetime.now(UTC),
                )
            )


def _to_model(registration: Registration) -> RegistrationModel:
    return RegistrationModel(
        id=registration.id,
        event_id=registration.event_id,
        user_id=registration.user_id,
        team_id=registration.team_id,
        registration_number=registration.registration_number,
        registration_date=registration.registration_date,
        status=registration.status.value,
        payment_status=registration.payment_status.value,
        payment_id=registration.payment_id,
        payment_window_started_at=registration.payment_window_started_at,
        cancelled_at=registration.cancelled_at,
        cancellation_reason=registration.cancellation_reason,
        current_round=registration.current_round,
        eliminated_in_round=registration.eliminated_in_round,
        advanced_to_rounds=list(registration.advanced_to_rounds),
        created_at=registration.created_at,
        updated_at=registration.updated_at,
    )


def _to_domain(model: RegistrationModel) -> Registration:
    return Registration(
        id=model.id,
        event_id=model.event_id,
        user_id=model.user_id,
        team_id=model.team_id,
        registration_number=model.registration_number,
        registration_date=model.registration_date,
        status=RegistrationStatus(model.status),
        payment_status=RegistrationPaymentStatus(model.payment_status),
        payment_id=model.payment_id,
        payment_window_started_at=model.payment_window_started_at,
        cancelled_at=model.cancelled_at,
        cancellation_reason=model.cancellation_reason,
        current_round=model.current_round,
        eliminated_in_round=model.eliminated_in_round,
        advanced_to_rounds=list(model.advanced_to_rounds or []),
        created_at=model.created_at,
        updated_at=model.updated_at,
    )
