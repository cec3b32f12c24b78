"""In-memory lifecycle store.

Single-process store used by tests and the ``memory`` storage backend.
Every repository call runs under one ``asyncio.Lock`` shared by all
repositories of the store, which makes each call atomic with respect to the
others: a compare-and-set and the counter delta it licenses are applied
together, and a capacity check and the insert it guards cannot interleave
with another writer.

Entities are deep-copied on the way in and out, so callers never mutate
stored state by accident and a stale copy behaves like a stale database row.

Usage:
    store = InMemoryLifecycleStore()
    repos = store.repositories()
    await repos.events.save(event)
"""

import asyncio
from collections.abc import Callable, Collection, Sequence
from copy import deepcopy
from dataclasses import replace
from datetime import UTC, datetime
from uuid import UUID

from src.domain.entities import Event, Invoice, Payment, Refund, Registration, Round, Team
from src.domain.enums import (
    EventStatus,
    PaymentStatus,
    RefundStatus,
    RegistrationPaymentStatus,
    RegistrationStatus,
    RoundStatus,
    TeamStatus,
)
from src.domain.policies import holds_counted_spot, is_awaiting_payment, occupies_capacity
from src.domain.protocols import AddOutcome, RegistrationChange, Repositories
from src.domain.validators import EDITABLE_FIELDS


def _fifo_key(registration: Registration) -> tuple[datetime, UUID]:
    return (registration.registration_date, registration.id)


class InMemoryLifecycleStore:
    """Shared state and lock behind the in-memory repositories.

    Attributes:
        lock: Serializes every repository call.
        events / registrations / teams / payments / refunds / invoices:
            Stored entities by id.
    """

    def __init__(self) -> None:
        self.lock = asyncio.Lock()
        self.events: dict[UUID, Event] = {}
        self.registrations: dict[UUID, Registration] = {}
        self.teams: dict[UUID, Team] = {}
        self.payments: dict[UUID, Payment] = {}
        self.refunds: dict[UUID, Refund] = {}
        self.invoices: dict[UUID, Invoice] = {}

    def repositories(self) -> Repositories:
        """Repository bundle over this store."""
        return Repositories(
            events=InMemoryEventRepository(self),
            registrations=InMemoryRegistrationRepository(self),
            teams=InMemoryTeamRepository(self),
            payments=InMemoryPaymentRepository(self),
            refunds=InMemoryRefundRepository(self),
            invoices=InMemoryInvoiceRepository(self),
        )

    # Helpers below expect the lock to be held.

    def counted(self, event_id: UUID) -> int:
        return sum(
            1
            for r in self.registrations.values()
            if r.event_id == event_id and holds_counted_spot(r.status, r.payment_status)
        )

    def awaiting(self, event_id: UUID) -> int:
        return sum(
            1
            for r in self.registrations.values()
            if r.event_id == event_id and is_awaiting_payment(r.status, r.payment_status)
        )

    def apply_count_delta(self, event_id: UUID, delta: int) -> None:
        event = self.events.get(event_id)
        if event is not None and delta:
            event.registered_count = max(0, event.registered_count + delta)


class InMemoryEventRepository:
    """EventRepository over an InMemoryLifecycleStore."""

    def __init__(self, store: InMemoryLifecycleStore) -> None:
        self._store = store

    async def find_by_id(self, event_id: UUID) -> Event | None:
        async with self._store.lock:
            event = self._store.events.get(event_id)
            return deepcopy(event) if event is not None else None

    async def find_ids(self) -> list[UUID]:
        async with self._store.lock:
            return list(self._store.events)

    async def find_due_to_start(self, now: datetime) -> list[Event]:
        return await self._select(lambda e: e.is_due_to_start(now))

    async def find_due_to_complete(self, now: datetime) -> list[Event]:
        return await self._select(lambda e: e.is_due_to_complete(now))

    async def find_with_due_rounds(self, now: datetime) -> list[Event]:
        return await self._select(lambda e: e.has_due_rounds(now))

    async def _select(self, predicate: Callable[[Event], bool]) -> list[Event]:
        async with self._store.lock:
            matches = [e for e in self._store.events.values() if predicate(e)]
            matches.sort(key=lambda e: (e.start_date_time, e.id))
            return deepcopy(matches)

    async def save(self, event: Event) -> None:
        async with self._store.lock:
            stored = self._store.events.get(event.id)
            if stored is None:
                self._store.events[event.id] = deepcopy(event)
                return
            for name in EDITABLE_FIELDS:
                setattr(stored, name, deepcopy(getattr(event, name)))
            stored.approval_status = event.approval_status
            stored.updated_at = event.updated_at

    async def add_round(self, event_id: UUID, round_: Round) -> int | None:
        async with self._store.lock:
            stored = self._store.events.get(event_id)
            if stored is None:
                return None
            stored.rounds.append(deepcopy(round_))
            stored.updated_at = round_.updated_at
            return len(stored.rounds)

    async def update_round(
        self,
        event_id: UUID,
        round_: Round,
        *,
        expected_status: RoundStatus,
    ) -> bool:
        async with self._store.lock:
            stored = self._store.events.get(event_id)
            current = stored.round_by_id(round_.id) if stored is not None else None
            if current is None or current.status != expected_status:
                return False
            current.name = round_.name
            current.description = round_.description
            current.start_date = round_.start_date
            current.end_date = round_.end_date
            current.max_participants = round_.max_participants
            current.updated_at = round_.updated_at
            return True

    async def transition_round(
        self,
        event_id: UUID,
        round_id: UUID,
        *,
        expected: RoundStatus,
        target: RoundStatus,
        now: datetime,
    ) -> bool:
        async with self._store.lock:
            stored = self._store.events.get(event_id)
            current = stored.round_by_id(round_id) if stored is not None else None
            if current is None or current.status != expected:
                return False
            current.status = target
            current.updated_at = now
            if target == RoundStatus.ACTIVE:
                number = stored.rounds.index(current) + 1
                stored.current_round = max(stored.current_round, number)
            return True

    async def transition_status(
        self,
        event_id: UUID,
        *,
        expected: EventStatus,
        target: EventStatus,
        now: datetime,
    ) -> bool:
        async with self._store.lock:
            stored = self._store.events.get(event_id)
            if stored is None or stored.status != expected:
                return False
            stored.status = target
            stored.updated_at = now
            return True

    async def recount(self, event_id: UUID) -> tuple[int, int] | None:
        async with self._store.lock:
            stored = self._store.events.get(event_id)
            if stored is None:
                return None
            previous = stored.registered_count
            stored.registered_count = self._store.counted(event_id)
            return previous, stored.registered_count

    async def delete(self, event_id: UUID) -> None:
        async with self._store.lock:
            self._store.events.pop(event_id, None)


class InMemoryRegistrationRepository:
    """RegistrationRepository over an InMemoryLifecycleStore."""

    def __init__(self, store: InMemoryLifecycleStore) -> None:
        self._store = store

    async def find_by_id(self, registration_id: UUID) -> Registration | None:
        async with self._store.lock:
            registration = self._store.registrations.get(registration_id)
            return deepcopy(registration) if registration is not None else None

    async def find_active_for_user(self, event_id: UUID, user_id: UUID) -> Registration | None:
        async with self._store.lock:
            found = self._active_for_user(event_id, user_id)
            return deepcopy(found) if found is not None else None

    def _active_for_user(self, event_id: UUID, user_id: UUID) -> Registration | None:
        active = RegistrationStatus.active_states()
        return next(
            (
                r
                for r in self._store.registrations.values()
                if r.event_id == event_id and r.user_id == user_id and r.status in active
            ),
            None,
        )

    async def find_by_event(
        self,
        event_id: UUID,
        statuses: Collection[RegistrationStatus] | None = None,
    ) -> list[Registration]:
        async with self._store.lock:
            found = [
                r
                for r in self._store.registrations.values()
                if r.event_id == event_id and (statuses is None or r.status in statuses)
            ]
            return deepcopy(sorted(found, key=_fifo_key))

    async def find_by_team(self, team_id: UUID, event_id: UUID) -> list[Registration]:
        async with self._store.lock:
            found = [
                r
                for r in self._store.registrations.values()
                if r.team_id == team_id and r.event_id == event_id
            ]
            return deepcopy(sorted(found, key=_fifo_key))

    async def find_waitlisted(self, event_id: UUID, limit: int) -> list[Registration]:
        async with self._store.lock:
            found = [
                r
                for r in self._store.registrations.values()
                if r.event_id == event_id and r.status == RegistrationStatus.WAITLISTED
            ]
            return deepcopy(sorted(found, key=_fifo_key)[:limit])

    async def find_event_ids_with_waitlist(self) -> list[UUID]:
        async with self._store.lock:
            return list(
                dict.fromkeys(
                    r.event_id
                    for r in sorted(self._store.registrations.values(), key=_fifo_key)
                    if r.status == RegistrationStatus.WAITLISTED
                )
            )

    async def find_overdue_payments(self, cutoff: datetime) -> list[Registration]:
        async with self._store.lock:
            found = [
                r
                for r in self._store.registrations.values()
                if is_awaiting_payment(r.status, r.payment_status)
                and (r.payment_window_started_at or r.registration_date) < cutoff
            ]
            return deepcopy(sorted(found, key=_fifo_key))

    async def count_counted(self, event_id: UUID) -> int:
        async with self._store.lock:
            return self._store.counted(event_id)

    async def count_awaiting_payment(self, event_id: UUID) -> int:
        async with self._store.lock:
            return self._store.awaiting(event_id)

    async def count_active(self, event_id: UUID) -> int:
        async with self._store.lock:
            active = RegistrationStatus.active_states()
            return sum(
                1
                for r in self._store.registrations.values()
                if r.event_id == event_id and r.status in active
            )

    async def add(
        self,
        registrations: Sequence[Registration],
        *,
        capacity: int | None,
    ) -> AddOutcome:
        if not registrations:
            return AddOutcome.ADDED
        event_id = registrations[0].event_id
        async with self._store.lock:
            for registration in registrations:
                if self._active_for_user(event_id, registration.user_id) is not None:
                    return AddOutcome.DUPLICATE_ACTIVE

            occupying = sum(
                1 for r in registrations if occupies_capacity(r.status, r.payment_status)
            )
            if capacity is not None and occupying:
                event = self._store.events.get(event_id)
                used = (event.registered_count if event else 0) + self._store.awaiting(event_id)
                if used + occupying > capacity:
                    return AddOutcome.NO_CAPACITY

            for registration in registrations:
                self._store.registrations[registration.id] = deepcopy(registration)
            self._store.apply_count_delta(
                event_id,
                sum(1 for r in registrations if holds_counted_spot(r.status, r.payment_status)),
            )
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
        async with self._store.lock:
            stored = self._store.registrations.get(registration_id)
            if stored is None or stored.status not in expected_statuses:
                return None
            if (
                expected_payment_statuses is not None
                and stored.payment_status not in expected_payment_statuses
            ):
                return None

            status = change.status or stored.status
            payment_status = change.payment_status or stored.payment_status
            if (
                capacity is not None
                and occupies_capacity(status, payment_status)
                and not occupies_capacity(stored.status, stored.payment_status)
            ):
                event = self._store.events.get(stored.event_id)
                used = (event.registered_count if event else 0) + self._store.awaiting(
                    stored.event_id
                )
                if used >= capacity:
                    return None

            delta = int(holds_counted_spot(status, payment_status)) - int(
                holds_counted_spot(stored.status, stored.payment_status)
            )
            updated = replace(
                stored,
                status=status,
                payment_status=payment_status,
                payment_id=change.payment_id or stored.payment_id,
                payment_window_started_at=(
                    change.payment_window_started_at or stored.payment_window_started_at
                ),
                cancelled_at=change.cancelled_at or stored.cancelled_at,
                cancellation_reason=change.cancellation_reason or stored.cancellation_reason,
                updated_at=datetime.now(UTC),
            )
            self._store.registrations[registration_id] = updated
            self._store.apply_count_delta(stored.event_id, delta)
            return deepcopy(updated)

    async def link_payment(
        self,
        registration_id: UUID,
        *,
        payment_id: UUID,
        previous_payment_id: UUID | None,
    ) -> Registration | None:
        async with self._store.lock:
            stored = self._store.registrations.get(registration_id)
            if (
                stored is None
                or not is_awaiting_payment(stored.status, stored.payment_status)
                or stored.payment_id != previous_payment_id
            ):
                return None
            stored.payment_id = payment_id
            stored.payment_status = RegistrationPaymentStatus.PENDING
            stored.updated_at = datetime.now(UTC)
            return deepcopy(stored)

    async def update_progress(
        self,
        registration_id: UUID,
        *,
        current_round: int,
        advanced_to_rounds: list[int],
        eliminated_in_round: int | None,
    ) -> None:
        async with self._store.lock:
            stored = self._store.registrations.get(registration_id)
            if stored is None:
                return
            stored.current_round = current_round
            stored.advanced_to_rounds = list(advanced_to_rounds)
            stored.eliminated_in_round = eliminated_in_round
            stored.updated_at = datetime.now(UTC)


class InMemoryTeamRepository:
    """TeamRepository over an InMemoryLifecycleStore."""

    def __init__(self, store: InMemoryLifecycleStore) -> None:
        self._store = store

    async def find_by_id(self, team_id: UUID) -> Team | None:
        async with self._store.lock:
            team = self._store.teams.get(team_id)
            return deepcopy(team) if team is not None else None

    async def find_by_invite_code(self, invite_code: str) -> Team | None:
        async with self._store.lock:
            for team in self._store.teams.values():
                if team.invite_code == invite_code:
                    return deepcopy(team)
            return None

    async def find_for_user(self, event_id: UUID, user_id: UUID) -> Team | None:
        async with self._store.lock:
            team = self._team_of(event_id, user_id)
            return deepcopy(team) if team is not None else None

    async def save(self, team: Team) -> None:
        async with self._store.lock:
            self._store.teams[team.id] = deepcopy(team)

    async def add(self, team: Team) -> bool:
        async with self._store.lock:
            if self._team_of(team.event_id, team.leader_id) is not None:
                return False
            self._store.teams[team.id] = deepcopy(team)
            return True

    async def save_if_unchanged(
        self,
        team: Team,
        *,
        expected_status: TeamStatus,
        expected_member_ids: Sequence[UUID],
    ) -> bool:
        async with self._store.lock:
            stored = self._store.teams.get(team.id)
            if stored is None:
                return False
            if stored.status != expected_status or stored.member_ids != list(expected_member_ids):
                return False
            for user_id in set(team.member_ids) - set(stored.member_ids):
                other = self._team_of(team.event_id, user_id)
                if other is not None and other.id != team.id:
                    return False
            self._store.teams[team.id] = deepcopy(team)
            return True

    def _team_of(self, event_id: UUID, user_id: UUID) -> Team | None:
        for team in self._store.teams.values():
            if (
                team.event_id == event_id
                and team.status != TeamStatus.DISBANDED
                and team.is_member(user_id)
            ):
                return team
        return None


class InMemoryPaymentRepository:
    """PaymentRepository over an InMemoryLifecycleStore."""

    def __init__(self, store: InMemoryLifecycleStore) -> None:
        self._store = store

    async def find_by_id(self, payment_id: UUID) -> Payment | None:
        async with self._store.lock:
            payment = self._store.payments.get(payment_id)
            return deepcopy(payment) if payment is not None else None

    async def find_by_registrations(
        self,
        registration_ids: Collection[UUID],
        statuses: Collection[PaymentStatus],
    ) -> list[Payment]:
        wanted = set(registration_ids)
        async with self._store.lock:
            return deepcopy(
                [
                    p
                    for p in self._store.payments.values()
                    if p.registration_id in wanted and p.status in statuses
                ]
            )

    async def save(self, payment: Payment) -> None:
        async with self._store.lock:
            self._store.payments[payment.id] = deepcopy(payment)

    async def save_if_status(self, payment: Payment, expected: PaymentStatus) -> bool:
        async with self._store.lock:
            stored = self._store.payments.get(payment.id)
            if stored is None or stored.status != expected:
                return False
            self._store.payments[payment.id] = deepcopy(payment)
            return True


class InMemoryRefundRepository:
    """RefundRepository over an InMemoryLifecycleStore."""

    def __init__(self, store: InMemoryLifecycleStore) -> None:
        self._store = store

    async def find_by_id(self, refund_id: UUID) -> Refund | None:
        async with self._store.lock:
            refund = self._store.refunds.get(refund_id)
            return deepcopy(refund) if refund is not None else None

    async def find_by_payment(self, payment_id: UUID) -> list[Refund]:
        async with self._store.lock:
            found = [r for r in self._store.refunds.values() if r.payment_id == payment_id]
            return deepcopy(sorted(found, key=lambda r: (r.requested_at, r.id)))

    async def save(self, refund: Refund) -> None:
        async with self._store.lock:
            self._store.refunds[refund.id] = deepcopy(refund)

    async def save_if_status(self, refund: Refund, expected: RefundStatus) -> bool:
        async with self._store.lock:
            stored = self._store.refunds.get(refund.id)
            if stored is None or stored.status != expected:
                return False
            self._store.refunds[refund.id] = deepcopy(refund)
            return True


class InMemoryInvoiceRepository:
    """InvoiceRepository over an InMemoryLifecycleStore."""

    def __init__(self, store: InMemoryLifecycleStore) -> None:
        self._store = store

    async def find_by_payment(self, payment_id: UUID) -> Invoice | None:
        async with self._store.lock:
            invoice = next(
                (i for i in self._store.invoices.values() if i.payment_id == payment_id),
                None,
            )
            return deepcopy(invoice) if invoice is not None else None

    async def save(self, invoice: Invoice) -> None:
        async with self._store.lock:
            if any(
                i.payment_id == invoice.payment_id and i.id != invoice.id
                for i in self._store.invoices.values()
            ):
                raise ValueError(f"Invoice already issued for payment {invoice.payment_id}")
            self._store.invoices[invoice.id] = deepcopy(invoice)


__all__ = [
    "InMemoryEventRepository",
    "InMemoryInvoiceRepository",
    "InMemoryLifecycleStore",
    "InMemoryPaymentRepository",
    "InMemoryRefundRepository",
    "InMemoryRegistrationRepository",
    "InMemoryTeamRepository",
]
