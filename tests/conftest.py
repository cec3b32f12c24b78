"""Pytest configuration and shared test helpers.

This configuration provides:
1. Marker registration (unit, integration, api)
2. Automatic asyncio marking of async tests
3. Entity factories anchored on a fixed clock (BASE_TIME)
4. In-memory lifecycle store, notification sink and payment gateway
   fixtures so handler tests exercise real compare-and-set behavior
"""

import asyncio
from datetime import UTC, datetime, timedelta
from decimal import Decimal
from typing import Any
from unittest.mock import Mock
from uuid import UUID

import pytest
from uuid_extensions import uuid7

from src.application.services.notification_dispatcher import NotificationDispatcher
from src.application.services.ownership_verifier import OwnershipVerifier
from src.application.services.status_transition_service import StatusTransitionService
from src.application.services.waitlist_service import WaitlistService
from src.domain.entities import Event, Payment, Registration, Round, Team
from src.domain.enums import (
    EventStatus,
    PaymentGateway,
    PaymentStatus,
    RegistrationPaymentStatus,
    RegistrationStatus,
    TeamStatus,
    UserRole,
)
from src.domain.protocols import Repositories
from src.domain.value_objects import Actor
from src.infrastructure.clock import FrozenClock
from src.infrastructure.notifications import InMemoryNotificationSink
from src.infrastructure.payments import StubPaymentGateway
from src.infrastructure.persistence.memory import InMemoryLifecycleStore

BASE_TIME = datetime(2026, 3, 1, 9, 0, 0, tzinfo=UTC)


# Pytest markers for different test types
def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests with in-memory or mocked dependencies")
    config.addinivalue_line("markers", "integration: Integration tests with a real database")
    config.addinivalue_line("markers", "api: HTTP tests through the FastAPI app")


def pytest_collection_modifyitems(config, items):
    """Automatically add asyncio marker to async test functions.

    This ensures all async tests are properly marked even if
    the developer forgets to add @pytest.mark.asyncio.
    """
    for item in items:
        if asyncio.iscoroutinefunction(item.function):
            item.add_marker(pytest.mark.asyncio)


# =============================================================================
# Entity factories
# =============================================================================


def make_actor(role: UserRole = UserRole.STUDENT, user_id: UUID | None = None) -> Actor:
    """Actor with a fresh id unless one is given."""
    return Actor(user_id=user_id or uuid7(), role=role)


def make_event(**overrides: Any) -> Event:
    """Published, unpaid, 10-seat event starting ten days after BASE_TIME.

    Usage:
        event = make_event(is_paid=True, amount=Decimal("500"))
        event = make_event(status=EventStatus.DRAFT, max_participants=None)
    """
    values: dict[str, Any] = {
        "organizer_id": uuid7(),
        "title": "Campus Hackathon",
        "event_type": "competition",
        "registration_deadline": BASE_TIME + timedelta(days=5),
        "start_date_time": BASE_TIME + timedelta(days=10),
        "end_date_time": BASE_TIME + timedelta(days=11),
        "status": EventStatus.PUBLISHED,
        "max_participants": 10,
        "created_at": BASE_TIME,
        "updated_at": BASE_TIME,
    }
    values.update(overrides)
    if values.get("is_paid") and "amount" not in overrides:
        values["amount"] = Decimal("500.00")
    return Event(**values)


def make_round(event: Event, name: str = "Round 1", **overrides: Any) -> Round:
    """Round covering the first half of the event window by default."""
    middle = event.start_date_time + (event.end_date_time - event.start_date_time) / 2
    values: dict[str, Any] = {
        "name": name,
        "start_date": event.start_date_time,
        "end_date": middle,
    }
    values.update(overrides)
    return Round(**values)


def make_registration(
    event: Event,
    user_id: UUID | None = None,
    *,
    status: RegistrationStatus = RegistrationStatus.CONFIRMED,
    payment_status: RegistrationPaymentStatus | None = None,
    registration_date: datetime = BASE_TIME,
    **overrides: Any,
) -> Registration:
    """Registration for ``event``; payment status follows ``event.is_paid``."""
    if payment_status is None:
        if not event.is_paid:
            payment_status = RegistrationPaymentStatus.NOT_REQUIRED
        elif status == RegistrationStatus.CONFIRMED:
            payment_status = RegistrationPaymentStatus.PAID
        else:
            payment_status = RegistrationPaymentStatus.PENDING
    return Registration(
        event_id=event.id,
        user_id=user_id or uuid7(),
        registration_date=registration_date,
        status=status,
        payment_status=payment_status,
        created_at=registration_date,
        updated_at=registration_date,
        **overrides,
    )


def make_team(
    event: Event,
    leader_id: UUID,
    member_ids: list[UUID],
    *,
    locked: bool = True,
    max_size: int = 4,
) -> Team:
    """Team of ``event`` led by ``leader_id``, locked by default."""
    return Team(
        event_id=event.id,
        name="Byte Busters",
        leader_id=leader_id,
        max_size=max_size,
        member_ids=[leader_id, *member_ids],
        status=TeamStatus.LOCKED if locked else TeamStatus.ACTIVE,
    )


def make_payment(
    registration: Registration,
    *,
    amount: Decimal = Decimal("500.00"),
    status: PaymentStatus = PaymentStatus.PENDING,
    **overrides: Any,
) -> Payment:
    """Payment made by the owner of ``registration``."""
    payment = Payment(
        user_id=registration.user_id,
        event_id=registration.event_id,
        registration_id=registration.id,
        amount=amount,
        currency="INR",
        gateway=PaymentGateway.RAZORPAY,
        order_id=f"order_{uuid7().hex}",
        created_at=BASE_TIME,
        updated_at=BASE_TIME,
        **overrides,
    )
    payment.status = status
    if status == PaymentStatus.COMPLETED:
        payment.transaction_id = f"pay_{uuid7().hex}"
        payment.paid_at = BASE_TIME
    return payment


def seed(store: InMemoryLifecycleStore, *entities: Any) -> None:
    """Put entities straight into the store and recount every event.

    Bypasses capacity checks so tests can build any starting state.
    """
    for entity in entities:
        if isinstance(entity, Event):
            store.events[entity.id] = entity
        elif isinstance(entity, Registration):
            store.registrations[entity.id] = entity
        elif isinstance(entity, Team):
            store.teams[entity.id] = entity
        elif isinstance(entity, Payment):
            store.payments[entity.id] = entity
        else:
            store.refunds[entity.id] = entity
    for event in store.events.values():
        event.registered_count = store.counted(event.id)


# =============================================================================
# Reusable fixtures
# =============================================================================


@pytest.fixture
def mock_logger():
    """Provide a mock logger for testing.

    Returns a Mock object with the LoggerProtocol methods.

    Usage:
        def test_something(mock_logger):
            service = MyService(logger=mock_logger)
            service.do_something()
            mock_logger.info.assert_called_once()
    """
    logger = Mock()
    logger.debug = Mock()
    logger.info = Mock()
    logger.warning = Mock()
    logger.error = Mock()
    logger.critical = Mock()
    return logger


@pytest.fixture
def clock() -> FrozenClock:
    """Clock frozen at BASE_TIME."""
    return FrozenClock(BASE_TIME)


@pytest.fixture
def store() -> InMemoryLifecycleStore:
    return InMemoryLifecycleStore()


@pytest.fixture
def repos(store: InMemoryLifecycleStore) -> Repositories:
    return store.repositories()


@pytest.fixture
def sink() -> InMemoryNotificationSink:
    return InMemoryNotificationSink()


@pytest.fixture
def gateway() -> StubPaymentGateway:
    return StubPaymentGateway()


@pytest.fixture
def notifications(sink: InMemoryNotificationSink, mock_logger) -> NotificationDispatcher:
    return NotificationDispatcher(sink, mock_logger)


@pytest.fixture
def verifier(repos: Repositories) -> OwnershipVerifier:
    return OwnershipVerifier(repos.events, repos.registrations)


@pytest.fixture
def waitlist(
    repos: Repositories,
    notifications: NotificationDispatcher,
    mock_logger,
) -> WaitlistService:
    return WaitlistService(
        event_repo=repos.events,
        registration_repo=repos.registrations,
        notifications=notifications,
        logger=mock_logger,
        payment_window_hours=24,
    )


@pytest.fixture
def transition_service(
    repos: Repositories,
    waitlist: WaitlistService,
    notifications: NotificationDispatcher,
    clock: FrozenClock,
    mock_logger,
) -> StatusTransitionService:
    return StatusTransitionService(
        event_repo=repos.events,
        registration_repo=repos.registrations,
        payment_repo=repos.payments,
        waitlist=waitlist,
        notifications=notifications,
        clock=clock,
        logger=mock_logger,
        payment_window=timedelta(hours=24),
    )


@pytest.fixture
def student() -> Actor:
    return make_actor(UserRole.STUDENT)


@pytest.fixture
def admin() -> Actor:
    return make_actor(UserRole.ADMIN)
