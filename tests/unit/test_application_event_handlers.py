"""Unit tests for event command handlers.

Tests cover:
- CreateEvent: capability, validation (all problems reported together), rounds
- UpdateEvent: locked fields after start, deadline extension, capacity floor,
  unchanged values, closed events
- PublishEvent / CancelEvent: transition table and notifications
- DeleteEvent: refused while registrations are active
"""

from datetime import timedelta
from decimal import Decimal

import pytest

from src.application.commands import (
    CancelEvent,
    CreateEvent,
    DeleteEvent,
    PublishEvent,
    RoundSpec,
    UpdateEvent,
)
from src.application.commands.handlers.cancel_event_handler import CancelEventHandler
from src.application.commands.handlers.create_event_handler import CreateEventHandler
from src.application.commands.handlers.delete_event_handler import DeleteEventHandler
from src.application.commands.handlers.publish_event_handler import PublishEventHandler
from src.application.commands.handlers.update_event_handler import UpdateEventHandler
from src.core.enums import ErrorCode
from src.core.errors import AuthorizationError, ConflictError, ValidationError
from src.core.result import Failure, Success
from src.domain.enums import EventStatus, RegistrationStatus, UserRole
from src.domain.errors import EventError
from tests.conftest import BASE_TIME, make_actor, make_event, make_registration, seed


def organizer_of(event):
    return make_actor(UserRole.FACULTY, user_id=event.organizer_id)


def create_command(actor, **overrides) -> CreateEvent:
    values = {
        "actor": actor,
        "title": "  Robotics Cup  ",
        "event_type": "competition",
        "registration_deadline": BASE_TIME + timedelta(days=5),
        "start_date_time": BASE_TIME + timedelta(days=10),
        "end_date_time": BASE_TIME + timedelta(days=12),
        "max_participants": 40,
    }
    values.update(overrides)
    return CreateEvent(**values)


@pytest.mark.unit
class TestCreateEvent:
    """Event creation."""

    @pytest.fixture
    def handler(self, repos, clock, mock_logger):
        return CreateEventHandler(
            event_repo=repos.events, clock=clock, logger=mock_logger, default_currency="INR"
        )

    async def test_creates_draft(self, handler, store):
        """Test a valid command stores a draft owned by the actor."""
        actor = make_actor(UserRole.DEPARTMENT_ORGANIZER)

        result = await handler.handle(create_command(actor))

        assert isinstance(result, Success)
        event = result.value
        assert event.status == EventStatus.DRAFT
        assert event.organizer_id == actor.user_id
        assert event.title == "Robotics Cup"
        assert event.currency == "INR"
        assert event.id in store.events

    async def test_creates_rounds(self, handler):
        """Test rounds given at creation are stored upcoming and in order."""
        actor = make_actor(UserRole.FACULTY)
        start = BASE_TIME + timedelta(days=10)
        rounds = (
            RoundSpec(name="Prelims", start_date=start, end_date=start + timedelta(hours=6)),
            RoundSpec(
                name="Finals",
                start_date=start + timedelta(days=1),
                end_date=start + timedelta(days=2),
            ),
        )

        result = await handler.handle(create_command(actor, rounds=rounds))

        assert [r.name for r in result.value.rounds] == ["Prelims", "Finals"]

    async def test_student_cannot_create(self, handler, student):
        """Test students lack the create capability."""
        result = await handler.handle(create_command(student))

        assert isinstance(result.error, AuthorizationError)
        assert result.error.required_permission == "event.create"

    async def test_reports_every_problem(self, handler):
        """Test schedule and payment problems come back together."""
        actor = make_actor(UserRole.FACULTY)

        result = await handler.handle(
            create_command(
                actor,
                registration_deadline=BASE_TIME + timedelta(days=11),
                is_paid=True,
                amount=Decimal("0"),
            )
        )

        assert isinstance(result.error, ValidationError)
        assert set(result.error.details) == {"registration_deadline", "amount"}

    async def test_round_outside_event(self, handler):
        """Test a round starting before the event is refused."""
        actor = make_actor(UserRole.FACULTY)
        rounds = (
            RoundSpec(
                name="Warmup",
                start_date=BASE_TIME + timedelta(days=9),
                end_date=BASE_TIME + timedelta(days=10, hours=2),
            ),
        )

        result = await handler.handle(create_command(actor, rounds=rounds))

        assert result.error.code == ErrorCode.INVALID_ROUND_WINDOW
        assert result.error.details["start_date"] == EventError.ROUND_BEFORE_EVENT


@pytest.mark.unit
class TestUpdateEvent:
    """Event edits."""

    @pytest.fixture
    def handler(self, repos, verifier, clock, mock_logger):
        return UpdateEventHandler(
            event_repo=repos.events, verifier=verifier, clock=clock, logger=mock_logger
        )

    async def test_updates_fields(self, handler, store):
        """Test edits before start are applied and saved."""
        event = make_event()
        seed(store, event)

        result = await handler.handle(
            UpdateEvent(
                actor=organizer_of(event),
                event_id=event.id,
                changes={"title": "Hack Night", "max_participants": 25},
            )
        )

        assert isinstance(result, Success)
        assert store.events[event.id].title == "Hack Night"
        assert store.events[event.id].max_participants == 25

    async def test_locked_fields_after_start(self, handler, store, clock):
        """Test structural fields cannot change once the event started."""
        event = make_event(status=EventStatus.ONGOING)
        seed(store, event)
        clock.set(event.start_date_time + timedelta(hours=1))

        result = await handler.handle(
            UpdateEvent(
                actor=organizer_of(event),
                event_id=event.id,
                changes={"title": "Renamed", "requires_approval": True},
            )
        )

        assert result.error.code == ErrorCode.FIELD_LOCKED
        assert set(result.error.details) == {"requires_approval", "title"}

    async def test_unchanged_locked_value_is_not_an_edit(self, handler, store, clock):
        """Test resending the current value of a locked field is accepted."""
        event = make_event(status=EventStatus.ONGOING, eligible_years=[1, 2])
        seed(store, event)
        clock.set(event.start_date_time + timedelta(hours=1))

        result = await handler.handle(
            UpdateEvent(
                actor=organizer_of(event),
                event_id=event.id,
                changes={"eligible_years": [2, 1], "description": "Bring laptops"},
            )
        )

        assert isinstance(result, Success)
        assert store.events[event.id].description == "Bring laptops"

    async def test_deadline_extension_after_passed(self, handler, store, clock):
        """Test a passed deadline cannot be moved later."""
        event = make_event()
        seed(store, event)
        clock.set(event.registration_deadline + timedelta(hours=1))

        result = await handler.handle(
            UpdateEvent(
                actor=organizer_of(event),
                event_id=event.id,
                changes={"registration_deadline": event.registration_deadline + timedelta(days=1)},
            )
        )

        assert result.error.message == EventError.DEADLINE_EXTENSION_AFTER_PASSED

    async def test_capacity_below_registered(self, handler, store):
        """Test capacity cannot drop below the registered count."""
        event = make_event()
        seed(store, event, make_registration(event), make_registration(event))

        result = await handler.handle(
            UpdateEvent(
                actor=organizer_of(event), event_id=event.id, changes={"max_participants": 1}
            )
        )

        assert result.error.field == "max_participants"

    async def test_unknown_field(self, handler, store):
        """Test fields outside the editable set are refused."""
        event = make_event()
        seed(store, event)

        result = await handler.handle(
            UpdateEvent(
                actor=organizer_of(event), event_id=event.id, changes={"registered_count": 0}
            )
        )

        assert result.error.code == ErrorCode.VALIDATION_FAILED
        assert "registered_count" in result.error.message

    async def test_schedule_revalidated(self, handler, store):
        """Test the resulting schedule must still be consistent."""
        event = make_event()
        seed(store, event)

        result = await handler.handle(
            UpdateEvent(
                actor=organizer_of(event),
                event_id=event.id,
                changes={"end_date_time": event.start_date_time - timedelta(hours=1)},
            )
        )

        assert result.error.code == ErrorCode.INVALID_DATE_RANGE

    async def test_closed_event(self, handler, store):
        """Test completed events cannot be edited."""
        event = make_event(status=EventStatus.COMPLETED)
        seed(store, event)

        result = await handler.handle(
            UpdateEvent(actor=organizer_of(event), event_id=event.id, changes={"title": "x"})
        )

        assert isinstance(result.error, ConflictError)
        assert result.error.message == EventError.CLOSED


@pytest.mark.unit
class TestPublishAndCancel:
    """Status commands."""

    async def test_publish_draft(self, repos, verifier, clock, mock_logger, store):
        """Test a draft becomes published."""
        handler = PublishEventHandler(repos.events, verifier, clock, mock_logger)
        event = make_event(status=EventStatus.DRAFT)
        seed(store, event)

        result = await handler.handle(PublishEvent(actor=organizer_of(event), event_id=event.id))

        assert isinstance(result, Success)
        assert store.events[event.id].status == EventStatus.PUBLISHED

    async def test_publish_twice(self, repos, verifier, clock, mock_logger, store):
        """Test publishing a published event is an invalid transition."""
        handler = PublishEventHandler(repos.events, verifier, clock, mock_logger)
        event = make_event()
        seed(store, event)

        result = await handler.handle(PublishEvent(actor=organizer_of(event), event_id=event.id))

        assert result.error.code == ErrorCode.INVALID_STATE_TRANSITION

    async def test_cancel_notifies_confirmed(
        self, repos, verifier, notifications, clock, mock_logger, store, sink
    ):
        """Test cancelling notifies confirmed registrants and keeps registrations."""
        handler = CancelEventHandler(
            repos.events, repos.registrations, verifier, notifications, clock, mock_logger
        )
        event = make_event()
        confirmed = make_registration(event)
        waitlisted = make_registration(event, status=RegistrationStatus.WAITLISTED)
        seed(store, event, confirmed, waitlisted)

        result = await handler.handle(
            CancelEvent(actor=organizer_of(event), event_id=event.id, reason="Venue closed")
        )

        assert isinstance(result, Success)
        assert store.events[event.id].status == EventStatus.CANCELLED
        assert sink.titles_for(confirmed.user_id) == [f"Event Cancelled: {event.title}"]
        assert sink.titles_for(waitlisted.user_id) == []
        assert store.registrations[confirmed.id].status == RegistrationStatus.CONFIRMED

    async def test_cancel_completed_refused(
        self, repos, verifier, notifications, clock, mock_logger, store
    ):
        """Test a completed event cannot be cancelled."""
        handler = CancelEventHandler(
            repos.events, repos.registrations, verifier, notifications, clock, mock_logger
        )
        event = make_event(status=EventStatus.COMPLETED)
        seed(store, event)

        result = await handler.handle(CancelEvent(actor=organizer_of(event), event_id=event.id))

        assert result.error.details["allowed"] == "none (terminal)"


@pytest.mark.unit
class TestDeleteEvent:
    """Event deletion."""

    @pytest.fixture
    def handler(self, repos, verifier, mock_logger):
        return DeleteEventHandler(repos.events, repos.registrations, verifier, mock_logger)

    async def test_delete_without_registrations(self, handler, store):
        """Test an event with only cancelled registrations is deleted."""
        event = make_event()
        seed(store, event, make_registration(event, status=RegistrationStatus.CANCELLED))

        result = await handler.handle(DeleteEvent(actor=organizer_of(event), event_id=event.id))

        assert result == Success(value=None)
        assert event.id not in store.events

    async def test_delete_with_waitlist_refused(self, handler, store):
        """Test waitlisted registrations count as active."""
        event = make_event()
        seed(store, event, make_registration(event, status=RegistrationStatus.WAITLISTED))

        result = await handler.handle(DeleteEvent(actor=organizer_of(event), event_id=event.id))

        assert result.error.code == ErrorCode.EVENT_HAS_ACTIVE_REGISTRATIONS
        assert result.error.details["active_registrations"] == 1

    async def test_other_organizer_forbidden(self, handler, store):
        """Test only the organizer or an admin deletes an event."""
        event = make_event()
        seed(store, event)

        result = await handler.handle(
            DeleteEvent(actor=make_actor(UserRole.FACULTY), event_id=event.id)
        )

        assert isinstance(result, Failure)
        assert isinstance(result.error, AuthorizationError)
