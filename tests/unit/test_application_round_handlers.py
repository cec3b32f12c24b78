"""Unit tests for AddRound, UpdateRound and AdvanceParticipants handlers."""

from datetime import timedelta

import pytest
from uuid_extensions import uuid7

from src.application.commands import AddRound, AdvanceParticipants, RoundSpec, UpdateRound
from src.application.commands.handlers.add_round_handler import AddRoundHandler
from src.application.commands.handlers.advance_participants_handler import (
    AdvanceParticipantsHandler,
)
from src.application.commands.handlers.update_round_handler import UpdateRoundHandler
from src.core.enums import ErrorCode
from src.core.result import Success
from src.domain.enums import EventStatus, RegistrationStatus, RoundStatus, UserRole
from src.domain.errors import EventError
from tests.conftest import make_actor, make_event, make_registration, make_round, make_team, seed


def organizer_of(event):
    return make_actor(UserRole.FACULTY, user_id=event.organizer_id)


def two_round_event(**overrides):
    event = make_event(status=EventStatus.ONGOING, **overrides)
    first = make_round(event, "Prelims")
    second = make_round(
        event, "Finals", start_date=first.end_date, end_date=event.end_date_time
    )
    event.rounds = [first, second]
    return event


@pytest.mark.unit
class TestAddRound:
    """Adding rounds."""

    @pytest.fixture
    def handler(self, repos, verifier, clock, mock_logger):
        return AddRoundHandler(repos.events, verifier, clock, mock_logger)

    async def test_appends_round(self, handler, store):
        """Test a valid round is appended to the event."""
        event = make_event()
        seed(store, event)
        draft = RoundSpec(
            name="Qualifier",
            start_date=event.start_date_time,
            end_date=event.start_date_time + timedelta(hours=4),
        )

        result = await handler.handle(
            AddRound(actor=organizer_of(event), event_id=event.id, round=draft)
        )

        assert isinstance(result, Success)
        assert [r.name for r in store.events[event.id].rounds] == ["Qualifier"]
        assert result.value.status == RoundStatus.UPCOMING

    async def test_round_after_event_end(self, handler, store):
        """Test a round ending after the event is refused."""
        event = make_event()
        seed(store, event)
        draft = RoundSpec(
            name="Late",
            start_date=event.start_date_time,
            end_date=event.end_date_time + timedelta(hours=1),
        )

        result = await handler.handle(
            AddRound(actor=organizer_of(event), event_id=event.id, round=draft)
        )

        assert result.error.details["end_date"] == EventError.ROUND_AFTER_EVENT
        assert store.events[event.id].rounds == []

    async def test_blank_name(self, handler, store):
        """Test a round needs a name."""
        event = make_event()
        seed(store, event)
        draft = RoundSpec(
            name="",
            start_date=event.start_date_time,
            end_date=event.start_date_time + timedelta(hours=1),
        )

        result = await handler.handle(
            AddRound(actor=organizer_of(event), event_id=event.id, round=draft)
        )

        assert result.error.code == ErrorCode.VALIDATION_FAILED


@pytest.mark.unit
class TestUpdateRound:
    """Editing rounds."""

    @pytest.fixture
    def handler(self, repos, verifier, clock, mock_logger):
        return UpdateRoundHandler(repos.events, verifier, clock, mock_logger)

    async def test_updates_upcoming_round(self, handler, store):
        """Test an upcoming round is edited in place."""
        event = two_round_event()
        seed(store, event)
        round_id = event.rounds[1].id

        result = await handler.handle(
            UpdateRound(
                actor=organizer_of(event), event_id=event.id, round_id=round_id, name="Grand Final"
            )
        )

        assert result.value.name == "Grand Final"
        assert store.events[event.id].rounds[1].name == "Grand Final"
        assert store.events[event.id].rounds[1].id == round_id

    async def test_active_round_not_editable(self, handler, store):
        """Test rounds that already started cannot be edited."""
        event = two_round_event()
        event.rounds[0].status = RoundStatus.ACTIVE
        seed(store, event)

        result = await handler.handle(
            UpdateRound(
                actor=organizer_of(event),
                event_id=event.id,
                round_id=event.rounds[0].id,
                name="Renamed",
            )
        )

        assert result.error.message == EventError.ROUND_NOT_EDITABLE

    async def test_unknown_round(self, handler, store):
        """Test a missing round is not found."""
        event = two_round_event()
        seed(store, event)

        result = await handler.handle(
            UpdateRound(actor=organizer_of(event), event_id=event.id, round_id=uuid7())
        )

        assert result.error.code == ErrorCode.ROUND_NOT_FOUND


@pytest.mark.unit
class TestAdvanceParticipants:
    """Round progression."""

    @pytest.fixture
    def handler(self, repos, verifier, notifications, mock_logger):
        return AdvanceParticipantsHandler(
            registration_repo=repos.registrations,
            team_repo=repos.teams,
            verifier=verifier,
            notifications=notifications,
            logger=mock_logger,
        )

    async def test_advances_selected_and_eliminates_rest(self, handler, store, sink):
        """Test selected participants move on and the others are eliminated."""
        event = two_round_event()
        event.rounds[0].status = RoundStatus.COMPLETED
        winner = make_registration(event)
        loser = make_registration(event)
        seed(store, event, winner, loser)

        result = await handler.handle(
            AdvanceParticipants(
                actor=organizer_of(event),
                event_id=event.id,
                from_round=1,
                registration_ids=frozenset({winner.id}),
            )
        )

        assert isinstance(result, Success)
        assert result.value.advanced_ids == [winner.id]
        assert result.value.eliminated_ids == [loser.id]
        stored_winner = store.registrations[winner.id]
        assert stored_winner.current_round == 2
        assert stored_winner.advanced_to_rounds == [2]
        assert store.registrations[loser.id].eliminated_in_round == 1
        assert sink.titles_for(winner.user_id) == [f"Advanced to Next Round: {event.title}"]
        assert sink.titles_for(loser.user_id) == [f"Round Results: {event.title}"]

    async def test_round_must_be_completed(self, handler, store):
        """Test advancing from an unfinished round is refused."""
        event = two_round_event()
        registration = make_registration(event)
        seed(store, event, registration)

        result = await handler.handle(
            AdvanceParticipants(
                actor=organizer_of(event),
                event_id=event.id,
                from_round=1,
                registration_ids=frozenset({registration.id}),
            )
        )

        assert result.error.message == EventError.ROUND_NOT_COMPLETED

    async def test_last_round_has_no_next(self, handler, store):
        """Test advancing from the final round names the missing round."""
        event = two_round_event()
        for round_ in event.rounds:
            round_.status = RoundStatus.COMPLETED
        seed(store, event)

        result = await handler.handle(
            AdvanceParticipants(
                actor=organizer_of(event),
                event_id=event.id,
                from_round=2,
                registration_ids=frozenset(),
            )
        )

        assert result.error.message == EventError.NEXT_ROUND_MISSING

    async def test_selected_must_be_in_round(self, handler, store):
        """Test eliminated or unconfirmed registrations cannot be advanced."""
        event = two_round_event()
        event.rounds[0].status = RoundStatus.COMPLETED
        eliminated = make_registration(event, eliminated_in_round=1)
        pending = make_registration(event, status=RegistrationStatus.PENDING)
        seed(store, event, eliminated, pending)

        result = await handler.handle(
            AdvanceParticipants(
                actor=organizer_of(event),
                event_id=event.id,
                from_round=1,
                registration_ids=frozenset({eliminated.id, pending.id}),
            )
        )

        assert result.error.message == EventError.NOT_IN_ROUND

    async def test_eliminated_team_is_marked(self, handler, store):
        """Test a team whose members are eliminated is marked eliminated."""
        event = two_round_event(min_team_size=2, max_team_size=4)
        event.rounds[0].status = RoundStatus.COMPLETED
        leader, member = uuid7(), uuid7()
        team = make_team(event, leader, [member])
        regs = [make_registration(event, uid, team_id=team.id) for uid in (leader, member)]
        seed(store, event, team, *regs)

        await handler.handle(
            AdvanceParticipants(
                actor=organizer_of(event),
                event_id=event.id,
                from_round=1,
                registration_ids=frozenset(),
            )
        )

        assert store.teams[team.id].eliminated
