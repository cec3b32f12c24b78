"""Unit tests for the team handlers (create, join, leave, lock).

Tests cover:
- Create: team events only, one live team per user and event, leader first
- Join by invite code: normalization, locked or full teams, other teams
- Concurrent joins for the last seat admit one user
- Leave: the leader stays, locked teams keep their members
- Lock: leader only, minimum team size, then registration accepts the team
- Store failure mapped to persistence_failed

Architecture:
- Real in-memory store, frozen clock
"""

import asyncio
from unittest.mock import AsyncMock

import pytest
from uuid_extensions import uuid7

from src.application.commands import CreateTeam, JoinTeam, LeaveTeam, LockTeam, RegisterForEvent
from src.application.commands.handlers.create_team_handler import CreateTeamHandler
from src.application.commands.handlers.join_team_handler import JoinTeamHandler
from src.application.commands.handlers.leave_team_handler import LeaveTeamHandler
from src.application.commands.handlers.lock_team_handler import LockTeamHandler
from src.application.commands.handlers.register_for_event_handler import (
    RegisterForEventHandler,
)
from src.core.enums import ErrorCode
from src.core.errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from src.core.result import Failure, Success
from src.domain.enums import EventStatus, RegistrationStatus, TeamStatus
from src.domain.errors import TeamError
from tests.conftest import make_actor, make_event, make_team, seed


@pytest.fixture
def create(repos, clock, mock_logger) -> CreateTeamHandler:
    return CreateTeamHandler(
        event_repo=repos.events,
        team_repo=repos.teams,
        clock=clock,
        logger=mock_logger,
    )


@pytest.fixture
def join(repos, clock, mock_logger) -> JoinTeamHandler:
    return JoinTeamHandler(team_repo=repos.teams, clock=clock, logger=mock_logger)


@pytest.fixture
def leave(repos, clock, mock_logger) -> LeaveTeamHandler:
    return LeaveTeamHandler(team_repo=repos.teams, clock=clock, logger=mock_logger)


@pytest.fixture
def lock(repos, clock, mock_logger) -> LockTeamHandler:
    return LockTeamHandler(
        event_repo=repos.events,
        team_repo=repos.teams,
        clock=clock,
        logger=mock_logger,
    )


@pytest.mark.unit
class TestCreateTeam:
    """CreateTeamHandler."""

    async def test_creates_active_team_sized_to_event(self, create, store, student, clock):
        """Test the actor leads a new active team capped at max_team_size."""
        event = make_event(min_team_size=2, max_team_size=3)
        seed(store, event)

        result = await create.handle(
            CreateTeam(actor=student, event_id=event.id, name="  Null Pointers  ")
        )

        assert isinstance(result, Success)
        team = result.value
        assert team.name == "Null Pointers"
        assert team.member_ids == [student.user_id]
        assert team.max_size == 3
        assert team.status == TeamStatus.ACTIVE
        assert team.created_at == clock.now()
        assert store.teams[team.id].invite_code == team.invite_code

    async def test_solo_event_refuses_teams(self, create, store, student):
        """Test events with max_team_size 1 do not allow teams."""
        event = make_event()
        seed(store, event)

        result = await create.handle(CreateTeam(actor=student, event_id=event.id, name="Solo"))

        assert isinstance(result, Failure)
        assert isinstance(result.error, ValidationError)
        assert result.error.message == TeamError.TEAMS_NOT_ALLOWED
        assert not store.teams

    async def test_closed_event_refuses_teams(self, create, store, student):
        """Test a cancelled event accepts no new teams."""
        event = make_event(max_team_size=4, status=EventStatus.CANCELLED)
        seed(store, event)

        result = await create.handle(CreateTeam(actor=student, event_id=event.id, name="Late"))

        assert isinstance(result.error, ConflictError)
        assert result.error.code == ErrorCode.INVALID_STATE_TRANSITION

    async def test_one_live_team_per_user(self, create, store, student):
        """Test a member of a live team cannot create another one."""
        event = make_event(max_team_size=4)
        seed(store, event, make_team(event, uuid7(), [student.user_id], locked=False))

        result = await create.handle(CreateTeam(actor=student, event_id=event.id, name="Twice"))

        assert isinstance(result, Failure)
        assert result.error.code == ErrorCode.ALREADY_IN_TEAM
        assert len(store.teams) == 1

    async def test_short_name_rejected(self, create, store, student):
        """Test names under two characters fail validation on the name field."""
        event = make_event(max_team_size=4)
        seed(store, event)

        result = await create.handle(CreateTeam(actor=student, event_id=event.id, name=" x "))

        assert isinstance(result.error, ValidationError)
        assert result.error.field == "name"

    async def test_unknown_event(self, create, student):
        """Test a missing event is reported as not found."""
        result = await create.handle(CreateTeam(actor=student, event_id=uuid7(), name="Ghosts"))

        assert result.error.code == ErrorCode.EVENT_NOT_FOUND


@pytest.mark.unit
class TestJoinTeam:
    """JoinTeamHandler."""

    async def test_joins_with_normalized_code(self, join, store, student):
        """Test a lower-case padded code finds the team and adds the actor."""
        event = make_event(max_team_size=4)
        team = make_team(event, uuid7(), [], locked=False)
        seed(store, event, team)

        result = await join.handle(
            JoinTeam(actor=student, invite_code=f"  {team.invite_code.lower()} ")
        )

        assert isinstance(result, Success)
        assert result.value.member_ids == [team.leader_id, student.user_id]
        assert store.teams[team.id].member_ids == [team.leader_id, student.user_id]

    async def test_unknown_code(self, join, student):
        """Test an unknown invite code is reported as not found."""
        result = await join.handle(JoinTeam(actor=student, invite_code="ZZZZZZ"))

        assert isinstance(result.error, NotFoundError)
        assert result.error.message == TeamError.INVITE_CODE_NOT_FOUND

    async def test_blank_code(self, join, student):
        """Test a blank invite code is reported as not found."""
        result = await join.handle(JoinTeam(actor=student, invite_code="   "))

        assert result.error.code == ErrorCode.TEAM_NOT_FOUND

    async def test_locked_team_refuses(self, join, store, student):
        """Test a locked team accepts no new members."""
        event = make_event(max_team_size=4)
        team = make_team(event, uuid7(), [])
        seed(store, event, team)

        result = await join.handle(JoinTeam(actor=student, invite_code=team.invite_code))

        assert isinstance(result.error, ConflictError)
        assert result.error.message == TeamError.NOT_ACTIVE
        assert store.teams[team.id].size == 1

    async def test_full_team_refuses(self, join, store, student):
        """Test a full team reports TEAM_FULL."""
        event = make_event(max_team_size=2)
        team = make_team(event, uuid7(), [uuid7()], locked=False, max_size=2)
        seed(store, event, team)

        result = await join.handle(JoinTeam(actor=student, invite_code=team.invite_code))

        assert result.error.code == ErrorCode.TEAM_FULL

    async def test_already_member(self, join, store, student):
        """Test joining one's own team again is a conflict."""
        event = make_event(max_team_size=4)
        team = make_team(event, uuid7(), [student.user_id], locked=False)
        seed(store, event, team)

        result = await join.handle(JoinTeam(actor=student, invite_code=team.invite_code))

        assert result.error.code == ErrorCode.ALREADY_IN_TEAM
        assert result.error.message == TeamError.ALREADY_MEMBER

    async def test_member_of_other_team_refused(self, join, store, student):
        """Test a user on another live team of the event cannot join."""
        event = make_event(max_team_size=4)
        mine = make_team(event, uuid7(), [student.user_id], locked=False)
        theirs = make_team(event, uuid7(), [], locked=False)
        seed(store, event, mine, theirs)

        result = await join.handle(JoinTeam(actor=student, invite_code=theirs.invite_code))

        assert result.error.code == ErrorCode.ALREADY_IN_TEAM
        assert result.error.details == {"team_id": str(mine.id)}
        assert store.teams[theirs.id].size == 1

    async def test_last_seat_goes_to_one_user(self, join, store):
        """Test concurrent joins for the last seat admit exactly one user."""
        event = make_event(max_team_size=3)
        team = make_team(event, uuid7(), [uuid7()], locked=False, max_size=3)
        seed(store, event, team)
        actors = [make_actor() for _ in range(4)]

        results = await asyncio.gather(
            *(join.handle(JoinTeam(actor=a, invite_code=team.invite_code)) for a in actors)
        )

        assert sum(isinstance(r, Success) for r in results) == 1
        assert store.teams[team.id].size == 3


@pytest.mark.unit
class TestLeaveTeam:
    """LeaveTeamHandler."""

    async def test_member_leaves(self, leave, store, student):
        """Test a member leaves an active team."""
        event = make_event(max_team_size=4)
        team = make_team(event, uuid7(), [student.user_id], locked=False)
        seed(store, event, team)

        result = await leave.handle(LeaveTeam(actor=student, team_id=team.id))

        assert isinstance(result, Success)
        assert store.teams[team.id].member_ids == [team.leader_id]

    async def test_leader_cannot_leave(self, leave, store, student):
        """Test the leader is refused."""
        event = make_event(max_team_size=4)
        team = make_team(event, student.user_id, [uuid7()], locked=False)
        seed(store, event, team)

        result = await leave.handle(LeaveTeam(actor=student, team_id=team.id))

        assert isinstance(result.error, ValidationError)
        assert result.error.message == TeamError.LEADER_CANNOT_LEAVE
        assert store.teams[team.id].size == 2

    async def test_locked_team_keeps_members(self, leave, store, student):
        """Test members cannot leave a locked team."""
        event = make_event(max_team_size=4)
        team = make_team(event, uuid7(), [student.user_id])
        seed(store, event, team)

        result = await leave.handle(LeaveTeam(actor=student, team_id=team.id))

        assert result.error.message == TeamError.NOT_ACTIVE
        assert student.user_id in store.teams[team.id].member_ids

    async def test_non_member(self, leave, store, student):
        """Test leaving a team one is not on fails validation."""
        event = make_event(max_team_size=4)
        team = make_team(event, uuid7(), [], locked=False)
        seed(store, event, team)

        result = await leave.handle(LeaveTeam(actor=student, team_id=team.id))

        assert result.error.message == TeamError.NOT_MEMBER

    async def test_unknown_team(self, leave, student):
        """Test a missing team is reported as not found."""
        result = await leave.handle(LeaveTeam(actor=student, team_id=uuid7()))

        assert result.error.code == ErrorCode.TEAM_NOT_FOUND


@pytest.mark.unit
class TestLockTeam:
    """LockTeamHandler."""

    async def test_leader_locks_and_registers(
        self, lock, store, repos, student, clock, mock_logger
    ):
        """Test a locked team can then be registered by its leader."""
        event = make_event(min_team_size=2, max_team_size=4)
        team = make_team(event, student.user_id, [uuid7()], locked=False)
        seed(store, event, team)

        result = await lock.handle(LockTeam(actor=student, team_id=team.id))

        assert isinstance(result, Success)
        assert store.teams[team.id].status == TeamStatus.LOCKED

        register = RegisterForEventHandler(
            event_repo=repos.events,
            registration_repo=repos.registrations,
            team_repo=repos.teams,
            clock=clock,
            logger=mock_logger,
        )
        registered = await register.handle(
            RegisterForEvent(actor=student, event_id=event.id, team_id=team.id)
        )
        assert isinstance(registered, Success)
        assert {r.status for r in registered.value.registrations} == {
            RegistrationStatus.CONFIRMED
        }

    async def test_only_leader_locks(self, lock, store, student):
        """Test a plain member cannot lock."""
        event = make_event(max_team_size=4)
        team = make_team(event, uuid7(), [student.user_id], locked=False)
        seed(store, event, team)

        result = await lock.handle(LockTeam(actor=student, team_id=team.id))

        assert isinstance(result.error, AuthorizationError)
        assert store.teams[team.id].status == TeamStatus.ACTIVE

    async def test_below_minimum_size(self, lock, store, student):
        """Test a team smaller than min_team_size stays active."""
        event = make_event(min_team_size=3, max_team_size=4)
        team = make_team(event, student.user_id, [uuid7()], locked=False)
        seed(store, event, team)

        result = await lock.handle(LockTeam(actor=student, team_id=team.id))

        assert result.error.code == ErrorCode.INVALID_TEAM_SIZE
        assert result.error.details == {"size": 2, "min_team_size": 3}

    async def test_already_locked(self, lock, store, student):
        """Test locking twice is a conflict."""
        event = make_event(max_team_size=4)
        team = make_team(event, student.user_id, [uuid7()])
        seed(store, event, team)

        result = await lock.handle(LockTeam(actor=student, team_id=team.id))

        assert result.error.message == TeamError.ALREADY_LOCKED

    async def test_membership_change_during_lock(self, lock, store, repos, student, monkeypatch):
        """Test a lock checked against an outdated member list is refused."""
        event = make_event(min_team_size=2, max_team_size=4)
        team = make_team(event, student.user_id, [uuid7()], locked=False)
        seed(store, event, team)
        stale = await repos.teams.find_by_id(team.id)
        store.teams[team.id].member_ids.append(uuid7())

        async def find_stale(team_id):
            return stale

        monkeypatch.setattr(repos.teams, "find_by_id", find_stale)

        result = await lock.handle(LockTeam(actor=student, team_id=team.id))

        assert result.error.code == ErrorCode.RESOURCE_CONFLICT
        assert store.teams[team.id].status == TeamStatus.ACTIVE

    async def test_store_failure(self, store, repos, clock, mock_logger, student):
        """Test store errors become persistence_failed."""
        broken = AsyncMock()
        broken.find_by_id.side_effect = RuntimeError("connection reset")
        handler = LockTeamHandler(
            event_repo=repos.events,
            team_repo=broken,
            clock=clock,
            logger=mock_logger,
        )

        result = await handler.handle(LockTeam(actor=student, team_id=uuid7()))

        assert result.error.code == ErrorCode.PERSISTENCE_FAILED
        mock_logger.error.assert_called_once()
