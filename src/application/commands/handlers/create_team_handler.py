"""CreateTeam command handler.

Flow:
1. Load the event; it must allow teams and still be open
2. Build the team with the actor as leader, sized to the event's
   ``max_team_size``, with a fresh invite code
3. Insert it unless the actor already belongs to a live team of the event
"""

from src.application.commands.team_commands import CreateTeam
from src.application.errors import event_closed, event_not_found, persistence_failed
from src.core.enums import ErrorCode
from src.core.errors import ConflictError, DomainError, ValidationError
from src.core.result import Failure, Result, Success
from src.domain.entities import Team
from src.domain.entities.team import generate_invite_code
from src.domain.errors import TeamError
from src.domain.protocols import ClockProtocol, EventRepository, LoggerProtocol, TeamRepository

_INVITE_CODE_ATTEMPTS = 5


class CreateTeamHandler:
    """Handler for team creation."""

    def __init__(
        self,
        event_repo: EventRepository,
        team_repo: TeamRepository,
        clock: ClockProtocol,
        logger: LoggerProtocol,
    ) -> None:
        self._event_repo = event_repo
        self._team_repo = team_repo
        self._clock = clock
        self._logger = logger

    async def handle(self, cmd: CreateTeam) -> Result[Team, DomainError]:
        """Handle CreateTeam command.

        Returns:
            Success(Team): Active team holding only the leader.
            Failure(NotFoundError): Event does not exist.
            Failure(ValidationError): Event without teams, or a bad name.
            Failure(ConflictError): Event closed, or the actor already has a
                team for this event.
        """
        try:
            event = await self._event_repo.find_by_id(cmd.event_id)
            if event is None:
                return Failure(error=event_not_found(cmd.event_id))
            if not event.allows_teams():
                return Failure(
                    error=ValidationError(
                        code=ErrorCode.INVALID_TEAM_SIZE,
                        message=TeamError.TEAMS_NOT_ALLOWED,
                        field="event_id",
                    )
                )
            if event.TRANSITIONS.is_terminal(event.status):
                return Failure(error=event_closed(event))

            now = self._clock.now()
            try:
                team = Team(
                    event_id=event.id,
                    name=cmd.name.strip(),
                    leader_id=cmd.actor.user_id,
                    max_size=event.max_team_size,
                    invite_code=await self._unused_invite_code(),
                    created_at=now,
                    updated_at=now,
                )
            except ValueError as e:
                return Failure(
                    error=ValidationError(
                        code=ErrorCode.VALIDATION_FAILED,
                        message=str(e),
                        field="name",
                    )
                )

            added = await self._team_repo.add(team)
        except Exception as e:
            self._logger.error("team_create_failed", error=e, event_id=str(cmd.event_id))
            return Failure(error=persistence_failed(e))

        if not added:
            return Failure(
                error=ConflictError(
                    code=ErrorCode.ALREADY_IN_TEAM,
                    message=TeamError.ALREADY_IN_TEAM,
                    resource_type="Team",
                    conflicting_field="leader_id",
                )
            )

        self._logger.info(
            "team_created",
            team_id=str(team.id),
            event_id=str(event.id),
            leader_id=str(team.leader_id),
            max_size=team.max_size,
        )
        return Success(value=team)

    async def _unused_invite_code(self) -> str:
        code = generate_invite_code()
        for _ in range(_INVITE_CODE_ATTEMPTS - 1):
            if await self._team_repo.find_by_invite_code(code) is None:
                break
            code = generate_invite_code()
        return code
