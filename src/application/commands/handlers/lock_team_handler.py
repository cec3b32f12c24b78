"""LockTeam command handler.

Flow:
1. Load the team; only its leader may lock it
2. Refuse teams that are already locked or smaller than the event's
   ``min_team_size``
3. Compare-and-set to LOCKED against the membership that was checked
"""

from src.application.commands.team_commands import LockTeam
from src.application.errors import (
    event_not_found,
    forbidden,
    persistence_failed,
    team_changed,
    team_not_found,
    team_rule_violation,
)
from src.core.enums import ErrorCode
from src.core.errors import ConflictError, DomainError, ValidationError
from src.core.result import Failure, Result, Success
from src.domain.entities import Team
from src.domain.enums import TeamStatus
from src.domain.errors import TeamError
from src.domain.protocols import ClockProtocol, EventRepository, LoggerProtocol, TeamRepository


class LockTeamHandler:
    """Handler for freezing team membership before registration."""

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

    async def handle(self, cmd: LockTeam) -> Result[Team, DomainError]:
        """Handle LockTeam command.

        Returns:
            Success(Team): Locked team.
            Failure(AuthorizationError): Actor is not the leader.
            Failure(ConflictError): Already locked, disbanded, or membership
                changed concurrently.
            Failure(ValidationError): Fewer members than the event minimum.
        """
        try:
            team = await self._team_repo.find_by_id(cmd.team_id)
            if team is None:
                return Failure(error=team_not_found(cmd.team_id))
            if not team.is_leader(cmd.actor.user_id):
                return Failure(error=forbidden(TeamError.ONLY_LEADER_CAN_LOCK))
            if team.is_locked():
                return Failure(
                    error=ConflictError(
                        code=ErrorCode.INVALID_STATE_TRANSITION,
                        message=TeamError.ALREADY_LOCKED,
                        resource_type="Team",
                        conflicting_field="status",
                        details={"current": team.status.value},
                    )
                )

            event = await self._event_repo.find_by_id(team.event_id)
            if event is None:
                return Failure(error=event_not_found(team.event_id))
            if team.size < event.min_team_size:
                return Failure(
                    error=ValidationError(
                        code=ErrorCode.INVALID_TEAM_SIZE,
                        message=TeamError.BELOW_MIN_SIZE,
                        field="team_id",
                        details={"size": team.size, "min_team_size": event.min_team_size},
                    )
                )

            expected_members = list(team.member_ids)
            locked = team.lock()
            if isinstance(locked, Failure):
                return Failure(error=team_rule_violation(locked.error, team))

            team.updated_at = self._clock.now()
            saved = await self._team_repo.save_if_unchanged(
                team,
                expected_status=TeamStatus.ACTIVE,
                expected_member_ids=expected_members,
            )
        except Exception as e:
            self._logger.error("team_lock_failed", error=e, team_id=str(cmd.team_id))
            return Failure(error=persistence_failed(e))

        if not saved:
            return Failure(error=team_changed())

        self._logger.info("team_locked", team_id=str(team.id), size=team.size)
        return Success(value=team)
