"""LeaveTeam command handler."""

from src.application.commands.team_commands import LeaveTeam
from src.application.errors import (
    persistence_failed,
    team_changed,
    team_not_found,
    team_rule_violation,
)
from src.core.errors import DomainError
from src.core.result import Failure, Result, Success
from src.domain.entities import Team
from src.domain.protocols import ClockProtocol, LoggerProtocol, TeamRepository


class LeaveTeamHandler:
    """Removes the actor from an active team; locked teams keep their members."""

    def __init__(
        self,
        team_repo: TeamRepository,
        clock: ClockProtocol,
        logger: LoggerProtocol,
    ) -> None:
        self._team_repo = team_repo
        self._clock = clock
        self._logger = logger

    async def handle(self, cmd: LeaveTeam) -> Result[Team, DomainError]:
        try:
            team = await self._team_repo.find_by_id(cmd.team_id)
            if team is None:
                return Failure(error=team_not_found(cmd.team_id))

            expected_status = team.status
            expected_members = list(team.member_ids)
            removed = team.remove_member(cmd.actor.user_id)
            if isinstance(removed, Failure):
                return Failure(error=team_rule_violation(removed.error, team))

            team.updated_at = self._clock.now()
            saved = await self._team_repo.save_if_unchanged(
                team,
                expected_status=expected_status,
                expected_member_ids=expected_members,
            )
        except Exception as e:
            self._logger.error("team_leave_failed", error=e, team_id=str(cmd.team_id))
            return Failure(error=persistence_failed(e))

        if not saved:
            return Failure(error=team_changed())

        self._logger.info(
            "team_left",
            team_id=str(team.id),
            user_id=str(cmd.actor.user_id),
            size=team.size,
        )
        return Success(value=team)
