"""JoinTeam command handler.

Flow:
1. Normalize the invite code (trim, upper-case) and load its team
2. Refuse locked, disbanded or full teams, current members, and users
   already on another live team of the same event
3. Compare-and-set the grown member list against the membership read in
   step 1
"""

from src.application.commands.team_commands import JoinTeam
from src.application.errors import persistence_failed, team_changed, team_rule_violation
from src.core.enums import ErrorCode
from src.core.errors import ConflictError, DomainError, NotFoundError
from src.core.result import Failure, Result, Success
from src.domain.entities import Team
from src.domain.errors import TeamError
from src.domain.protocols import ClockProtocol, LoggerProtocol, TeamRepository


class JoinTeamHandler:
    """Handler for joining a team by invite code."""

    def __init__(
        self,
        team_repo: TeamRepository,
        clock: ClockProtocol,
        logger: LoggerProtocol,
    ) -> None:
        self._team_repo = team_repo
        self._clock = clock
        self._logger = logger

    async def handle(self, cmd: JoinTeam) -> Result[Team, DomainError]:
        """Handle JoinTeam command.

        Returns:
            Success(Team): Team including the actor.
            Failure(NotFoundError): No team with this invite code.
            Failure(ConflictError): Team not active or full, the actor is
                already on a team of the event, or membership changed
                concurrently.
        """
        code = cmd.invite_code.strip().upper()
        user_id = cmd.actor.user_id
        try:
            team = await self._team_repo.find_by_invite_code(code) if code else None
            if team is None:
                return Failure(
                    error=NotFoundError(
                        code=ErrorCode.TEAM_NOT_FOUND,
                        message=TeamError.INVITE_CODE_NOT_FOUND,
                        resource_type="Team",
                        resource_id=code,
                    )
                )

            expected_status = team.status
            expected_members = list(team.member_ids)
            added = team.add_member(user_id)
            if isinstance(added, Failure):
                return Failure(error=team_rule_violation(added.error, team))

            other = await self._team_repo.find_for_user(team.event_id, user_id)
            if other is not None:
                return Failure(error=_already_in_team(other))

            team.updated_at = self._clock.now()
            saved = await self._team_repo.save_if_unchanged(
                team,
                expected_status=expected_status,
                expected_member_ids=expected_members,
            )
        except Exception as e:
            self._logger.error("team_join_failed", error=e, user_id=str(user_id))
            return Failure(error=persistence_failed(e))

        if not saved:
            self._logger.warning("team_join_refused", team_id=str(team.id), user_id=str(user_id))
            return Failure(error=team_changed())

        self._logger.info(
            "team_joined",
            team_id=str(team.id),
            user_id=str(user_id),
            size=team.size,
        )
        return Success(value=team)


def _already_in_team(other: Team) -> ConflictError:
    return ConflictError(
        code=ErrorCode.ALREADY_IN_TEAM,
        message=TeamError.ALREADY_IN_TEAM,
        resource_type="Team",
        conflicting_field="member_ids",
        details={"team_id": str(other.id)},
    )
