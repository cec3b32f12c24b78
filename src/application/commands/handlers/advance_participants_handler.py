"""AdvanceParticipants command handler.

Moves chosen participants from round N to round N+1 after round N has
completed.

Flow:
1. Load the event and check the actor manages it
2. Validate N and N+1 exist and round N is completed
3. Participants of round N: confirmed, not eliminated, ``current_round``
   equal to N (registrations that never progressed are in round 1)
4. Selected participants: ``current_round = N+1``, N+1 appended to
   ``advanced_to_rounds``
5. Every other participant of round N: ``eliminated_in_round = N``; their
   team is marked eliminated
6. Notify advanced and eliminated users
"""

from uuid import UUID

from src.application.commands.event_commands import AdvanceParticipants
from src.application.dtos import AdvancementResult
from src.application.errors import persistence_failed
from src.application.services.notification_dispatcher import (
    IN_APP_EMAIL,
    NotificationDispatcher,
)
from src.application.services.ownership_verifier import OwnershipVerifier
from src.core.enums import ErrorCode
from src.core.errors import DomainError, ValidationError
from src.core.result import Failure, Result, Success
from src.domain.entities import Event, Registration
from src.domain.enums import NotificationPriority, RegistrationStatus, RoundStatus
from src.domain.errors import EventError
from src.domain.protocols import LoggerProtocol, RegistrationRepository, TeamRepository
from src.domain.validators import validate_round_progression


def participant_round(registration: Registration) -> int:
    """Round a participant is in (1 before any progression)."""
    return max(registration.current_round, 1)


class AdvanceParticipantsHandler:
    """Handler for round progression."""

    def __init__(
        self,
        registration_repo: RegistrationRepository,
        team_repo: TeamRepository,
        verifier: OwnershipVerifier,
        notifications: NotificationDispatcher,
        logger: LoggerProtocol,
    ) -> None:
        self._registration_repo = registration_repo
        self._team_repo = team_repo
        self._verifier = verifier
        self._notifications = notifications
        self._logger = logger

    async def handle(self, cmd: AdvanceParticipants) -> Result[AdvancementResult, DomainError]:
        """Handle AdvanceParticipants command.

        Returns:
            Success(AdvancementResult): Ids advanced and eliminated.
            Failure(ValidationError): Invalid round numbers, round N not
                completed, or a selected id is not a participant of round N.
        """
        try:
            access = await self._verifier.verify_event_manager(cmd.event_id, cmd.actor)
            if isinstance(access, Failure):
                return access
            event = access.value

            from_round, to_round = cmd.from_round, cmd.from_round + 1
            check = self._check_rounds(event, from_round, to_round)
            if isinstance(check, Failure):
                return check

            confirmed = await self._registration_repo.find_by_event(
                event.id, {RegistrationStatus.CONFIRMED}
            )
            participants = [
                r
                for r in confirmed
                if not r.is_eliminated() and participant_round(r) == from_round
            ]
            participant_ids = {r.id for r in participants}
            unknown = sorted(str(i) for i in cmd.registration_ids - participant_ids)
            if unknown:
                return Failure(
                    error=ValidationError(
                        code=ErrorCode.INVALID_ROUND_PROGRESSION,
                        message=EventError.NOT_IN_ROUND,
                        field="registration_ids",
                        details={"registration_ids": ", ".join(unknown)},
                    )
                )

            result = AdvancementResult(from_round=from_round, to_round=to_round)
            eliminated_teams: set[UUID] = set()
            for registration in participants:
                if registration.id in cmd.registration_ids:
                    await self._registration_repo.update_progress(
                        registration.id,
                        current_round=to_round,
                        advanced_to_rounds=[*registration.advanced_to_rounds, to_round],
                        eliminated_in_round=None,
                    )
                    result.advanced_ids.append(registration.id)
                else:
                    await self._registration_repo.update_progress(
                        registration.id,
                        current_round=participant_round(registration),
                        advanced_to_rounds=list(registration.advanced_to_rounds),
                        eliminated_in_round=from_round,
                    )
                    result.eliminated_ids.append(registration.id)
                    if registration.team_id is not None:
                        eliminated_teams.add(registration.team_id)

            for team_id in eliminated_teams:
                team = await self._team_repo.find_by_id(team_id)
                if team is not None and not team.eliminated:
                    team.mark_eliminated()
                    await self._team_repo.save(team)
        except Exception as e:
            self._logger.error("round_advance_failed", error=e, event_id=str(cmd.event_id))
            return Failure(error=persistence_failed(e))

        self._logger.info(
            "participants_advanced",
            event_id=str(event.id),
            from_round=from_round,
            advanced=len(result.advanced_ids),
            eliminated=len(result.eliminated_ids),
        )
        users = {r.id: r.user_id for r in participants}
        await self._notifications.notify(
            [users[i] for i in result.advanced_ids],
            title=f"Advanced to Next Round: {event.title}",
            message=f'Congratulations! You have advanced to round {to_round} of "{event.title}".',
            event_id=event.id,
            channels=IN_APP_EMAIL,
            priority=NotificationPriority.HIGH,
        )
        await self._notifications.notify(
            [users[i] for i in result.eliminated_ids],
            title=f"Round Results: {event.title}",
            message=(
                f'Results for round {from_round} of "{event.title}" are out. '
                "Unfortunately you did not advance this time."
            ),
            event_id=event.id,
            channels=IN_APP_EMAIL,
            priority=NotificationPriority.NORMAL,
        )
        return Success(value=result)

    @staticmethod
    def _check_rounds(
        event: Event, from_round: int, to_round: int
    ) -> Result[None, ValidationError]:
        progression = validate_round_progression(from_round, to_round, len(event.rounds))
        if isinstance(progression, Failure):
            if to_round > len(event.rounds) and 1 <= from_round <= len(event.rounds):
                return Failure(
                    error=ValidationError(
                        code=ErrorCode.INVALID_ROUND_PROGRESSION,
                        message=EventError.NEXT_ROUND_MISSING,
                        field="to_round",
                    )
                )
            return progression

        current = event.round_by_number(from_round)
        if current is None or current.status != RoundStatus.COMPLETED:
            return Failure(
                error=ValidationError(
                    code=ErrorCode.INVALID_ROUND_PROGRESSION,
                    message=EventError.ROUND_NOT_COMPLETED,
                    field="from_round",
                )
            )
        return Success(value=None)
