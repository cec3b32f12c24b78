"""RegisterForEvent command handler.

Flow:
1. Check the actor may register and the event accepts registrations
   (published, deadline not passed)
2. Resolve participants: the actor alone, or every member of the actor's
   locked team (team events; only the leader registers)
3. Build registrations: PENDING when the event is paid or requires approval,
   else CONFIRMED; payment PENDING when paid, else NOT_REQUIRED
4. Guarded insert: no active duplicate, enough capacity
5. When full and the caller asked for it, insert WAITLISTED instead

The duplicate and capacity checks run atomically with the insert inside the
store, so concurrent requests cannot both take the last spot or both create
an active registration for the same user.
"""

from collections.abc import Sequence
from datetime import datetime
from uuid import UUID

from src.application.commands.registration_commands import RegisterForEvent
from src.application.dtos import RegistrationResult
from src.application.errors import event_not_found, forbidden, persistence_failed, team_not_found
from src.core.enums import ErrorCode
from src.core.errors import ConflictError, DomainError, ValidationError
from src.core.result import Failure, Result, Success
from src.domain.entities import Event, Registration
from src.domain.enums import Capability, RegistrationPaymentStatus, RegistrationStatus
from src.domain.errors import RegistrationError
from src.domain.policies import has_capability
from src.domain.protocols import (
    AddOutcome,
    ClockProtocol,
    EventRepository,
    LoggerProtocol,
    RegistrationRepository,
    TeamRepository,
)


def _invalid(
    message: str, field: str, code: ErrorCode = ErrorCode.VALIDATION_FAILED
) -> Failure[ValidationError]:
    return Failure(error=ValidationError(code=code, message=message, field=field))


class RegisterForEventHandler:
    """Handler for event registration."""

    def __init__(
        self,
        event_repo: EventRepository,
        registration_repo: RegistrationRepository,
        team_repo: TeamRepository,
        clock: ClockProtocol,
        logger: LoggerProtocol,
    ) -> None:
        """Initialize registration handler with dependencies.

        Args:
            event_repo: Event repository.
            registration_repo: Registration repository (guarded insert).
            team_repo: Team repository.
            clock: Time source.
            logger: Structured logger.
        """
        self._event_repo = event_repo
        self._registration_repo = registration_repo
        self._team_repo = team_repo
        self._clock = clock
        self._logger = logger

    async def handle(self, cmd: RegisterForEvent) -> Result[RegistrationResult, DomainError]:
        """Handle RegisterForEvent command.

        Returns:
            Success(RegistrationResult): Registrations created, the actor's
                first.
            Failure(ValidationError): Registration closed or team rules
                violated.
            Failure(ConflictError): Already registered, or event full
                without ``join_waitlist``.
        """
        if not has_capability(cmd.actor, Capability.REGISTER_FOR_EVENTS):
            return Failure(
                error=forbidden(RegistrationError.CANNOT_REGISTER, Capability.REGISTER_FOR_EVENTS)
            )

        try:
            event = await self._event_repo.find_by_id(cmd.event_id)
            if event is None:
                return Failure(error=event_not_found(cmd.event_id))

            now = self._clock.now()
            if not event.is_registration_open(now):
                message = (
                    RegistrationError.DEADLINE_PASSED
                    if now > event.registration_deadline
                    else RegistrationError.NOT_OPEN
                )
                return _invalid(message, "event_id", ErrorCode.REGISTRATION_CLOSED)

            participants = await self._resolve_participants(cmd, event)
            if isinstance(participants, Failure):
                return participants

            registrations = self._build(event, participants.value, cmd.team_id, now)
            outcome = await self._registration_repo.add(
                registrations, capacity=event.max_participants
            )
            waitlisted = False
            if outcome == AddOutcome.NO_CAPACITY and cmd.join_waitlist:
                registrations = self._build(
                    event, participants.value, cmd.team_id, now, waitlisted=True
                )
                outcome = await self._registration_repo.add(registrations, capacity=None)
                waitlisted = True
        except Exception as e:
            self._logger.error(
                "registration_failed",
                error=e,
                event_id=str(cmd.event_id),
                user_id=str(cmd.actor.user_id),
            )
            return Failure(error=persistence_failed(e))

        if outcome == AddOutcome.DUPLICATE_ACTIVE:
            return Failure(
                error=ConflictError(
                    code=ErrorCode.REGISTRATION_ALREADY_ACTIVE,
                    message=RegistrationError.ALREADY_REGISTERED,
                    resource_type="Registration",
                    conflicting_field="user_id",
                )
            )
        if outcome == AddOutcome.NO_CAPACITY:
            return Failure(
                error=ConflictError(
                    code=ErrorCode.EVENT_FULL,
                    message=RegistrationError.EVENT_FULL,
                    resource_type="Event",
                    conflicting_field="max_participants",
                    details={"max_participants": event.max_participants},
                )
            )

        self._logger.info(
            "registration_created",
            event_id=str(event.id),
            user_id=str(cmd.actor.user_id),
            team_id=str(cmd.team_id) if cmd.team_id else None,
            registrations=len(registrations),
            status=registrations[0].status.value,
        )
        return Success(value=RegistrationResult(registrations=registrations, waitlisted=waitlisted))

    async def _resolve_participants(
        self, cmd: RegisterForEvent, event: Event
    ) -> Result[list[UUID], DomainError]:
        """The actor alone, or the actor's team with the actor first."""
        if cmd.team_id is None:
            if event.is_team_event():
                return _invalid(RegistrationError.TEAM_REQUIRED, "team_id")
            return Success(value=[cmd.actor.user_id])

        if not event.allows_teams():
            return _invalid(RegistrationError.TEAM_NOT_ALLOWED, "team_id")

        team = await self._team_repo.find_by_id(cmd.team_id)
        if team is None:
            return Failure(error=team_not_found(cmd.team_id))
        if team.event_id != event.id:
            return _invalid(RegistrationError.TEAM_WRONG_EVENT, "team_id")
        if not team.is_leader(cmd.actor.user_id):
            return Failure(error=forbidden(RegistrationError.NOT_TEAM_LEADER))
        if not team.is_locked():
            return _invalid(RegistrationError.TEAM_NOT_LOCKED, "team_id")
        if not event.min_team_size <= team.size <= event.max_team_size:
            return _invalid(RegistrationError.TEAM_SIZE_OUT_OF_BOUNDS, "team_id")
        return Success(value=list(team.member_ids))

    @staticmethod
    def _build(
        event: Event,
        user_ids: Sequence[UUID],
        team_id: UUID | None,
        now: datetime,
        *,
        waitlisted: bool = False,
    ) -> list[Registration]:
        if waitlisted:
            status = RegistrationStatus.WAITLISTED
        elif event.is_paid or event.requires_approval:
            status = RegistrationStatus.PENDING
        else:
            status = RegistrationStatus.CONFIRMED
        payment_status = (
            RegistrationPaymentStatus.PENDING
            if event.is_paid
            else RegistrationPaymentStatus.NOT_REQUIRED
        )
        return [
            Registration(
                event_id=event.id,
                user_id=user_id,
                registration_date=now,
                status=status,
                payment_status=payment_status,
                team_id=team_id,
                created_at=now,
                updated_at=now,
            )
            for user_id in user_ids
        ]

