"""CreateEvent command handler.

Flow:
1. Check the actor may create events
2. Validate schedule, team size, payment settings, capacity, eligible
   years and every round window (all problems reported together)
3. Build the draft Event with its rounds
4. Save and return the event

Architecture:
- Application layer ONLY imports from domain layer (entities, protocols)
- Repositories are injected via protocols
"""

from decimal import Decimal

from src.application.commands.event_commands import CreateEvent
from src.application.errors import forbidden, persistence_failed
from src.core.enums import ErrorCode
from src.core.errors import DomainError, ValidationError
from src.core.result import Failure, Result, Success
from src.domain.entities import Event, Round
from src.domain.enums import Capability
from src.domain.errors import EventError
from src.domain.policies import has_capability
from src.domain.protocols import ClockProtocol, EventRepository, LoggerProtocol
from src.domain.validators import (
    merge_validations,
    validate_capacity,
    validate_eligible_years,
    validate_event_schedule,
    validate_payment_settings,
    validate_round_window,
    validate_team_size,
)


class CreateEventHandler:
    """Handler for event creation."""

    def __init__(
        self,
        event_repo: EventRepository,
        clock: ClockProtocol,
        logger: LoggerProtocol,
        default_currency: str = "INR",
    ) -> None:
        """Initialize handler with dependencies.

        Args:
            event_repo: Event repository.
            clock: Time source.
            logger: Structured logger.
            default_currency: Currency used when the command names none.
        """
        self._event_repo = event_repo
        self._clock = clock
        self._logger = logger
        self._default_currency = default_currency

    async def handle(self, cmd: CreateEvent) -> Result[Event, DomainError]:
        """Handle CreateEvent command.

        Returns:
            Success(Event): Draft event created.
            Failure(AuthorizationError): Actor cannot create events.
            Failure(ValidationError): Invalid schedule, settings or rounds.
        """
        if not has_capability(cmd.actor, Capability.CREATE_EVENTS):
            return Failure(error=forbidden(EventError.CANNOT_CREATE, Capability.CREATE_EVENTS))

        validation = merge_validations(
            validate_event_schedule(
                cmd.registration_deadline, cmd.start_date_time, cmd.end_date_time
            ),
            validate_team_size(cmd.min_team_size, cmd.max_team_size),
            validate_payment_settings(cmd.is_paid, cmd.amount),
            validate_capacity(cmd.max_participants),
            validate_eligible_years(cmd.eligible_years),
            *(
                validate_round_window(
                    cmd.start_date_time,
                    cmd.end_date_time,
                    round_draft.start_date,
                    round_draft.end_date,
                )
                for round_draft in cmd.rounds
            ),
        )
        if isinstance(validation, Failure):
            return validation

        now = self._clock.now()
        try:
            event = Event(
                organizer_id=cmd.actor.user_id,
                title=cmd.title.strip(),
                event_type=cmd.event_type,
                description=cmd.description,
                registration_deadline=cmd.registration_deadline,
                start_date_time=cmd.start_date_time,
                end_date_time=cmd.end_date_time,
                max_participants=cmd.max_participants,
                is_paid=cmd.is_paid,
                amount=cmd.amount if cmd.is_paid else Decimal("0"),
                currency=cmd.currency or self._default_currency,
                min_team_size=cmd.min_team_size,
                max_team_size=cmd.max_team_size,
                requires_approval=cmd.requires_approval,
                eligibility=cmd.eligibility,
                eligible_years=list(cmd.eligible_years),
                eligible_departments=list(cmd.eligible_departments),
                allow_external_students=cmd.allow_external_students,
                rounds=[
                    Round(
                        name=round_draft.name,
                        description=round_draft.description,
                        start_date=round_draft.start_date,
                        end_date=round_draft.end_date,
                        max_participants=round_draft.max_participants,
                        updated_at=now,
                    )
                    for round_draft in cmd.rounds
                ],
                created_at=now,
                updated_at=now,
            )
        except ValueError as e:
            return Failure(
                error=ValidationError(code=ErrorCode.VALIDATION_FAILED, message=str(e))
            )

        try:
            await self._event_repo.save(event)
        except Exception as e:
            self._logger.error("event_create_failed", error=e, organizer_id=str(cmd.actor.user_id))
            return Failure(error=persistence_failed(e))

        self._logger.info(
            "event_created",
            event_id=str(event.id),
            organizer_id=str(event.organizer_id),
            rounds=len(event.rounds),
        )
        return Success(value=event)
