"""UpdateEvent command handler.

Flow:
1. Load the event and check the actor manages it
2. Reject edits of completed or cancelled events
3. Drop values equal to the current ones; reject unknown fields, locked
   fields after start, deadline extensions after the deadline passed and
   capacity below the registered count
4. Re-validate the resulting schedule, team size, payment settings and
   round windows
5. Apply and save
"""

from typing import Any

from src.application.commands.event_commands import UpdateEvent
from src.application.errors import event_closed, persistence_failed
from src.application.services.ownership_verifier import OwnershipVerifier
from src.core.enums import ErrorCode
from src.core.errors import DomainError, ValidationError
from src.core.result import Failure, Result, Success
from src.domain.entities import Event
from src.domain.protocols import ClockProtocol, EventRepository, LoggerProtocol
from src.domain.validators import (
    merge_validations,
    validate_capacity,
    validate_edit,
    validate_eligible_years,
    validate_event_schedule,
    validate_payment_settings,
    validate_round_window,
    validate_team_size,
)


class UpdateEventHandler:
    """Handler for event edits."""

    def __init__(
        self,
        event_repo: EventRepository,
        verifier: OwnershipVerifier,
        clock: ClockProtocol,
        logger: LoggerProtocol,
    ) -> None:
        self._event_repo = event_repo
        self._verifier = verifier
        self._clock = clock
        self._logger = logger

    async def handle(self, cmd: UpdateEvent) -> Result[Event, DomainError]:
        """Handle UpdateEvent command.

        Returns:
            Success(Event): Updated event (unchanged if nothing differed).
            Failure(NotFoundError | AuthorizationError | ConflictError |
                ValidationError): see flow above.
        """
        try:
            access = await self._verifier.verify_event_manager(cmd.event_id, cmd.actor)
        except Exception as e:
            return Failure(error=persistence_failed(e))
        if isinstance(access, Failure):
            return access
        event = access.value
        if event.TRANSITIONS.is_terminal(event.status):
            return Failure(error=event_closed(event))

        now = self._clock.now()
        edit = validate_edit(event, cmd.changes, now)
        if isinstance(edit, Failure):
            return edit
        effective = edit.value
        if not effective:
            return Success(value=event)

        validation = self._validate_result(event, effective)
        if isinstance(validation, Failure):
            return validation

        applied = event.apply_changes(effective, now)
        if isinstance(applied, Failure):
            return Failure(
                error=ValidationError(code=ErrorCode.VALIDATION_FAILED, message=applied.error)
            )

        try:
            await self._event_repo.save(event)
        except Exception as e:
            self._logger.error("event_update_failed", error=e, event_id=str(event.id))
            return Failure(error=persistence_failed(e))

        self._logger.info(
            "event_updated",
            event_id=str(event.id),
            fields=sorted(effective),
        )
        return Success(value=event)

    @staticmethod
    def _validate_result(
        event: Event, changes: dict[str, Any]
    ) -> Result[None, ValidationError]:
        def value(name: str) -> Any:
            return changes.get(name, getattr(event, name))

        start, end = value("start_date_time"), value("end_date_time")
        return merge_validations(
            validate_event_schedule(value("registration_deadline"), start, end),
            validate_team_size(value("min_team_size"), value("max_team_size")),
            validate_payment_settings(value("is_paid"), value("amount")),
            validate_capacity(value("max_participants")),
            validate_eligible_years(value("eligible_years")),
            *(
                validate_round_window(start, end, round_.start_date, round_.end_date)
                for round_ in event.rounds
            ),
        )
