"""AddRound command handler.

Appends a round whose window lies inside the event window:
``event.start <= round.start < round.end <= event.end``.
"""

from src.application.commands.event_commands import AddRound
from src.application.errors import event_closed, event_not_found, persistence_failed
from src.application.services.ownership_verifier import OwnershipVerifier
from src.core.enums import ErrorCode
from src.core.errors import DomainError, ValidationError
from src.core.result import Failure, Result, Success
from src.domain.entities import Round
from src.domain.protocols import ClockProtocol, EventRepository, LoggerProtocol
from src.domain.validators import validate_round_window


class AddRoundHandler:
    """Handler for adding rounds to an event."""

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

    async def handle(self, cmd: AddRound) -> Result[Round, DomainError]:
        """Handle AddRound command.

        Returns:
            Success(Round): Round appended (number = position).
            Failure(ValidationError): Window outside the event window, errors
                keyed ``start_date`` / ``end_date``.
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

        draft = cmd.round
        window = validate_round_window(
            event.start_date_time, event.end_date_time, draft.start_date, draft.end_date
        )
        if isinstance(window, Failure):
            return window

        now = self._clock.now()
        try:
            round_ = Round(
                name=draft.name,
                description=draft.description,
                start_date=draft.start_date,
                end_date=draft.end_date,
                max_participants=draft.max_participants,
                updated_at=now,
            )
        except ValueError as e:
            return Failure(
                error=ValidationError(
                    code=ErrorCode.VALIDATION_FAILED, message=str(e), field="name"
                )
            )

        try:
            number = await self._event_repo.add_round(event.id, round_)
        except Exception as e:
            self._logger.error("round_add_failed", error=e, event_id=str(event.id))
            return Failure(error=persistence_failed(e))
        if number is None:
            return Failure(error=event_not_found(event.id))

        self._logger.info(
            "round_added",
            event_id=str(event.id),
            round_id=str(round_.id),
            round_number=number,
        )
        return Success(value=round_)
