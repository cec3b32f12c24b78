"""UpdateRound command handler.

Only upcoming rounds can be edited; the edited window must still lie inside
the event window.
"""

from dataclasses import replace

from src.application.commands.event_commands import UpdateRound
from src.application.errors import event_closed, persistence_failed
from src.application.services.ownership_verifier import OwnershipVerifier
from src.core.enums import ErrorCode
from src.core.errors import ConflictError, DomainError, NotFoundError, ValidationError
from src.core.result import Failure, Result, Success
from src.domain.entities import Round
from src.domain.enums import RoundStatus
from src.domain.errors import EventError
from src.domain.protocols import ClockProtocol, EventRepository, LoggerProtocol
from src.domain.validators import validate_round_window


class UpdateRoundHandler:
    """Handler for round edits."""

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

    async def handle(self, cmd: UpdateRound) -> Result[Round, DomainError]:
        """Handle UpdateRound command."""
        try:
            access = await self._verifier.verify_event_manager(cmd.event_id, cmd.actor)
        except Exception as e:
            return Failure(error=persistence_failed(e))
        if isinstance(access, Failure):
            return access
        event = access.value
        if event.TRANSITIONS.is_terminal(event.status):
            return Failure(error=event_closed(event))

        current = event.round_by_id(cmd.round_id)
        if current is None:
            return Failure(
                error=NotFoundError(
                    code=ErrorCode.ROUND_NOT_FOUND,
                    message=EventError.ROUND_NOT_FOUND,
                    resource_type="Round",
                    resource_id=str(cmd.round_id),
                )
            )
        if current.status != RoundStatus.UPCOMING:
            return Failure(error=_round_not_editable(current.status))

        start = cmd.start_date or current.start_date
        end = cmd.end_date or current.end_date
        window = validate_round_window(event.start_date_time, event.end_date_time, start, end)
        if isinstance(window, Failure):
            return window

        now = self._clock.now()
        try:
            updated = replace(
                current,
                name=cmd.name if cmd.name is not None else current.name,
                description=cmd.description if cmd.description is not None else current.description,
                start_date=start,
                end_date=end,
                max_participants=(
                    cmd.max_participants
                    if cmd.max_participants is not None
                    else current.max_participants
                ),
                updated_at=now,
            )
        except ValueError as e:
            return Failure(
                error=ValidationError(
                    code=ErrorCode.VALIDATION_FAILED, message=str(e), field="name"
                )
            )

        try:
            written = await self._event_repo.update_round(
                event.id, updated, expected_status=RoundStatus.UPCOMING
            )
        except Exception as e:
            self._logger.error("round_update_failed", error=e, event_id=str(event.id))
            return Failure(error=persistence_failed(e))
        if not written:
            return Failure(error=_round_not_editable(None))

        self._logger.info("round_updated", event_id=str(event.id), round_id=str(updated.id))
        return Success(value=updated)


def _round_not_editable(status: RoundStatus | None) -> ConflictError:
    """Round left UPCOMING; ``status`` is None when it moved after it was read."""
    return ConflictError(
        code=ErrorCode.INVALID_STATE_TRANSITION,
        message=EventError.ROUND_NOT_EDITABLE,
        resource_type="Round",
        conflicting_field="status",
        details={"current": status.value} if status is not None else None,
    )
