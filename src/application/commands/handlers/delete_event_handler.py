"""DeleteEvent command handler.

An event can be deleted only while no registration for it is pending,
confirmed or waitlisted.
"""

from src.application.commands.event_commands import DeleteEvent
from src.application.errors import persistence_failed
from src.application.services.ownership_verifier import OwnershipVerifier
from src.core.enums import ErrorCode
from src.core.errors import ConflictError, DomainError
from src.core.result import Failure, Result, Success
from src.domain.errors import EventError
from src.domain.protocols import EventRepository, LoggerProtocol, RegistrationRepository


class DeleteEventHandler:
    """Handler for event deletion."""

    def __init__(
        self,
        event_repo: EventRepository,
        registration_repo: RegistrationRepository,
        verifier: OwnershipVerifier,
        logger: LoggerProtocol,
    ) -> None:
        self._event_repo = event_repo
        self._registration_repo = registration_repo
        self._verifier = verifier
        self._logger = logger

    async def handle(self, cmd: DeleteEvent) -> Result[None, DomainError]:
        """Handle DeleteEvent command.

        Returns:
            Success(None): Event deleted.
            Failure(ConflictError): Active registrations exist.
        """
        try:
            access = await self._verifier.verify_event_manager(cmd.event_id, cmd.actor)
            if isinstance(access, Failure):
                return access

            active = await self._registration_repo.count_active(cmd.event_id)
            if active > 0:
                return Failure(
                    error=ConflictError(
                        code=ErrorCode.EVENT_HAS_ACTIVE_REGISTRATIONS,
                        message=EventError.HAS_ACTIVE_REGISTRATIONS,
                        resource_type="Event",
                        details={"active_registrations": active},
                    )
                )

            await self._event_repo.delete(cmd.event_id)
        except Exception as e:
            self._logger.error("event_delete_failed", error=e, event_id=str(cmd.event_id))
            return Failure(error=persistence_failed(e))

        self._logger.info("event_deleted", event_id=str(cmd.event_id))
        return Success(value=None)
