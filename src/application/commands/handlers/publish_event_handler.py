"""PublishEvent command handler.

DRAFT -> PUBLISHED through the event transition table, then a
compare-and-set on the stored status so a concurrent cancel or publish
cannot be overwritten.
"""

from src.application.commands.event_commands import PublishEvent
from src.application.errors import persistence_failed, stale_state
from src.application.services.ownership_verifier import OwnershipVerifier
from src.core.errors import DomainError
from src.core.result import Failure, Result, Success
from src.domain.entities import Event
from src.domain.enums import EventStatus
from src.domain.protocols import ClockProtocol, EventRepository, LoggerProtocol


class PublishEventHandler:
    """Handler for publishing draft events."""

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

    async def handle(self, cmd: PublishEvent) -> Result[Event, DomainError]:
        """Handle PublishEvent command.

        Returns:
            Success(Event): Event is now published.
            Failure(ConflictError): Event is not a draft.
        """
        try:
            access = await self._verifier.verify_event_manager(cmd.event_id, cmd.actor)
            if isinstance(access, Failure):
                return access
            event = access.value

            now = self._clock.now()
            expected = event.status
            transition = event.transition_to(EventStatus.PUBLISHED, now)
            if isinstance(transition, Failure):
                return transition

            changed = await self._event_repo.transition_status(
                event.id, expected=expected, target=EventStatus.PUBLISHED, now=now
            )
        except Exception as e:
            self._logger.error("event_publish_failed", error=e, event_id=str(cmd.event_id))
            return Failure(error=persistence_failed(e))

        if not changed:
            return Failure(error=stale_state("Event"))

        self._logger.info("event_published", event_id=str(event.id))
        return Success(value=event)
