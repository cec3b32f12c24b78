"""CancelEvent command handler.

Any non-terminal status -> CANCELLED. Confirmed registrants are notified;
their registrations are left as they are (refunds go through RequestRefund).
"""

from src.application.commands.event_commands import CancelEvent
from src.application.errors import persistence_failed, stale_state
from src.application.services.notification_dispatcher import (
    IN_APP_EMAIL_PUSH,
    NotificationDispatcher,
)
from src.application.services.ownership_verifier import OwnershipVerifier
from src.core.errors import DomainError
from src.core.result import Failure, Result, Success
from src.domain.entities import Event
from src.domain.enums import EventStatus, NotificationPriority, RegistrationStatus
from src.domain.protocols import (
    ClockProtocol,
    EventRepository,
    LoggerProtocol,
    RegistrationRepository,
)


class CancelEventHandler:
    """Handler for event cancellation."""

    def __init__(
        self,
        event_repo: EventRepository,
        registration_repo: RegistrationRepository,
        verifier: OwnershipVerifier,
        notifications: NotificationDispatcher,
        clock: ClockProtocol,
        logger: LoggerProtocol,
    ) -> None:
        self._event_repo = event_repo
        self._registration_repo = registration_repo
        self._verifier = verifier
        self._notifications = notifications
        self._clock = clock
        self._logger = logger

    async def handle(self, cmd: CancelEvent) -> Result[Event, DomainError]:
        """Handle CancelEvent command.

        Returns:
            Success(Event): Event is now cancelled.
            Failure(ConflictError): Event already completed or cancelled, or
                its status changed concurrently.
        """
        try:
            access = await self._verifier.verify_event_manager(cmd.event_id, cmd.actor)
            if isinstance(access, Failure):
                return access
            event = access.value

            now = self._clock.now()
            expected = event.status
            transition = event.transition_to(EventStatus.CANCELLED, now)
            if isinstance(transition, Failure):
                return transition

            changed = await self._event_repo.transition_status(
                event.id, expected=expected, target=EventStatus.CANCELLED, now=now
            )
            if not changed:
                return Failure(error=stale_state("Event"))

            confirmed = await self._registration_repo.find_by_event(
                event.id, {RegistrationStatus.CONFIRMED}
            )
        except Exception as e:
            self._logger.error("event_cancel_failed", error=e, event_id=str(cmd.event_id))
            return Failure(error=persistence_failed(e))

        self._logger.info(
            "event_cancelled",
            event_id=str(event.id),
            previous_status=expected.value,
            reason=cmd.reason,
        )
        reason = f" Reason: {cmd.reason}" if cmd.reason else ""
        await self._notifications.notify(
            [registration.user_id for registration in confirmed],
            title=f"Event Cancelled: {event.title}",
            message=f'The event "{event.title}" has been cancelled.{reason}',
            event_id=event.id,
            channels=IN_APP_EMAIL_PUSH,
            priority=NotificationPriority.HIGH,
        )
        return Success(value=event)
