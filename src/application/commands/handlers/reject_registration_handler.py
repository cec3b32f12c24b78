"""RejectRegistration command handler.

PENDING, WAITLISTED or CONFIRMED -> REJECTED. A released spot is offered to
the waitlist straight away.
"""

from src.application.commands.registration_commands import RejectRegistration
from src.application.errors import persistence_failed, stale_state
from src.application.services.notification_dispatcher import (
    IN_APP_EMAIL,
    NotificationDispatcher,
)
from src.application.services.ownership_verifier import OwnershipVerifier
from src.application.services.waitlist_service import WaitlistService
from src.core.errors import DomainError
from src.core.result import Failure, Result, Success
from src.domain.entities import Registration
from src.domain.enums import NotificationPriority, RegistrationStatus
from src.domain.protocols import (
    ClockProtocol,
    LoggerProtocol,
    RegistrationChange,
    RegistrationRepository,
)
from src.domain.state_machine import attempt_transition


class RejectRegistrationHandler:
    """Handler for organizer rejection."""

    def __init__(
        self,
        registration_repo: RegistrationRepository,
        verifier: OwnershipVerifier,
        waitlist: WaitlistService,
        notifications: NotificationDispatcher,
        clock: ClockProtocol,
        logger: LoggerProtocol,
    ) -> None:
        self._registration_repo = registration_repo
        self._verifier = verifier
        self._waitlist = waitlist
        self._notifications = notifications
        self._clock = clock
        self._logger = logger

    async def handle(self, cmd: RejectRegistration) -> Result[Registration, DomainError]:
        """Handle RejectRegistration command."""
        try:
            access = await self._verifier.verify_registration_access(
                cmd.registration_id, cmd.actor, managers_only=True
            )
            if isinstance(access, Failure):
                return access
            registration, event = access.value

            now = self._clock.now()
            expected_status = registration.status
            transition = attempt_transition(registration, RegistrationStatus.REJECTED, now=now)
            if isinstance(transition, Failure):
                return transition

            rejected = await self._registration_repo.transition(
                registration.id,
                expected_statuses={expected_status},
                expected_payment_statuses={registration.payment_status},
                change=RegistrationChange(
                    status=RegistrationStatus.REJECTED,
                    cancelled_at=now,
                    cancellation_reason=cmd.reason,
                ),
            )
        except Exception as e:
            self._logger.error(
                "registration_reject_failed",
                error=e,
                registration_id=str(cmd.registration_id),
            )
            return Failure(error=persistence_failed(e))

        if rejected is None:
            return Failure(error=stale_state("Registration"))

        if expected_status != RegistrationStatus.WAITLISTED:
            await self._waitlist.promote_after_release(event.id, now)

        self._logger.info(
            "registration_rejected",
            registration_id=str(rejected.id),
            event_id=str(event.id),
            previous_status=expected_status.value,
        )
        reason = f" Reason: {cmd.reason}" if cmd.reason else ""
        await self._notifications.notify(
            [rejected.user_id],
            title=f"Registration Rejected: {event.title}",
            message=f'Your registration for "{event.title}" was not accepted.{reason}',
            event_id=event.id,
            channels=IN_APP_EMAIL,
            priority=NotificationPriority.NORMAL,
        )
        return Success(value=rejected)
