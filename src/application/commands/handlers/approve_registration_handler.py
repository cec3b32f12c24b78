"""ApproveRegistration command handler.

PENDING -> CONFIRMED for registrations waiting for organizer approval.
Registrations still waiting for payment are confirmed by settlement instead.
"""

from src.application.commands.registration_commands import ApproveRegistration
from src.application.errors import persistence_failed, stale_state
from src.application.services.notification_dispatcher import (
    IN_APP_EMAIL,
    NotificationDispatcher,
)
from src.application.services.ownership_verifier import OwnershipVerifier
from src.core.enums import ErrorCode
from src.core.errors import ConflictError, DomainError
from src.core.result import Failure, Result, Success
from src.domain.entities import Registration
from src.domain.enums import NotificationPriority, RegistrationPaymentStatus, RegistrationStatus
from src.domain.errors import RegistrationError
from src.domain.protocols import (
    ClockProtocol,
    LoggerProtocol,
    RegistrationChange,
    RegistrationRepository,
)

_APPROVABLE_PAYMENT_STATES = frozenset(
    {RegistrationPaymentStatus.NOT_REQUIRED, RegistrationPaymentStatus.PAID}
)


class ApproveRegistrationHandler:
    """Handler for organizer approval."""

    def __init__(
        self,
        registration_repo: RegistrationRepository,
        verifier: OwnershipVerifier,
        notifications: NotificationDispatcher,
        clock: ClockProtocol,
        logger: LoggerProtocol,
    ) -> None:
        self._registration_repo = registration_repo
        self._verifier = verifier
        self._notifications = notifications
        self._clock = clock
        self._logger = logger

    async def handle(self, cmd: ApproveRegistration) -> Result[Registration, DomainError]:
        """Handle ApproveRegistration command."""
        try:
            access = await self._verifier.verify_registration_access(
                cmd.registration_id, cmd.actor, managers_only=True
            )
            if isinstance(access, Failure):
                return access
            registration, event = access.value

            if (
                registration.status != RegistrationStatus.PENDING
                or registration.payment_status not in _APPROVABLE_PAYMENT_STATES
            ):
                return Failure(
                    error=ConflictError(
                        code=ErrorCode.INVALID_STATE_TRANSITION,
                        message=RegistrationError.NOT_AWAITING_APPROVAL,
                        resource_type="Registration",
                        conflicting_field="status",
                        details={
                            "current": registration.status.value,
                            "payment_status": registration.payment_status.value,
                        },
                    )
                )

            approved = await self._registration_repo.transition(
                registration.id,
                expected_statuses={RegistrationStatus.PENDING},
                expected_payment_statuses=_APPROVABLE_PAYMENT_STATES,
                change=RegistrationChange(status=RegistrationStatus.CONFIRMED),
            )
        except Exception as e:
            self._logger.error(
                "registration_approve_failed",
                error=e,
                registration_id=str(cmd.registration_id),
            )
            return Failure(error=persistence_failed(e))

        if approved is None:
            return Failure(error=stale_state("Registration"))

        self._logger.info(
            "registration_approved",
            registration_id=str(approved.id),
            event_id=str(event.id),
            approved_by=str(cmd.actor.user_id),
        )
        await self._notifications.notify(
            [approved.user_id],
            title=f"Registration Approved: {event.title}",
            message=f'Your registration for "{event.title}" has been approved.',
            event_id=event.id,
            channels=IN_APP_EMAIL,
            priority=NotificationPriority.NORMAL,
        )
        return Success(value=approved)
