"""CancelRegistration command handler.

Flow:
1. Load the registration and its event; the owner or an event manager may
   cancel
2. Reject already cancelled/rejected registrations and cancellations
   within the cutoff before the event start
3. Compare-and-set to CANCELLED (the store releases the counted spot in
   the same step)
4. Promote from the waitlist into the freed spot
"""

from datetime import timedelta

from src.application.commands.registration_commands import CancelRegistration
from src.application.errors import persistence_failed, stale_state
from src.application.services.ownership_verifier import OwnershipVerifier
from src.application.services.waitlist_service import WaitlistService
from src.core.enums import ErrorCode
from src.core.errors import ConflictError, DomainError, ValidationError
from src.core.result import Failure, Result, Success
from src.domain.entities import Registration
from src.domain.enums import RegistrationStatus
from src.domain.errors import RegistrationError
from src.domain.protocols import (
    ClockProtocol,
    LoggerProtocol,
    RegistrationChange,
    RegistrationRepository,
)
from src.domain.state_machine import attempt_transition


class CancelRegistrationHandler:
    """Handler for registration cancellation."""

    def __init__(
        self,
        registration_repo: RegistrationRepository,
        verifier: OwnershipVerifier,
        waitlist: WaitlistService,
        clock: ClockProtocol,
        logger: LoggerProtocol,
        cancellation_cutoff: timedelta = timedelta(hours=24),
    ) -> None:
        """Initialize cancellation handler with dependencies.

        Args:
            registration_repo: Registration repository.
            verifier: Ownership verifier.
            waitlist: Waitlist promotion service.
            clock: Time source.
            logger: Structured logger.
            cancellation_cutoff: No cancellations closer than this to start.
        """
        self._registration_repo = registration_repo
        self._verifier = verifier
        self._waitlist = waitlist
        self._clock = clock
        self._logger = logger
        self._cancellation_cutoff = cancellation_cutoff

    async def handle(self, cmd: CancelRegistration) -> Result[Registration, DomainError]:
        """Handle CancelRegistration command.

        Returns:
            Success(Registration): Cancelled registration.
            Failure(ConflictError): Already cancelled/rejected or changed
                concurrently.
            Failure(ValidationError): Too close to the event start.
        """
        try:
            access = await self._verifier.verify_registration_access(
                cmd.registration_id, cmd.actor
            )
            if isinstance(access, Failure):
                return access
            registration, event = access.value

            if registration.status in RegistrationStatus.terminal_states():
                return Failure(
                    error=ConflictError(
                        code=ErrorCode.INVALID_STATE_TRANSITION,
                        message=RegistrationError.ALREADY_CANCELLED,
                        resource_type="Registration",
                        conflicting_field="status",
                        details={"current": registration.status.value},
                    )
                )

            now = self._clock.now()
            if event.start_date_time - now < self._cancellation_cutoff:
                return Failure(
                    error=ValidationError(
                        code=ErrorCode.CANCELLATION_WINDOW_CLOSED,
                        message=RegistrationError.TOO_LATE_TO_CANCEL,
                        field="registration_id",
                    )
                )

            expected_status = registration.status
            transition = attempt_transition(registration, RegistrationStatus.CANCELLED, now=now)
            if isinstance(transition, Failure):
                return transition

            cancelled = await self._registration_repo.transition(
                registration.id,
                expected_statuses={expected_status},
                expected_payment_statuses={registration.payment_status},
                change=RegistrationChange(
                    status=RegistrationStatus.CANCELLED,
                    cancelled_at=now,
                    cancellation_reason=cmd.reason or RegistrationError.CANCELLED_BY_USER,
                ),
            )
        except Exception as e:
            self._logger.error(
                "registration_cancel_failed",
                error=e,
                registration_id=str(cmd.registration_id),
            )
            return Failure(error=persistence_failed(e))

        if cancelled is None:
            return Failure(error=stale_state("Registration"))

        self._logger.info(
            "registration_cancelled",
            registration_id=str(cancelled.id),
            event_id=str(event.id),
            previous_status=expected_status.value,
        )
        await self._waitlist.promote_after_release(event.id, now)
        return Success(value=cancelled)

