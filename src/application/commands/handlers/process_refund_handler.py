"""ProcessRefund command handler.

Reject:
    refund REJECTED, registration payment status back to PAID.

Approve:
    gateway refund keyed by the refund id, then
    - success: refund COMPLETED, payment refund fields set, registration
      CANCELLED + REFUNDED (releases the spot), waitlist promotion, user
      notified
    - gateway error: refund FAILED with the error in its notes, registration
      payment status back to PAID so a new request can be made
"""

from datetime import datetime

from src.application.commands.payment_commands import ProcessRefund
from src.application.errors import (
    event_not_found,
    forbidden,
    payment_not_found,
    persistence_failed,
    refund_not_found,
    stale_state,
)
from src.application.services.notification_dispatcher import (
    IN_APP_EMAIL,
    NotificationDispatcher,
)
from src.application.services.waitlist_service import WaitlistService
from src.core.enums import ErrorCode
from src.core.errors import ConflictError, DomainError
from src.core.result import Failure, Result, Success
from src.domain.entities import Event, Refund
from src.domain.enums import (
    Capability,
    NotificationPriority,
    RefundStatus,
    RegistrationPaymentStatus,
    RegistrationStatus,
)
from src.domain.errors import RefundError
from src.domain.policies import has_capability
from src.domain.protocols import (
    ClockProtocol,
    EventRepository,
    LoggerProtocol,
    PaymentGatewayProtocol,
    PaymentRepository,
    RefundRepository,
    RegistrationChange,
    RegistrationRepository,
)
from src.domain.value_objects import Actor

REFUND_CANCELLATION_REASON = "Refund processed"


class ProcessRefundHandler:
    """Handler for refund decisions."""

    def __init__(
        self,
        refund_repo: RefundRepository,
        payment_repo: PaymentRepository,
        registration_repo: RegistrationRepository,
        event_repo: EventRepository,
        gateway: PaymentGatewayProtocol,
        waitlist: WaitlistService,
        notifications: NotificationDispatcher,
        clock: ClockProtocol,
        logger: LoggerProtocol,
    ) -> None:
        self._refund_repo = refund_repo
        self._payment_repo = payment_repo
        self._registration_repo = registration_repo
        self._event_repo = event_repo
        self._gateway = gateway
        self._waitlist = waitlist
        self._notifications = notifications
        self._clock = clock
        self._logger = logger

    async def handle(self, cmd: ProcessRefund) -> Result[Refund, DomainError]:
        """Handle ProcessRefund command.

        Returns:
            Success(Refund): Rejected or completed refund.
            Failure(AuthorizationError): Not the organizer, no refund capability.
            Failure(ConflictError): Refund not pending, or decided concurrently.
            Failure(DomainError): Gateway refused the payout (refund FAILED).
        """
        try:
            refund = await self._refund_repo.find_by_id(cmd.refund_id)
            if refund is None:
                return Failure(error=refund_not_found(cmd.refund_id))
            event = await self._event_repo.find_by_id(refund.event_id)
            if event is None:
                return Failure(error=event_not_found(refund.event_id))
            if not _may_process(cmd.actor, event):
                return Failure(
                    error=forbidden(RefundError.NOT_AUTHORIZED, Capability.PROCESS_ANY_REFUND)
                )
            if not refund.is_pending():
                return Failure(
                    error=ConflictError(
                        code=ErrorCode.INVALID_STATE_TRANSITION,
                        message=RefundError.NOT_PENDING,
                        resource_type="Refund",
                        conflicting_field="status",
                        details={"current": refund.status.value},
                    )
                )

            now = self._clock.now()
            if not cmd.approve:
                return await self._reject(cmd, refund, now)
            result = await self._approve(cmd, refund, now)
        except Exception as e:
            self._logger.error(
                "refund_processing_failed",
                error=e,
                refund_id=str(cmd.refund_id),
            )
            return Failure(error=persistence_failed(e))

        if isinstance(result, Failure):
            return result

        await self._waitlist.promote_after_release(event.id, now)
        await self._notifications.notify(
            [refund.user_id],
            title="Refund Processed",
            message=f"Your refund of {refund.amount} has been processed",
            event_id=event.id,
            channels=IN_APP_EMAIL,
            priority=NotificationPriority.NORMAL,
        )
        return result

    async def _reject(
        self,
        cmd: ProcessRefund,
        refund: Refund,
        now: datetime,
    ) -> Result[Refund, DomainError]:
        rejected = refund.reject(cmd.rejection_reason, cmd.actor.user_id, now, cmd.notes)
        if isinstance(rejected, Failure):
            return rejected
        if not await self._refund_repo.save_if_status(refund, RefundStatus.PENDING):
            return Failure(error=stale_state("Refund"))

        await self._restore_paid(refund)
        self._logger.info(
            "refund_rejected",
            refund_id=str(refund.id),
            processed_by=str(cmd.actor.user_id),
        )
        return Success(value=refund)

    async def _approve(
        self,
        cmd: ProcessRefund,
        refund: Refund,
        now: datetime,
    ) -> Result[Refund, DomainError]:
        payment = await self._payment_repo.find_by_id(refund.payment_id)
        if payment is None:
            return Failure(error=payment_not_found(refund.payment_id))

        payout = await self._gateway.refund(
            payment=payment,
            amount=refund.amount,
            idempotency_key=str(refund.id),
        )
        if isinstance(payout, Failure):
            refund.fail(payout.error.message, cmd.actor.user_id, now)
            if await self._refund_repo.save_if_status(refund, RefundStatus.PENDING):
                await self._restore_paid(refund)
            self._logger.warning(
                "refund_gateway_failed",
                refund_id=str(refund.id),
                payment_id=str(payment.id),
                error_code=payout.error.code.value,
                error_message=payout.error.message,
            )
            return payout

        completed = refund.complete(payout.value, cmd.actor.user_id, now, cmd.notes)
        if isinstance(completed, Failure):
            return completed
        if not await self._refund_repo.save_if_status(refund, RefundStatus.PENDING):
            return Failure(error=stale_state("Refund"))

        payment.record_refund(refund.amount, now)
        await self._payment_repo.save(payment)

        registration = await self._registration_repo.find_by_id(refund.registration_id)
        if registration is not None:
            still_active = registration.status not in RegistrationStatus.terminal_states()
            await self._registration_repo.transition(
                registration.id,
                expected_statuses={registration.status},
                expected_payment_statuses={RegistrationPaymentStatus.REFUND_PENDING},
                change=RegistrationChange(
                    status=RegistrationStatus.CANCELLED if still_active else None,
                    payment_status=RegistrationPaymentStatus.REFUNDED,
                    cancelled_at=now if still_active else None,
                    cancellation_reason=REFUND_CANCELLATION_REASON if still_active else None,
                ),
            )

        self._logger.info(
            "refund_completed",
            refund_id=str(refund.id),
            payment_id=str(payment.id),
            amount=str(refund.amount),
            refund_transaction_id=refund.refund_transaction_id,
        )
        return Success(value=refund)

    async def _restore_paid(self, refund: Refund) -> None:
        """REFUND_PENDING -> PAID, whatever the registration status."""
        await self._registration_repo.transition(
            refund.registration_id,
            expected_statuses=set(RegistrationStatus),
            expected_payment_statuses={RegistrationPaymentStatus.REFUND_PENDING},
            change=RegistrationChange(payment_status=RegistrationPaymentStatus.PAID),
        )


def _may_process(actor: Actor, event: Event) -> bool:
    return actor.user_id == event.organizer_id or has_capability(
        actor, Capability.PROCESS_ANY_REFUND
    )
