"""RequestRefund command handler.

Flow:
1. Load the payment; only the payer may request, only when completed
2. Any refund for the payment that was not rejected blocks a new request
3. Refund policy picks the tier (100% / 50% / too close)
4. Registration payment status PAID -> REFUND_PENDING (compare-and-set)
5. Persist the pending Refund and notify the organizer
"""

from src.application.commands.payment_commands import RequestRefund
from src.application.errors import (
    event_not_found,
    forbidden,
    payment_not_found,
    persistence_failed,
    stale_state,
)
from src.application.services.notification_dispatcher import (
    IN_APP_EMAIL,
    NotificationDispatcher,
)
from src.core.enums import ErrorCode
from src.core.errors import ConflictError, DomainError
from src.core.result import Failure, Result, Success
from src.domain.entities import Refund
from src.domain.enums import (
    NotificationPriority,
    RefundStatus,
    RegistrationPaymentStatus,
    RegistrationStatus,
)
from src.domain.errors import RefundError
from src.domain.policies import RefundPolicy
from src.domain.protocols import (
    ClockProtocol,
    EventRepository,
    LoggerProtocol,
    PaymentRepository,
    RefundRepository,
    RegistrationChange,
    RegistrationRepository,
)


class RequestRefundHandler:
    """Handler for refund requests."""

    def __init__(
        self,
        payment_repo: PaymentRepository,
        refund_repo: RefundRepository,
        registration_repo: RegistrationRepository,
        event_repo: EventRepository,
        notifications: NotificationDispatcher,
        clock: ClockProtocol,
        logger: LoggerProtocol,
        policy: RefundPolicy | None = None,
    ) -> None:
        """Initialize refund request handler with dependencies.

        Args:
            payment_repo: Payment repository.
            refund_repo: Refund repository.
            registration_repo: Registration repository.
            event_repo: Event repository.
            notifications: Best-effort notification dispatcher.
            clock: Time source.
            logger: Structured logger.
            policy: Refund tiers (defaults to 7 / 3 days).
        """
        self._payment_repo = payment_repo
        self._refund_repo = refund_repo
        self._registration_repo = registration_repo
        self._event_repo = event_repo
        self._notifications = notifications
        self._clock = clock
        self._logger = logger
        self._policy = policy or RefundPolicy()

    async def handle(self, cmd: RequestRefund) -> Result[Refund, DomainError]:
        """Handle RequestRefund command.

        Returns:
            Success(Refund): Pending refund.
            Failure(AuthorizationError): Caller is not the payer.
            Failure(ConflictError): Payment not completed or refund exists.
            Failure(ValidationError): Event is too close for refund.
        """
        try:
            payment = await self._payment_repo.find_by_id(cmd.payment_id)
            if payment is None:
                return Failure(error=payment_not_found(cmd.payment_id))
            if payment.user_id != cmd.actor.user_id:
                return Failure(error=forbidden(RefundError.NOT_OWNER))
            if not payment.is_completed():
                return Failure(
                    error=ConflictError(
                        code=ErrorCode.INVALID_STATE_TRANSITION,
                        message=RefundError.PAYMENT_NOT_COMPLETED,
                        resource_type="Payment",
                        conflicting_field="status",
                        details={"current": payment.status.value},
                    )
                )

            existing = await self._refund_repo.find_by_payment(payment.id)
            blocking = [r for r in existing if r.status in RefundStatus.blocking_states()]
            if blocking:
                return Failure(
                    error=ConflictError(
                        code=ErrorCode.REFUND_ALREADY_REQUESTED,
                        message=RefundError.ALREADY_REQUESTED,
                        resource_type="Refund",
                        conflicting_field="payment_id",
                        details={
                            "refund_id": str(blocking[0].id),
                            "status": blocking[0].status.value,
                        },
                    )
                )

            event = await self._event_repo.find_by_id(payment.event_id)
            if event is None:
                return Failure(error=event_not_found(payment.event_id))

            now = self._clock.now()
            tier = self._policy.percentage_for(event.start_date_time, now)
            if isinstance(tier, Failure):
                self._logger.info(
                    "refund_request_too_late",
                    payment_id=str(payment.id),
                    event_id=str(event.id),
                )
                return tier

            refund = Refund(
                payment_id=payment.id,
                registration_id=payment.registration_id,
                event_id=event.id,
                user_id=payment.user_id,
                amount=RefundPolicy.refund_amount(payment.amount, tier.value),
                original_amount=payment.amount,
                refund_percentage=tier.value,
                reason=cmd.reason,
                requested_at=now,
                updated_at=now,
            )

            marked = await self._registration_repo.transition(
                payment.registration_id,
                expected_statuses=set(RegistrationStatus),
                expected_payment_statuses={RegistrationPaymentStatus.PAID},
                change=RegistrationChange(
                    payment_status=RegistrationPaymentStatus.REFUND_PENDING
                ),
            )
            if marked is None:
                return Failure(error=stale_state("Registration", "payment_status"))

            try:
                await self._refund_repo.save(refund)
            except Exception:
                await self._registration_repo.transition(
                    payment.registration_id,
                    expected_statuses=set(RegistrationStatus),
                    expected_payment_statuses={RegistrationPaymentStatus.REFUND_PENDING},
                    change=RegistrationChange(payment_status=RegistrationPaymentStatus.PAID),
                )
                raise
        except Exception as e:
            self._logger.error(
                "refund_request_failed",
                error=e,
                payment_id=str(cmd.payment_id),
            )
            return Failure(error=persistence_failed(e))

        self._logger.info(
            "refund_requested",
            refund_id=str(refund.id),
            payment_id=str(payment.id),
            percentage=refund.refund_percentage,
            amount=str(refund.amount),
        )
        await self._notifications.notify(
            [event.organizer_id],
            title="Refund Request",
            message=f"Refund requested for {event.title}",
            event_id=event.id,
            channels=IN_APP_EMAIL,
            priority=NotificationPriority.NORMAL,
        )
        return Success(value=refund)
