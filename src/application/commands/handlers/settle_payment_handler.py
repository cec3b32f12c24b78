"""SettlePayment command handler.

Applies the settlement outcome reported by the payment collaborator.

Flow:
1. Already completed payment: duplicate callback. The registration updates
   are re-applied, which finishes a settlement that failed part way and is
   a no-op otherwise
2. Failure: payment FAILED, registration payment status FAILED (the spot
   stays reserved until the payment window runs out)
3. Success: payment COMPLETED, then the paying registration and every other
   registration of the same team move to PAID, pending ones to CONFIRMED
4. One invoice and one confirmation notification for the payer

Each registration update is a compare-and-set from (PENDING, payment due),
so a replayed settlement or a concurrent timeout sweep can never count the
same registration twice.
"""

from datetime import datetime
from uuid import UUID

from src.application.commands.payment_commands import SettlePayment
from src.application.dtos import SettlementResult
from src.application.errors import payment_not_found, persistence_failed, stale_state
from src.application.services.notification_dispatcher import (
    IN_APP_EMAIL,
    NotificationDispatcher,
)
from src.core.enums import ErrorCode
from src.core.errors import ConflictError, DomainError
from src.core.result import Failure, Result, Success
from src.domain.entities import Event, Invoice, InvoiceItem, Payment, Registration
from src.domain.entities.invoice import generate_invoice_number
from src.domain.enums import (
    NotificationPriority,
    PaymentStatus,
    RegistrationPaymentStatus,
    RegistrationStatus,
)
from src.domain.policies import PAYMENT_DUE_STATES
from src.domain.protocols import (
    ClockProtocol,
    EventRepository,
    InvoiceRepository,
    LoggerProtocol,
    PaymentRepository,
    RegistrationChange,
    RegistrationRepository,
)


class SettlePaymentHandler:
    """Handler for payment settlement callbacks."""

    def __init__(
        self,
        payment_repo: PaymentRepository,
        registration_repo: RegistrationRepository,
        event_repo: EventRepository,
        invoice_repo: InvoiceRepository,
        notifications: NotificationDispatcher,
        clock: ClockProtocol,
        logger: LoggerProtocol,
    ) -> None:
        """Initialize settlement handler with dependencies.

        Args:
            payment_repo: Payment repository.
            registration_repo: Registration repository.
            event_repo: Event repository (invoice line and notification text).
            invoice_repo: Invoice repository.
            notifications: Best-effort notification dispatcher.
            clock: Time source.
            logger: Structured logger.
        """
        self._payment_repo = payment_repo
        self._registration_repo = registration_repo
        self._event_repo = event_repo
        self._invoice_repo = invoice_repo
        self._notifications = notifications
        self._clock = clock
        self._logger = logger

    async def handle(self, cmd: SettlePayment) -> Result[SettlementResult, DomainError]:
        """Handle SettlePayment command.

        Returns:
            Success(SettlementResult): Applied or recognised as duplicate.
            Failure(NotFoundError): Unknown payment.
            Failure(ConflictError): Payment already failed, or lost a race.
        """
        try:
            payment = await self._payment_repo.find_by_id(cmd.payment_id)
            if payment is None:
                return Failure(error=payment_not_found(cmd.payment_id))

            if payment.is_completed():
                return await self._replay(payment)

            now = self._clock.now()
            if not cmd.success:
                return await self._fail(payment, cmd.failure_reason, now)

            marked = payment.mark_completed(cmd.transaction_id, now)
            if isinstance(marked, Failure):
                return Failure(error=_not_pending(payment, marked.error))
            if not await self._payment_repo.save_if_status(payment, PaymentStatus.PENDING):
                return await self._lost_race(payment.id)

            result = SettlementResult(payment_id=payment.id, succeeded=True)
            await self._confirm_targets(payment, result)
            event = await self._event_repo.find_by_id(payment.event_id)
            result.invoice = await self._issue_invoice(payment, event, now)
        except Exception as e:
            self._logger.error(
                "payment_settlement_failed",
                error=e,
                payment_id=str(cmd.payment_id),
            )
            return Failure(error=persistence_failed(e))

        self._logger.info(
            "payment_settled",
            payment_id=str(payment.id),
            transaction_id=payment.transaction_id,
            confirmed=len(result.confirmed_registration_ids),
            invoice_number=result.invoice.invoice_number if result.invoice else None,
        )
        await self._notify_confirmed(payment, event)
        return Success(value=result)

    async def _replay(self, payment: Payment) -> Result[SettlementResult, DomainError]:
        """Completed payment seen again: re-apply the registration updates.

        A settlement interrupted after the payment was completed leaves its
        registrations awaiting payment. The conditional writes finish that
        work and change nothing when it was already done.
        """
        result = SettlementResult(payment_id=payment.id, duplicate=True, succeeded=True)
        await self._confirm_targets(payment, result)
        if not result.confirmed_registration_ids:
            self._logger.info("payment_settlement_duplicate", payment_id=str(payment.id))
            return Success(value=result)

        event = await self._event_repo.find_by_id(payment.event_id)
        result.invoice = await self._issue_invoice(
            payment, event, payment.paid_at or self._clock.now()
        )
        self._logger.warning(
            "payment_settlement_repaired",
            payment_id=str(payment.id),
            confirmed=len(result.confirmed_registration_ids),
        )
        await self._notify_confirmed(payment, event)
        return Success(value=result)

    async def _confirm_targets(self, payment: Payment, result: SettlementResult) -> None:
        """PENDING + payment due -> CONFIRMED + PAID for the payer and their team."""
        registration = await self._registration_repo.find_by_id(payment.registration_id)
        for target in await self._targets(registration):
            if (
                target.payment_id == payment.id
                and target.payment_status == RegistrationPaymentStatus.PAID
            ):
                continue
            updated = await self._registration_repo.transition(
                target.id,
                expected_statuses={RegistrationStatus.PENDING},
                expected_payment_statuses=PAYMENT_DUE_STATES,
                change=RegistrationChange(
                    status=RegistrationStatus.CONFIRMED,
                    payment_status=RegistrationPaymentStatus.PAID,
                    payment_id=payment.id,
                ),
            )
            if updated is None:
                self._logger.warning(
                    "settlement_registration_skipped",
                    payment_id=str(payment.id),
                    registration_id=str(target.id),
                    status=target.status.value,
                    payment_status=target.payment_status.value,
                )
                continue
            result.updated_registration_ids.append(updated.id)
            result.confirmed_registration_ids.append(updated.id)

    async def _notify_confirmed(self, payment: Payment, event: Event | None) -> None:
        title = event.title if event else "your event"
        await self._notifications.notify(
            [payment.user_id],
            title="Payment Successful - Registration Confirmed",
            message=(
                f"Your payment of {payment.currency} {payment.amount} for {title} "
                "has been confirmed. Your registration is now complete!"
            ),
            event_id=payment.event_id,
            channels=IN_APP_EMAIL,
            priority=NotificationPriority.NORMAL,
        )

    async def _fail(
        self,
        payment: Payment,
        reason: str | None,
        now: datetime,
    ) -> Result[SettlementResult, DomainError]:
        marked = payment.mark_failed(reason, now)
        if isinstance(marked, Failure):
            return Failure(error=_not_pending(payment, marked.error))
        if not await self._payment_repo.save_if_status(payment, PaymentStatus.PENDING):
            return await self._lost_race(payment.id)

        result = SettlementResult(payment_id=payment.id, succeeded=False)
        updated = await self._registration_repo.transition(
            payment.registration_id,
            expected_statuses={RegistrationStatus.PENDING},
            expected_payment_statuses={RegistrationPaymentStatus.PENDING},
            change=RegistrationChange(payment_status=RegistrationPaymentStatus.FAILED),
        )
        if updated is not None:
            result.updated_registration_ids.append(updated.id)

        self._logger.warning(
            "payment_settlement_rejected",
            payment_id=str(payment.id),
            registration_id=str(payment.registration_id),
            reason=reason,
        )
        return Success(value=result)

    async def _lost_race(self, payment_id: UUID) -> Result[SettlementResult, DomainError]:
        """A concurrent settlement won; treat it as a replay if it completed."""
        current = await self._payment_repo.find_by_id(payment_id)
        if current is not None and current.is_completed():
            return await self._replay(current)
        return Failure(error=stale_state("Payment"))

    async def _targets(self, registration: Registration | None) -> list[Registration]:
        """Paying registration first, then the rest of its team."""
        if registration is None:
            return []
        if registration.team_id is None:
            return [registration]
        members = await self._registration_repo.find_by_team(
            registration.team_id, registration.event_id
        )
        return [registration] + [member for member in members if member.id != registration.id]

    async def _issue_invoice(
        self,
        payment: Payment,
        event: Event | None,
        now: datetime,
    ) -> Invoice:
        existing = await self._invoice_repo.find_by_payment(payment.id)
        if existing is not None:
            return existing
        title = event.title if event else str(payment.event_id)
        invoice = Invoice(
            invoice_number=generate_invoice_number(now),
            user_id=payment.user_id,
            event_id=payment.event_id,
            registration_id=payment.registration_id,
            payment_id=payment.id,
            items=[
                InvoiceItem(
                    description=f"Registration for {title}",
                    quantity=1,
                    unit_price=payment.amount,
                )
            ],
            currency=payment.currency,
            paid_at=payment.paid_at or now,
            created_at=now,
        )
        await self._invoice_repo.save(invoice)
        return invoice


def _not_pending(payment: Payment, message: str) -> ConflictError:
    return ConflictError(
        code=ErrorCode.INVALID_STATE_TRANSITION,
        message=message,
        resource_type="Payment",
        conflicting_field="status",
        details={"current": payment.status.value},
    )
