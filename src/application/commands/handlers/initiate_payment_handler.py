"""InitiatePayment command handler.

Flow:
1. Load the registration; only its owner may pay
2. Reject paid registrations, unpaid events and registrations that are not
   awaiting payment
3. Team registrations: only the leader pays, once for the whole team
4. Solo registrations: reuse an open pending payment
5. Create the gateway order, persist a pending Payment and link it to the
   registration, compare-and-set on the link seen in step 1; the loser of
   two concurrent initiations fails its own payment
"""

from src.application.commands.payment_commands import InitiatePayment
from src.application.errors import (
    event_not_found,
    forbidden,
    persistence_failed,
    registration_not_found,
    stale_state,
    team_not_found,
)
from src.core.enums import ErrorCode
from src.core.errors import ConflictError, DomainError, ValidationError
from src.core.result import Failure, Result, Success
from src.domain.entities import Event, Payment, Registration
from src.domain.enums import PaymentStatus, RegistrationPaymentStatus
from src.domain.errors import PaymentError
from src.domain.protocols import (
    ClockProtocol,
    EventRepository,
    LoggerProtocol,
    PaymentGatewayProtocol,
    PaymentRepository,
    RegistrationRepository,
    TeamRepository,
)

_PAID_STATES = frozenset(
    {
        RegistrationPaymentStatus.PAID,
        RegistrationPaymentStatus.REFUND_PENDING,
        RegistrationPaymentStatus.REFUNDED,
    }
)


class InitiatePaymentHandler:
    """Handler for payment initiation.

    Dependencies (injected via constructor):
        - RegistrationRepository: Registration lookup and linking
        - EventRepository: Amount and currency
        - TeamRepository: Leader check for team registrations
        - PaymentRepository: Payment persistence
        - PaymentGatewayProtocol: Order creation
        - ClockProtocol: Time source
        - LoggerProtocol: Structured logging
    """

    def __init__(
        self,
        registration_repo: RegistrationRepository,
        event_repo: EventRepository,
        team_repo: TeamRepository,
        payment_repo: PaymentRepository,
        gateway: PaymentGatewayProtocol,
        clock: ClockProtocol,
        logger: LoggerProtocol,
    ) -> None:
        self._registration_repo = registration_repo
        self._event_repo = event_repo
        self._team_repo = team_repo
        self._payment_repo = payment_repo
        self._gateway = gateway
        self._clock = clock
        self._logger = logger

    async def handle(self, cmd: InitiatePayment) -> Result[Payment, DomainError]:
        """Handle InitiatePayment command.

        Returns:
            Success(Payment): Pending payment to settle at the gateway.
            Failure(AuthorizationError): Not the owner or not the team leader.
            Failure(ConflictError): Already paid or a team payment exists.
            Failure(ValidationError): Free event or registration not payable.
            Failure(DomainError): Gateway or store failure.
        """
        try:
            registration = await self._registration_repo.find_by_id(cmd.registration_id)
            if registration is None:
                return Failure(error=registration_not_found(cmd.registration_id))
            if registration.user_id != cmd.actor.user_id:
                return Failure(error=forbidden(PaymentError.NOT_OWNER))

            if registration.payment_status in _PAID_STATES:
                return Failure(error=_conflict(PaymentError.ALREADY_PAID, registration))

            event = await self._event_repo.find_by_id(registration.event_id)
            if event is None:
                return Failure(error=event_not_found(registration.event_id))
            if not event.is_paid:
                return Failure(
                    error=ValidationError(
                        code=ErrorCode.INVALID_PAYMENT_SETTINGS,
                        message=PaymentError.EVENT_NOT_PAID,
                        field="event_id",
                    )
                )
            if not registration.is_awaiting_payment():
                return Failure(
                    error=ValidationError(
                        code=ErrorCode.VALIDATION_FAILED,
                        message=PaymentError.REGISTRATION_NOT_PAYABLE,
                        field="registration_id",
                        details={
                            "status": registration.status.value,
                            "payment_status": registration.payment_status.value,
                        },
                    )
                )

            if registration.team_id is not None:
                blocked = await self._check_team(registration)
                if blocked is not None:
                    return Failure(error=blocked)
            elif registration.payment_id is not None:
                existing = await self._payment_repo.find_by_id(registration.payment_id)
                if existing is not None and existing.status == PaymentStatus.PENDING:
                    self._logger.info(
                        "payment_initiation_reused",
                        payment_id=str(existing.id),
                        registration_id=str(registration.id),
                    )
                    return Success(value=existing)

            return await self._create(registration, event)
        except Exception as e:
            self._logger.error(
                "payment_initiation_failed",
                error=e,
                registration_id=str(cmd.registration_id),
            )
            return Failure(error=persistence_failed(e))

    async def _check_team(self, registration: Registration) -> DomainError | None:
        """Leader-only payment, at most one open payment per team."""
        assert registration.team_id is not None
        team = await self._team_repo.find_by_id(registration.team_id)
        if team is None:
            return team_not_found(registration.team_id)
        if not team.is_leader(registration.user_id):
            return forbidden(PaymentError.ONLY_LEADER_CAN_PAY)

        members = await self._registration_repo.find_by_team(team.id, registration.event_id)
        open_payments = await self._payment_repo.find_by_registrations(
            [member.id for member in members],
            PaymentStatus.open_states(),
        )
        if open_payments:
            return ConflictError(
                code=ErrorCode.PAYMENT_ALREADY_EXISTS,
                message=PaymentError.TEAM_PAYMENT_EXISTS,
                resource_type="Payment",
                conflicting_field="team_id",
                details={"payment_id": str(open_payments[0].id)},
            )
        return None

    async def _create(
        self,
        registration: Registration,
        event: Event,
    ) -> Result[Payment, DomainError]:
        order = await self._gateway.create_order(
            amount=event.amount,
            currency=event.currency,
            receipt=registration.registration_number or str(registration.id),
        )
        if isinstance(order, Failure):
            self._logger.warning(
                "payment_order_failed",
                registration_id=str(registration.id),
                error_code=order.error.code.value,
            )
            return order

        now = self._clock.now()
        payment = Payment(
            user_id=registration.user_id,
            event_id=event.id,
            registration_id=registration.id,
            amount=event.amount,
            currency=event.currency,
            gateway=order.value.gateway,
            order_id=order.value.order_id,
            created_at=now,
            updated_at=now,
        )
        await self._payment_repo.save(payment)

        linked = await self._registration_repo.link_payment(
            registration.id,
            payment_id=payment.id,
            previous_payment_id=registration.payment_id,
        )
        if linked is None:
            return await self._unlinked(registration, payment)

        self._logger.info(
            "payment_initiated",
            payment_id=str(payment.id),
            registration_id=str(registration.id),
            order_id=payment.order_id,
            amount=str(payment.amount),
        )
        return Success(value=payment)

    async def _unlinked(
        self,
        registration: Registration,
        payment: Payment,
    ) -> Result[Payment, DomainError]:
        """Fail the orphaned payment after the registration refused the link.

        Either the registration moved on (timed out or cancelled) after the
        order, or a concurrent initiation linked its own payment first. A
        solo payer gets the winning payment back; a team gets a conflict.
        """
        current = await self._registration_repo.find_by_id(registration.id)
        superseded = (
            current is not None
            and current.is_awaiting_payment()
            and current.payment_id != registration.payment_id
        )
        reason = PaymentError.SUPERSEDED if superseded else PaymentError.REGISTRATION_NOT_PAYABLE
        payment.mark_failed(reason, self._clock.now())
        await self._payment_repo.save_if_status(payment, PaymentStatus.PENDING)
        self._logger.warning(
            "payment_link_refused",
            payment_id=str(payment.id),
            registration_id=str(registration.id),
            superseded=superseded,
        )
        if current is None or not superseded:
            return Failure(error=stale_state("Registration", "payment_status"))

        winner = await self._payment_repo.find_by_id(current.payment_id)
        if (
            registration.team_id is None
            and winner is not None
            and winner.status == PaymentStatus.PENDING
        ):
            return Success(value=winner)
        return Failure(
            error=ConflictError(
                code=ErrorCode.PAYMENT_ALREADY_EXISTS,
                message=(
                    PaymentError.TEAM_PAYMENT_EXISTS
                    if registration.team_id is not None
                    else PaymentError.SUPERSEDED
                ),
                resource_type="Payment",
                conflicting_field="registration_id",
                details={"payment_id": str(current.payment_id)},
            )
        )


def _conflict(message: str, registration: Registration) -> ConflictError:
    return ConflictError(
        code=ErrorCode.PAYMENT_ALREADY_COMPLETED,
        message=message,
        resource_type="Registration",
        conflicting_field="payment_status",
        details={"payment_status": registration.payment_status.value},
    )
