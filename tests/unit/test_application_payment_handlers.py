"""Unit tests for InitiatePaymentHandler and SettlePaymentHandler.

Tests cover:
- Payment initiation guards (owner, already paid, free event, not payable)
- Pending payment reuse for solo registrations
- Team payments: leader only, one open payment per team
- Concurrent initiations link exactly one payment
- Gateway failure passthrough
- Settlement success with team propagation, invoice and notification
- Duplicate and failed settlements
- A replay finishing a settlement interrupted after the payment completed
"""

import asyncio
from datetime import timedelta
from decimal import Decimal

import pytest
from uuid_extensions import uuid7

from src.application.commands import InitiatePayment, SettlePayment
from src.application.commands.handlers.initiate_payment_handler import InitiatePaymentHandler
from src.application.commands.handlers.settle_payment_handler import SettlePaymentHandler
from src.core.enums import ErrorCode
from src.core.errors import AuthorizationError, ValidationError
from src.core.result import Failure, Success
from src.domain.enums import (
    PaymentStatus,
    RegistrationPaymentStatus,
    RegistrationStatus,
)
from src.domain.errors import PaymentError
from tests.conftest import (
    BASE_TIME,
    make_event,
    make_payment,
    make_registration,
    make_team,
    seed,
)


@pytest.fixture
def initiate(repos, gateway, clock, mock_logger) -> InitiatePaymentHandler:
    return InitiatePaymentHandler(
        registration_repo=repos.registrations,
        event_repo=repos.events,
        team_repo=repos.teams,
        payment_repo=repos.payments,
        gateway=gateway,
        clock=clock,
        logger=mock_logger,
    )


@pytest.fixture
def slow_gateway(gateway, monkeypatch):
    """Gateway whose order call yields to the event loop before answering."""
    create_order = gateway.create_order

    async def yielding(**kwargs):
        await asyncio.sleep(0)
        return await create_order(**kwargs)

    monkeypatch.setattr(gateway, "create_order", yielding)
    return gateway


@pytest.fixture
def settle(repos, notifications, clock, mock_logger) -> SettlePaymentHandler:
    return SettlePaymentHandler(
        payment_repo=repos.payments,
        registration_repo=repos.registrations,
        event_repo=repos.events,
        invoice_repo=repos.invoices,
        notifications=notifications,
        clock=clock,
        logger=mock_logger,
    )


@pytest.mark.unit
class TestInitiatePayment:
    """Payment initiation."""

    async def test_creates_pending_payment(self, initiate, store, student, gateway):
        """Test a pending payment is created and linked to the registration."""
        event = make_event(is_paid=True, amount=Decimal("750.00"))
        registration = make_registration(
            event, student.user_id, status=RegistrationStatus.PENDING
        )
        seed(store, event, registration)

        result = await initiate.handle(
            InitiatePayment(actor=student, registration_id=registration.id)
        )

        assert isinstance(result, Success)
        payment = result.value
        assert payment.status == PaymentStatus.PENDING
        assert payment.amount == Decimal("750.00")
        assert payment.order_id == gateway.orders[0][0]
        assert store.payments[payment.id].registration_id == registration.id
        assert store.registrations[registration.id].payment_id == payment.id

    async def test_reuses_open_solo_payment(self, initiate, store, student, gateway):
        """Test a second initiation returns the pending payment without a new order."""
        event = make_event(is_paid=True)
        registration = make_registration(
            event, student.user_id, status=RegistrationStatus.PENDING
        )
        seed(store, event, registration)
        first = await initiate.handle(
            InitiatePayment(actor=student, registration_id=registration.id)
        )

        second = await initiate.handle(
            InitiatePayment(actor=student, registration_id=registration.id)
        )

        assert second.value.id == first.value.id
        assert len(gateway.orders) == 1

    async def test_retry_after_failed_payment(self, initiate, store, student):
        """Test a registration whose payment failed can start a new payment."""
        event = make_event(is_paid=True)
        registration = make_registration(
            event,
            student.user_id,
            status=RegistrationStatus.PENDING,
            payment_status=RegistrationPaymentStatus.FAILED,
        )
        seed(store, event, registration)

        result = await initiate.handle(
            InitiatePayment(actor=student, registration_id=registration.id)
        )

        assert isinstance(result, Success)
        stored = store.registrations[registration.id]
        assert stored.payment_status == RegistrationPaymentStatus.PENDING

    async def test_not_owner(self, initiate, store, student):
        """Test only the registrant may pay."""
        event = make_event(is_paid=True)
        registration = make_registration(event, status=RegistrationStatus.PENDING)
        seed(store, event, registration)

        result = await initiate.handle(
            InitiatePayment(actor=student, registration_id=registration.id)
        )

        assert isinstance(result.error, AuthorizationError)
        assert result.error.message == PaymentError.NOT_OWNER

    async def test_already_paid(self, initiate, store, student):
        """Test a paid registration cannot be paid again."""
        event = make_event(is_paid=True)
        registration = make_registration(event, student.user_id)
        seed(store, event, registration)

        result = await initiate.handle(
            InitiatePayment(actor=student, registration_id=registration.id)
        )

        assert result.error.code == ErrorCode.PAYMENT_ALREADY_COMPLETED

    async def test_free_event(self, initiate, store, student):
        """Test free events do not take payments."""
        event = make_event()
        registration = make_registration(
            event, student.user_id, status=RegistrationStatus.PENDING
        )
        seed(store, event, registration)

        result = await initiate.handle(
            InitiatePayment(actor=student, registration_id=registration.id)
        )

        assert isinstance(result.error, ValidationError)
        assert result.error.code == ErrorCode.INVALID_PAYMENT_SETTINGS

    async def test_waitlisted_not_payable(self, initiate, store, student):
        """Test waitlisted registrations cannot pay yet."""
        event = make_event(is_paid=True)
        registration = make_registration(
            event, student.user_id, status=RegistrationStatus.WAITLISTED
        )
        seed(store, event, registration)

        result = await initiate.handle(
            InitiatePayment(actor=student, registration_id=registration.id)
        )

        assert result.error.message == PaymentError.REGISTRATION_NOT_PAYABLE

    async def test_gateway_failure_returned(self, initiate, store, student, gateway):
        """Test a gateway failure is passed through and nothing is stored."""
        event = make_event(is_paid=True)
        registration = make_registration(
            event, student.user_id, status=RegistrationStatus.PENDING
        )
        seed(store, event, registration)
        gateway.fail_orders = True

        result = await initiate.handle(
            InitiatePayment(actor=student, registration_id=registration.id)
        )

        assert isinstance(result, Failure)
        assert result.error.code == ErrorCode.PAYMENT_GATEWAY_FAILED
        assert store.payments == {}

    async def test_team_member_cannot_pay(self, initiate, store, student):
        """Test only the team leader pays for a team registration."""
        event = make_event(is_paid=True, min_team_size=2, max_team_size=4)
        team = make_team(event, uuid7(), [student.user_id])
        registration = make_registration(
            event, student.user_id, status=RegistrationStatus.PENDING, team_id=team.id
        )
        seed(store, event, team, registration)

        result = await initiate.handle(
            InitiatePayment(actor=student, registration_id=registration.id)
        )

        assert result.error.message == PaymentError.ONLY_LEADER_CAN_PAY

    async def test_team_has_one_open_payment(self, initiate, store, student):
        """Test a second team payment is refused while one is open."""
        event = make_event(is_paid=True, min_team_size=2, max_team_size=4)
        member = uuid7()
        team = make_team(event, student.user_id, [member])
        leader_reg = make_registration(
            event, student.user_id, status=RegistrationStatus.PENDING, team_id=team.id
        )
        member_reg = make_registration(
            event, member, status=RegistrationStatus.PENDING, team_id=team.id
        )
        seed(store, event, team, leader_reg, member_reg, make_payment(member_reg))

        result = await initiate.handle(
            InitiatePayment(actor=student, registration_id=leader_reg.id)
        )

        assert result.error.code == ErrorCode.PAYMENT_ALREADY_EXISTS

    async def test_concurrent_team_initiations_link_one_payment(
        self, initiate, store, student, slow_gateway
    ):
        """Test two overlapping leader requests leave a single pending payment."""
        event = make_event(is_paid=True, min_team_size=2, max_team_size=4)
        team = make_team(event, student.user_id, [uuid7()])
        leader_reg = make_registration(
            event, student.user_id, status=RegistrationStatus.PENDING, team_id=team.id
        )
        seed(store, event, team, leader_reg)
        command = InitiatePayment(actor=student, registration_id=leader_reg.id)

        results = await asyncio.gather(initiate.handle(command), initiate.handle(command))

        assert len(slow_gateway.orders) == 2
        winners = [r for r in results if isinstance(r, Success)]
        losers = [r for r in results if isinstance(r, Failure)]
        assert len(winners) == 1 and len(losers) == 1
        assert losers[0].error.code == ErrorCode.PAYMENT_ALREADY_EXISTS
        pending = [p for p in store.payments.values() if p.status == PaymentStatus.PENDING]
        assert [p.id for p in pending] == [winners[0].value.id]
        assert store.registrations[leader_reg.id].payment_id == winners[0].value.id
        failed = [p for p in store.payments.values() if p.status == PaymentStatus.FAILED]
        assert failed[0].failure_reason == PaymentError.SUPERSEDED

    async def test_concurrent_solo_initiations_share_payment(
        self, initiate, store, student, slow_gateway
    ):
        """Test overlapping solo requests both get the payment that was linked."""
        event = make_event(is_paid=True)
        registration = make_registration(
            event, student.user_id, status=RegistrationStatus.PENDING
        )
        seed(store, event, registration)
        command = InitiatePayment(actor=student, registration_id=registration.id)

        first, second = await asyncio.gather(initiate.handle(command), initiate.handle(command))

        assert first.value.id == second.value.id
        assert store.registrations[registration.id].payment_id == first.value.id
        statuses = sorted(p.status.value for p in store.payments.values())
        assert statuses == [PaymentStatus.FAILED.value, PaymentStatus.PENDING.value]


@pytest.mark.unit
class TestSettlePayment:
    """Settlement callbacks."""

    async def test_success_confirms_whole_team(self, settle, store, sink):
        """Test a team payment confirms every member and issues one invoice."""
        event = make_event(is_paid=True, min_team_size=2, max_team_size=4)
        leader, member = uuid7(), uuid7()
        team = make_team(event, leader, [member])
        leader_reg = make_registration(
            event, leader, status=RegistrationStatus.PENDING, team_id=team.id
        )
        member_reg = make_registration(
            event, member, status=RegistrationStatus.PENDING, team_id=team.id
        )
        payment = make_payment(leader_reg)
        seed(store, event, team, leader_reg, member_reg, payment)

        result = await settle.handle(
            SettlePayment(payment_id=payment.id, success=True, transaction_id="pay_1")
        )

        assert isinstance(result, Success)
        settlement = result.value
        assert settlement.succeeded and not settlement.duplicate
        assert set(settlement.confirmed_registration_ids) == {leader_reg.id, member_reg.id}
        for reg_id in (leader_reg.id, member_reg.id):
            stored = store.registrations[reg_id]
            assert stored.status == RegistrationStatus.CONFIRMED
            assert stored.payment_status == RegistrationPaymentStatus.PAID
        assert store.events[event.id].registered_count == 2
        assert store.payments[payment.id].status == PaymentStatus.COMPLETED
        assert settlement.invoice.items[0].description == f"Registration for {event.title}"
        assert settlement.invoice.total == payment.amount
        assert len(store.invoices) == 1
        assert sink.titles_for(leader) == ["Payment Successful - Registration Confirmed"]

    async def test_duplicate_settlement_changes_nothing(self, settle, store, sink):
        """Test a replayed success is reported as duplicate."""
        event = make_event(is_paid=True)
        registration = make_registration(event, status=RegistrationStatus.PENDING)
        payment = make_payment(registration)
        seed(store, event, registration, payment)
        await settle.handle(
            SettlePayment(payment_id=payment.id, success=True, transaction_id="pay_1")
        )
        sink.clear()

        result = await settle.handle(
            SettlePayment(payment_id=payment.id, success=True, transaction_id="pay_1")
        )

        assert result.value.duplicate
        assert store.events[event.id].registered_count == 1
        assert len(store.invoices) == 1
        assert sink.sent == []

    async def test_failure_marks_payment_and_registration(self, settle, store):
        """Test a failed settlement keeps the reservation with payment FAILED."""
        event = make_event(is_paid=True)
        registration = make_registration(event, status=RegistrationStatus.PENDING)
        payment = make_payment(registration)
        seed(store, event, registration, payment)

        result = await settle.handle(
            SettlePayment(payment_id=payment.id, success=False, failure_reason="declined")
        )

        assert isinstance(result, Success)
        assert not result.value.succeeded
        assert store.payments[payment.id].status == PaymentStatus.FAILED
        assert store.payments[payment.id].failure_reason == "declined"
        stored = store.registrations[registration.id]
        assert stored.status == RegistrationStatus.PENDING
        assert stored.payment_status == RegistrationPaymentStatus.FAILED
        assert store.events[event.id].registered_count == 0

    async def test_success_after_failure_is_conflict(self, settle, store):
        """Test a failed payment cannot be completed later."""
        event = make_event(is_paid=True)
        registration = make_registration(event, status=RegistrationStatus.PENDING)
        payment = make_payment(registration, status=PaymentStatus.FAILED)
        seed(store, event, registration, payment)

        result = await settle.handle(
            SettlePayment(payment_id=payment.id, success=True, transaction_id="pay_9")
        )

        assert result.error.code == ErrorCode.INVALID_STATE_TRANSITION

    async def test_cancelled_registration_is_skipped(self, settle, store, mock_logger):
        """Test settling for a timed-out registration completes the payment only."""
        event = make_event(is_paid=True)
        registration = make_registration(event, status=RegistrationStatus.CANCELLED)
        payment = make_payment(registration)
        seed(store, event, registration, payment)

        result = await settle.handle(
            SettlePayment(payment_id=payment.id, success=True, transaction_id="pay_2")
        )

        assert result.value.confirmed_registration_ids == []
        assert store.events[event.id].registered_count == 0
        warnings = [c.args[0] for c in mock_logger.warning.call_args_list]
        assert "settlement_registration_skipped" in warnings

    async def test_replay_finishes_interrupted_settlement(
        self, settle, repos, store, sink, clock, transition_service, monkeypatch
    ):
        """Test a replay confirms a registration whose write failed after payment."""
        event = make_event(is_paid=True)
        registration = make_registration(event, status=RegistrationStatus.PENDING)
        payment = make_payment(registration)
        registration.payment_id = payment.id
        seed(store, event, registration, payment)
        real = repos.registrations.transition
        calls = []

        async def fails_once(registration_id, **kwargs):
            calls.append(registration_id)
            if len(calls) == 1:
                raise ConnectionError("connection reset")
            return await real(registration_id, **kwargs)

        monkeypatch.setattr(repos.registrations, "transition", fails_once)
        command = SettlePayment(payment_id=payment.id, success=True, transaction_id="pay_3")

        first = await settle.handle(command)

        assert first.error.code == ErrorCode.PERSISTENCE_FAILED
        assert store.payments[payment.id].status == PaymentStatus.COMPLETED
        assert store.registrations[registration.id].payment_status == (
            RegistrationPaymentStatus.PENDING
        )

        replay = await settle.handle(command)

        assert replay.value.duplicate
        assert replay.value.confirmed_registration_ids == [registration.id]
        stored = store.registrations[registration.id]
        assert stored.status == RegistrationStatus.CONFIRMED
        assert stored.payment_status == RegistrationPaymentStatus.PAID
        assert store.events[event.id].registered_count == 1
        assert len(store.invoices) == 1
        assert sink.titles_for(registration.user_id) == [
            "Payment Successful - Registration Confirmed"
        ]

        clock.set(BASE_TIME + timedelta(days=2))
        await transition_service.run_all_transitions()

        assert store.registrations[registration.id].status == RegistrationStatus.CONFIRMED

    async def test_unknown_payment(self, settle):
        """Test settling an unknown payment is not found."""
        result = await settle.handle(SettlePayment(payment_id=uuid7(), success=True))

        assert result.error.code == ErrorCode.PAYMENT_NOT_FOUND
