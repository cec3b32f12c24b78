"""End-to-end lifecycle flows on the SQL store.

Real handlers and services over SQLite:
- register, wait-list, pay, settle, refund, promote, time out
- the transition sweep moving an event and its rounds
"""

from datetime import timedelta
from decimal import Decimal

import pytest

from src.application.commands import (
    InitiatePayment,
    ProcessRefund,
    RegisterForEvent,
    RequestRefund,
    SettlePayment,
)
from src.application.commands.handlers.initiate_payment_handler import InitiatePaymentHandler
from src.application.commands.handlers.process_refund_handler import ProcessRefundHandler
from src.application.commands.handlers.register_for_event_handler import (
    RegisterForEventHandler,
)
from src.application.commands.handlers.request_refund_handler import RequestRefundHandler
from src.application.commands.handlers.settle_payment_handler import SettlePaymentHandler
from src.application.services.notification_dispatcher import NotificationDispatcher
from src.application.services.status_transition_service import (
    EVENT_TO_COMPLETED,
    EVENT_TO_ONGOING,
    PAYMENT_TIMEOUT,
    ROUND_TO_ACTIVE,
    StatusTransitionService,
)
from src.application.services.waitlist_service import WaitlistService
from src.domain.enums import (
    EventStatus,
    RefundStatus,
    RegistrationPaymentStatus,
    RegistrationStatus,
    RoundStatus,
    UserRole,
)
from src.domain.policies import RefundPolicy
from src.infrastructure.payments import StubPaymentGateway
from tests.conftest import make_actor, make_event, make_round


@pytest.fixture
def services(sql_repos, sink, clock, mock_logger):
    notifications = NotificationDispatcher(sink, mock_logger)
    waitlist = WaitlistService(
        event_repo=sql_repos.events,
        registration_repo=sql_repos.registrations,
        notifications=notifications,
        logger=mock_logger,
        payment_window_hours=24,
    )
    sweep = StatusTransitionService(
        event_repo=sql_repos.events,
        registration_repo=sql_repos.registrations,
        payment_repo=sql_repos.payments,
        waitlist=waitlist,
        notifications=notifications,
        clock=clock,
        logger=mock_logger,
        payment_window=timedelta(hours=24),
    )
    return notifications, waitlist, sweep


@pytest.mark.integration
class TestPaidEventFlow:
    """Registration through refund and waitlist promotion."""

    async def test_full_flow(self, sql_repos, services, sink, clock, mock_logger):
        """Test a paid seat moves from payer to waitlist and then times out."""
        notifications, waitlist, sweep = services
        gateway = StubPaymentGateway()
        repos = sql_repos
        event = make_event(is_paid=True, amount=Decimal("400.00"), max_participants=1)
        await repos.events.save(event)
        alice = make_actor(UserRole.STUDENT)
        bob = make_actor(UserRole.STUDENT)
        organizer = make_actor(UserRole.FACULTY, user_id=event.organizer_id)

        register = RegisterForEventHandler(
            event_repo=repos.events,
            registration_repo=repos.registrations,
            team_repo=repos.teams,
            clock=clock,
            logger=mock_logger,
        )
        initiate = InitiatePaymentHandler(
            registration_repo=repos.registrations,
            event_repo=repos.events,
            team_repo=repos.teams,
            payment_repo=repos.payments,
            gateway=gateway,
            clock=clock,
            logger=mock_logger,
        )
        settle = SettlePaymentHandler(
            payment_repo=repos.payments,
            registration_repo=repos.registrations,
            event_repo=repos.events,
            invoice_repo=repos.invoices,
            notifications=notifications,
            clock=clock,
            logger=mock_logger,
        )
        request_refund = RequestRefundHandler(
            payment_repo=repos.payments,
            refund_repo=repos.refunds,
            registration_repo=repos.registrations,
            event_repo=repos.events,
            notifications=notifications,
            clock=clock,
            logger=mock_logger,
            policy=RefundPolicy(),
        )
        process_refund = ProcessRefundHandler(
            refund_repo=repos.refunds,
            payment_repo=repos.payments,
            registration_repo=repos.registrations,
            event_repo=repos.events,
            gateway=gateway,
            waitlist=waitlist,
            notifications=notifications,
            clock=clock,
            logger=mock_logger,
        )

        # Alice takes the only seat (reserved until paid); Bob waits.
        alice_result = await register.handle(RegisterForEvent(actor=alice, event_id=event.id))
        alice_reg = alice_result.value.primary
        assert alice_reg.status == RegistrationStatus.PENDING
        bob_result = await register.handle(
            RegisterForEvent(actor=bob, event_id=event.id, join_waitlist=True)
        )
        bob_reg = bob_result.value.primary
        assert bob_reg.status == RegistrationStatus.WAITLISTED

        # Alice pays.
        payment = (
            await initiate.handle(InitiatePayment(actor=alice, registration_id=alice_reg.id))
        ).value
        settlement = (
            await settle.handle(
                SettlePayment(payment_id=payment.id, success=True, transaction_id="pay_flow")
            )
        ).value
        assert settlement.succeeded
        assert (await repos.events.find_by_id(event.id)).registered_count == 1
        assert (await repos.invoices.find_by_payment(payment.id)).total == Decimal("400.00")

        # Ten days out: full refund, approved by the organizer.
        refund = (
            await request_refund.handle(
                RequestRefund(actor=alice, payment_id=payment.id, reason="Clash")
            )
        ).value
        assert refund.refund_percentage == 100
        processed = await process_refund.handle(
            ProcessRefund(actor=organizer, refund_id=refund.id, approve=True)
        )
        assert processed.value.status == RefundStatus.COMPLETED

        stored_alice = await repos.registrations.find_by_id(alice_reg.id)
        assert stored_alice.status == RegistrationStatus.CANCELLED
        assert stored_alice.payment_status == RegistrationPaymentStatus.REFUNDED
        stored_bob = await repos.registrations.find_by_id(bob_reg.id)
        assert stored_bob.status == RegistrationStatus.PENDING
        assert stored_bob.payment_status == RegistrationPaymentStatus.PENDING
        assert (await repos.events.find_by_id(event.id)).registered_count == 0

        # Bob never pays: the sweep cancels the registration after the window.
        clock.advance(timedelta(hours=24, minutes=1))
        report = await sweep.run_all_transitions()

        assert report.step(PAYMENT_TIMEOUT).processed == 1
        stored_bob = await repos.registrations.find_by_id(bob_reg.id)
        assert stored_bob.status == RegistrationStatus.CANCELLED
        assert sink.titles_for(bob.user_id)[-1] == f"Registration Cancelled: {event.title}"


@pytest.mark.integration
class TestSweepFlow:
    """Event and round transitions on the SQL store."""

    async def test_event_and_round_lifecycle(self, sql_repos, services, clock):
        """Test an event starts, runs its round and completes across sweeps."""
        _, _, sweep = services
        event = make_event()
        event.rounds = [make_round(event)]
        await sql_repos.events.save(event)

        clock.set(event.start_date_time + timedelta(minutes=1))
        started = await sweep.run_all_transitions()

        assert started.step(EVENT_TO_ONGOING).processed == 1
        assert started.step(ROUND_TO_ACTIVE).processed == 1
        loaded = await sql_repos.events.find_by_id(event.id)
        assert loaded.status == EventStatus.ONGOING
        assert loaded.rounds[0].status == RoundStatus.ACTIVE

        clock.set(event.end_date_time)
        finished = await sweep.run_all_transitions()

        assert finished.step(EVENT_TO_COMPLETED).processed == 1
        loaded = await sql_repos.events.find_by_id(event.id)
        assert loaded.status == EventStatus.COMPLETED
        assert loaded.rounds[0].status == RoundStatus.COMPLETED
        assert finished.failed_steps == []
