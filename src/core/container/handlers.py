"""Command handler factories.

Handlers are cheap and built per use from the cached adapters and
services. FastAPI routes receive them through ``Depends``, so tests swap
one with ``app.dependency_overrides``.

Usage:
    handler = get_register_for_event_handler()
    result = await handler.handle(RegisterForEvent(...))
"""

from datetime import timedelta

from src.application.commands.handlers.add_round_handler import AddRoundHandler
from src.application.commands.handlers.advance_participants_handler import (
    AdvanceParticipantsHandler,
)
from src.application.commands.handlers.approve_registration_handler import (
    ApproveRegistrationHandler,
)
from src.application.commands.handlers.cancel_event_handler import CancelEventHandler
from src.application.commands.handlers.cancel_registration_handler import (
    CancelRegistrationHandler,
)
from src.application.commands.handlers.create_event_handler import CreateEventHandler
from src.application.commands.handlers.create_team_handler import CreateTeamHandler
from src.application.commands.handlers.delete_event_handler import DeleteEventHandler
from src.application.commands.handlers.initiate_payment_handler import (
    InitiatePaymentHandler,
)
from src.application.commands.handlers.join_team_handler import JoinTeamHandler
from src.application.commands.handlers.leave_team_handler import LeaveTeamHandler
from src.application.commands.handlers.lock_team_handler import LockTeamHandler
from src.application.commands.handlers.process_refund_handler import ProcessRefundHandler
from src.application.commands.handlers.publish_event_handler import PublishEventHandler
from src.application.commands.handlers.reconcile_counts_handler import (
    ReconcileCountsHandler,
)
from src.application.commands.handlers.register_for_event_handler import (
    RegisterForEventHandler,
)
from src.application.commands.handlers.reject_registration_handler import (
    RejectRegistrationHandler,
)
from src.application.commands.handlers.request_refund_handler import RequestRefundHandler
from src.application.commands.handlers.run_transitions_handler import (
    RunTransitionsHandler,
)
from src.application.commands.handlers.settle_payment_handler import SettlePaymentHandler
from src.application.commands.handlers.update_event_handler import UpdateEventHandler
from src.application.commands.handlers.update_round_handler import UpdateRoundHandler
from src.core.config import get_settings
from src.core.container.infrastructure import (
    get_clock,
    get_logger,
    get_payment_gateway,
    get_repositories,
)
from src.core.container.services import (
    get_notification_dispatcher,
    get_ownership_verifier,
    get_refund_policy,
    get_status_transition_service,
    get_waitlist_service,
)

# =============================================================================
# Events and rounds
# =============================================================================


def get_create_event_handler() -> CreateEventHandler:
    return CreateEventHandler(
        event_repo=get_repositories().events,
        clock=get_clock(),
        logger=get_logger(),
        default_currency=get_settings().default_currency,
    )


def get_update_event_handler() -> UpdateEventHandler:
    return UpdateEventHandler(
        event_repo=get_repositories().events,
        verifier=get_ownership_verifier(),
        clock=get_clock(),
        logger=get_logger(),
    )


def get_publish_event_handler() -> PublishEventHandler:
    return PublishEventHandler(
        event_repo=get_repositories().events,
        verifier=get_ownership_verifier(),
        clock=get_clock(),
        logger=get_logger(),
    )


def get_cancel_event_handler() -> CancelEventHandler:
    repos = get_repositories()
    return CancelEventHandler(
        event_repo=repos.events,
        registration_repo=repos.registrations,
        verifier=get_ownership_verifier(),
        notifications=get_notification_dispatcher(),
        clock=get_clock(),
        logger=get_logger(),
    )


def get_delete_event_handler() -> DeleteEventHandler:
    repos = get_repositories()
    return DeleteEventHandler(
        event_repo=repos.events,
        registration_repo=repos.registrations,
        verifier=get_ownership_verifier(),
        logger=get_logger(),
    )


def get_add_round_handler() -> AddRoundHandler:
    return AddRoundHandler(
        event_repo=get_repositories().events,
        verifier=get_ownership_verifier(),
        clock=get_clock(),
        logger=get_logger(),
    )


def get_update_round_handler() -> UpdateRoundHandler:
    return UpdateRoundHandler(
        event_repo=get_repositories().events,
        verifier=get_ownership_verifier(),
        clock=get_clock(),
        logger=get_logger(),
    )


def get_advance_participants_handler() -> AdvanceParticipantsHandler:
    repos = get_repositories()
    return AdvanceParticipantsHandler(
        registration_repo=repos.registrations,
        team_repo=repos.teams,
        verifier=get_ownership_verifier(),
        notifications=get_notification_dispatcher(),
        logger=get_logger(),
    )


# =============================================================================
# Registrations
# =============================================================================


def get_register_for_event_handler() -> RegisterForEventHandler:
    repos = get_repositories()
    return RegisterForEventHandler(
        event_repo=repos.events,
        registration_repo=repos.registrations,
        team_repo=repos.teams,
        clock=get_clock(),
        logger=get_logger(),
    )


def get_cancel_registration_handler() -> CancelRegistrationHandler:
    return CancelRegistrationHandler(
        registration_repo=get_repositories().registrations,
        verifier=get_ownership_verifier(),
        waitlist=get_waitlist_service(),
        clock=get_clock(),
        logger=get_logger(),
        cancellation_cutoff=timedelta(hours=get_settings().cancellation_cutoff_hours),
    )


def get_approve_registration_handler() -> ApproveRegistrationHandler:
    return ApproveRegistrationHandler(
        registration_repo=get_repositories().registrations,
        verifier=get_ownership_verifier(),
        notifications=get_notification_dispatcher(),
        clock=get_clock(),
        logger=get_logger(),
    )


def get_reject_registration_handler() -> RejectRegistrationHandler:
    return RejectRegistrationHandler(
        registration_repo=get_repositories().registrations,
        verifier=get_ownership_verifier(),
        waitlist=get_waitlist_service(),
        notifications=get_notification_dispatcher(),
        clock=get_clock(),
        logger=get_logger(),
    )


# =============================================================================
# Teams
# =============================================================================


def get_create_team_handler() -> CreateTeamHandler:
    repos = get_repositories()
    return CreateTeamHandler(
        event_repo=repos.events,
        team_repo=repos.teams,
        clock=get_clock(),
        logger=get_logger(),
    )


def get_join_team_handler() -> JoinTeamHandler:
    return JoinTeamHandler(
        team_repo=get_repositories().teams,
        clock=get_clock(),
        logger=get_logger(),
    )


def get_leave_team_handler() -> LeaveTeamHandler:
    return LeaveTeamHandler(
        team_repo=get_repositories().teams,
        clock=get_clock(),
        logger=get_logger(),
    )


def get_lock_team_handler() -> LockTeamHandler:
    repos = get_repositories()
    return LockTeamHandler(
        event_repo=repos.events,
        team_repo=repos.teams,
        clock=get_clock(),
        logger=get_logger(),
    )


# =============================================================================
# Payments and refunds
# =============================================================================


def get_initiate_payment_handler() -> InitiatePaymentHandler:
    repos = get_repositories()
    return InitiatePaymentHandler(
        registration_repo=repos.registrations,
        event_repo=repos.events,
        team_repo=repos.teams,
        payment_repo=repos.payments,
        gateway=get_payment_gateway(),
        clock=get_clock(),
        logger=get_logger(),
    )


def get_settle_payment_handler() -> SettlePaymentHandler:
    repos = get_repositories()
    return SettlePaymentHandler(
        payment_repo=repos.payments,
        registration_repo=repos.registrations,
        event_repo=repos.events,
        invoice_repo=repos.invoices,
        notifications=get_notification_dispatcher(),
        clock=get_clock(),
        logger=get_logger(),
    )


def get_request_refund_handler() -> RequestRefundHandler:
    repos = get_repositories()
    return RequestRefundHandler(
        payment_repo=repos.payments,
        refund_repo=repos.refunds,
        registration_repo=repos.registrations,
        event_repo=repos.events,
        notifications=get_notification_dispatcher(),
        clock=get_clock(),
        logger=get_logger(),
        policy=get_refund_policy(),
    )


def get_process_refund_handler() -> ProcessRefundHandler:
    repos = get_repositories()
    return ProcessRefundHandler(
        refund_repo=repos.refunds,
        payment_repo=repos.payments,
        registration_repo=repos.registrations,
        event_repo=repos.events,
        gateway=get_payment_gateway(),
        waitlist=get_waitlist_service(),
        notifications=get_notification_dispatcher(),
        clock=get_clock(),
        logger=get_logger(),
    )


# =============================================================================
# Maintenance
# =============================================================================


def get_run_transitions_handler() -> RunTransitionsHandler:
    return RunTransitionsHandler(get_status_transition_service(), get_logger())


def get_reconcile_counts_handler() -> ReconcileCountsHandler:
    return ReconcileCountsHandler(get_repositories().events, get_logger())
