"""Container module - Centralized dependency injection.

The composition root: adapters are chosen here from settings and wired
into services and handlers.

- infrastructure: logger, clock, database, store, notification sink, gateway
- services: notification dispatcher, waitlist, sweep service, scheduler
- handlers: one factory per command handler
"""

from src.core.container.handlers import (
    get_add_round_handler,
    get_advance_participants_handler,
    get_approve_registration_handler,
    get_cancel_event_handler,
    get_cancel_registration_handler,
    get_create_event_handler,
    get_create_team_handler,
    get_delete_event_handler,
    get_initiate_payment_handler,
    get_join_team_handler,
    get_leave_team_handler,
    get_lock_team_handler,
    get_process_refund_handler,
    get_publish_event_handler,
    get_reconcile_counts_handler,
    get_register_for_event_handler,
    get_reject_registration_handler,
    get_request_refund_handler,
    get_run_transitions_handler,
    get_settle_payment_handler,
    get_update_event_handler,
    get_update_round_handler,
)
from src.core.container.infrastructure import (
    get_clock,
    get_database,
    get_logger,
    get_memory_store,
    get_notification_sink,
    get_payment_gateway,
    get_repositories,
    reset_container,
)
from src.core.container.services import (
    build_scheduler,
    get_notification_dispatcher,
    get_ownership_verifier,
    get_refund_policy,
    get_status_transition_service,
    get_waitlist_service,
)

__all__ = [
    # Infrastructure
    "get_clock",
    "get_database",
    "get_logger",
    "get_memory_store",
    "get_notification_sink",
    "get_payment_gateway",
    "get_repositories",
    "reset_container",
    # Services
    "build_scheduler",
    "get_notification_dispatcher",
    "get_ownership_verifier",
    "get_refund_policy",
    "get_status_transition_service",
    "get_waitlist_service",
    # Handlers
    "get_add_round_handler",
    "get_advance_participants_handler",
    "get_approve_registration_handler",
    "get_cancel_event_handler",
    "get_cancel_registration_handler",
    "get_create_event_handler",
    "get_create_team_handler",
    "get_delete_event_handler",
    "get_initiate_payment_handler",
    "get_join_team_handler",
    "get_leave_team_handler",
    "get_lock_team_handler",
    "get_process_refund_handler",
    "get_publish_event_handler",
    "get_reconcile_counts_handler",
    "get_register_for_event_handler",
    "get_reject_registration_handler",
    "get_request_refund_handler",
    "get_run_transitions_handler",
    "get_settle_payment_handler",
    "get_update_event_handler",
    "get_update_round_handler",
]
