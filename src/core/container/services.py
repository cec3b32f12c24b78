"""Application service factories.

Services are stateless apart from their collaborators, so they are cached
for the application lifetime like the adapters they wrap.
"""

from datetime import timedelta
from functools import lru_cache

from src.application.services.notification_dispatcher import NotificationDispatcher
from src.application.services.ownership_verifier import OwnershipVerifier
from src.application.services.status_transition_service import StatusTransitionService
from src.application.services.waitlist_service import WaitlistService
from src.core.config import get_settings
from src.core.container.infrastructure import (
    get_clock,
    get_logger,
    get_notification_sink,
    get_repositories,
)
from src.domain.policies import RefundPolicy
from src.infrastructure.jobs import IntervalScheduler

SWEEP_JOB_NAME = "status_transitions"


@lru_cache()
def get_notification_dispatcher() -> NotificationDispatcher:
    return NotificationDispatcher(get_notification_sink(), get_logger())


@lru_cache()
def get_waitlist_service() -> WaitlistService:
    repos = get_repositories()
    return WaitlistService(
        event_repo=repos.events,
        registration_repo=repos.registrations,
        notifications=get_notification_dispatcher(),
        logger=get_logger(),
        payment_window_hours=get_settings().payment_window_hours,
    )


def get_ownership_verifier() -> OwnershipVerifier:
    repos = get_repositories()
    return OwnershipVerifier(repos.events, repos.registrations)


def get_refund_policy() -> RefundPolicy:
    settings = get_settings()
    return RefundPolicy(
        full_refund_days=settings.full_refund_days,
        partial_refund_days=settings.partial_refund_days,
    )


@lru_cache()
def get_status_transition_service() -> StatusTransitionService:
    """The sweep service shared by the scheduler and the maintenance API."""
    repos = get_repositories()
    return StatusTransitionService(
        event_repo=repos.events,
        registration_repo=repos.registrations,
        payment_repo=repos.payments,
        waitlist=get_waitlist_service(),
        notifications=get_notification_dispatcher(),
        clock=get_clock(),
        logger=get_logger(),
        payment_window=timedelta(hours=get_settings().payment_window_hours),
    )


def build_scheduler() -> IntervalScheduler:
    """Interval scheduler running the transition sweep."""
    settings = get_settings()
    return IntervalScheduler(
        name=SWEEP_JOB_NAME,
        job=get_status_transition_service().run_all_transitions,
        interval_seconds=settings.sweep_interval_seconds,
        logger=get_logger(),
        run_immediately=settings.run_sweep_on_startup,
    )
