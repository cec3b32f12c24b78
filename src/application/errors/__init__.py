"""Application layer errors.

Constructors for the DomainError values command handlers return.
"""

from src.application.errors.lifecycle_errors import (
    event_closed,
    event_not_found,
    forbidden,
    payment_not_found,
    persistence_failed,
    refund_not_found,
    registration_not_found,
    stale_state,
    team_changed,
    team_not_found,
    team_rule_violation,
)

__all__ = [
    "event_closed",
    "event_not_found",
    "forbidden",
    "payment_not_found",
    "persistence_failed",
    "refund_not_found",
    "registration_not_found",
    "stale_state",
    "team_changed",
    "team_not_found",
    "team_rule_violation",
]
