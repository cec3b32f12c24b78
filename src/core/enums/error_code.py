"""Domain-level error codes (machine-readable).

Error codes follow ENTITY_ACTION_REASON naming convention and travel inside
DomainError instances returned through Result types.

Categories:
- Validation errors (INVALID_*, VALIDATION_*, *_LOCKED)
- Resource errors (*_NOT_FOUND)
- Conflict errors (*_ALREADY_*, *_CONFLICT, INVALID_STATE_TRANSITION)
- Authorization errors (PERMISSION_DENIED, RESOURCE_NOT_OWNED)
- Business rule violations (EVENT_FULL, REFUND_WINDOW_CLOSED, ...)
- Collaborator errors (PAYMENT_GATEWAY_*, PERSISTENCE_FAILED)
"""

from enum import Enum


class ErrorCode(Enum):
    """Domain-level error codes (machine-readable)."""

    # Validation errors
    VALIDATION_FAILED = "validation_failed"
    INVALID_DATE_RANGE = "invalid_date_range"
    INVALID_ROUND_WINDOW = "invalid_round_window"
    INVALID_TEAM_SIZE = "invalid_team_size"
    INVALID_PAYMENT_SETTINGS = "invalid_payment_settings"
    INVALID_ROUND_PROGRESSION = "invalid_round_progression"
    FIELD_LOCKED = "field_locked"
    REGISTRATION_CLOSED = "registration_closed"
    CANCELLATION_WINDOW_CLOSED = "cancellation_window_closed"
    REFUND_WINDOW_CLOSED = "refund_window_closed"

    # Resource errors
    EVENT_NOT_FOUND = "event_not_found"
    ROUND_NOT_FOUND = "round_not_found"
    REGISTRATION_NOT_FOUND = "registration_not_found"
    TEAM_NOT_FOUND = "team_not_found"
    PAYMENT_NOT_FOUND = "payment_not_found"
    REFUND_NOT_FOUND = "refund_not_found"

    # Conflict errors
    INVALID_STATE_TRANSITION = "invalid_state_transition"
    REGISTRATION_ALREADY_ACTIVE = "registration_already_active"
    PAYMENT_ALREADY_EXISTS = "payment_already_exists"
    PAYMENT_ALREADY_COMPLETED = "payment_already_completed"
    REFUND_ALREADY_REQUESTED = "refund_already_requested"
    EVENT_FULL = "event_full"
    TEAM_FULL = "team_full"
    ALREADY_IN_TEAM = "already_in_team"
    EVENT_HAS_ACTIVE_REGISTRATIONS = "event_has_active_registrations"
    RESOURCE_CONFLICT = "resource_conflict"

    # Authorization errors
    PERMISSION_DENIED = "permission_denied"
    RESOURCE_NOT_OWNED = "resource_not_owned"

    # Collaborator errors
    PAYMENT_GATEWAY_FAILED = "payment_gateway_failed"
    PERSISTENCE_FAILED = "persistence_failed"
