"""Domain policies: pure rules shared by handlers, stores and the sweep."""

from src.domain.policies.authorization import (
    ROLE_CAPABILITIES,
    can_manage_event,
    has_capability,
)
from src.domain.policies.capacity import (
    PAYMENT_DUE_STATES,
    holds_counted_spot,
    is_awaiting_payment,
    occupies_capacity,
    spots_available,
)
from src.domain.policies.refund_policy import RefundPolicy

__all__ = [
    "PAYMENT_DUE_STATES",
    "ROLE_CAPABILITIES",
    "RefundPolicy",
    "can_manage_event",
    "has_capability",
    "holds_counted_spot",
    "is_awaiting_payment",
    "occupies_capacity",
    "spots_available",
]
