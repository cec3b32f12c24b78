"""Payment state tracked on a registration.

State Machine:
    NOT_REQUIRED (free events, terminal)
    PENDING → PAID → REFUND_PENDING → REFUNDED
       ↓  ↑           ↓
     FAILED          PAID (refund rejected)
"""

from enum import Enum


class RegistrationPaymentStatus(str, Enum):
    """Payment state of a registration (distinct from Payment.status)."""

    NOT_REQUIRED = "not_required"
    """Free event, nothing to pay."""

    PENDING = "pending"
    """Payment expected within the payment window."""

    PAID = "paid"
    """Settlement confirmed."""

    REFUND_PENDING = "refund_pending"
    """Refund requested, awaiting organizer decision."""

    REFUNDED = "refunded"
    """Refund paid out. Terminal."""

    FAILED = "failed"
    """Last settlement attempt failed; the user may retry."""

    @classmethod
    def values(cls) -> list[str]:
        """Get all status values as strings."""
        return [status.value for status in cls]
