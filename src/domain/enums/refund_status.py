"""Refund request states.

State Machine:
    PENDING → COMPLETED (gateway refund succeeded)
    PENDING → REJECTED (organizer declined)
    PENDING → FAILED (gateway error)
"""

from enum import Enum


class RefundStatus(str, Enum):
    """Lifecycle state of a refund request."""

    PENDING = "pending"
    REJECTED = "rejected"
    COMPLETED = "completed"
    FAILED = "failed"

    @classmethod
    def blocking_states(cls) -> list["RefundStatus"]:
        """States that prevent another refund request for the same payment.

        Returns:
            list[RefundStatus]: PENDING and COMPLETED. A rejected or failed
            refund leaves the payment refundable again.
        """
        return [cls.PENDING, cls.COMPLETED]
