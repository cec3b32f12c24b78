"""Payment record states.

State Machine:
    PENDING → COMPLETED (terminal, refund bookkeeping only afterwards)
    PENDING → FAILED (terminal)
"""

from enum import Enum


class PaymentStatus(str, Enum):
    """Settlement state of a single payment attempt."""

    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"

    @classmethod
    def open_states(cls) -> list["PaymentStatus"]:
        """States that block a second payment for the same team.

        Returns:
            list[PaymentStatus]: PENDING and COMPLETED.
        """
        return [cls.PENDING, cls.COMPLETED]
