"""Registration lifecycle states.

State Machine:
    WAITLISTED → PENDING → CONFIRMED → CANCELLED
        ↓           ↓          ↓
    CONFIRMED   CANCELLED   REJECTED
        ↓       REJECTED
    CANCELLED

    - PENDING: Awaiting payment and/or organizer approval
    - CONFIRMED: Holds a seat at the event
    - WAITLISTED: Event was full, waiting for a spot (FIFO)
    - CANCELLED: Withdrawn, timed out or refunded (terminal)
    - REJECTED: Refused by the organizer (terminal)

Usage:
    from src.domain.enums import RegistrationStatus

    if registration.status in RegistrationStatus.active_states():
        # Blocks a second registration for the same user and event
"""

from enum import Enum


class RegistrationStatus(str, Enum):
    """Registration lifecycle states.

    String Enum:
        Inherits from str for easy serialization and database storage.
    """

    PENDING = "pending"
    """Awaiting payment settlement or organizer approval."""

    CONFIRMED = "confirmed"
    """Participation confirmed."""

    WAITLISTED = "waitlisted"
    """Queued until capacity frees up."""

    CANCELLED = "cancelled"
    """Withdrawn by the user, timed out, or refunded. Terminal."""

    REJECTED = "rejected"
    """Refused by the organizer. Terminal."""

    @classmethod
    def values(cls) -> list[str]:
        """Get all status values as strings.

        Returns:
            list[str]: List of status values.
        """
        return [status.value for status in cls]

    @classmethod
    def is_valid(cls, value: str) -> bool:
        """Check if a string is a valid status.

        Args:
            value: String to check.

        Returns:
            bool: True if value is a valid status.
        """
        return value in cls.values()

    @classmethod
    def active_states(cls) -> list["RegistrationStatus"]:
        """Get non-terminal states.

        At most one registration per (event, user) may be in one of these.

        Returns:
            list[RegistrationStatus]: Non-terminal states.
        """
        return [cls.PENDING, cls.CONFIRMED, cls.WAITLISTED]

    @classmethod
    def terminal_states(cls) -> list["RegistrationStatus"]:
        """Get terminal states.

        Returns:
            list[RegistrationStatus]: Terminal states.
        """
        return [cls.CANCELLED, cls.REJECTED]
