"""Event lifecycle states.

State Machine:
    DRAFT → PUBLISHED → ONGOING → COMPLETED
      ↓         ↓          ↓
    CANCELLED CANCELLED CANCELLED

    - DRAFT: Being prepared by the organizer, invisible to participants
    - PUBLISHED: Open for registration until the deadline
    - ONGOING: Start time reached (set by the scheduler)
    - COMPLETED: End time reached (terminal, set by the scheduler)
    - CANCELLED: Called off by the organizer or an admin (terminal)

Usage:
    from src.domain.enums import EventStatus

    if event.status == EventStatus.PUBLISHED:
        # Registration may be open
"""

from enum import Enum


class EventStatus(str, Enum):
    """Event lifecycle states.

    String Enum:
        Inherits from str for easy serialization and database storage.
        Values are lowercase for consistency.

    State Transitions:
        DRAFT → PUBLISHED: Organizer publishes
        DRAFT → CANCELLED: Organizer abandons the draft
        PUBLISHED → ONGOING: Scheduler, start time reached
        PUBLISHED → CANCELLED: Organizer/admin cancels
        ONGOING → COMPLETED: Scheduler, end time reached
        ONGOING → CANCELLED: Organizer/admin cancels
    """

    DRAFT = "draft"
    """Initial state, editable and not open for registration."""

    PUBLISHED = "published"
    """Visible and accepting registrations until the deadline."""

    ONGOING = "ongoing"
    """Start time has passed and end time has not."""

    COMPLETED = "completed"
    """End time has passed. Terminal."""

    CANCELLED = "cancelled"
    """Called off. Terminal."""

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
    def terminal_states(cls) -> list["EventStatus"]:
        """Get terminal states (no outgoing transitions).

        Returns:
            list[EventStatus]: Terminal states.
        """
        return [cls.COMPLETED, cls.CANCELLED]
