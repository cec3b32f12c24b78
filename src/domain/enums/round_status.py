"""Round lifecycle states.

State Machine:
    UPCOMING → ACTIVE → COMPLETED

Transitions are time-based and applied by the scheduler sweep.
"""

from enum import Enum


class RoundStatus(str, Enum):
    """Lifecycle state of a round within an event."""

    UPCOMING = "upcoming"
    """Round start time not reached yet."""

    ACTIVE = "active"
    """Round is running."""

    COMPLETED = "completed"
    """Round end time has passed. Terminal."""

    @classmethod
    def values(cls) -> list[str]:
        """Get all status values as strings."""
        return [status.value for status in cls]
