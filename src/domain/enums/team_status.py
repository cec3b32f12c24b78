"""Team states."""

from enum import Enum


class TeamStatus(str, Enum):
    """Team lifecycle state.

    ACTIVE teams accept members, LOCKED teams are frozen for registration,
    DISBANDED teams are dissolved.
    """

    ACTIVE = "active"
    LOCKED = "locked"
    DISBANDED = "disbanded"
