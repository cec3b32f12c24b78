"""ClockProtocol - Port for the current time.

The scheduler sweep and every time-dependent handler read time through this
port so tests can move time without waiting.
"""

from datetime import datetime
from typing import Protocol


class ClockProtocol(Protocol):
    """Source of the current time."""

    def now(self) -> datetime:
        """Current time as an aware UTC datetime."""
        ...
