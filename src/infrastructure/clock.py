"""Clock adapters.

Implement ClockProtocol via structural typing (no inheritance).

Usage:
    clock = SystemClock()            # production
    clock = FrozenClock(start)       # tests and replays
    clock.advance(timedelta(hours=25))
"""

from datetime import UTC, datetime, timedelta


class SystemClock:
    """Wall clock in UTC."""

    def now(self) -> datetime:
        """Current aware UTC time."""
        return datetime.now(UTC)


class FrozenClock:
    """Manually driven clock.

    Time only moves when ``set`` or ``advance`` is called, so a sweep run
    against it is fully deterministic.
    """

    def __init__(self, start: datetime) -> None:
        """Initialize frozen clock.

        Args:
            start: Initial time. Naive values are taken as UTC.
        """
        self._now = _as_utc(start)

    def now(self) -> datetime:
        """Current frozen time."""
        return self._now

    def set(self, value: datetime) -> None:
        """Jump to ``value``."""
        self._now = _as_utc(value)

    def advance(self, delta: timedelta) -> datetime:
        """Move forward by ``delta`` and return the new time."""
        self._now = self._now + delta
        return self._now


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)
