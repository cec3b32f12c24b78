"""Capabilities checked by command handlers.

A capability names something a caller may do regardless of ownership.
Ownership (organizer of the event, owner of the registration) is checked
separately by the handlers.
"""

from enum import Enum


class Capability(str, Enum):
    """Actions gated by role."""

    REGISTER_FOR_EVENTS = "registration.create"
    """Register for events and pay for own registrations."""

    CREATE_EVENTS = "event.create"
    """Create events (as their organizer)."""

    MANAGE_ANY_EVENT = "event.manage_any"
    """Edit, publish, cancel, delete any event and review its registrations."""

    PROCESS_ANY_REFUND = "payment.refund"
    """Approve or reject refunds for events organized by someone else."""

    RUN_MAINTENANCE = "admin.maintenance"
    """Trigger sweeps and counter reconciliation out-of-band."""
