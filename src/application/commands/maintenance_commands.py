"""Maintenance commands (operator actions)."""

from dataclasses import dataclass
from uuid import UUID

from src.domain.value_objects import Actor


@dataclass(frozen=True, kw_only=True)
class ReconcileRegisteredCounts:
    """Recompute ``registered_count`` from the registration set.

    Attributes:
        actor: Operator holding the maintenance capability.
        event_id: One event, or None for every event.
    """

    actor: Actor
    event_id: UUID | None = None


@dataclass(frozen=True, kw_only=True)
class RunTransitions:
    """Run one status transition sweep out-of-band."""

    actor: Actor
