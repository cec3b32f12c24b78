"""Role to capability mapping.

Replaces ad-hoc role list checks with one lookup evaluated per command.

Usage:
    from src.domain.policies import has_capability
    from src.domain.enums import Capability

    if not has_capability(actor, Capability.RUN_MAINTENANCE):
        return Failure(error=AuthorizationError(...))
"""

from types import MappingProxyType
from typing import TYPE_CHECKING

from src.domain.enums import Capability, UserRole
from src.domain.value_objects.actor import Actor

if TYPE_CHECKING:
    from src.domain.entities.event import Event

_PARTICIPANT = frozenset({Capability.REGISTER_FOR_EVENTS})
_ORGANIZER = _PARTICIPANT | {Capability.CREATE_EVENTS}
_ADMIN = _ORGANIZER | {
    Capability.MANAGE_ANY_EVENT,
    Capability.PROCESS_ANY_REFUND,
    Capability.RUN_MAINTENANCE,
}

ROLE_CAPABILITIES: MappingProxyType[UserRole, frozenset[Capability]] = MappingProxyType(
    {
        UserRole.STUDENT: _PARTICIPANT,
        UserRole.DEPARTMENT_ORGANIZER: _ORGANIZER,
        UserRole.FACULTY: _ORGANIZER,
        UserRole.ADMIN: _ADMIN,
        UserRole.SUPER_ADMIN: _ADMIN,
    }
)


def has_capability(actor: Actor, capability: Capability) -> bool:
    """Check whether the actor's role grants ``capability``."""
    return capability in ROLE_CAPABILITIES.get(actor.role, frozenset())


def can_manage_event(actor: Actor, event: "Event") -> bool:
    """Organizer of the event, or a role that manages any event."""
    return actor.user_id == event.organizer_id or has_capability(
        actor, Capability.MANAGE_ANY_EVENT
    )
