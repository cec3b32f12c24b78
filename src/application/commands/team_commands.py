"""Team commands (CQRS write operations)."""

from dataclasses import dataclass
from uuid import UUID

from src.domain.value_objects import Actor


@dataclass(frozen=True, kw_only=True)
class CreateTeam:
    """Create a team for an event, led by the actor.

    Attributes:
        actor: Team leader and first member.
        event_id: Event that allows teams.
        name: Team name (2..100 characters).
    """

    actor: Actor
    event_id: UUID
    name: str


@dataclass(frozen=True, kw_only=True)
class JoinTeam:
    """Join a team by its invite code (case and surrounding blanks ignored)."""

    actor: Actor
    invite_code: str


@dataclass(frozen=True, kw_only=True)
class LeaveTeam:
    """Leave an unlocked team. The leader cannot leave."""

    actor: Actor
    team_id: UUID


@dataclass(frozen=True, kw_only=True)
class LockTeam:
    """Freeze team membership so the leader can register the team."""

    actor: Actor
    team_id: UUID
