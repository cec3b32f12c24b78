"""Team domain entity.

Groups one to ``max_size`` users under one event. The leader is always a
member and always listed first; the leader's payment pays for everyone.
"""

import secrets
import string
from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import UUID

from uuid_extensions import uuid7

from src.core.result import Failure, Result, Success
from src.domain.enums import TeamStatus
from src.domain.errors import TeamError

_INVITE_ALPHABET = string.ascii_uppercase + string.digits


def generate_invite_code() -> str:
    """Random six-character upper-case invite code."""
    return "".join(secrets.choice(_INVITE_ALPHABET) for _ in range(6))


@dataclass
class Team:
    """A team registering together for an event.

    Attributes:
        event_id: Event the team is formed for.
        name: Team name (2..100 characters).
        leader_id: Team leader (always first member).
        max_size: Maximum number of members.
        id: Unique identifier.
        member_ids: Members, leader first.
        status: ACTIVE, LOCKED or DISBANDED.
        invite_code: Code other users join with.
        round: Round the team is in.
        eliminated: Whether the team was eliminated.
        created_at: Record creation timestamp.
        updated_at: Last modification timestamp.
    """

    event_id: UUID
    name: str
    leader_id: UUID
    max_size: int
    id: UUID = field(default_factory=uuid7)
    member_ids: list[UUID] = field(default_factory=list)
    status: TeamStatus = TeamStatus.ACTIVE
    invite_code: str = field(default_factory=generate_invite_code)
    round: int = 0
    eliminated: bool = False
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __post_init__(self) -> None:
        """Normalize membership and validate.

        Raises:
            ValueError: Invalid name, size, invite code, or too many members.
        """
        if not self.name or not 2 <= len(self.name.strip()) <= 100:
            raise ValueError(TeamError.INVALID_NAME)
        if self.max_size < 1:
            raise ValueError(TeamError.INVALID_MAX_SIZE)
        if len(self.invite_code) != 6 or self.invite_code != self.invite_code.upper():
            raise ValueError(TeamError.INVALID_INVITE_CODE)

        others = [m for m in dict.fromkeys(self.member_ids) if m != self.leader_id]
        self.member_ids = [self.leader_id, *others]

        if len(self.member_ids) > self.max_size:
            raise ValueError(TeamError.TOO_MANY_MEMBERS)

    @property
    def size(self) -> int:
        """Number of members including the leader."""
        return len(self.member_ids)

    def is_leader(self, user_id: UUID) -> bool:
        """Check whether ``user_id`` leads the team."""
        return self.leader_id == user_id

    def is_member(self, user_id: UUID) -> bool:
        """Check whether ``user_id`` is on the team."""
        return user_id in self.member_ids

    def is_locked(self) -> bool:
        """Frozen and ready to register."""
        return self.status == TeamStatus.LOCKED

    def add_member(self, user_id: UUID) -> Result[None, str]:
        """Add a member to an active team.

        Returns:
            Success(None): Member added.
            Failure(str): Team not active, already a member, or full.
        """
        if self.status != TeamStatus.ACTIVE:
            return Failure(error=TeamError.NOT_ACTIVE)
        if self.is_member(user_id):
            return Failure(error=TeamError.ALREADY_MEMBER)
        if self.size >= self.max_size:
            return Failure(error=TeamError.FULL)
        self.member_ids.append(user_id)
        self.updated_at = datetime.now(UTC)
        return Success(value=None)

    def remove_member(self, user_id: UUID) -> Result[None, str]:
        """Remove a non-leader member from an active team."""
        if self.status != TeamStatus.ACTIVE:
            return Failure(error=TeamError.NOT_ACTIVE)
        if self.is_leader(user_id):
            return Failure(error=TeamError.LEADER_CANNOT_LEAVE)
        if not self.is_member(user_id):
            return Failure(error=TeamError.NOT_MEMBER)
        self.member_ids.remove(user_id)
        self.updated_at = datetime.now(UTC)
        return Success(value=None)

    def lock(self) -> Result[None, str]:
        """Freeze membership so the team can register."""
        if self.status != TeamStatus.ACTIVE:
            return Failure(error=TeamError.NOT_ACTIVE)
        self.status = TeamStatus.LOCKED
        self.updated_at = datetime.now(UTC)
        return Success(value=None)

    def mark_eliminated(self) -> None:
        """Record elimination from round progression."""
        self.eliminated = True
        self.updated_at = datetime.now(UTC)
