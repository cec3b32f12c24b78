"""TeamRepository protocol (port)."""

from collections.abc import Sequence
from typing import Protocol
from uuid import UUID

from src.domain.entities.team import Team
from src.domain.enums import TeamStatus


class TeamRepository(Protocol):
    """Team persistence port.

    ``add`` and ``save_if_unchanged`` are atomic with respect to every other
    team write of the same event, so one user never ends up in two live
    teams of one event.
    """

    async def find_by_id(self, team_id: UUID) -> Team | None:
        """Find team by ID."""
        ...

    async def find_by_invite_code(self, invite_code: str) -> Team | None:
        """Find team by its (upper-case) invite code."""
        ...

    async def find_for_user(self, event_id: UUID, user_id: UUID) -> Team | None:
        """Find the non-disbanded team of ``event_id`` that ``user_id`` is on."""
        ...

    async def save(self, team: Team) -> None:
        """Create or update a team."""
        ...

    async def add(self, team: Team) -> bool:
        """Insert a new team.

        Returns:
            False when the leader already belongs to a non-disbanded team of
            the same event; nothing is written then.
        """
        ...

    async def save_if_unchanged(
        self,
        team: Team,
        *,
        expected_status: TeamStatus,
        expected_member_ids: Sequence[UUID],
    ) -> bool:
        """Compare-and-set on status and membership.

        Writes ``team`` only when the stored team still has
        ``expected_status`` and ``expected_member_ids``, and no member the
        write adds belongs to another non-disbanded team of the event.

        Returns:
            True if written.
        """
        ...
