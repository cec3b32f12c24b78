"""TeamRepository - SQLAlchemy implementation.

Maps between domain Team entity and TeamModel. Member ids are stored as
strings in a JSON column, leader first.

``add`` and ``save_if_unchanged`` lock the event row first, the same lock
the registration writes take, so membership checks across the teams of
one event never interleave.
"""

from collections.abc import Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.domain.entities import Team
from src.domain.enums import TeamStatus
from src.infrastructure.persistence.database import SessionFactory
from src.infrastructure.persistence.models import TeamModel
from src.infrastructure.persistence.repositories.queries import lock_event


class TeamRepository:
    """SQLAlchemy implementation of TeamRepository protocol."""

    def __init__(self, session_factory: SessionFactory) -> None:
        self._session = session_factory

    async def find_by_id(self, team_id: UUID) -> Team | None:
        async with self._session() as session:
            model = await session.get(TeamModel, team_id)
            return _to_domain(model) if model is not None else None

    async def find_by_invite_code(self, invite_code: str) -> Team | None:
        async with self._session() as session:
            result = await session.execute(
                select(TeamModel).where(TeamModel.invite_code == invite_code)
            )
            model = result.scalars().first()
            return _to_domain(model) if model is not None else None

    async def find_for_user(self, event_id: UUID, user_id: UUID) -> Team | None:
        async with self._session() as session:
            model = await _team_of(session, event_id, user_id)
            return _to_domain(model) if model is not None else None

    async def save(self, team: Team) -> None:
        """Create or update a team."""
        async with self._session() as session:
            model = await session.get(TeamModel, team.id)
            if model is None:
                model = TeamModel(id=team.id, created_at=team.created_at)
                session.add(model)
            _apply(model, team)

    async def add(self, team: Team) -> bool:
        async with self._session() as session:
            await lock_event(session, team.event_id)
            if await _team_of(session, team.event_id, team.leader_id) is not None:
                return False
            model = TeamModel(id=team.id, created_at=team.created_at)
            _apply(model, team)
            session.add(model)
            await session.flush()
            return True

    async def save_if_unchanged(
        self,
        team: Team,
        *,
        expected_status: TeamStatus,
        expected_member_ids: Sequence[UUID],
    ) -> bool:
        async with self._session() as session:
            model = await session.get(TeamModel, team.id)
            if model is None:
                return False
            await lock_event(session, model.event_id)
            await session.refresh(model, with_for_update=True)

            stored_members = [UUID(member) for member in model.member_ids or []]
            if model.status != expected_status.value or stored_members != list(
                expected_member_ids
            ):
                return False
            for user_id in set(team.member_ids) - set(stored_members):
                other = await _team_of(session, model.event_id, user_id)
                if other is not None and other.id != team.id:
                    return False

            _apply(model, team)
            await session.flush()
            return True


async def _team_of(session: AsyncSession, event_id: UUID, user_id: UUID) -> TeamModel | None:
    """Non-disbanded team of the event listing ``user_id`` as a member."""
    result = await session.execute(
        select(TeamModel)
        .where(
            TeamModel.event_id == event_id,
            TeamModel.status != TeamStatus.DISBANDED.value,
        )
        .order_by(TeamModel.created_at, TeamModel.id)
    )
    member = str(user_id)
    for model in result.scalars().all():
        if member in (model.member_ids or []):
            return model
    return None


def _apply(model: TeamModel, team: Team) -> None:
    model.event_id = team.event_id
    model.name = team.name
    model.leader_id = team.leader_id
    model.max_size = team.max_size
    model.member_ids = [str(member) for member in team.member_ids]
    model.status = team.status.value
    model.invite_code = team.invite_code
    model.round = team.round
    model.eliminated = team.eliminated
    model.updated_at = team.updated_at


def _to_domain(model: TeamModel) -> Team:
    return Team(
        id=model.id,
        event_id=model.event_id,
        name=model.name,
        leader_id=model.leader_id,
        max_size=model.max_size,
        member_ids=[UUID(member) for member in model.member_ids or []],
        status=TeamStatus(model.status),
        invite_code=model.invite_code,
        round=model.round,
        eliminated=model.eliminated,
        created_at=model.created_at,
        updated_at=model.updated_at,
    )
