from typing import List, Sequence, Tuple
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from clubify.core.database import db_operation
from clubify.core.exceptions import NotFoundError
from clubify.club.models import Team, TeamPlayer


@db_operation
async def load_teams(session: AsyncSession, club_id: int) -> List[Team]:
    result = await session.execute(
        select(Team).where(Team.club_id == club_id).order_by(Team.name, Team.id)
    )
    return list(result.scalars().all())


@db_operation
async def load_active_assignments(
    session: AsyncSession, team_ids: Sequence[int]
) -> List[Tuple[int, int]]:
    """(team_id, player_id) for every assignment with no left_at"""
    if not team_ids:
        return []

    result = await session.execute(
        select(TeamPlayer.team_id, TeamPlayer.player_id)
        .where(TeamPlayer.team_id.in_(team_ids), TeamPlayer.left_at.is_(None))
        .order_by(TeamPlayer.id)
    )
    return [(team_id, player_id) for team_id, player_id in result.all()]


@db_operation
async def get_team_by_id(session: AsyncSession, team_id: int) -> Team:
    result = await session.execute(select(Team).where(Team.id == team_id))
    team = result.scalar_one_or_none()
    if not team:
        raise NotFoundError("Team", str(team_id))
    return team
