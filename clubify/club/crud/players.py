from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from clubify.core.database import db_operation
from clubify.core.exceptions import NotFoundError
from clubify.club.models import Player


@db_operation
async def get_player_by_id(session: AsyncSession, player_id: int) -> Player:
    result = await session.execute(select(Player).where(Player.id == player_id))
    player = result.scalar_one_or_none()
    if not player:
        raise NotFoundError("Player", str(player_id))
    return player
