from typing import List
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from clubify.core.database import db_operation
from clubify.core.roles import Grant
from clubify.club.models import User, UserRole


@db_operation
async def get_user_by_id(session: AsyncSession, user_id: int):
    result = await session.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


@db_operation
async def load_grants(session: AsyncSession, user_id: int) -> List[Grant]:
    """Caller's user_roles rows as grants; unknown role names are skipped"""
    result = await session.execute(
        select(UserRole.role, UserRole.club_id)
        .where(UserRole.user_id == user_id)
        .order_by(UserRole.id)
    )
    grants = []
    for role, club_id in result.all():
        grant = Grant.from_row(role, club_id)
        if grant is not None:
            grants.append(grant)
    return grants
