import logging
from datetime import date
from typing import Any, Dict, List, Sequence
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from clubify.core.database import db_operation
from clubify.core.exceptions import ValidationError
from clubify.club.models import SubscriptionFee, Team, TeamPlayer
from clubify.club.schemas.fees import SubscriptionFeeCreate

logger = logging.getLogger(__name__)


@db_operation
async def load_fees(
    session: AsyncSession, team_ids: Sequence[int], on_or_before: date = None
) -> List[SubscriptionFee]:
    """
    Fee rows of the teams, newest effective_from first.

    Rows sharing an effective_from come newest-created first, so the first
    row seen per team is the one in force.
    """
    if not team_ids:
        return []

    query = select(SubscriptionFee).where(SubscriptionFee.team_id.in_(team_ids))
    if on_or_before is not None:
        query = query.where(SubscriptionFee.effective_from <= on_or_before)

    result = await session.execute(
        query.order_by(
            SubscriptionFee.effective_from.desc(), SubscriptionFee.id.desc()
        )
    )
    return list(result.scalars().all())


def latest_fee_per_team(fees: Sequence[SubscriptionFee]) -> Dict[int, SubscriptionFee]:
    """Keep the first row per team of an already ordered fee list"""
    fee_map = {}
    for fee in fees:
        if fee.team_id not in fee_map:
            fee_map[fee.team_id] = fee
    return fee_map


@db_operation
async def list_team_fees(session: AsyncSession, club_id: int) -> List[Dict[str, Any]]:
    """
    Teams of a club with their active player count and most recent fee.

    The fee shown may be future-dated: it is the latest row regardless of
    today's date.
    """
    teams_result = await session.execute(
        select(Team).where(Team.club_id == club_id).order_by(Team.name)
    )
    teams = teams_result.scalars().all()
    team_ids = [team.id for team in teams]
    if not team_ids:
        return []

    counts_result = await session.execute(
        select(TeamPlayer.team_id, func.count(TeamPlayer.id))
        .where(TeamPlayer.team_id.in_(team_ids), TeamPlayer.left_at.is_(None))
        .group_by(TeamPlayer.team_id)
    )
    player_counts = dict(counts_result.all())

    fee_map = latest_fee_per_team(await load_fees(session, team_ids))

    return [
        {
            "id": team.id,
            "name": team.name,
            "age_group": team.age_group,
            "player_count": player_counts.get(team.id, 0),
            "subscription_fee": fee_map.get(team.id),
        }
        for team in teams
    ]


@db_operation
async def create_fee(
    session: AsyncSession, fee_data: SubscriptionFeeCreate
) -> SubscriptionFee:
    """Append a fee row; a newer effective_from supersedes older rows"""
    result = await session.execute(
        select(Team.club_id).where(Team.id == fee_data.team_id)
    )
    team_club_id = result.scalar_one_or_none()
    if team_club_id is None or team_club_id != fee_data.club_id:
        raise ValidationError("Team does not belong to this club")

    fee = SubscriptionFee(
        team_id=fee_data.team_id,
        amount=fee_data.amount,
        currency=fee_data.currency,
        effective_from=fee_data.effective_from,
        notes=fee_data.notes,
    )
    session.add(fee)
    await session.commit()
    await session.refresh(fee)

    logger.info(
        f"Subscription fee {fee.id} created for team {fee.team_id}",
        extra={
            "team_id": fee.team_id,
            "amount": str(fee.amount),
            "effective_from": fee.effective_from.isoformat(),
        },
    )
    return fee
