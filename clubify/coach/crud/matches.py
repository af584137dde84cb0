from typing import List, Optional, Sequence, Tuple
from sqlalchemy import select, delete, insert, update
from sqlalchemy.ext.asyncio import AsyncSession

from clubify.core.database import db_operation
from clubify.core.exceptions import NotFoundError
from clubify.club.models import Player
from clubify.coach.models import Match, MatchSquad, MatchStatistic, MatchStatus
from clubify.coach.schemas.matches import MatchCreate, PlayerStatEntry, SquadEntry

# Minutes credited to every squad player with recorded figures
FULL_MATCH_MINUTES = 90


@db_operation
async def get_match(session: AsyncSession, match_id: int) -> Match:
    result = await session.execute(select(Match).where(Match.id == match_id))
    match = result.scalar_one_or_none()
    if not match:
        raise NotFoundError("Match", str(match_id))
    return match


@db_operation
async def create_match(session: AsyncSession, match_data: MatchCreate) -> Match:
    match = Match(
        home_team_id=match_data.home_team_id,
        away_team_name=match_data.away_team_name,
        match_date=match_data.match_date,
        start_time=match_data.start_time,
        location=match_data.location,
        competition=match_data.competition or None,
        notes=match_data.notes or None,
        status=MatchStatus.scheduled.value,
    )
    session.add(match)
    await session.commit()
    await session.refresh(match)
    return match


@db_operation
async def list_matches(
    session: AsyncSession,
    team_ids: Optional[Sequence[int]] = None,
    team_id: Optional[int] = None,
    status: Optional[str] = None,
) -> List[Match]:
    """Newest first; team_ids=None means any team"""
    query = select(Match)
    if team_ids is not None:
        if not team_ids:
            return []
        query = query.where(Match.home_team_id.in_(team_ids))
    if team_id:
        query = query.where(Match.home_team_id == team_id)
    if status:
        query = query.where(Match.status == status)

    result = await session.execute(
        query.order_by(Match.match_date.desc(), Match.start_time.desc(), Match.id)
    )
    return list(result.scalars().all())


@db_operation
async def load_squad(
    session: AsyncSession, match_id: int
) -> List[Tuple[MatchSquad, Player]]:
    """Starters first, then by jersey number (unnumbered last)"""
    result = await session.execute(
        select(MatchSquad, Player)
        .join(Player, MatchSquad.player_id == Player.id)
        .where(MatchSquad.match_id == match_id)
        .order_by(
            MatchSquad.is_starting.desc(),
            MatchSquad.jersey_number.is_(None),
            MatchSquad.jersey_number,
            Player.last_name,
        )
    )
    return [(squad, player) for squad, player in result.all()]


@db_operation
async def replace_squad(
    session: AsyncSession, match_id: int, entries: Sequence[SquadEntry]
) -> int:
    """Swap the match squad for the given one; a repeated player keeps the last entry"""
    latest = {entry.player_id: entry for entry in entries}
    await session.execute(delete(MatchSquad).where(MatchSquad.match_id == match_id))
    if latest:
        await session.execute(
            insert(MatchSquad),
            [
                {
                    "match_id": match_id,
                    "player_id": entry.player_id,
                    "is_starting": entry.is_starting,
                    "jersey_number": entry.jersey_number,
                    "position": entry.position or None,
                    "notes": entry.notes or None,
                }
                for entry in latest.values()
            ],
        )
    await session.commit()
    return len(latest)


@db_operation
async def load_match_statistics(
    session: AsyncSession, match_id: int
) -> List[Tuple[MatchStatistic, Player]]:
    result = await session.execute(
        select(MatchStatistic, Player)
        .join(Player, MatchStatistic.player_id == Player.id)
        .where(MatchStatistic.match_id == match_id)
        .order_by(Player.last_name, Player.first_name, MatchStatistic.id)
    )
    return [(stat, player) for stat, player in result.all()]


@db_operation
async def save_match_results(
    session: AsyncSession,
    match: Match,
    home_score: int,
    away_score: int,
    entries: Sequence[PlayerStatEntry],
) -> int:
    """
    Record the final score, mark the match completed and replace every
    player's figures for it. Squad players with figures are credited a
    full match. One commit for all of it.
    """
    latest = {entry.player_id: entry for entry in entries}

    match.home_score = home_score
    match.away_score = away_score
    match.status = MatchStatus.completed.value

    await session.execute(
        delete(MatchStatistic).where(MatchStatistic.match_id == match.id)
    )
    if latest:
        await session.execute(
            insert(MatchStatistic),
            [
                {
                    "match_id": match.id,
                    "player_id": entry.player_id,
                    "goals": entry.goals,
                    "assists": entry.assists,
                    "yellow_cards": entry.yellow_cards,
                    "red_cards": entry.red_cards,
                    "saves": entry.saves,
                    "shots_on_target": entry.shots_on_target,
                    "passes_completed": entry.passes_completed,
                    "rating": entry.rating,
                    "notes": entry.notes or None,
                }
                for entry in latest.values()
            ],
        )
        await session.execute(
            update(MatchSquad)
            .where(
                MatchSquad.match_id == match.id,
                MatchSquad.player_id.in_(list(latest)),
            )
            .values(minutes_played=FULL_MATCH_MINUTES)
            .execution_options(synchronize_session=False)
        )

    await session.commit()
    await session.refresh(match)
    return len(latest)


@db_operation
async def load_player_match_statistics(
    session: AsyncSession, player_id: int
) -> List[Tuple[MatchStatistic, Match]]:
    """(figures, match), newest match first"""
    result = await session.execute(
        select(MatchStatistic, Match)
        .join(Match, MatchStatistic.match_id == Match.id)
        .where(MatchStatistic.player_id == player_id)
        .order_by(Match.match_date.desc(), Match.start_time.desc(), Match.id.desc())
    )
    return [(stat, match) for stat, match in result.all()]


@db_operation
async def load_player_squad_entries(
    session: AsyncSession, player_id: int
) -> List[Tuple[Optional[int], str]]:
    """(minutes_played, match status) for every squad the player was named in"""
    result = await session.execute(
        select(MatchSquad.minutes_played, Match.status)
        .join(Match, MatchSquad.match_id == Match.id)
        .where(MatchSquad.player_id == player_id)
    )
    return [(minutes, status) for minutes, status in result.all()]
