from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence, Tuple
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from clubify.core.database import db_operation, dialect_insert
from clubify.core.exceptions import ValidationError
from clubify.club.models import Player, Team, TeamPlayer
from clubify.coach.models import Attendance, TrainingSession
from clubify.coach.schemas.attendance import AttendanceEntry


@db_operation
async def load_team_roster(
    session: AsyncSession, team_ids: Sequence[int]
) -> List[Player]:
    """Players with an active assignment to any of the teams"""
    if not team_ids:
        return []
    result = await session.execute(
        select(Player)
        .join(TeamPlayer, TeamPlayer.player_id == Player.id)
        .where(TeamPlayer.team_id.in_(team_ids), TeamPlayer.left_at.is_(None))
        .order_by(Player.last_name, Player.first_name, Player.id)
    )
    return list(result.scalars().unique().all())


async def ensure_players_on_team(
    session: AsyncSession, team_id: int, player_ids: Iterable[int]
):
    """Reject players without an active assignment to the team"""
    roster_ids = {player.id for player in await load_team_roster(session, [team_id])}
    unknown = sorted(set(player_ids) - roster_ids)
    if unknown:
        raise ValidationError(
            "Players are not on this team", {"player_ids": unknown}
        )


@db_operation
async def load_session_attendance(
    session: AsyncSession, training_session_id: int
) -> Dict[int, Attendance]:
    result = await session.execute(
        select(Attendance).where(
            Attendance.training_session_id == training_session_id
        )
    )
    return {record.player_id: record for record in result.scalars().all()}


@db_operation
async def upsert_attendance(
    session: AsyncSession,
    training_session_id: int,
    entries: Sequence[AttendanceEntry],
) -> int:
    """
    Save attendance marks for a session, replacing earlier marks of the
    same players. Entries without a status are skipped; when a player is
    listed more than once the last entry wins.
    """
    latest = {entry.player_id: entry for entry in entries if entry.status}
    rows = [
        {
            "training_session_id": training_session_id,
            "player_id": entry.player_id,
            "status": entry.status.value,
            "arrival_time": entry.arrival_time,
            "notes": entry.notes or None,
        }
        for entry in latest.values()
    ]
    if not rows:
        return 0

    stmt = dialect_insert(session, Attendance).values(rows)
    stmt = stmt.on_conflict_do_update(
        index_elements=["training_session_id", "player_id"],
        set_={
            "status": stmt.excluded.status,
            "arrival_time": stmt.excluded.arrival_time,
            "notes": stmt.excluded.notes,
            "updated_at": func.now(),
        },
    )
    await session.execute(stmt)
    await session.commit()
    return len(rows)


@db_operation
async def load_sessions_for_teams(
    session: AsyncSession,
    team_ids: Sequence[int],
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> List[int]:
    """Ids of the teams' sessions within the optional date range"""
    if not team_ids:
        return []
    query = select(TrainingSession.id).where(TrainingSession.team_id.in_(team_ids))
    if date_from:
        query = query.where(TrainingSession.session_date >= date_from)
    if date_to:
        query = query.where(TrainingSession.session_date <= date_to)

    result = await session.execute(query)
    return list(result.scalars().all())


@db_operation
async def load_attendance_with_players(
    session: AsyncSession, training_session_ids: Sequence[int]
) -> List[Tuple[Attendance, Player]]:
    if not training_session_ids:
        return []
    result = await session.execute(
        select(Attendance, Player)
        .join(Player, Attendance.player_id == Player.id)
        .where(Attendance.training_session_id.in_(training_session_ids))
        .order_by(Attendance.id)
    )
    return [(attendance, player) for attendance, player in result.all()]


@db_operation
async def count_active_assignments(
    session: AsyncSession, team_ids: Sequence[int]
) -> int:
    if not team_ids:
        return 0
    result = await session.execute(
        select(func.count(TeamPlayer.id)).where(
            TeamPlayer.team_id.in_(team_ids), TeamPlayer.left_at.is_(None)
        )
    )
    return result.scalar_one()


@db_operation
async def load_player_attendance(
    session: AsyncSession, player_id: int
) -> List[Tuple[Attendance, date, str]]:
    """(attendance, session_date, team name), newest session first"""
    result = await session.execute(
        select(Attendance, TrainingSession.session_date, Team.name)
        .join(TrainingSession, Attendance.training_session_id == TrainingSession.id)
        .join(Team, TrainingSession.team_id == Team.id)
        .where(Attendance.player_id == player_id)
        .order_by(TrainingSession.session_date.desc(), TrainingSession.start_time.desc())
    )
    return [(attendance, session_date, name) for attendance, session_date, name in result.all()]
