from datetime import date
from typing import Any, Dict, List, Optional, Sequence
from sqlalchemy import select, delete, insert
from sqlalchemy.ext.asyncio import AsyncSession

from clubify.core.database import db_operation
from clubify.core.exceptions import NotFoundError
from clubify.coach.models import TrainingRecurrence, TrainingSession
from clubify.coach.schemas.training import (
    TrainingSessionCreate,
    TrainingSessionUpdate,
)


@db_operation
async def get_training_session(
    session: AsyncSession, session_id: int
) -> TrainingSession:
    result = await session.execute(
        select(TrainingSession).where(TrainingSession.id == session_id)
    )
    training = result.scalar_one_or_none()
    if not training:
        raise NotFoundError("Training session", str(session_id))
    return training


@db_operation
async def create_training_session(
    session: AsyncSession, session_data: TrainingSessionCreate
) -> TrainingSession:
    training = TrainingSession(
        team_id=session_data.team_id,
        session_date=session_data.session_date,
        start_time=session_data.start_time,
        duration_minutes=session_data.duration_minutes,
        location=session_data.location or None,
        notes=session_data.notes or None,
    )
    session.add(training)
    await session.commit()
    await session.refresh(training)
    return training


@db_operation
async def update_training_session(
    session: AsyncSession,
    training: TrainingSession,
    session_data: TrainingSessionUpdate,
) -> TrainingSession:
    update_data = session_data.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        if field in ("location", "notes"):
            value = value or None
        setattr(training, field, value)

    await session.commit()
    await session.refresh(training)
    return training


@db_operation
async def list_training_sessions(
    session: AsyncSession,
    team_ids: Optional[Sequence[int]] = None,
    team_id: Optional[int] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> List[TrainingSession]:
    """Sessions ordered by date and time; team_ids=None means any team"""
    query = select(TrainingSession)
    if team_ids is not None:
        if not team_ids:
            return []
        query = query.where(TrainingSession.team_id.in_(team_ids))
    if team_id:
        query = query.where(TrainingSession.team_id == team_id)
    if date_from:
        query = query.where(TrainingSession.session_date >= date_from)
    if date_to:
        query = query.where(TrainingSession.session_date <= date_to)

    result = await session.execute(
        query.order_by(TrainingSession.session_date, TrainingSession.start_time)
    )
    return list(result.scalars().all())


@db_operation
async def insert_recurrences(
    session: AsyncSession, rows: Sequence[Dict[str, Any]]
) -> List[TrainingRecurrence]:
    """Add recurrence rows in order and flush so their ids are known"""
    recurrences = [TrainingRecurrence(**row) for row in rows]
    session.add_all(recurrences)
    await session.flush()
    return recurrences


@db_operation
async def insert_sessions(
    session: AsyncSession, rows: Sequence[Dict[str, Any]]
) -> int:
    if not rows:
        return 0
    await session.execute(insert(TrainingSession), list(rows))
    return len(rows)


@db_operation
async def get_recurrence(
    session: AsyncSession, recurrence_id: int
) -> Optional[TrainingRecurrence]:
    result = await session.execute(
        select(TrainingRecurrence).where(TrainingRecurrence.id == recurrence_id)
    )
    return result.scalar_one_or_none()


@db_operation
async def find_pattern_recurrence_ids(
    session: AsyncSession, recurrence: TrainingRecurrence
) -> List[int]:
    """
    Ids of every recurrence row belonging to the same weekly pattern.

    Rows created together share pattern_id. Rows without one are grouped
    by team, start time, duration and location (NULL matches NULL).
    """
    if recurrence.pattern_id:
        query = select(TrainingRecurrence.id).where(
            TrainingRecurrence.pattern_id == recurrence.pattern_id
        )
    else:
        query = select(TrainingRecurrence.id).where(
            TrainingRecurrence.pattern_id.is_(None),
            TrainingRecurrence.team_id == recurrence.team_id,
            TrainingRecurrence.start_time == recurrence.start_time,
            TrainingRecurrence.duration_minutes == recurrence.duration_minutes,
        )
        if recurrence.location is None:
            query = query.where(TrainingRecurrence.location.is_(None))
        else:
            query = query.where(TrainingRecurrence.location == recurrence.location)

    result = await session.execute(query.order_by(TrainingRecurrence.id))
    return list(result.scalars().all())


@db_operation
async def delete_sessions(
    session: AsyncSession, recurrence_ids: Sequence[int], from_date: date
) -> int:
    """Delete sessions of the given recurrences dated on or after from_date"""
    if not recurrence_ids:
        return 0
    result = await session.execute(
        delete(TrainingSession).where(
            TrainingSession.recurrence_id.in_(recurrence_ids),
            TrainingSession.session_date >= from_date,
        )
    )
    return result.rowcount


@db_operation
async def delete_session(session: AsyncSession, session_id: int) -> int:
    result = await session.execute(
        delete(TrainingSession).where(TrainingSession.id == session_id)
    )
    return result.rowcount


@db_operation
async def delete_recurrences(
    session: AsyncSession, recurrence_ids: Sequence[int]
) -> int:
    if not recurrence_ids:
        return 0
    result = await session.execute(
        delete(TrainingRecurrence).where(TrainingRecurrence.id.in_(recurrence_ids))
    )
    return result.rowcount
