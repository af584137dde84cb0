from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Query, Request, Path
from sqlalchemy.ext.asyncio import AsyncSession

from clubify.core.access import (
    CallerContext,
    accessible_team_ids,
    ensure_team_access,
    require_minimum_role,
)
from clubify.core.database import get_session
from clubify.core.dependencies import get_current_caller
from clubify.core.exceptions import ValidationError
from clubify.core.limits import limiter
from clubify.core.logging_utils import log_business_event
from clubify.core.roles import Role
from clubify.club.crud.teams import get_team_by_id
from clubify.coach.crud.attendance import (
    ensure_players_on_team,
    load_session_attendance,
    load_team_roster,
    upsert_attendance,
)
from clubify.coach.crud.training import get_training_session
from clubify.coach.schemas.attendance import (
    AttendanceSave,
    AttendanceSaveResponse,
    AttendanceStatisticsResponse,
    PlayerAttendanceRow,
    SessionAttendanceResponse,
    SessionInfo,
)
from clubify.coach.services.attendance_stats import AttendanceStatistics

router = APIRouter(prefix="/coach", tags=["Attendance"])


@router.get(
    "/training/{session_id}/attendance", response_model=SessionAttendanceResponse
)
@limiter.limit("60/minute")
async def get_session_attendance(
    request: Request,
    session_id: int = Path(..., gt=0),
    caller: CallerContext = Depends(get_current_caller),
    db: AsyncSession = Depends(get_session),
):
    """Team roster of the session with each player's mark, if any"""
    training = await get_training_session(db, session_id)
    await ensure_team_access(db, caller, training.team_id)

    team = await get_team_by_id(db, training.team_id)
    roster = await load_team_roster(db, [training.team_id])
    marks = await load_session_attendance(db, training.id)

    rows = []
    for player in roster:
        mark = marks.get(player.id)
        rows.append(
            PlayerAttendanceRow(
                player_id=player.id,
                first_name=player.first_name,
                last_name=player.last_name,
                jersey_number=player.jersey_number,
                status=mark.status if mark else None,
                arrival_time=mark.arrival_time if mark else None,
                notes=mark.notes if mark else None,
            )
        )

    return SessionAttendanceResponse(
        session=SessionInfo(
            id=training.id,
            team_id=team.id,
            team_name=team.name,
            session_date=training.session_date,
            start_time=training.start_time,
        ),
        attendance=rows,
    )


@router.post(
    "/training/{session_id}/attendance", response_model=AttendanceSaveResponse
)
@limiter.limit("30/minute")
async def save_session_attendance(
    request: Request,
    payload: AttendanceSave,
    session_id: int = Path(..., gt=0),
    caller: CallerContext = Depends(get_current_caller),
    db: AsyncSession = Depends(get_session),
):
    """Save marks for a session; players sent without a status are skipped"""
    training = await get_training_session(db, session_id)
    await ensure_team_access(db, caller, training.team_id)

    await ensure_players_on_team(
        db, training.team_id, (entry.player_id for entry in payload.attendance)
    )

    saved = await upsert_attendance(db, training.id, payload.attendance)

    log_business_event(
        "attendance_saved",
        "training_session",
        training.id,
        {"records_saved": saved, "saved_by": caller.user_id},
    )
    return AttendanceSaveResponse(records_saved=saved)


@router.get("/attendance/statistics", response_model=AttendanceStatisticsResponse)
@limiter.limit("30/minute")
async def get_attendance_statistics(
    request: Request,
    team_id: Optional[int] = Query(None, gt=0),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    caller: CallerContext = Depends(get_current_caller),
    db: AsyncSession = Depends(get_session),
):
    """Per-player attendance over the teams the caller manages"""
    require_minimum_role(caller, Role.coach)
    if date_from and date_to and date_from > date_to:
        raise ValidationError("date_from must not be after date_to")

    team_ids = await accessible_team_ids(db, caller)
    stats = AttendanceStatistics(db)
    return await stats.team_statistics(
        team_ids, team_id=team_id, date_from=date_from, date_to=date_to
    )
