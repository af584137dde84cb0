from fastapi import APIRouter, Depends, Request, Path
from sqlalchemy.ext.asyncio import AsyncSession

from clubify.core.access import AccessEvaluator, CallerContext
from clubify.core.database import get_session
from clubify.core.dependencies import get_current_caller
from clubify.core.exceptions import AuthorizationError
from clubify.core.limits import limiter
from clubify.core.roles import Role
from clubify.club.crud.players import get_player_by_id
from clubify.coach.schemas.attendance import PlayerTrainingAttendanceResponse
from clubify.coach.schemas.matches import PlayerMatchStatisticsResponse
from clubify.coach.services.attendance_stats import AttendanceStatistics
from clubify.coach.services.match_stats import MatchStatistics

router = APIRouter(prefix="/players", tags=["Players"])


@router.get(
    "/{player_id}/training-attendance",
    response_model=PlayerTrainingAttendanceResponse,
)
@limiter.limit("60/minute")
async def get_player_training_attendance(
    request: Request,
    player_id: int = Path(..., gt=0),
    caller: CallerContext = Depends(get_current_caller),
    db: AsyncSession = Depends(get_session),
):
    """
    Attendance summaries for one player over the last 30 days, the last
    90 days and all time, plus the ten most recent marks.

    Open to parents, coaches and club admins of the player's club.
    """
    player = await get_player_by_id(db, player_id)
    if not AccessEvaluator.has_minimum_role(
        caller.grants, Role.parent, club_id=player.club_id
    ):
        raise AuthorizationError()

    stats = AttendanceStatistics(db)
    return await stats.player_training_attendance(player.id)


@router.get(
    "/{player_id}/match-statistics",
    response_model=PlayerMatchStatisticsResponse,
)
@limiter.limit("60/minute")
async def get_player_match_statistics(
    request: Request,
    player_id: int = Path(..., gt=0),
    caller: CallerContext = Depends(get_current_caller),
    db: AsyncSession = Depends(get_session),
):
    """Goals, assists, cards, ratings and minutes for one player"""
    player = await get_player_by_id(db, player_id)
    if not AccessEvaluator.has_minimum_role(
        caller.grants, Role.parent, club_id=player.club_id
    ):
        raise AuthorizationError()

    stats = MatchStatistics(db)
    return await stats.player_match_statistics(player.id)
