from typing import Optional
from fastapi import APIRouter, Depends, Query, Request, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from clubify.core.access import (
    CallerContext,
    accessible_team_ids,
    ensure_team_access,
    require_minimum_role,
)
from clubify.core.database import get_session
from clubify.core.dependencies import get_current_caller
from clubify.core.limits import limiter
from clubify.core.logging_utils import log_business_event
from clubify.core.roles import Role
from clubify.coach.crud.attendance import ensure_players_on_team
from clubify.coach.crud.matches import (
    create_match,
    get_match,
    list_matches,
    load_match_statistics,
    load_squad,
    replace_squad,
    save_match_results,
)
from clubify.coach.models import Match, MatchStatus
from clubify.coach.schemas.matches import (
    MatchCreate,
    MatchListResponse,
    MatchRead,
    MatchResponse,
    MatchResultSave,
    MatchResultSaveResponse,
    MatchResultsResponse,
    MatchStatisticRow,
    SquadResponse,
    SquadRow,
    SquadSave,
    SquadSaveResponse,
)

router = APIRouter(prefix="/coach/matches", tags=["Matches"])


async def _managed_match(
    db: AsyncSession, caller: CallerContext, match_id: int
) -> Match:
    require_minimum_role(caller, Role.coach)
    match = await get_match(db, match_id)
    await ensure_team_access(db, caller, match.home_team_id)
    return match


@router.post("", response_model=MatchResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
async def schedule_match(
    request: Request,
    match_data: MatchCreate,
    caller: CallerContext = Depends(get_current_caller),
    db: AsyncSession = Depends(get_session),
):
    """Schedule a match for one of the caller's teams"""
    require_minimum_role(caller, Role.coach)
    await ensure_team_access(db, caller, match_data.home_team_id)

    match = await create_match(db, match_data)
    log_business_event(
        "match_scheduled",
        "match",
        match.id,
        {"team_id": match.home_team_id, "scheduled_by": caller.user_id},
    )
    return {"match": MatchRead.model_validate(match)}


@router.get("", response_model=MatchListResponse)
@limiter.limit("60/minute")
async def get_matches(
    request: Request,
    team_id: Optional[int] = Query(None, gt=0),
    match_status: Optional[MatchStatus] = Query(None, alias="status"),
    caller: CallerContext = Depends(get_current_caller),
    db: AsyncSession = Depends(get_session),
):
    """Matches of the teams the caller manages, newest first"""
    require_minimum_role(caller, Role.coach)

    team_ids = await accessible_team_ids(db, caller)
    matches = await list_matches(
        db,
        team_ids=team_ids,
        team_id=team_id,
        status=match_status.value if match_status else None,
    )
    return {"matches": [MatchRead.model_validate(m) for m in matches]}


@router.get("/{match_id}/squad", response_model=SquadResponse)
@limiter.limit("60/minute")
async def get_match_squad(
    request: Request,
    match_id: int = Path(..., gt=0),
    caller: CallerContext = Depends(get_current_caller),
    db: AsyncSession = Depends(get_session),
):
    match = await _managed_match(db, caller, match_id)
    rows = await load_squad(db, match.id)
    return SquadResponse(
        squad=[
            SquadRow(
                player_id=player.id,
                first_name=player.first_name,
                last_name=player.last_name,
                is_starting=entry.is_starting,
                jersey_number=entry.jersey_number,
                position=entry.position,
                minutes_played=entry.minutes_played,
                notes=entry.notes,
            )
            for entry, player in rows
        ]
    )


@router.put("/{match_id}/squad", response_model=SquadSaveResponse)
@limiter.limit("30/minute")
async def save_match_squad(
    request: Request,
    payload: SquadSave,
    match_id: int = Path(..., gt=0),
    caller: CallerContext = Depends(get_current_caller),
    db: AsyncSession = Depends(get_session),
):
    """Replace the squad; every player must be on the match team"""
    match = await _managed_match(db, caller, match_id)
    await ensure_players_on_team(
        db, match.home_team_id, (entry.player_id for entry in payload.squad)
    )

    selected = await replace_squad(db, match.id, payload.squad)
    return SquadSaveResponse(players_selected=selected)


@router.get("/{match_id}/results", response_model=MatchResultsResponse)
@limiter.limit("60/minute")
async def get_match_results(
    request: Request,
    match_id: int = Path(..., gt=0),
    caller: CallerContext = Depends(get_current_caller),
    db: AsyncSession = Depends(get_session),
):
    match = await _managed_match(db, caller, match_id)
    rows = await load_match_statistics(db, match.id)
    return MatchResultsResponse(
        match=MatchRead.model_validate(match),
        statistics=[
            MatchStatisticRow(
                player_id=player.id,
                first_name=player.first_name,
                last_name=player.last_name,
                goals=stat.goals,
                assists=stat.assists,
                yellow_cards=stat.yellow_cards,
                red_cards=stat.red_cards,
                saves=stat.saves,
                shots_on_target=stat.shots_on_target,
                passes_completed=stat.passes_completed,
                rating=float(stat.rating) if stat.rating is not None else None,
                notes=stat.notes,
            )
            for stat, player in rows
        ],
    )


@router.post("/{match_id}/results", response_model=MatchResultSaveResponse)
@limiter.limit("30/minute")
async def save_results(
    request: Request,
    payload: MatchResultSave,
    match_id: int = Path(..., gt=0),
    caller: CallerContext = Depends(get_current_caller),
    db: AsyncSession = Depends(get_session),
):
    """
    Enter the final score and player figures. The match is marked
    completed and earlier figures for it are replaced.
    """
    match = await _managed_match(db, caller, match_id)
    await ensure_players_on_team(
        db, match.home_team_id, (entry.player_id for entry in payload.player_stats)
    )

    saved = await save_match_results(
        db, match, payload.home_score, payload.away_score, payload.player_stats
    )

    log_business_event(
        "match_results_saved",
        "match",
        match.id,
        {
            "score": f"{payload.home_score}-{payload.away_score}",
            "statistics_saved": saved,
            "saved_by": caller.user_id,
        },
    )
    return MatchResultSaveResponse(statistics_saved=saved)
