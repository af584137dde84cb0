from datetime import date
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
from clubify.core.exceptions import ValidationError
from clubify.core.limits import limiter
from clubify.core.roles import Role
from clubify.coach.crud.training import (
    create_training_session,
    get_training_session,
    list_training_sessions,
    update_training_session,
)
from clubify.coach.schemas.training import (
    DeleteMode,
    DeleteSessionResponse,
    RecurringTrainingCreate,
    RecurringTrainingResponse,
    TrainingSessionCreate,
    TrainingSessionListResponse,
    TrainingSessionRead,
    TrainingSessionResponse,
    TrainingSessionUpdate,
)
from clubify.coach.services.recurrence_expander import RecurringSessionExpander

router = APIRouter(prefix="/coach/training", tags=["Training"])


@router.post(
    "", response_model=TrainingSessionResponse, status_code=status.HTTP_201_CREATED
)
@limiter.limit("30/minute")
async def create_session(
    request: Request,
    session_data: TrainingSessionCreate,
    caller: CallerContext = Depends(get_current_caller),
    db: AsyncSession = Depends(get_session),
):
    """Create a one-off training session"""
    require_minimum_role(caller, Role.coach)
    await ensure_team_access(db, caller, session_data.team_id)

    training = await create_training_session(db, session_data)
    return {"session": TrainingSessionRead.model_validate(training)}


@router.get("", response_model=TrainingSessionListResponse)
@limiter.limit("60/minute")
async def get_sessions(
    request: Request,
    team_id: Optional[int] = Query(None, gt=0),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    caller: CallerContext = Depends(get_current_caller),
    db: AsyncSession = Depends(get_session),
):
    """Training sessions of the teams the caller manages"""
    require_minimum_role(caller, Role.coach)
    if date_from and date_to and date_from > date_to:
        raise ValidationError("date_from must not be after date_to")

    team_ids = await accessible_team_ids(db, caller)
    sessions = await list_training_sessions(
        db, team_ids=team_ids, team_id=team_id, date_from=date_from, date_to=date_to
    )
    return {"sessions": [TrainingSessionRead.model_validate(s) for s in sessions]}


@router.post(
    "/recurring",
    response_model=RecurringTrainingResponse,
    status_code=status.HTTP_201_CREATED,
)
@limiter.limit("10/minute")
async def create_recurring_sessions(
    request: Request,
    pattern: RecurringTrainingCreate,
    caller: CallerContext = Depends(get_current_caller),
    db: AsyncSession = Depends(get_session),
):
    """
    Create a weekly training pattern and generate its sessions from today
    through generate_until.
    """
    require_minimum_role(caller, Role.coach)
    await ensure_team_access(db, caller, pattern.team_id)

    expander = RecurringSessionExpander(db)
    result = await expander.expand(
        team_id=pattern.team_id,
        days_of_week=pattern.days_of_week,
        start_time=pattern.start_time,
        duration_minutes=pattern.duration_minutes,
        location=pattern.location,
        notes=pattern.notes,
        generate_until=pattern.generate_until,
    )
    return RecurringTrainingResponse(
        pattern_id=result.pattern_id,
        patterns_created=len(result.recurrence_ids),
        sessions_generated=len(result.sessions),
        recurrence_ids=result.recurrence_ids,
    )


@router.patch("/{session_id}", response_model=TrainingSessionResponse)
@limiter.limit("30/minute")
async def update_session(
    request: Request,
    session_data: TrainingSessionUpdate,
    session_id: int = Path(..., gt=0),
    caller: CallerContext = Depends(get_current_caller),
    db: AsyncSession = Depends(get_session),
):
    """Update date, time, duration, location, notes or team of a session"""
    require_minimum_role(caller, Role.coach)
    training = await get_training_session(db, session_id)
    await ensure_team_access(db, caller, training.team_id)
    if session_data.team_id and session_data.team_id != training.team_id:
        await ensure_team_access(db, caller, session_data.team_id)

    training = await update_training_session(db, training, session_data)
    return {"session": TrainingSessionRead.model_validate(training)}


@router.delete("/{session_id}", response_model=DeleteSessionResponse)
@limiter.limit("30/minute")
async def delete_session(
    request: Request,
    session_id: int = Path(..., gt=0),
    delete_mode: DeleteMode = Query("single"),
    caller: CallerContext = Depends(get_current_caller),
    db: AsyncSession = Depends(get_session),
):
    """
    Delete a session, or with delete_mode=all_future the whole weekly
    pattern it belongs to from this session's date on.
    """
    require_minimum_role(caller, Role.coach)
    training = await get_training_session(db, session_id)
    await ensure_team_access(db, caller, training.team_id)

    expander = RecurringSessionExpander(db)
    result = await expander.delete_training_session(training, delete_mode)
    return DeleteSessionResponse(
        message=result.message,
        sessions_deleted=result.sessions_deleted,
        recurrences_deleted=result.recurrences_deleted,
    )
