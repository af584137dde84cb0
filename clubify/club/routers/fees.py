from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from clubify.core.access import CallerContext, require_club_role
from clubify.core.database import get_session
from clubify.core.dependencies import get_current_caller
from clubify.core.limits import limiter
from clubify.core.roles import Role
from clubify.club.crud.fees import create_fee, list_team_fees
from clubify.club.schemas.fees import (
    SubscriptionFeeCreate,
    SubscriptionFeeRead,
    SubscriptionFeeResponse,
    TeamFeeListResponse,
    TeamFeeRead,
)

router = APIRouter(prefix="/club/subscription-fees", tags=["Subscription Fees"])


@router.get("", response_model=TeamFeeListResponse)
@limiter.limit("60/minute")
async def get_subscription_fees(
    request: Request,
    club_id: int = Query(..., gt=0),
    caller: CallerContext = Depends(get_current_caller),
    db: AsyncSession = Depends(get_session),
):
    """Teams of the club with player counts and their most recent fee"""
    require_club_role(caller, club_id, Role.club_admin)

    teams = await list_team_fees(db, club_id)
    return {"teams": [TeamFeeRead.model_validate(team) for team in teams]}


@router.post(
    "", response_model=SubscriptionFeeResponse, status_code=status.HTTP_201_CREATED
)
@limiter.limit("20/minute")
async def create_subscription_fee(
    request: Request,
    fee_data: SubscriptionFeeCreate,
    caller: CallerContext = Depends(get_current_caller),
    db: AsyncSession = Depends(get_session),
):
    """
    Add a fee row for a team.

    Fees are append-only: to change a fee, add a row with a later
    effective_from.
    """
    require_club_role(caller, fee_data.club_id, Role.club_admin)

    fee = await create_fee(db, fee_data)
    return {"fee": SubscriptionFeeRead.model_validate(fee)}
