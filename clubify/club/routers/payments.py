from typing import Optional, Literal
from fastapi import APIRouter, Depends, Query, Request, Path
from sqlalchemy.ext.asyncio import AsyncSession

from clubify.core.access import CallerContext, require_club_role
from clubify.core.database import get_session
from clubify.core.dates import local_today
from clubify.core.dependencies import get_current_caller
from clubify.core.limits import limiter
from clubify.core.roles import Role
from clubify.club.crud.payments import (
    get_payment_record,
    list_payment_records,
    record_payment,
)
from clubify.club.schemas.payments import (
    GeneratePaymentsRequest,
    GenerationSummary,
    PaymentListResponse,
    PaymentRecordDetail,
    PaymentRecordRead,
    PaymentResponse,
    PaymentUpdate,
)
from clubify.club.services.payment_generator import PaymentGenerator

router = APIRouter(prefix="/club/payments", tags=["Payments"])


@router.post("/generate", response_model=GenerationSummary)
@limiter.limit("10/minute")
async def generate_payments(
    request: Request,
    payload: GeneratePaymentsRequest,
    caller: CallerContext = Depends(get_current_caller),
    db: AsyncSession = Depends(get_session),
):
    """
    Generate monthly payment records for every active player of the club.

    Idempotent: existing records for the period are counted as skipped.
    """
    require_club_role(caller, payload.club_id, Role.club_admin)

    generator = PaymentGenerator(db)
    return await generator.generate(payload.club_id, payload.month, payload.year)


@router.get("", response_model=PaymentListResponse)
@limiter.limit("60/minute")
async def get_payments(
    request: Request,
    club_id: int = Query(..., gt=0),
    month: int = Query(..., ge=1, le=12),
    year: int = Query(..., ge=1),
    team_id: Optional[int] = Query(None, gt=0),
    status: Optional[Literal["unpaid", "partial", "paid", "overdue"]] = Query(None),
    caller: CallerContext = Depends(get_current_caller),
    db: AsyncSession = Depends(get_session),
):
    """
    Payment records of a club for one period; unpaid past due read as overdue.

    The status filter matches the stored status before that switch, so
    status=unpaid can return records reported as overdue.
    """
    require_club_role(caller, club_id, Role.club_admin)

    records = await list_payment_records(
        db,
        club_id,
        month,
        year,
        today=local_today(),
        team_id=team_id,
        status=status,
    )
    return {"records": [PaymentRecordDetail.model_validate(r) for r in records]}


@router.patch("/{payment_id}", response_model=PaymentResponse)
@limiter.limit("30/minute")
async def update_payment(
    request: Request,
    payment_data: PaymentUpdate,
    payment_id: int = Path(..., gt=0),
    caller: CallerContext = Depends(get_current_caller),
    db: AsyncSession = Depends(get_session),
):
    """Record a payment (amount, method, date) against a payment record"""
    record = await get_payment_record(db, payment_id)
    require_club_role(caller, record.team.club_id, Role.club_admin)

    updated = await record_payment(db, record, payment_data)
    return {"payment": PaymentRecordRead.model_validate(updated)}
