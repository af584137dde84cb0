import logging
from datetime import date
from typing import Any, Dict, List, Optional, Sequence
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy.orm.attributes import set_committed_value

from clubify.core.database import db_operation, dialect_insert
from clubify.core.exceptions import NotFoundError
from clubify.core.logging_utils import log_business_event
from clubify.club.models import PaymentRecord, PaymentStatus, Player, Team
from clubify.club.schemas.payments import PaymentUpdate
from clubify.club.services.payment_status import is_overdue, status_for_amount

logger = logging.getLogger(__name__)


@db_operation
async def upsert_payment_records(
    session: AsyncSession, rows: Sequence[Dict[str, Any]]
) -> List[int]:
    """
    Insert payment rows, silently skipping any (player, month, year) that
    already exists. Returns the ids of the rows actually inserted.
    """
    if not rows:
        return []

    stmt = (
        dialect_insert(session, PaymentRecord)
        .values(list(rows))
        .on_conflict_do_nothing(
            index_elements=["player_id", "period_month", "period_year"]
        )
        .returning(PaymentRecord.id)
    )
    result = await session.execute(stmt)
    inserted_ids = list(result.scalars().all())
    await session.commit()
    return inserted_ids


@db_operation
async def list_payment_records(
    session: AsyncSession,
    club_id: int,
    month: int,
    year: int,
    today: date,
    team_id: Optional[int] = None,
    status: Optional[str] = None,
) -> List[PaymentRecord]:
    """
    Payment records of a club's teams for one period, ordered by player
    last name.

    Unpaid records past their due date are switched to overdue, both in
    the returned objects and in the database (one UPDATE for all of them).
    The status filter applies to the stored status, before that switch.
    """
    query = (
        select(PaymentRecord)
        .join(Team, PaymentRecord.team_id == Team.id)
        .join(Player, PaymentRecord.player_id == Player.id)
        .options(selectinload(PaymentRecord.player), selectinload(PaymentRecord.team))
        .where(
            Team.club_id == club_id,
            PaymentRecord.period_month == month,
            PaymentRecord.period_year == year,
        )
        .order_by(Player.last_name, Player.first_name, PaymentRecord.id)
    )
    if team_id:
        query = query.where(PaymentRecord.team_id == team_id)
    if status:
        query = query.where(PaymentRecord.status == status)

    result = await session.execute(query)
    records = list(result.scalars().all())

    overdue_ids = [r.id for r in records if is_overdue(r.status, r.due_date, today)]
    if overdue_ids:
        await session.execute(
            update(PaymentRecord)
            .where(PaymentRecord.id.in_(overdue_ids))
            .values(status=PaymentStatus.overdue.value)
            .execution_options(synchronize_session=False)
        )
        await session.commit()

        for record in records:
            if record.id in overdue_ids:
                set_committed_value(record, "status", PaymentStatus.overdue.value)

        logger.info(
            f"Marked {len(overdue_ids)} payment records overdue",
            extra={"club_id": club_id, "month": month, "year": year},
        )

    return records


@db_operation
async def get_payment_record(session: AsyncSession, payment_id: int) -> PaymentRecord:
    result = await session.execute(
        select(PaymentRecord)
        .options(selectinload(PaymentRecord.team))
        .where(PaymentRecord.id == payment_id)
    )
    record = result.scalar_one_or_none()
    if not record:
        raise NotFoundError("Payment record", str(payment_id))
    return record


@db_operation
async def record_payment(
    session: AsyncSession, record: PaymentRecord, payment_data: PaymentUpdate
) -> PaymentRecord:
    """Apply a payment; status follows amount_paid against amount_due"""
    new_status = status_for_amount(payment_data.amount_paid, record.amount_due)

    record.amount_paid = payment_data.amount_paid
    record.status = new_status.value
    record.paid_date = payment_data.paid_date
    record.payment_method = payment_data.payment_method
    record.transaction_reference = payment_data.transaction_reference or None
    record.notes = payment_data.notes or None

    await session.commit()
    await session.refresh(record)

    log_business_event(
        "payment_recorded",
        "payment_record",
        record.id,
        {
            "amount_paid": str(record.amount_paid),
            "amount_due": str(record.amount_due),
            "status": record.status,
        },
    )
    return record
