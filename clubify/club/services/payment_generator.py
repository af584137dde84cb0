import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, List, Protocol, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from clubify.core.config import MIN_BILLING_YEAR
from clubify.core.dates import payment_due_date, period_start
from clubify.core.exceptions import DatabaseError, ValidationError
from clubify.core.logging_utils import log_business_event
from clubify.club.crud.fees import latest_fee_per_team, load_fees
from clubify.club.crud.payments import upsert_payment_records
from clubify.club.crud.teams import load_active_assignments, load_teams
from clubify.club.models import PaymentStatus, SubscriptionFee
from clubify.club.schemas.payments import GenerationSummary

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BillingPeriod:
    month: int
    year: int


class DiscountResolver(Protocol):
    """Amount to subtract from a team's fee for one player and period"""

    async def resolve(
        self, player_id: int, team_id: int, fee: Decimal, period: BillingPeriod
    ) -> Decimal: ...


class NoDiscount:
    async def resolve(
        self, player_id: int, team_id: int, fee: Decimal, period: BillingPeriod
    ) -> Decimal:
        return Decimal("0")


class PaymentGenerator:
    """Creates one unpaid payment record per active player for a month"""

    def __init__(self, session: AsyncSession, discount_resolver: DiscountResolver = None):
        self.session = session
        self.discount_resolver = discount_resolver or NoDiscount()

    async def generate(self, club_id: int, month: int, year: int) -> GenerationSummary:
        """
        Generate the club's payment records for month/year.

        Safe to rerun: records that already exist for a player and period
        are left untouched and counted as skipped.

        Raises:
            ValidationError: bad period, club without teams or players
            DatabaseError: the insert failed
        """
        self._validate_period(month, year)
        period = BillingPeriod(month=month, year=year)

        teams = await load_teams(self.session, club_id)
        if not teams:
            raise ValidationError("No teams found for this club")
        team_names = {team.id: team.name for team in teams}
        team_ids = list(team_names)

        assignments = await load_active_assignments(self.session, team_ids)
        if not assignments:
            raise ValidationError("No active players found in this club")

        target_date = period_start(year, month)
        fee_map = latest_fee_per_team(
            await load_fees(self.session, team_ids, on_or_before=target_date)
        )

        rows, teams_without_fees = await self._build_rows(
            assignments, fee_map, team_names, period
        )

        try:
            inserted_ids = await upsert_payment_records(self.session, rows)
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(
                f"Payment generation failed for club {club_id} ({month}/{year}): {e}",
                extra={"club_id": club_id, "month": month, "year": year},
            )
            raise DatabaseError(
                "Failed to generate payment records",
                details={"store_message": str(getattr(e, "orig", None) or e)},
            )

        inserted = len(inserted_ids)
        skipped = len(rows) - inserted

        log_business_event(
            "payments_generated",
            "club",
            club_id,
            {
                "month": month,
                "year": year,
                "inserted": inserted,
                "skipped": skipped,
                "teams_without_fees": teams_without_fees,
            },
        )

        return GenerationSummary(
            inserted=inserted,
            skipped=skipped,
            teams_without_fees=teams_without_fees,
            message=f"Generated {inserted} payment records. Skipped {skipped} existing records.",
        )

    def _validate_period(self, month: int, year: int):
        if month < 1 or month > 12:
            raise ValidationError("Month must be between 1 and 12")
        if year < MIN_BILLING_YEAR:
            raise ValidationError(f"Year must be {MIN_BILLING_YEAR} or later")

    async def _build_rows(
        self,
        assignments: List[Tuple[int, int]],
        fee_map: Dict[int, SubscriptionFee],
        team_names: Dict[int, str],
        period: BillingPeriod,
    ) -> Tuple[List[dict], List[str]]:
        due_date = payment_due_date(period.year, period.month)
        rows = []
        missing_fee_team_ids = []

        for team_id, player_id in assignments:
            fee_row = fee_map.get(team_id)
            if fee_row is None:
                if team_id not in missing_fee_team_ids:
                    missing_fee_team_ids.append(team_id)
                continue

            fee = Decimal(fee_row.amount)
            discount = await self.discount_resolver.resolve(
                player_id, team_id, fee, period
            )
            rows.append(
                {
                    "player_id": player_id,
                    "team_id": team_id,
                    "period_month": period.month,
                    "period_year": period.year,
                    "amount_due": fee - discount,
                    "amount_paid": Decimal("0"),
                    "discount_applied": discount,
                    "status": PaymentStatus.unpaid.value,
                    "due_date": due_date,
                }
            )

        return rows, [team_names[team_id] for team_id in missing_fee_team_ids]
