from datetime import date
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, Field, ConfigDict

from clubify.club.models import PaymentStatus


class GeneratePaymentsRequest(BaseModel):
    """Monthly billing run for one club"""

    club_id: int = Field(..., gt=0)
    month: int = Field(..., description="1-12")
    year: int = Field(..., description="Billing year")


class GenerationSummary(BaseModel):
    inserted: int = 0
    skipped: int = 0
    teams_without_fees: List[str] = Field(default_factory=list)
    message: str = ""


class PaymentUpdate(BaseModel):
    """Record a payment against an existing record"""

    amount_paid: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    payment_method: str = Field(..., min_length=1, max_length=50)
    paid_date: date
    transaction_reference: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = Field(None, max_length=1000)

    model_config = ConfigDict(str_strip_whitespace=True)


class PlayerBrief(BaseModel):
    id: int
    first_name: str
    last_name: str
    jersey_number: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)


class TeamBrief(BaseModel):
    id: int
    name: str
    age_group: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class PaymentRecordRead(BaseModel):
    id: int
    player_id: int
    team_id: int
    period_month: int
    period_year: int
    amount_due: Decimal
    amount_paid: Decimal
    discount_applied: Decimal
    status: PaymentStatus
    due_date: date
    paid_date: Optional[date] = None
    payment_method: Optional[str] = None
    transaction_reference: Optional[str] = None
    notes: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class PaymentRecordDetail(PaymentRecordRead):
    player: Optional[PlayerBrief] = None
    team: Optional[TeamBrief] = None


class PaymentListResponse(BaseModel):
    records: List[PaymentRecordDetail]


class PaymentResponse(BaseModel):
    payment: PaymentRecordRead
