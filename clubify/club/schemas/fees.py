from datetime import date
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, Field, ConfigDict


class SubscriptionFeeCreate(BaseModel):
    """New fee row for a team"""

    club_id: int = Field(..., gt=0)
    team_id: int = Field(..., gt=0)
    amount: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    currency: str = Field("MKD", min_length=3, max_length=3)
    effective_from: date
    notes: Optional[str] = Field(None, max_length=1000)

    model_config = ConfigDict(str_strip_whitespace=True)


class SubscriptionFeeRead(BaseModel):
    id: int
    team_id: int
    amount: Decimal
    currency: str
    effective_from: date
    notes: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class SubscriptionFeeResponse(BaseModel):
    fee: SubscriptionFeeRead


class TeamFeeRead(BaseModel):
    """Team with its active player count and most recent fee"""

    id: int
    name: str
    age_group: Optional[str] = None
    player_count: int = 0
    subscription_fee: Optional[SubscriptionFeeRead] = None

    model_config = ConfigDict(from_attributes=True)


class TeamFeeListResponse(BaseModel):
    teams: List[TeamFeeRead]
