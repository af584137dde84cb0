from datetime import date, time
from typing import List, Optional, Literal
from pydantic import BaseModel, Field, ConfigDict, field_validator, model_validator


class TrainingSessionCreate(BaseModel):
    """One-off training session"""

    team_id: int = Field(..., gt=0)
    session_date: date
    start_time: time
    duration_minutes: int = Field(..., gt=0, description="Duration in minutes")
    location: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = Field(None, max_length=1000)

    model_config = ConfigDict(str_strip_whitespace=True)


class TrainingSessionUpdate(BaseModel):
    team_id: Optional[int] = Field(None, gt=0)
    session_date: Optional[date] = None
    start_time: Optional[time] = None
    duration_minutes: Optional[int] = Field(None, gt=0)
    location: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = Field(None, max_length=1000)

    model_config = ConfigDict(str_strip_whitespace=True)

    @model_validator(mode="after")
    def reject_null_required_fields(self):
        cleared = sorted(
            field
            for field in ("team_id", "session_date", "start_time", "duration_minutes")
            if field in self.model_fields_set and getattr(self, field) is None
        )
        if cleared:
            raise ValueError(f"Fields cannot be null: {', '.join(cleared)}")
        return self


class TrainingSessionRead(BaseModel):
    id: int
    team_id: int
    session_date: date
    start_time: time
    duration_minutes: int
    location: Optional[str] = None
    notes: Optional[str] = None
    recurrence_id: Optional[int] = None
    is_cancelled: bool = False
    cancellation_reason: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class TrainingSessionResponse(BaseModel):
    session: TrainingSessionRead


class TrainingSessionListResponse(BaseModel):
    sessions: List[TrainingSessionRead]


class RecurringTrainingCreate(BaseModel):
    """Weekly pattern: one or more weekdays (0=Sunday .. 6=Saturday)"""

    team_id: int = Field(..., gt=0)
    days_of_week: List[int] = Field(..., min_length=1)
    start_time: time
    duration_minutes: int = Field(..., gt=0)
    location: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = Field(None, max_length=1000)
    generate_until: date

    model_config = ConfigDict(str_strip_whitespace=True)

    @field_validator("days_of_week")
    @classmethod
    def validate_days(cls, v: List[int]) -> List[int]:
        if any(day < 0 or day > 6 for day in v):
            raise ValueError(
                "Days of week must be between 0 (Sunday) and 6 (Saturday)"
            )
        return v


class SessionDraft(BaseModel):
    team_id: int
    session_date: date
    start_time: time
    duration_minutes: int
    location: Optional[str] = None
    notes: Optional[str] = None
    recurrence_id: int


class RecurringTrainingResponse(BaseModel):
    success: bool = True
    pattern_id: str
    patterns_created: int
    sessions_generated: int
    recurrence_ids: List[int]


class DeleteSessionResponse(BaseModel):
    success: bool = True
    message: str
    sessions_deleted: int = 0
    recurrences_deleted: int = 0


DeleteMode = Literal["single", "all_future"]
