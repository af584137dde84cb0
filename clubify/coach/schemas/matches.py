import datetime as dt
from datetime import date, time
from decimal import Decimal
from typing import List, Optional, Literal
from pydantic import BaseModel, Field, ConfigDict

from clubify.coach.models import MatchStatus


class MatchCreate(BaseModel):
    home_team_id: int = Field(..., gt=0)
    away_team_name: str = Field(..., min_length=1, max_length=200)
    match_date: date
    start_time: time
    location: str = Field(..., min_length=1, max_length=255)
    competition: Optional[str] = Field(None, max_length=200)
    notes: Optional[str] = Field(None, max_length=1000)

    model_config = ConfigDict(str_strip_whitespace=True)


class MatchRead(BaseModel):
    id: int
    home_team_id: int
    away_team_name: str
    match_date: date
    start_time: time
    location: str
    competition: Optional[str] = None
    status: MatchStatus
    home_score: Optional[int] = None
    away_score: Optional[int] = None
    notes: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class MatchResponse(BaseModel):
    match: MatchRead


class MatchListResponse(BaseModel):
    matches: List[MatchRead]


class SquadEntry(BaseModel):
    player_id: int = Field(..., gt=0)
    is_starting: bool = False
    jersey_number: Optional[int] = Field(None, ge=0, le=99)
    position: Optional[str] = Field(None, max_length=50)
    notes: Optional[str] = Field(None, max_length=1000)

    model_config = ConfigDict(str_strip_whitespace=True)


class SquadSave(BaseModel):
    squad: List[SquadEntry]


class SquadRow(BaseModel):
    player_id: int
    first_name: str
    last_name: str
    is_starting: bool
    jersey_number: Optional[int] = None
    position: Optional[str] = None
    minutes_played: Optional[int] = None
    notes: Optional[str] = None


class SquadResponse(BaseModel):
    squad: List[SquadRow]


class SquadSaveResponse(BaseModel):
    success: bool = True
    players_selected: int


class PlayerStatEntry(BaseModel):
    """One player's figures; counters default to zero"""

    player_id: int = Field(..., gt=0)
    goals: int = Field(0, ge=0)
    assists: int = Field(0, ge=0)
    yellow_cards: int = Field(0, ge=0, le=2)
    red_cards: int = Field(0, ge=0, le=1)
    saves: Optional[int] = Field(None, ge=0)
    shots_on_target: Optional[int] = Field(None, ge=0)
    passes_completed: Optional[int] = Field(None, ge=0)
    rating: Optional[Decimal] = Field(None, ge=1, le=10, decimal_places=1)
    notes: Optional[str] = Field(None, max_length=1000)


class MatchResultSave(BaseModel):
    home_score: int = Field(0, ge=0)
    away_score: int = Field(0, ge=0)
    player_stats: List[PlayerStatEntry] = Field(default_factory=list)


class MatchResultSaveResponse(BaseModel):
    success: bool = True
    message: str = "Match results saved successfully"
    statistics_saved: int


class MatchStatisticRow(BaseModel):
    player_id: int
    first_name: str
    last_name: str
    goals: int
    assists: int
    yellow_cards: int
    red_cards: int
    saves: Optional[int] = None
    shots_on_target: Optional[int] = None
    passes_completed: Optional[int] = None
    rating: Optional[float] = None
    notes: Optional[str] = None


class MatchResultsResponse(BaseModel):
    match: MatchRead
    statistics: List[MatchStatisticRow]


class MatchTotals(BaseModel):
    matches_played: int = 0
    goals: int = 0
    assists: int = 0
    yellow_cards: int = 0
    red_cards: int = 0
    saves: int = 0
    shots_on_target: int = 0
    passes_completed: int = 0
    average_rating: float = 0


class MatchSummary(BaseModel):
    matches_played: int = 0
    matches_this_season: int = 0
    matches_all_time: int = 0
    total_goals: int = 0
    goals_per_match: float = 0
    total_assists: int = 0
    assists_per_match: float = 0
    yellow_cards: int = 0
    red_cards: int = 0
    average_rating: float = 0
    minutes_played: int = 0
    this_season: MatchTotals = Field(default_factory=MatchTotals)
    all_time: MatchTotals = Field(default_factory=MatchTotals)


class RecentMatch(BaseModel):
    date: dt.date
    opponent: str
    score: str
    result: Literal["win", "loss", "draw"]
    goals: int = 0
    assists: int = 0
    rating: Optional[float] = None
    yellow_cards: int = 0
    red_cards: int = 0


class PlayerMatchStatisticsResponse(BaseModel):
    summary: MatchSummary
    total_minutes_played: int = 0
    matches_scheduled: int = 0
    matches_completed: int = 0
    recent_matches: List[RecentMatch] = Field(default_factory=list)
