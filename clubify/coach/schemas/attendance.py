import datetime as dt
from datetime import date, time
from typing import List, Optional
from pydantic import BaseModel, Field, ConfigDict

from clubify.coach.models import AttendanceStatus


class AttendanceEntry(BaseModel):
    """Attendance mark for one player; entries without status are ignored"""

    player_id: int = Field(..., gt=0)
    status: Optional[AttendanceStatus] = None
    arrival_time: Optional[time] = None
    notes: Optional[str] = Field(None, max_length=1000)


class AttendanceSave(BaseModel):
    attendance: List[AttendanceEntry]


class AttendanceSaveResponse(BaseModel):
    success: bool = True
    message: str = "Attendance saved successfully"
    records_saved: int


class PlayerAttendanceRow(BaseModel):
    player_id: int
    first_name: str
    last_name: str
    jersey_number: Optional[int] = None
    status: Optional[AttendanceStatus] = None
    arrival_time: Optional[time] = None
    notes: Optional[str] = None


class SessionInfo(BaseModel):
    id: int
    team_id: int
    team_name: str
    session_date: date
    start_time: time


class SessionAttendanceResponse(BaseModel):
    session: SessionInfo
    attendance: List[PlayerAttendanceRow]


class AttendanceSummary(BaseModel):
    total: int = 0
    present: int = 0
    late: int = 0
    absent: int = 0
    excused: int = 0
    injured: int = 0
    attendance_percentage: int = 0


class PlayerStatistics(AttendanceSummary):
    player_id: int
    first_name: str
    last_name: str
    jersey_number: Optional[int] = None


class OverallStatistics(BaseModel):
    total_sessions: int = 0
    average_attendance: int = 0
    perfect_attendance: int = 0
    low_attendance: int = 0


class TeamBrief(BaseModel):
    id: int
    name: str
    club_id: int

    model_config = ConfigDict(from_attributes=True)


class AttendanceStatisticsResponse(BaseModel):
    teams: List[TeamBrief] = Field(default_factory=list)
    statistics: List[PlayerStatistics] = Field(default_factory=list)
    overall: OverallStatistics = Field(default_factory=OverallStatistics)


class AttendanceWindows(BaseModel):
    last_30_days: AttendanceSummary
    last_90_days: AttendanceSummary
    all_time: AttendanceSummary


class RecentAttendance(BaseModel):
    date: dt.date
    team: str
    status: AttendanceStatus
    arrival_time: Optional[time] = None
    notes: Optional[str] = None


class PlayerTrainingAttendanceResponse(BaseModel):
    statistics: AttendanceWindows
    recent_attendance: List[RecentAttendance]
