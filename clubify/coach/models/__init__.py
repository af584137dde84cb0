from clubify.core.database import Base
from .coaches import Coach, TeamCoach
from .training import TrainingRecurrence, TrainingSession
from .attendance import Attendance, AttendanceStatus
from .matches import Match, MatchSquad, MatchStatistic, MatchStatus

__all__ = [
    "Base",
    "Coach",
    "TeamCoach",
    "TrainingRecurrence",
    "TrainingSession",
    "Attendance",
    "AttendanceStatus",
    "Match",
    "MatchSquad",
    "MatchStatistic",
    "MatchStatus",
]
