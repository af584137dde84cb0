"""
Attendance counting and percentages.

A player "attended" a session when marked present or late; the percentage
is attended / recorded sessions, rounded half up to a whole number.
"""

from collections import Counter
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from clubify.core.dates import local_today, round_half_up
from clubify.club.models import Player, Team
from clubify.coach.crud.attendance import (
    count_active_assignments,
    load_attendance_with_players,
    load_player_attendance,
    load_sessions_for_teams,
    load_team_roster,
)
from clubify.coach.models import AttendanceStatus
from clubify.coach.schemas.attendance import (
    AttendanceStatisticsResponse,
    AttendanceSummary,
    AttendanceWindows,
    OverallStatistics,
    PlayerStatistics,
    PlayerTrainingAttendanceResponse,
    RecentAttendance,
    TeamBrief,
)

LOW_ATTENDANCE_THRESHOLD = 75
PERFECT_ATTENDANCE = 100
RECENT_LIMIT = 10


def attendance_percentage(present: int, late: int, total: int) -> int:
    if total <= 0:
        return 0
    return round_half_up((present + late) / total * 100)


def summarize(statuses: Iterable[str]) -> AttendanceSummary:
    """Count statuses; unknown values count towards total only"""
    counts = Counter()
    total = 0
    for status in statuses:
        total += 1
        counts[status] += 1

    present = counts[AttendanceStatus.present.value]
    late = counts[AttendanceStatus.late.value]
    return AttendanceSummary(
        total=total,
        present=present,
        late=late,
        absent=counts[AttendanceStatus.absent.value],
        excused=counts[AttendanceStatus.excused.value],
        injured=counts[AttendanceStatus.injured.value],
        attendance_percentage=attendance_percentage(present, late, total),
    )


class AttendanceStatistics:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def team_statistics(
        self,
        team_ids: Optional[Sequence[int]],
        team_id: Optional[int] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> AttendanceStatisticsResponse:
        """
        Per-player attendance across the given teams (None = every team),
        best attendance first, plus overall figures.
        """
        query = select(Team)
        if team_ids is not None:
            if not team_ids:
                return AttendanceStatisticsResponse()
            query = query.where(Team.id.in_(team_ids))
        if team_id:
            query = query.where(Team.id == team_id)

        result = await self.session.execute(query.order_by(Team.name))
        teams = [TeamBrief.model_validate(team) for team in result.scalars().all()]
        if not teams:
            return AttendanceStatisticsResponse()

        selected_ids = [team.id for team in teams]
        session_ids = await load_sessions_for_teams(
            self.session, selected_ids, date_from, date_to
        )
        if not session_ids:
            return AttendanceStatisticsResponse(teams=teams)

        records = await load_attendance_with_players(self.session, session_ids)
        roster = await load_team_roster(self.session, selected_ids)

        players: Dict[int, Player] = {player.id: player for player in roster}
        statuses: Dict[int, List[str]] = {player.id: [] for player in roster}
        for attendance, player in records:
            players.setdefault(player.id, player)
            statuses.setdefault(player.id, []).append(attendance.status)

        statistics = []
        for player_id, player_statuses in statuses.items():
            player = players[player_id]
            summary = summarize(player_statuses)
            statistics.append(
                PlayerStatistics(
                    player_id=player.id,
                    first_name=player.first_name,
                    last_name=player.last_name,
                    jersey_number=player.jersey_number,
                    **summary.model_dump(),
                )
            )
        statistics.sort(key=lambda s: s.attendance_percentage, reverse=True)

        assignments = await count_active_assignments(self.session, selected_ids)
        total_sessions = len(session_ids)
        overall = OverallStatistics(
            total_sessions=total_sessions,
            average_attendance=round_half_up(
                len(records) / (total_sessions * max(assignments, 1)) * 100
            ),
            perfect_attendance=sum(
                1
                for s in statistics
                if s.total > 0 and s.attendance_percentage == PERFECT_ATTENDANCE
            ),
            low_attendance=sum(
                1
                for s in statistics
                if s.total > 0 and s.attendance_percentage < LOW_ATTENDANCE_THRESHOLD
            ),
        )

        return AttendanceStatisticsResponse(
            teams=teams, statistics=statistics, overall=overall
        )

    async def player_training_attendance(
        self, player_id: int, today: Optional[date] = None
    ) -> PlayerTrainingAttendanceResponse:
        """Last 30 days, last 90 days and all-time summaries plus recent marks"""
        today = today or local_today()
        rows = await load_player_attendance(self.session, player_id)

        def since(days: int) -> List[str]:
            start = today - timedelta(days=days)
            return [a.status for a, session_date, _ in rows if session_date >= start]

        statistics = AttendanceWindows(
            last_30_days=summarize(since(30)),
            last_90_days=summarize(since(90)),
            all_time=summarize(a.status for a, _, _ in rows),
        )
        recent = [
            RecentAttendance(
                date=session_date,
                team=team_name,
                status=attendance.status,
                arrival_time=attendance.arrival_time,
                notes=attendance.notes,
            )
            for attendance, session_date, team_name in rows[:RECENT_LIMIT]
        ]
        return PlayerTrainingAttendanceResponse(
            statistics=statistics, recent_attendance=recent
        )
