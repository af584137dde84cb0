"""
Per-player match figures.

Matches played and minutes come from squad call-ups; goals, assists,
cards and ratings from the per-match statistics rows. Per-match rates
and the average rating are rounded half up to one decimal; the average
rating only counts rated matches.
"""

from datetime import date
from typing import List, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from clubify.core.dates import local_today, round_to_tenth
from clubify.coach.crud.matches import (
    load_player_match_statistics,
    load_player_squad_entries,
)
from clubify.coach.models import MatchStatistic, MatchStatus
from clubify.coach.schemas.matches import (
    MatchSummary,
    MatchTotals,
    PlayerMatchStatisticsResponse,
    RecentMatch,
)

RECENT_LIMIT = 10


def per_match(total: int, matches: int) -> float:
    if matches <= 0:
        return 0
    return round_to_tenth(total / matches)


def match_result(home_score: int, away_score: int) -> str:
    if home_score > away_score:
        return "win"
    if home_score < away_score:
        return "loss"
    return "draw"


def total_figures(stats: Sequence[MatchStatistic]) -> MatchTotals:
    ratings = [float(s.rating) for s in stats if s.rating]
    return MatchTotals(
        matches_played=len(stats),
        goals=sum(s.goals or 0 for s in stats),
        assists=sum(s.assists or 0 for s in stats),
        yellow_cards=sum(s.yellow_cards or 0 for s in stats),
        red_cards=sum(s.red_cards or 0 for s in stats),
        saves=sum(s.saves or 0 for s in stats),
        shots_on_target=sum(s.shots_on_target or 0 for s in stats),
        passes_completed=sum(s.passes_completed or 0 for s in stats),
        average_rating=round_to_tenth(sum(ratings) / len(ratings)) if ratings else 0,
    )


class MatchStatistics:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def player_match_statistics(
        self, player_id: int, today: Optional[date] = None
    ) -> PlayerMatchStatisticsResponse:
        """Season and all-time totals, squad counts and the last ten matches"""
        today = today or local_today()
        season_start = date(today.year, 1, 1)

        rows = await load_player_match_statistics(self.session, player_id)
        squads = await load_player_squad_entries(self.session, player_id)

        all_time = total_figures([stat for stat, _ in rows])
        this_season = total_figures(
            [stat for stat, match in rows if match.match_date >= season_start]
        )

        matches_played = len(squads)
        minutes_played = sum(minutes or 0 for minutes, _ in squads)

        summary = MatchSummary(
            matches_played=matches_played,
            matches_this_season=this_season.matches_played,
            matches_all_time=matches_played,
            total_goals=all_time.goals,
            goals_per_match=per_match(all_time.goals, matches_played),
            total_assists=all_time.assists,
            assists_per_match=per_match(all_time.assists, matches_played),
            yellow_cards=all_time.yellow_cards,
            red_cards=all_time.red_cards,
            average_rating=all_time.average_rating,
            minutes_played=minutes_played,
            this_season=this_season,
            all_time=all_time,
        )

        recent: List[RecentMatch] = []
        for stat, match in rows[:RECENT_LIMIT]:
            home_score = match.home_score or 0
            away_score = match.away_score or 0
            recent.append(
                RecentMatch(
                    date=match.match_date,
                    opponent=match.away_team_name,
                    score=f"{home_score}-{away_score}",
                    result=match_result(home_score, away_score),
                    goals=stat.goals or 0,
                    assists=stat.assists or 0,
                    rating=float(stat.rating) if stat.rating else None,
                    yellow_cards=stat.yellow_cards or 0,
                    red_cards=stat.red_cards or 0,
                )
            )

        return PlayerMatchStatisticsResponse(
            summary=summary,
            total_minutes_played=minutes_played,
            matches_scheduled=sum(
                1 for _, status in squads if status == MatchStatus.scheduled.value
            ),
            matches_completed=sum(
                1 for _, status in squads if status == MatchStatus.completed.value
            ),
            recent_matches=recent,
        )
