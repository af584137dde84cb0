from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import select

from clubify.coach.crud.matches import (
    load_match_statistics,
    load_squad,
    replace_squad,
    save_match_results,
)
from clubify.coach.models import MatchSquad, MatchStatistic
from clubify.coach.schemas.matches import PlayerStatEntry, SquadEntry
from clubify.coach.services.match_stats import (
    MatchStatistics,
    match_result,
    per_match,
    total_figures,
)

TODAY = date(2025, 6, 1)


@pytest.fixture
async def team_with_players(factory):
    club = await factory.club()
    team = await factory.team(club, name="U14")
    ana = await factory.player(club, first_name="Ana", last_name="Angelova")
    bojan = await factory.player(club, first_name="Bojan", last_name="Bojanov")
    await factory.assign(team, ana)
    await factory.assign(team, bojan)
    return team, ana, bojan


class TestCalculations:
    def test_per_match_rounds_half_up_to_one_decimal(self):
        assert per_match(2, 3) == 0.7
        assert per_match(1, 3) == 0.3
        assert per_match(1, 4) == 0.3
        assert per_match(5, 0) == 0

    def test_match_result_from_home_side(self):
        assert match_result(3, 1) == "win"
        assert match_result(0, 2) == "loss"
        assert match_result(2, 2) == "draw"

    def test_average_rating_ignores_unrated_matches(self):
        totals = total_figures(
            [
                MatchStatistic(goals=1, assists=0, yellow_cards=0, red_cards=0, rating=Decimal("7.0")),
                MatchStatistic(goals=2, assists=1, yellow_cards=1, red_cards=0, rating=None),
                MatchStatistic(goals=0, assists=2, yellow_cards=0, red_cards=0, rating=Decimal("8.5")),
            ]
        )
        assert totals.matches_played == 3
        assert totals.goals == 3
        assert totals.assists == 3
        assert totals.yellow_cards == 1
        # (7.0 + 8.5) / 2 = 7.75
        assert totals.average_rating == 7.8

    def test_no_figures(self):
        totals = total_figures([])
        assert totals.matches_played == 0
        assert totals.average_rating == 0


class TestSquadsAndResults:
    async def test_squad_replaced_and_ordered(self, session, factory, team_with_players):
        team, ana, bojan = team_with_players
        match = await factory.match(team, date(2025, 3, 1))

        await replace_squad(session, match.id, [SquadEntry(player_id=ana.id)])
        selected = await replace_squad(
            session,
            match.id,
            [
                SquadEntry(player_id=ana.id, jersey_number=7),
                SquadEntry(player_id=bojan.id, is_starting=True, jersey_number=9),
                SquadEntry(player_id=ana.id, jersey_number=10),
            ],
        )

        assert selected == 2
        rows = await load_squad(session, match.id)
        assert [(player.first_name, entry.jersey_number) for entry, player in rows] == [
            ("Bojan", 9),
            ("Ana", 10),
        ]

    async def test_results_complete_match_and_credit_minutes(
        self, session, factory, team_with_players
    ):
        team, ana, bojan = team_with_players
        match = await factory.match(team, date(2025, 3, 1))
        await replace_squad(
            session, match.id, [SquadEntry(player_id=ana.id), SquadEntry(player_id=bojan.id)]
        )

        await save_match_results(
            session, match, 2, 0, [PlayerStatEntry(player_id=ana.id, goals=1)]
        )
        saved = await save_match_results(
            session,
            match,
            3,
            1,
            [PlayerStatEntry(player_id=ana.id, goals=2, rating=Decimal("8.0"))],
        )

        assert saved == 1
        assert (match.status, match.home_score, match.away_score) == ("completed", 3, 1)

        [(stat, player)] = await load_match_statistics(session, match.id)
        assert player.id == ana.id
        assert stat.goals == 2

        result = await session.execute(
            select(MatchSquad.player_id, MatchSquad.minutes_played)
            .order_by(MatchSquad.player_id)
            .execution_options(populate_existing=True)
        )
        assert dict(result.all()) == {ana.id: 90, bojan.id: None}


class TestPlayerMatchStatistics:
    async def test_summary_season_and_recent_matches(
        self, session, factory, team_with_players
    ):
        team, ana, _ = team_with_players
        autumn = await factory.match(team, date(2024, 10, 5), opponent="FK Pelister")
        spring = await factory.match(team, date(2025, 3, 1), opponent="FK Shkupi")
        upcoming = await factory.match(team, date(2025, 6, 14), opponent="FK Sileks")
        for match in (autumn, spring, upcoming):
            await replace_squad(session, match.id, [SquadEntry(player_id=ana.id)])

        await save_match_results(
            session,
            autumn,
            3,
            1,
            [PlayerStatEntry(player_id=ana.id, goals=2, assists=1, rating=Decimal("8.0"))],
        )
        await save_match_results(
            session,
            spring,
            1,
            2,
            [PlayerStatEntry(player_id=ana.id, yellow_cards=1, rating=Decimal("6.5"))],
        )

        stats = await MatchStatistics(session).player_match_statistics(
            ana.id, today=TODAY
        )

        summary = stats.summary
        assert summary.matches_played == 3
        assert summary.matches_all_time == 3
        assert summary.matches_this_season == 1
        assert summary.total_goals == 2
        assert summary.goals_per_match == 0.7
        assert summary.total_assists == 1
        assert summary.assists_per_match == 0.3
        assert summary.yellow_cards == 1
        # (8.0 + 6.5) / 2 = 7.25
        assert summary.average_rating == 7.3
        assert summary.this_season.average_rating == 6.5
        assert summary.minutes_played == 180
        assert stats.total_minutes_played == 180
        assert (stats.matches_scheduled, stats.matches_completed) == (1, 2)

        assert [(m.opponent, m.score, m.result) for m in stats.recent_matches] == [
            ("FK Shkupi", "1-2", "loss"),
            ("FK Pelister", "3-1", "win"),
        ]
        assert stats.recent_matches[0].rating == 6.5

    async def test_player_without_matches(self, session, team_with_players):
        _, _, bojan = team_with_players

        stats = await MatchStatistics(session).player_match_statistics(
            bojan.id, today=TODAY
        )

        assert stats.summary.matches_played == 0
        assert stats.summary.goals_per_match == 0
        assert stats.recent_matches == []

    async def test_figures_without_squad_entry_count_goals_not_matches(
        self, session, factory, team_with_players
    ):
        team, ana, _ = team_with_players
        match = await factory.match(team, date(2025, 2, 1))
        await save_match_results(
            session, match, 1, 1, [PlayerStatEntry(player_id=ana.id, goals=1)]
        )

        stats = await MatchStatistics(session).player_match_statistics(
            ana.id, today=TODAY
        )

        assert stats.summary.total_goals == 1
        assert stats.summary.matches_played == 0
        assert stats.summary.goals_per_match == 0
        assert stats.summary.all_time.matches_played == 1
        assert stats.recent_matches[0].result == "draw"
