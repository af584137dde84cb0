from datetime import date, time

import pytest
from sqlalchemy import select

from clubify.core.dates import js_weekday
from clubify.core.exceptions import ValidationError
from clubify.coach.models import TrainingRecurrence, TrainingSession
from clubify.coach.services.recurrence_expander import RecurringSessionExpander

MONDAY = date(2025, 3, 3)
TWO_WEEKS_LATER = date(2025, 3, 16)  # Sunday, 14 days inclusive


async def all_sessions(session):
    result = await session.execute(
        select(TrainingSession)
        .order_by(TrainingSession.session_date, TrainingSession.id)
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


async def all_recurrences(session):
    result = await session.execute(
        select(TrainingRecurrence).order_by(TrainingRecurrence.id)
    )
    return list(result.scalars().all())


@pytest.fixture
async def team(factory):
    club = await factory.club()
    return await factory.team(club)


async def expand_mon_wed_fri(session, team, location="Hall A"):
    return await RecurringSessionExpander(session).expand(
        team_id=team.id,
        days_of_week=[1, 3, 5],
        start_time=time(17, 30),
        duration_minutes=90,
        generate_until=TWO_WEEKS_LATER,
        location=location,
        today=MONDAY,
    )


class TestExpansion:
    async def test_two_weeks_of_mon_wed_fri(self, session, team):
        result = await expand_mon_wed_fri(session, team)

        assert len(result.recurrence_ids) == 3
        assert len(result.sessions) == 6

        sessions = await all_sessions(session)
        assert [s.session_date for s in sessions] == [
            date(2025, 3, 3),
            date(2025, 3, 5),
            date(2025, 3, 7),
            date(2025, 3, 10),
            date(2025, 3, 12),
            date(2025, 3, 14),
        ]
        by_day = dict(zip([1, 3, 5], result.recurrence_ids))
        for training in sessions:
            assert training.recurrence_id == by_day[js_weekday(training.session_date)]
            assert training.start_time == time(17, 30)
            assert training.duration_minutes == 90
            assert training.location == "Hall A"

    async def test_recurrences_share_pattern_id(self, session, team):
        result = await expand_mon_wed_fri(session, team)

        recurrences = await all_recurrences(session)
        assert [r.day_of_week for r in recurrences] == [1, 3, 5]
        assert {r.pattern_id for r in recurrences} == {result.pattern_id}

    async def test_end_date_before_today_creates_no_sessions(self, session, team):
        result = await RecurringSessionExpander(session).expand(
            team_id=team.id,
            days_of_week=[2],
            start_time=time(18, 0),
            duration_minutes=60,
            generate_until=date(2025, 3, 1),
            today=MONDAY,
        )

        assert len(result.recurrence_ids) == 1
        assert result.sessions == []
        assert await all_sessions(session) == []

    async def test_duplicate_days_link_to_first_recurrence(self, session, team):
        result = await RecurringSessionExpander(session).expand(
            team_id=team.id,
            days_of_week=[1, 1],
            start_time=time(18, 0),
            duration_minutes=60,
            generate_until=date(2025, 3, 9),
            today=MONDAY,
        )

        assert len(result.recurrence_ids) == 2
        [training] = await all_sessions(session)
        assert training.recurrence_id == result.recurrence_ids[0]

    async def test_blank_location_stored_as_null(self, session, team):
        await expand_mon_wed_fri(session, team, location="")
        assert {s.location for s in await all_sessions(session)} == {None}

    @pytest.mark.parametrize(
        "days, duration",
        [([], 60), ([7], 60), ([-1, 2], 60), ([1], 0)],
    )
    async def test_invalid_patterns_rejected(self, session, team, days, duration):
        with pytest.raises(ValidationError):
            await RecurringSessionExpander(session).expand(
                team_id=team.id,
                days_of_week=days,
                start_time=time(18, 0),
                duration_minutes=duration,
                generate_until=TWO_WEEKS_LATER,
                today=MONDAY,
            )
        assert await all_recurrences(session) == []


class TestDeletion:
    async def test_all_future_from_first_session_removes_whole_pattern(
        self, session, team
    ):
        await expand_mon_wed_fri(session, team)
        first = (await all_sessions(session))[0]

        result = await RecurringSessionExpander(session).delete_training_session(
            first, "all_future"
        )

        assert result.sessions_deleted == 6
        assert result.recurrences_deleted == 3
        assert result.message == (
            "Recurring pattern and all future sessions deleted successfully"
        )
        assert await all_sessions(session) == []
        assert await all_recurrences(session) == []

    async def test_all_future_keeps_earlier_sessions(self, session, team):
        await expand_mon_wed_fri(session, team)
        sessions = await all_sessions(session)
        wednesday = next(s for s in sessions if s.session_date == date(2025, 3, 12))

        result = await RecurringSessionExpander(session).delete_training_session(
            wednesday, "all_future"
        )

        assert result.sessions_deleted == 2
        remaining = [s.session_date for s in await all_sessions(session)]
        assert remaining == [
            date(2025, 3, 3),
            date(2025, 3, 5),
            date(2025, 3, 7),
            date(2025, 3, 10),
        ]

    async def test_other_patterns_of_the_team_are_untouched(self, session, team):
        await expand_mon_wed_fri(session, team)
        other = await expand_mon_wed_fri(session, team)
        first = (await all_sessions(session))[0]

        await RecurringSessionExpander(session).delete_training_session(
            first, "all_future"
        )

        remaining = await all_sessions(session)
        assert len(remaining) == 6
        assert {s.recurrence_id for s in remaining} == set(other.recurrence_ids)

    async def test_single_mode_deletes_one_session(self, session, team):
        await expand_mon_wed_fri(session, team)
        first = (await all_sessions(session))[0]

        result = await RecurringSessionExpander(session).delete_training_session(
            first, "single"
        )

        assert result.sessions_deleted == 1
        assert result.recurrences_deleted == 0
        assert result.message == "Training session deleted successfully"
        assert len(await all_sessions(session)) == 5
        assert len(await all_recurrences(session)) == 3

    async def test_all_future_on_one_off_session_deletes_only_it(
        self, session, factory, team
    ):
        one_off = await factory.training(team, date(2025, 3, 4))

        result = await RecurringSessionExpander(session).delete_training_session(
            one_off, "all_future"
        )

        assert result.sessions_deleted == 1
        assert result.recurrences_deleted == 0

    async def test_rows_without_pattern_id_grouped_by_attributes(
        self, session, team
    ):
        def legacy(day, location):
            return TrainingRecurrence(
                team_id=team.id,
                day_of_week=day,
                start_time=time(19, 0),
                duration_minutes=60,
                location=location,
            )

        tuesday, thursday, elsewhere = legacy(2, None), legacy(4, None), legacy(2, "Park")
        session.add_all([tuesday, thursday, elsewhere])
        await session.flush()
        session.add_all(
            [
                TrainingSession(
                    team_id=team.id,
                    session_date=session_date,
                    start_time=time(19, 0),
                    duration_minutes=60,
                    recurrence_id=recurrence.id,
                )
                for session_date, recurrence in [
                    (date(2025, 3, 4), tuesday),
                    (date(2025, 3, 6), thursday),
                    (date(2025, 3, 11), elsewhere),
                ]
            ]
        )
        group_ids = sorted([tuesday.id, thursday.id])
        await session.commit()
        first = (await all_sessions(session))[0]

        result = await RecurringSessionExpander(session).delete_training_session(
            first, "all_future"
        )

        assert sorted(result.recurrence_ids) == group_ids
        assert result.sessions_deleted == 2
        [left] = await all_sessions(session)
        assert left.session_date == date(2025, 3, 11)

    async def test_unknown_mode_rejected(self, session, factory, team):
        training = await factory.training(team, date(2025, 3, 4))
        with pytest.raises(ValidationError):
            await RecurringSessionExpander(session).delete_training_session(
                training, "everything"
            )
