from datetime import date, time

import pytest
from sqlalchemy import select

from clubify.coach.crud.attendance import load_session_attendance, upsert_attendance
from clubify.coach.models import Attendance
from clubify.coach.schemas.attendance import AttendanceEntry
from clubify.coach.services.attendance_stats import AttendanceStatistics


def marks(*pairs):
    return [AttendanceEntry(player_id=player.id, status=status) for player, status in pairs]


@pytest.fixture
async def squad(factory):
    club = await factory.club()
    team = await factory.team(club, name="U12")
    ana = await factory.player(club, first_name="Ana", last_name="Angelova")
    bojan = await factory.player(club, first_name="Bojan", last_name="Bojanov")
    await factory.assign(team, ana)
    await factory.assign(team, bojan)
    return club, team, ana, bojan


class TestSavingAttendance:
    async def test_marks_are_replaced_not_duplicated(self, session, factory, squad):
        _, team, ana, bojan = squad
        training = await factory.training(team, date(2025, 3, 3))

        saved = await upsert_attendance(
            session, training.id, marks((ana, "present"), (bojan, "absent"))
        )
        assert saved == 2

        await upsert_attendance(
            session,
            training.id,
            [AttendanceEntry(player_id=bojan.id, status="late", arrival_time=time(18, 10))],
        )

        result = await session.execute(select(Attendance.id))
        assert len(result.scalars().all()) == 2

        stored = await load_session_attendance(session, training.id)
        assert stored[ana.id].status == "present"
        assert stored[bojan.id].status == "late"
        assert stored[bojan.id].arrival_time == time(18, 10)

    async def test_entries_without_status_are_skipped(self, session, factory, squad):
        _, team, ana, bojan = squad
        training = await factory.training(team, date(2025, 3, 3))

        saved = await upsert_attendance(
            session,
            training.id,
            [AttendanceEntry(player_id=ana.id, status="present"), AttendanceEntry(player_id=bojan.id)],
        )

        assert saved == 1
        assert list(await load_session_attendance(session, training.id)) == [ana.id]

    async def test_repeated_player_keeps_last_entry(self, session, factory, squad):
        _, team, ana, _ = squad
        training = await factory.training(team, date(2025, 3, 3))

        saved = await upsert_attendance(
            session, training.id, marks((ana, "absent"), (ana, "injured"))
        )

        assert saved == 1
        stored = await load_session_attendance(session, training.id)
        assert stored[ana.id].status == "injured"


class TestTeamStatistics:
    async def test_per_player_and_overall_figures(self, session, factory, squad):
        _, team, ana, bojan = squad
        first = await factory.training(team, date(2025, 3, 3))
        second = await factory.training(team, date(2025, 3, 5))
        await upsert_attendance(session, first.id, marks((ana, "present"), (bojan, "present")))
        await upsert_attendance(session, second.id, marks((ana, "late"), (bojan, "absent")))

        stats = await AttendanceStatistics(session).team_statistics([team.id])

        assert [t.name for t in stats.teams] == ["U12"]
        assert [s.player_id for s in stats.statistics] == [ana.id, bojan.id]
        ana_stats, bojan_stats = stats.statistics
        assert (ana_stats.present, ana_stats.late, ana_stats.attendance_percentage) == (1, 1, 100)
        assert (bojan_stats.present, bojan_stats.absent, bojan_stats.attendance_percentage) == (1, 1, 50)
        assert stats.overall.total_sessions == 2
        assert stats.overall.average_attendance == 100
        assert stats.overall.perfect_attendance == 1
        assert stats.overall.low_attendance == 1

    async def test_date_range_limits_sessions(self, session, factory, squad):
        _, team, ana, _ = squad
        march = await factory.training(team, date(2025, 3, 3))
        april = await factory.training(team, date(2025, 4, 7))
        await upsert_attendance(session, march.id, marks((ana, "absent")))
        await upsert_attendance(session, april.id, marks((ana, "present")))

        stats = await AttendanceStatistics(session).team_statistics(
            [team.id], date_from=date(2025, 4, 1), date_to=date(2025, 4, 30)
        )

        ana_stats = next(s for s in stats.statistics if s.player_id == ana.id)
        assert ana_stats.total == 1
        assert ana_stats.attendance_percentage == 100
        assert stats.overall.total_sessions == 1

    async def test_roster_players_without_marks_are_listed(self, session, factory, squad):
        _, team, ana, bojan = squad
        training = await factory.training(team, date(2025, 3, 3))
        await upsert_attendance(session, training.id, marks((ana, "present")))

        stats = await AttendanceStatistics(session).team_statistics([team.id])

        bojan_stats = next(s for s in stats.statistics if s.player_id == bojan.id)
        assert bojan_stats.total == 0
        assert stats.overall.low_attendance == 0

    async def test_no_sessions_gives_empty_statistics(self, session, squad):
        _, team, _, _ = squad

        stats = await AttendanceStatistics(session).team_statistics([team.id])

        assert len(stats.teams) == 1
        assert stats.statistics == []
        assert stats.overall.total_sessions == 0

    async def test_caller_without_teams_gets_nothing(self, session, squad):
        stats = await AttendanceStatistics(session).team_statistics([])
        assert stats.teams == []
        assert stats.statistics == []


class TestPlayerTrainingAttendance:
    async def test_windows_and_recent_marks(self, session, factory, squad):
        _, team, ana, _ = squad
        recent = await factory.training(team, date(2025, 3, 20))
        february = await factory.training(team, date(2025, 2, 10))
        last_year = await factory.training(team, date(2024, 6, 1))
        await upsert_attendance(session, recent.id, marks((ana, "present")))
        await upsert_attendance(session, february.id, marks((ana, "late")))
        await upsert_attendance(session, last_year.id, marks((ana, "absent")))

        report = await AttendanceStatistics(session).player_training_attendance(
            ana.id, today=date(2025, 3, 31)
        )

        assert report.statistics.last_30_days.total == 1
        assert report.statistics.last_90_days.total == 2
        assert report.statistics.last_90_days.attendance_percentage == 100
        assert report.statistics.all_time.total == 3
        assert report.statistics.all_time.attendance_percentage == 67
        assert [r.date for r in report.recent_attendance] == [
            date(2025, 3, 20),
            date(2025, 2, 10),
            date(2024, 6, 1),
        ]
        assert {r.team for r in report.recent_attendance} == {"U12"}
