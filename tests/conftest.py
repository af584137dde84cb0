"""
Shared pytest configuration.

Every test gets a fresh in-memory SQLite database; the API client runs the
FastAPI app in-process with the request session bound to that database.
"""

import os

os.environ.setdefault("JWT_SECRET_KEY", "test-secret")
os.environ.setdefault("ENVIRONMENT", "test")

from datetime import date, time
from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from clubify.core.database import Base, get_session
from clubify.core.jwt_auth import jwt_manager
from clubify.core.limits import limiter
from clubify.club.models import (
    Club,
    Player,
    SubscriptionFee,
    Team,
    TeamPlayer,
    User,
    UserRole,
)
from clubify.coach.models import Coach, Match, TeamCoach, TrainingSession

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def test_engine():
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def session_maker(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
    )


@pytest_asyncio.fixture
async def session(session_maker):
    async with session_maker() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_maker):
    from clubify.main import app

    async def override_get_session():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    limiter.enabled = False

    # No lifespan: the test database is created by the fixtures above
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
    limiter.enabled = True


@pytest.fixture
def auth_headers():
    """Bearer header for a user id, signed with the app's secret"""

    def make(user_id: int) -> dict:
        token = jwt_manager.create_access_token(user_id)
        return {"Authorization": f"Bearer {token}"}

    return make


class Factory:
    """Inserts rows and commits; returns the ORM objects"""

    def __init__(self, session: AsyncSession):
        self.session = session
        self._counter = 0

    def _next(self) -> int:
        self._counter += 1
        return self._counter

    async def _save(self, obj):
        self.session.add(obj)
        await self.session.commit()
        await self.session.refresh(obj)
        return obj

    async def club(self, name: str = None) -> Club:
        n = self._next()
        return await self._save(Club(name=name or f"Club {n}", slug=f"club-{n}"))

    async def team(self, club: Club, name: str = None, age_group: str = None) -> Team:
        n = self._next()
        return await self._save(
            Team(club_id=club.id, name=name or f"Team {n}", age_group=age_group)
        )

    async def player(
        self, club: Club, first_name: str = "Ana", last_name: str = None
    ) -> Player:
        n = self._next()
        return await self._save(
            Player(
                club_id=club.id,
                first_name=first_name,
                last_name=last_name or f"Petrovska{n}",
                jersey_number=n,
            )
        )

    async def assign(
        self, team: Team, player: Player, left_at: date = None
    ) -> TeamPlayer:
        return await self._save(
            TeamPlayer(
                team_id=team.id,
                player_id=player.id,
                joined_at=date(2024, 1, 1),
                left_at=left_at,
                is_active=left_at is None,
            )
        )

    async def fee(
        self, team: Team, amount, effective_from: date, currency: str = "MKD"
    ) -> SubscriptionFee:
        return await self._save(
            SubscriptionFee(
                team_id=team.id,
                amount=Decimal(str(amount)),
                currency=currency,
                effective_from=effective_from,
            )
        )

    async def user(self, *grants) -> User:
        """User with (role, club_id) grants"""
        n = self._next()
        user = await self._save(User(email=f"user{n}@clubify.mk", full_name=f"User {n}"))
        for role, club_id in grants:
            self.session.add(UserRole(user_id=user.id, role=role, club_id=club_id))
        await self.session.commit()
        return user

    async def coach_for(self, user: User, club: Club, *teams: Team) -> Coach:
        coach = await self._save(
            Coach(user_id=user.id, club_id=club.id, first_name="Marko", last_name="Trenerski")
        )
        for team in teams:
            self.session.add(TeamCoach(team_id=team.id, coach_id=coach.id, is_active=True))
        await self.session.commit()
        return coach

    async def training(
        self, team: Team, session_date: date, start_time: time = time(18, 0)
    ) -> TrainingSession:
        return await self._save(
            TrainingSession(
                team_id=team.id,
                session_date=session_date,
                start_time=start_time,
                duration_minutes=90,
            )
        )

    async def match(
        self,
        team: Team,
        match_date: date,
        opponent: str = "FK Rabotnicki",
        status: str = "scheduled",
        home_score: int = None,
        away_score: int = None,
    ) -> Match:
        return await self._save(
            Match(
                home_team_id=team.id,
                away_team_name=opponent,
                match_date=match_date,
                start_time=time(11, 0),
                location="City Park",
                status=status,
                home_score=home_score,
                away_score=away_score,
            )
        )


@pytest.fixture
def factory(session):
    return Factory(session)
