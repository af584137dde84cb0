import enum
from sqlalchemy import (
    Column,
    Integer,
    String,
    Date,
    Time,
    Text,
    Boolean,
    Numeric,
    ForeignKey,
    DateTime,
    Index,
    UniqueConstraint,
)
from sqlalchemy.sql import func
from clubify.core.database import Base


class MatchStatus(str, enum.Enum):
    scheduled = "scheduled"
    completed = "completed"
    cancelled = "cancelled"


class Match(Base):
    """A fixture of one of the club's teams against a named opponent"""

    __tablename__ = "matches"

    id = Column(Integer, primary_key=True)
    home_team_id = Column(
        Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False
    )
    away_team_name = Column(String(200), nullable=False)
    match_date = Column(Date, nullable=False)
    start_time = Column(Time, nullable=False)
    location = Column(String(255), nullable=False)
    competition = Column(String(200), nullable=True)
    status = Column(String(20), nullable=False, default=MatchStatus.scheduled.value)
    home_score = Column(Integer, nullable=True)
    away_score = Column(Integer, nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (Index("ix_matches_team_date", "home_team_id", "match_date"),)

    def __repr__(self):
        return f"<Match(id={self.id}, team_id={self.home_team_id}, vs='{self.away_team_name}', date={self.match_date})>"


class MatchSquad(Base):
    """Player called up for a match"""

    __tablename__ = "match_squads"

    id = Column(Integer, primary_key=True)
    match_id = Column(
        Integer, ForeignKey("matches.id", ondelete="CASCADE"), nullable=False, index=True
    )
    player_id = Column(
        Integer, ForeignKey("players.id", ondelete="CASCADE"), nullable=False, index=True
    )
    is_starting = Column(Boolean, default=False, nullable=False)
    jersey_number = Column(Integer, nullable=True)
    position = Column(String(50), nullable=True)
    minutes_played = Column(Integer, nullable=True)
    notes = Column(Text, nullable=True)

    __table_args__ = (
        UniqueConstraint("match_id", "player_id", name="uq_match_squads_match_player"),
    )

    def __repr__(self):
        return f"<MatchSquad(match_id={self.match_id}, player_id={self.player_id}, starting={self.is_starting})>"


class MatchStatistic(Base):
    """One player's figures in one match"""

    __tablename__ = "match_statistics"

    id = Column(Integer, primary_key=True)
    match_id = Column(
        Integer, ForeignKey("matches.id", ondelete="CASCADE"), nullable=False, index=True
    )
    player_id = Column(
        Integer, ForeignKey("players.id", ondelete="CASCADE"), nullable=False, index=True
    )
    goals = Column(Integer, default=0, nullable=False)
    assists = Column(Integer, default=0, nullable=False)
    yellow_cards = Column(Integer, default=0, nullable=False)
    red_cards = Column(Integer, default=0, nullable=False)
    saves = Column(Integer, nullable=True)
    shots_on_target = Column(Integer, nullable=True)
    passes_completed = Column(Integer, nullable=True)
    # 1.0 .. 10.0
    rating = Column(Numeric(3, 1), nullable=True)
    notes = Column(Text, nullable=True)

    __table_args__ = (
        UniqueConstraint(
            "match_id", "player_id", name="uq_match_statistics_match_player"
        ),
    )

    def __repr__(self):
        return f"<MatchStatistic(match_id={self.match_id}, player_id={self.player_id}, goals={self.goals})>"
