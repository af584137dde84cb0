from sqlalchemy import (
    Column,
    Integer,
    String,
    Date,
    Boolean,
    ForeignKey,
    DateTime,
    Index,
)
from sqlalchemy.sql import func
from clubify.core.database import Base


class Player(Base):
    __tablename__ = "players"

    id = Column(Integer, primary_key=True)
    club_id = Column(
        Integer, ForeignKey("clubs.id", ondelete="CASCADE"), nullable=False, index=True
    )
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    jersey_number = Column(Integer, nullable=True)
    date_of_birth = Column(Date, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __repr__(self):
        return f"<Player(id={self.id}, name='{self.full_name}')>"


class TeamPlayer(Base):
    """Player-to-team assignment; active while left_at is NULL"""

    __tablename__ = "team_players"

    id = Column(Integer, primary_key=True)
    team_id = Column(
        Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False
    )
    player_id = Column(
        Integer, ForeignKey("players.id", ondelete="CASCADE"), nullable=False
    )
    joined_at = Column(Date, nullable=True)
    left_at = Column(Date, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    __table_args__ = (
        Index("ix_team_players_team_active", "team_id", "left_at"),
        Index("ix_team_players_player", "player_id"),
    )

    def __repr__(self):
        return f"<TeamPlayer(team_id={self.team_id}, player_id={self.player_id}, left_at={self.left_at})>"
