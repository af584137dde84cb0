from sqlalchemy import (
    Column,
    Integer,
    String,
    Boolean,
    ForeignKey,
    DateTime,
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from clubify.core.database import Base


class Club(Base):
    __tablename__ = "clubs"

    id = Column(Integer, primary_key=True)
    name = Column(String(200), nullable=False)
    slug = Column(String(100), unique=True, nullable=False)
    city = Column(String(100), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    teams = relationship("Team", back_populates="club", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Club(id={self.id}, name='{self.name}')>"


class Team(Base):
    __tablename__ = "teams"

    id = Column(Integer, primary_key=True)
    club_id = Column(
        Integer, ForeignKey("clubs.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name = Column(String(200), nullable=False)
    age_group = Column(String(20), nullable=True)
    season = Column(String(20), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    club = relationship("Club", back_populates="teams")

    def __repr__(self):
        return f"<Team(id={self.id}, club_id={self.club_id}, name='{self.name}')>"
