from sqlalchemy import (
    Column,
    Integer,
    String,
    Date,
    Time,
    Text,
    Boolean,
    ForeignKey,
    DateTime,
    Index,
)
from sqlalchemy.sql import func
from clubify.core.database import Base


class TrainingRecurrence(Base):
    """One weekday of a weekly training pattern"""

    __tablename__ = "training_recurrences"

    id = Column(Integer, primary_key=True)
    team_id = Column(
        Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, index=True
    )
    # 0=Sunday .. 6=Saturday
    day_of_week = Column(Integer, nullable=False)
    start_time = Column(Time, nullable=False)
    duration_minutes = Column(Integer, nullable=False, default=90)
    location = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)
    # Shared by every row created from one request; NULL on legacy rows
    pattern_id = Column(String(32), nullable=True, index=True)
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<TrainingRecurrence(id={self.id}, team_id={self.team_id}, day={self.day_of_week}, time={self.start_time})>"


class TrainingSession(Base):
    __tablename__ = "training_sessions"

    id = Column(Integer, primary_key=True)
    team_id = Column(
        Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False
    )
    session_date = Column(Date, nullable=False)
    start_time = Column(Time, nullable=False)
    duration_minutes = Column(Integer, nullable=False, default=90)
    location = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)
    recurrence_id = Column(
        Integer,
        ForeignKey("training_recurrences.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    is_cancelled = Column(Boolean, default=False, nullable=False)
    cancellation_reason = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        Index("ix_training_sessions_team_date", "team_id", "session_date"),
    )

    def __repr__(self):
        return f"<TrainingSession(id={self.id}, team_id={self.team_id}, date={self.session_date}, time={self.start_time})>"
