import enum
from sqlalchemy import (
    Column,
    Integer,
    String,
    Date,
    Text,
    ForeignKey,
    Numeric,
    DateTime,
    Index,
    UniqueConstraint,
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from clubify.core.database import Base


class PaymentStatus(str, enum.Enum):
    unpaid = "unpaid"
    partial = "partial"
    paid = "paid"
    overdue = "overdue"


class SubscriptionFee(Base):
    """Monthly fee of a team from effective_from on; rows are never updated"""

    __tablename__ = "subscription_fees"

    id = Column(Integer, primary_key=True)
    team_id = Column(
        Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False
    )
    amount = Column(Numeric(10, 2), nullable=False)
    currency = Column(String(3), nullable=False, default="MKD")
    effective_from = Column(Date, nullable=False)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        Index("ix_subscription_fees_team_effective", "team_id", "effective_from"),
    )

    def __repr__(self):
        return f"<SubscriptionFee(team_id={self.team_id}, amount={self.amount}, effective_from={self.effective_from})>"


class PaymentRecord(Base):
    __tablename__ = "payment_records"

    id = Column(Integer, primary_key=True)
    player_id = Column(
        Integer, ForeignKey("players.id", ondelete="CASCADE"), nullable=False
    )
    team_id = Column(
        Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False, index=True
    )

    period_month = Column(Integer, nullable=False)
    period_year = Column(Integer, nullable=False)

    amount_due = Column(Numeric(10, 2), nullable=False)
    amount_paid = Column(Numeric(10, 2), nullable=False, default=0)
    discount_applied = Column(Numeric(10, 2), nullable=False, default=0)

    status = Column(String(20), nullable=False, default=PaymentStatus.unpaid.value)
    due_date = Column(Date, nullable=False)
    paid_date = Column(Date, nullable=True)
    payment_method = Column(String(50), nullable=True)
    transaction_reference = Column(String(100), nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    player = relationship("Player")
    team = relationship("Team")

    __table_args__ = (
        UniqueConstraint(
            "player_id",
            "period_month",
            "period_year",
            name="uq_payment_records_player_period",
        ),
        Index("ix_payment_records_period", "period_year", "period_month"),
    )

    def __repr__(self):
        return f"<PaymentRecord(id={self.id}, player_id={self.player_id}, period={self.period_month}/{self.period_year}, status={self.status})>"
