from clubify.core.database import Base
from .users import User, UserRole
from .clubs import Club, Team
from .players import Player, TeamPlayer
from .payments import SubscriptionFee, PaymentRecord, PaymentStatus

__all__ = [
    "Base",
    "User",
    "UserRole",
    "Club",
    "Team",
    "Player",
    "TeamPlayer",
    "SubscriptionFee",
    "PaymentRecord",
    "PaymentStatus",
]
