"""
Role hierarchy and caller grants
"""

import enum
import logging
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)


class Role(str, enum.Enum):
    player = "player"
    parent = "parent"
    coach = "coach"
    club_admin = "club_admin"
    super_admin = "super_admin"

    @property
    def rank(self) -> int:
        return _RANKS[self]

    def satisfies(self, minimum: "Role") -> bool:
        """True when this role is at or above `minimum` in the hierarchy"""
        return self.rank >= minimum.rank

    @classmethod
    def parse(cls, value: str) -> Optional["Role"]:
        try:
            return cls(value)
        except ValueError:
            return None


# Lowest to highest
_RANKS = {
    Role.player: 0,
    Role.parent: 1,
    Role.coach: 2,
    Role.club_admin: 3,
    Role.super_admin: 4,
}


@dataclass(frozen=True)
class Grant:
    """One user_roles row: a role, scoped to a club unless super_admin"""

    role: Role
    club_id: Optional[int] = None

    @classmethod
    def from_row(cls, role: str, club_id: Optional[int]) -> Optional["Grant"]:
        parsed = Role.parse(role)
        if parsed is None:
            logger.warning(f"Ignoring unknown role '{role}' for club {club_id}")
            return None
        return cls(role=parsed, club_id=club_id)
