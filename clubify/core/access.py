"""
Role-based access decisions.

`AccessEvaluator` is pure: it looks only at the caller's grants. The team
checks at the bottom of this module also read team and coach assignments
from the database.
"""

import enum
import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from clubify.club.models import Team
from clubify.coach.models import Coach, TeamCoach
from clubify.core.exceptions import AuthorizationError, NotFoundError
from clubify.core.roles import Grant, Role

logger = logging.getLogger(__name__)


class AccessDecision(str, enum.Enum):
    ALLOW = "allow"
    DENY = "deny"


@dataclass(frozen=True)
class AccessRequirement:
    minimum_role: Role
    club_id: Optional[int] = None


class AccessEvaluator:
    """Decides whether a set of grants meets a requirement"""

    @staticmethod
    def evaluate(
        grants: Iterable[Grant], requirement: AccessRequirement
    ) -> AccessDecision:
        grants = list(grants)

        if any(g.role is Role.super_admin for g in grants):
            return AccessDecision.ALLOW

        for grant in grants:
            if not grant.role.satisfies(requirement.minimum_role):
                continue
            if requirement.club_id is not None and grant.club_id != requirement.club_id:
                continue
            return AccessDecision.ALLOW

        return AccessDecision.DENY

    @classmethod
    def has_minimum_role(
        cls, grants: Iterable[Grant], role: Role, club_id: Optional[int] = None
    ) -> bool:
        decision = cls.evaluate(grants, AccessRequirement(role, club_id))
        return decision is AccessDecision.ALLOW

    @staticmethod
    def has_role(
        grants: Iterable[Grant], role: Role, club_id: Optional[int] = None
    ) -> bool:
        """Exact role match (no hierarchy); super_admin always passes"""
        grants = list(grants)
        if any(g.role is Role.super_admin for g in grants):
            return True
        return any(
            g.role is role and (club_id is None or g.club_id == club_id)
            for g in grants
        )


def is_super_admin(grants: Iterable[Grant]) -> bool:
    return any(g.role is Role.super_admin for g in grants)


def is_club_admin(grants: Iterable[Grant], club_id: Optional[int] = None) -> bool:
    return AccessEvaluator.has_role(grants, Role.club_admin, club_id)


def is_coach(grants: Iterable[Grant], club_id: Optional[int] = None) -> bool:
    return AccessEvaluator.has_role(grants, Role.coach, club_id)


def is_parent(grants: Iterable[Grant], club_id: Optional[int] = None) -> bool:
    return AccessEvaluator.has_role(grants, Role.parent, club_id)


def get_user_club_ids(grants: Iterable[Grant]) -> List[int]:
    """Clubs the grants are scoped to; empty for super_admin (all clubs)"""
    grants = list(grants)
    if is_super_admin(grants):
        return []

    club_ids = []
    for grant in grants:
        if grant.club_id is not None and grant.club_id not in club_ids:
            club_ids.append(grant.club_id)
    return club_ids


def has_club_access(grants: Iterable[Grant], club_id: int) -> bool:
    grants = list(grants)
    if is_super_admin(grants):
        return True
    return any(g.club_id == club_id for g in grants)


def get_highest_role(grants: Iterable[Grant]) -> Optional[Role]:
    highest = None
    for grant in grants:
        if highest is None or grant.role.rank > highest.rank:
            highest = grant.role
    return highest


@dataclass(frozen=True)
class CallerContext:
    """Authenticated caller and the grants loaded for this request"""

    user_id: int
    grants: Tuple[Grant, ...] = field(default_factory=tuple)

    @property
    def is_super_admin(self) -> bool:
        return is_super_admin(self.grants)


def require_club_role(caller: CallerContext, club_id: int, minimum_role: Role):
    """Raise AuthorizationError unless the caller holds minimum_role in club_id"""
    decision = AccessEvaluator.evaluate(
        caller.grants, AccessRequirement(minimum_role, club_id)
    )
    if decision is AccessDecision.DENY:
        logger.warning(
            f"Access denied: user {caller.user_id} lacks {minimum_role.value} in club {club_id}"
        )
        raise AuthorizationError()


def require_minimum_role(caller: CallerContext, minimum_role: Role):
    """Raise AuthorizationError unless the caller holds minimum_role anywhere"""
    if not AccessEvaluator.has_minimum_role(caller.grants, minimum_role):
        logger.warning(
            f"Access denied: user {caller.user_id} lacks {minimum_role.value}"
        )
        raise AuthorizationError()


# === Team-level checks ===


async def get_team_club_id(session: AsyncSession, team_id: int) -> int:
    result = await session.execute(select(Team.club_id).where(Team.id == team_id))
    club_id = result.scalar_one_or_none()
    if club_id is None:
        raise NotFoundError("Team", str(team_id))
    return club_id


async def coached_team_ids(session: AsyncSession, user_id: int) -> List[int]:
    """Teams with an active assignment to any coach profile of the user"""
    result = await session.execute(
        select(TeamCoach.team_id)
        .join(Coach, TeamCoach.coach_id == Coach.id)
        .where(Coach.user_id == user_id, TeamCoach.is_active.is_(True))
    )
    return sorted(set(result.scalars().all()))


async def can_manage_team(
    session: AsyncSession, caller: CallerContext, team_id: int
) -> bool:
    """super_admin, club_admin of the team's club, or an assigned coach"""
    club_id = await get_team_club_id(session, team_id)

    if caller.is_super_admin:
        return True
    if any(
        g.role is Role.club_admin and g.club_id == club_id for g in caller.grants
    ):
        return True
    if any(g.role is Role.coach for g in caller.grants):
        return team_id in await coached_team_ids(session, caller.user_id)
    return False


async def ensure_team_access(
    session: AsyncSession, caller: CallerContext, team_id: int
):
    if not await can_manage_team(session, caller, team_id):
        logger.warning(
            f"Access denied: user {caller.user_id} has no access to team {team_id}"
        )
        raise AuthorizationError("You do not have access to this team")


async def accessible_team_ids(
    session: AsyncSession, caller: CallerContext
) -> Optional[List[int]]:
    """
    Teams the caller may manage.

    Returns None for super_admin (no restriction); otherwise the union of
    every team in the caller's club_admin clubs and the coached teams.
    """
    if caller.is_super_admin:
        return None

    team_ids = set()

    admin_club_ids = [
        g.club_id
        for g in caller.grants
        if g.role is Role.club_admin and g.club_id is not None
    ]
    if admin_club_ids:
        result = await session.execute(
            select(Team.id).where(Team.club_id.in_(admin_club_ids))
        )
        team_ids.update(result.scalars().all())

    if any(g.role is Role.coach for g in caller.grants):
        team_ids.update(await coached_team_ids(session, caller.user_id))

    return sorted(team_ids)
