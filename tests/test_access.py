import pytest

from clubify.core.access import (
    AccessDecision,
    AccessEvaluator,
    AccessRequirement,
    CallerContext,
    accessible_team_ids,
    can_manage_team,
    ensure_team_access,
    get_highest_role,
    get_user_club_ids,
    has_club_access,
    is_club_admin,
    is_coach,
    is_parent,
    require_club_role,
    require_minimum_role,
)
from clubify.core.exceptions import AuthorizationError, NotFoundError
from clubify.core.roles import Grant, Role

HIERARCHY = [Role.player, Role.parent, Role.coach, Role.club_admin, Role.super_admin]
CLUB_ROLES = [Role.player, Role.parent, Role.coach, Role.club_admin]


class TestRoleHierarchy:
    @pytest.mark.parametrize("held", CLUB_ROLES)
    def test_holding_a_role_satisfies_every_lower_requirement(self, held):
        grants = [Grant(held, club_id=1)]
        for required in HIERARCHY:
            allowed = AccessEvaluator.has_minimum_role(grants, required, club_id=1)
            assert allowed == (required.rank <= held.rank), (held, required)

    def test_satisfies_is_reflexive(self):
        assert all(role.satisfies(role) for role in Role)

    def test_parse_unknown_role(self):
        assert Role.parse("janitor") is None
        assert Role.parse("coach") is Role.coach

    def test_grant_from_row_skips_unknown_roles(self):
        assert Grant.from_row("janitor", 3) is None
        assert Grant.from_row("club_admin", 3) == Grant(Role.club_admin, 3)


class TestSuperAdminBypass:
    @pytest.mark.parametrize("required", HIERARCHY)
    def test_super_admin_passes_any_requirement_in_any_club(self, required):
        grants = [Grant(Role.super_admin)]
        requirement = AccessRequirement(required, club_id=999)
        assert AccessEvaluator.evaluate(grants, requirement) is AccessDecision.ALLOW

    def test_super_admin_has_every_exact_role(self):
        grants = [Grant(Role.super_admin)]
        assert is_club_admin(grants, 5)
        assert is_coach(grants, 5)
        assert is_parent(grants)


class TestClubScoping:
    def test_admin_of_one_club_is_denied_in_another(self):
        grants = [Grant(Role.club_admin, club_id=1)]
        assert AccessEvaluator.has_minimum_role(grants, Role.club_admin, club_id=1)
        assert not AccessEvaluator.has_minimum_role(grants, Role.club_admin, club_id=2)

    def test_requirement_without_club_accepts_any_club(self):
        grants = [Grant(Role.coach, club_id=7)]
        assert AccessEvaluator.has_minimum_role(grants, Role.coach)
        assert not AccessEvaluator.has_minimum_role(grants, Role.club_admin)

    def test_any_matching_grant_is_enough(self):
        grants = [Grant(Role.parent, club_id=1), Grant(Role.club_admin, club_id=2)]
        assert AccessEvaluator.has_minimum_role(grants, Role.coach, club_id=2)
        assert not AccessEvaluator.has_minimum_role(grants, Role.coach, club_id=1)

    def test_no_grants_denies(self):
        requirement = AccessRequirement(Role.player)
        assert AccessEvaluator.evaluate([], requirement) is AccessDecision.DENY

    def test_exact_role_check_ignores_hierarchy(self):
        grants = [Grant(Role.club_admin, club_id=1)]
        assert is_club_admin(grants, 1)
        assert not is_coach(grants, 1)


class TestGrantHelpers:
    def test_user_club_ids_are_distinct_in_grant_order(self):
        grants = [
            Grant(Role.coach, 3),
            Grant(Role.parent, 1),
            Grant(Role.club_admin, 3),
        ]
        assert get_user_club_ids(grants) == [3, 1]

    def test_user_club_ids_empty_for_super_admin(self):
        grants = [Grant(Role.super_admin), Grant(Role.coach, 3)]
        assert get_user_club_ids(grants) == []

    def test_has_club_access(self):
        grants = [Grant(Role.player, 4)]
        assert has_club_access(grants, 4)
        assert not has_club_access(grants, 5)
        assert has_club_access([Grant(Role.super_admin)], 5)

    def test_highest_role(self):
        grants = [Grant(Role.parent, 1), Grant(Role.club_admin, 2), Grant(Role.coach, 1)]
        assert get_highest_role(grants) is Role.club_admin
        assert get_highest_role([]) is None

    def test_require_club_role_raises_forbidden(self):
        caller = CallerContext(user_id=1, grants=(Grant(Role.coach, 1),))
        require_club_role(caller, 1, Role.coach)
        with pytest.raises(AuthorizationError) as exc_info:
            require_club_role(caller, 1, Role.club_admin)
        assert exc_info.value.status_code == 403

    def test_require_minimum_role(self):
        caller = CallerContext(user_id=1, grants=(Grant(Role.parent, 1),))
        require_minimum_role(caller, Role.parent)
        with pytest.raises(AuthorizationError):
            require_minimum_role(caller, Role.coach)


class TestTeamAccess:
    async def test_assigned_coach_manages_only_their_teams(self, session, factory):
        club = await factory.club()
        mine = await factory.team(club)
        other = await factory.team(club)
        user = await factory.user(("coach", club.id))
        await factory.coach_for(user, club, mine)
        caller = CallerContext(user.id, (Grant(Role.coach, club.id),))

        assert await can_manage_team(session, caller, mine.id)
        assert not await can_manage_team(session, caller, other.id)
        with pytest.raises(AuthorizationError):
            await ensure_team_access(session, caller, other.id)

    async def test_club_admin_manages_every_team_of_their_club(self, session, factory):
        club = await factory.club()
        other_club = await factory.club()
        team = await factory.team(club)
        foreign = await factory.team(other_club)
        caller = CallerContext(1, (Grant(Role.club_admin, club.id),))

        assert await can_manage_team(session, caller, team.id)
        assert not await can_manage_team(session, caller, foreign.id)

    async def test_missing_team_is_not_found(self, session):
        caller = CallerContext(1, (Grant(Role.super_admin),))
        with pytest.raises(NotFoundError):
            await can_manage_team(session, caller, 12345)

    async def test_accessible_teams_union_admin_clubs_and_coached_teams(
        self, session, factory
    ):
        admin_club = await factory.club()
        coach_club = await factory.club()
        a1 = await factory.team(admin_club)
        a2 = await factory.team(admin_club)
        coached = await factory.team(coach_club)
        await factory.team(coach_club)
        user = await factory.user(
            ("club_admin", admin_club.id), ("coach", coach_club.id)
        )
        await factory.coach_for(user, coach_club, coached)
        caller = CallerContext(
            user.id,
            (Grant(Role.club_admin, admin_club.id), Grant(Role.coach, coach_club.id)),
        )

        assert await accessible_team_ids(session, caller) == sorted(
            [a1.id, a2.id, coached.id]
        )

    async def test_accessible_teams_unrestricted_for_super_admin(self, session):
        caller = CallerContext(1, (Grant(Role.super_admin),))
        assert await accessible_team_ids(session, caller) is None
