from __future__ import annotations

from types import SimpleNamespace

import pytest

from dashboard.security import resolver as r
from dashboard.security.resolver import AuthorizationDenied, Capability, InvalidScope
from dashboard.security.roles import CompanyRole, CompanyRoleAssignment, GlobalRole, UserIdentity


def user(global_role: str, *assignments: tuple[str, str]) -> UserIdentity:
    return UserIdentity(
        id="u",
        email="u@example.test",
        global_role=global_role,  # type: ignore[arg-type]
        company_roles=tuple(CompanyRoleAssignment(c, CompanyRole(role)) for c, role in assignments),
    )


ALL_GLOBAL_ROLES = [g.value for g in GlobalRole]
COMPANY_VIEWS = [
    Capability.VIEW_DASHBOARD,
    Capability.VIEW_BUDGETS,
    Capability.VIEW_EXPENSES,
    Capability.VIEW_ANALYTICS,
    Capability.VIEW_COMPANIES,
]


def test_super_admin_is_excluded_from_tenant_views():
    sa = user("super_admin", ("c1", "owner"))
    for cap in COMPANY_VIEWS:
        assert r.can(sa, cap) is False
    assert r.can(sa, Capability.VIEW_SUPER_ADMIN) is True
    assert r.can_manage_budgets(sa, "c1") is False
    assert r.can_manage_users(sa, "c1") is False


@pytest.mark.parametrize("role", ["company_owner", "company_admin", "member"])
def test_tenant_roles_have_broad_read_access(role):
    u = user(role)
    for cap in COMPANY_VIEWS:
        assert r.can(u, cap) is True
    assert r.can(u, Capability.VIEW_SUPER_ADMIN) is False


@pytest.mark.parametrize("table", [(), (("c1", "viewer"),), (("c1", "member"),), (("c1", "owner"),)])
def test_company_owner_manages_regardless_of_table(table):
    owner = user("company_owner", *table)
    assert r.can_manage_companies(owner) is True
    assert r.can_view_users(owner) is True
    assert r.can_manage_users(owner, "c1") is True
    assert r.can_manage_users(owner, "any-other-company") is True
    assert r.can_manage_budgets(owner, "c1") is True


def test_company_admin_assignment_manages_expenses_not_users():
    u = user("company_admin", ("c1", "admin"))
    assert r.can_manage_expenses(u, "c1") is True
    assert r.can_manage_users(u, "c1") is False
    assert r.can_view_users(u, "c1") is True


def test_global_company_admin_needs_assignment_for_scoped_management():
    u = user("company_admin", ("c1", "manager"))
    assert r.can_manage_expenses(u) is True
    assert r.can_manage_expenses(u, "c1") is False
    assert r.can_manage_expenses(u, "c2") is False


def test_member_never_manages_even_with_admin_assignment():
    u = user("member", ("c1", "admin"))
    assert r.can_manage_expenses(u, "c1") is False
    assert r.can_manage_budgets(u, "c1") is False


def test_scenario_member_without_assignments():
    u = user("member")
    assert r.can_manage_budgets(u) is False
    assert r.can_view_budgets(u) is True


@pytest.mark.parametrize("role", ALL_GLOBAL_ROLES)
def test_manage_users_with_empty_company_denies_everyone(role):
    u = user(role, ("c1", "owner"))
    assert r.can_manage_users(u, "") is False
    assert r.can(u, Capability.MANAGE_USERS, "") is False
    assert r.can(u, Capability.MANAGE_USERS) is False


@pytest.mark.parametrize("bad", ["", "   ", 123, ["c1"]])
def test_malformed_company_id_denies_scoped_predicates(bad):
    owner = user("company_owner", ("c1", "owner"))
    assert r.can_manage_budgets(owner, bad) is False
    assert r.can_manage_expenses(owner, bad) is False
    assert r.can_create_expenses(owner, bad) is False
    d = r.decide(owner, Capability.MANAGE_BUDGETS, bad)
    assert d.allowed is False
    assert d.reason == "invalid_scope"


def test_decide_distinguishes_role_denial_from_scope_denial():
    viewer = user("company_admin", ("c1", "viewer"))
    by_role = r.decide(viewer, Capability.MANAGE_BUDGETS, "c1")
    by_scope = r.decide(viewer, Capability.MANAGE_BUDGETS, "")
    assert (by_role.allowed, by_role.reason, by_role.effective_role) == (False, "role", "viewer")
    assert (by_scope.allowed, by_scope.reason) == (False, "invalid_scope")


def test_decide_reports_company_owner_effective_role():
    d = r.decide(user("company_owner"), "manage_budgets", "c9")
    assert d.allowed is True
    assert d.reason == "granted"
    assert d.effective_role == "owner"


def test_is_company_admin_follows_assignment_table_for_owners():
    owner = user("company_owner", ("c1", "admin"), ("c2", "member"))
    assert r.is_company_admin(owner) is True
    assert r.is_company_admin(owner, "c1") is True
    assert r.is_company_admin(owner, "c2") is False
    assert r.is_company_admin(user("company_admin"), "anything") is True
    assert r.is_company_admin(user("member", ("c1", "admin")), "c1") is False


def test_is_admin_alias_matches_company_owner():
    assert r.is_admin is r.is_company_owner
    assert r.is_admin(user("company_owner")) is True
    assert r.is_admin(user("company_admin")) is False


def test_create_expenses_excludes_viewers():
    u = user("member", ("c1", "member"), ("c2", "viewer"))
    assert r.can_create_expenses(u) is True
    assert r.can_create_expenses(u, "c1") is True
    assert r.can_create_expenses(u, "c2") is False
    assert r.can_create_expenses(u, "c3") is False
    assert r.can_create_expenses(user("super_admin")) is False


def test_manage_analytics():
    assert r.can_manage_analytics(user("company_admin")) is True
    assert r.can_manage_analytics(user("company_owner")) is True
    assert r.can_manage_analytics(user("member")) is False
    assert r.can_manage_analytics(user("super_admin")) is False


@pytest.mark.parametrize("role", ALL_GLOBAL_ROLES)
def test_view_profile_always_allowed(role):
    assert r.can(user(role), Capability.VIEW_PROFILE) is True


def test_missing_role_data_is_minimum_privilege():
    blank = SimpleNamespace()
    assert r.is_member(blank) is True
    assert r.can_view_budgets(blank) is True
    assert r.can_manage_budgets(blank) is False
    assert r.can_manage_budgets(blank, "c1") is False
    assert r.can_manage_users(blank, "c1") is False
    assert r.can_view_super_admin(None) is False


def test_unknown_capability_is_denied():
    d = r.decide(user("company_owner"), "launch_rockets")
    assert d.allowed is False
    assert r.can(user("company_owner"), "launch_rockets") is False


def test_require_raises_distinct_errors():
    admin = user("company_admin", ("c1", "admin"))
    assert r.require(admin, Capability.MANAGE_BUDGETS, "c1").allowed is True
    with pytest.raises(InvalidScope):
        r.require(admin, Capability.MANAGE_USERS)
    with pytest.raises(AuthorizationDenied) as exc:
        r.require(admin, Capability.MANAGE_USERS, "c1")
    assert not isinstance(exc.value, InvalidScope)
    assert exc.value.capability == Capability.MANAGE_USERS


def test_require_names_unknown_capability_as_given():
    owner = user("company_owner")
    with pytest.raises(AuthorizationDenied) as exc:
        r.require(owner, "launch_rockets")
    assert exc.value.capability == "launch_rockets"
    assert exc.value.reason == "role"
    assert "launch_rockets" in str(exc.value)


def test_decisions_are_not_cached_between_identities():
    promoted = user("company_admin", ("c1", "admin"))
    demoted = user("company_admin", ("c1", "viewer"))
    assert r.can_manage_budgets(promoted, "c1") is True
    assert r.can_manage_budgets(demoted, "c1") is False
    assert r.can_manage_budgets(promoted, "c1") is True


def test_capability_matrix_for_company():
    m = r.capability_matrix(user("company_admin", ("c1", "admin")), "c1")
    assert m["global_role"] == "company_admin"
    assert m["company_role"] == "admin"
    assert m["effective_company_role"] == "admin"
    assert set(m["capabilities"]) == {c.value for c in Capability}
    assert m["capabilities"]["manage_budgets"] is True
    assert m["capabilities"]["manage_users"] is False
    assert m["capabilities"]["view_super_admin"] is False
    assert m["roles"] == {
        "is_super_admin": False,
        "is_company_owner": False,
        "is_company_admin": True,
        "is_member": False,
    }


def test_capability_matrix_without_company():
    m = r.capability_matrix(user("super_admin"))
    assert m["company_id"] is None
    assert m["effective_company_role"] is None
    assert m["capabilities"]["view_super_admin"] is True
    assert m["capabilities"]["view_dashboard"] is False
    assert m["capabilities"]["manage_users"] is False
