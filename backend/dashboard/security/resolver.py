"""Authorization resolver (pure, stateless, deny-by-default).

Design:
- Capabilities are a closed enumeration; each has exactly one canonical
  predicate.
- Role families are checked in a fixed order and the first matching rule wins:
  super admin, company owner, company admin, member.
- A super admin is a platform operator, not a tenant participant: every
  company-scoped capability is denied to that role.
- A company id that is given but empty or malformed always denies. Omitting
  the id selects the global form of predicates that have one.
- Nothing is cached. Every call re-derives the decision from the identity
  passed in.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional, Union

from dashboard.security.roles import (
    CompanyRole,
    GlobalRole,
    company_role_of,
    global_role_of,
)


class Capability(str, Enum):
    VIEW_DASHBOARD = "view_dashboard"
    VIEW_COMPANIES = "view_companies"
    MANAGE_COMPANIES = "manage_companies"
    VIEW_EXPENSES = "view_expenses"
    MANAGE_EXPENSES = "manage_expenses"
    CREATE_EXPENSES = "create_expenses"
    VIEW_BUDGETS = "view_budgets"
    MANAGE_BUDGETS = "manage_budgets"
    VIEW_ANALYTICS = "view_analytics"
    MANAGE_ANALYTICS = "manage_analytics"
    VIEW_USERS = "view_users"
    MANAGE_USERS = "manage_users"
    VIEW_SUPER_ADMIN = "view_super_admin"
    VIEW_PROFILE = "view_profile"


class AuthorizationDenied(Exception):
    """Raised by `require` only; `can`/`decide` never raise for a denial."""

    def __init__(self, capability: Union[Capability, str], reason: str = "role") -> None:
        # Canonical name for known capabilities, the raw name otherwise.
        name = capability.value if isinstance(capability, Capability) else str(capability)
        super().__init__(f"{name} denied ({reason})")
        self.capability = name
        self.reason = reason


class InvalidScope(AuthorizationDenied):
    """Company-scoped capability called without a usable company id."""

    def __init__(self, capability: Union[Capability, str]) -> None:
        super().__init__(capability, reason="invalid_scope")


# No company id given: the global form. An empty string is a malformed id, not this.
_UNSCOPED: Any = None

_MANAGING_COMPANY_ROLES = frozenset({CompanyRole.OWNER, CompanyRole.ADMIN})
_CONTRIBUTING_COMPANY_ROLES = frozenset(
    {CompanyRole.OWNER, CompanyRole.ADMIN, CompanyRole.MANAGER, CompanyRole.MEMBER}
)


def valid_company_id(company_id: Any) -> bool:
    return isinstance(company_id, str) and bool(company_id.strip())


# ---- Role families ----------------------------------------------------------


def is_super_admin(user: Any) -> bool:
    return global_role_of(user) == GlobalRole.SUPER_ADMIN


def is_company_owner(user: Any) -> bool:
    return global_role_of(user) == GlobalRole.COMPANY_OWNER


def is_company_admin(user: Any, company_id: Optional[str] = _UNSCOPED) -> bool:
    """Global company admins always; company owners only where the table says owner/admin.

    Without a company id this is a global check only.
    """
    role = global_role_of(user)
    if role == GlobalRole.COMPANY_ADMIN:
        return True
    if role == GlobalRole.COMPANY_OWNER:
        if company_id is _UNSCOPED:
            return True
        return company_role_of(user, company_id) in _MANAGING_COMPANY_ROLES
    return False


def is_member(user: Any) -> bool:
    return global_role_of(user) == GlobalRole.MEMBER


def effective_company_role(user: Any, company_id: Any) -> Optional[CompanyRole]:
    """Company role used for scoped decisions.

    A global company owner counts as owner of any company it is asked about.
    Super admins hold no effective company role anywhere.
    """
    if not valid_company_id(company_id):
        return None
    role = global_role_of(user)
    if role == GlobalRole.SUPER_ADMIN:
        return None
    if role == GlobalRole.COMPANY_OWNER:
        return CompanyRole.OWNER
    return company_role_of(user, company_id)


# ---- Capability predicates --------------------------------------------------


def can_view_dashboard(user: Any) -> bool:
    return not is_super_admin(user)


def can_view_companies(user: Any) -> bool:
    return not is_super_admin(user)


def can_manage_companies(user: Any) -> bool:
    return is_company_owner(user)


def can_view_expenses(user: Any) -> bool:
    return not is_super_admin(user)


def can_manage_expenses(user: Any, company_id: Optional[str] = _UNSCOPED) -> bool:
    if is_super_admin(user) or is_member(user):
        return False
    if company_id is not _UNSCOPED:
        return effective_company_role(user, company_id) in _MANAGING_COMPANY_ROLES
    return is_company_owner(user) or is_company_admin(user)


def can_create_expenses(user: Any, company_id: Optional[str] = _UNSCOPED) -> bool:
    if is_super_admin(user):
        return False
    if company_id is not _UNSCOPED:
        return effective_company_role(user, company_id) in _CONTRIBUTING_COMPANY_ROLES
    return True


def can_view_budgets(user: Any) -> bool:
    return not is_super_admin(user)


def can_manage_budgets(user: Any, company_id: Optional[str] = _UNSCOPED) -> bool:
    # Budgets and expenses share one trust boundary.
    return can_manage_expenses(user, company_id)


def can_view_analytics(user: Any) -> bool:
    return not is_super_admin(user)


def can_manage_analytics(user: Any) -> bool:
    return not is_super_admin(user) and not is_member(user)


def can_view_users(user: Any, company_id: Optional[str] = _UNSCOPED) -> bool:
    if is_super_admin(user):
        return False
    if company_id is not _UNSCOPED:
        return effective_company_role(user, company_id) in _MANAGING_COMPANY_ROLES
    return is_company_owner(user) or is_company_admin(user)


def can_manage_users(user: Any, company_id: Optional[str] = _UNSCOPED) -> bool:
    """Owner-only: invite, remove and role changes. There is no global form."""
    if is_super_admin(user):
        return False
    return effective_company_role(user, company_id) == CompanyRole.OWNER


def can_view_super_admin(user: Any) -> bool:
    return is_super_admin(user)


def can_view_profile(user: Any) -> bool:
    return True


# Compatibility alias for callers that still use the old name.
is_admin = is_company_owner


Predicate = Callable[..., bool]

_PREDICATES: dict[Capability, Predicate] = {
    Capability.VIEW_DASHBOARD: can_view_dashboard,
    Capability.VIEW_COMPANIES: can_view_companies,
    Capability.MANAGE_COMPANIES: can_manage_companies,
    Capability.VIEW_EXPENSES: can_view_expenses,
    Capability.MANAGE_EXPENSES: can_manage_expenses,
    Capability.CREATE_EXPENSES: can_create_expenses,
    Capability.VIEW_BUDGETS: can_view_budgets,
    Capability.MANAGE_BUDGETS: can_manage_budgets,
    Capability.VIEW_ANALYTICS: can_view_analytics,
    Capability.MANAGE_ANALYTICS: can_manage_analytics,
    Capability.VIEW_USERS: can_view_users,
    Capability.MANAGE_USERS: can_manage_users,
    Capability.VIEW_SUPER_ADMIN: can_view_super_admin,
    Capability.VIEW_PROFILE: can_view_profile,
}

# Capabilities whose predicate takes an optional company id.
SCOPED_CAPABILITIES = frozenset(
    {
        Capability.MANAGE_EXPENSES,
        Capability.CREATE_EXPENSES,
        Capability.MANAGE_BUDGETS,
        Capability.VIEW_USERS,
        Capability.MANAGE_USERS,
    }
)

# Capabilities that cannot be evaluated without a company id.
COMPANY_REQUIRED = frozenset({Capability.MANAGE_USERS})


@dataclass(frozen=True, slots=True)
class Decision:
    capability: str
    allowed: bool
    effective_role: str
    reason: str  # granted | role | invalid_scope


def parse_capability(capability: Union[Capability, str]) -> Optional[Capability]:
    if isinstance(capability, Capability):
        return capability
    try:
        return Capability(str(capability).strip().lower())
    except ValueError:
        return None


def _effective_role_label(user: Any, capability: Capability, company_id: Any) -> str:
    if capability in SCOPED_CAPABILITIES and company_id is not _UNSCOPED:
        scoped = effective_company_role(user, company_id)
        if scoped is not None:
            return scoped.value
    return global_role_of(user).value


def decide(user: Any, capability: Union[Capability, str], company_id: Optional[str] = _UNSCOPED) -> Decision:
    """Evaluate one capability and explain the outcome.

    A capability name outside the enumeration is denied, never granted.
    """
    cap = parse_capability(capability)
    if cap is None:
        return Decision(
            capability=str(capability),
            allowed=False,
            effective_role=global_role_of(user).value,
            reason="role",
        )

    if cap in SCOPED_CAPABILITIES and company_id is not _UNSCOPED:
        allowed = _PREDICATES[cap](user, company_id)
        malformed = not valid_company_id(company_id)
    else:
        allowed = _PREDICATES[cap](user)
        malformed = cap in COMPANY_REQUIRED

    if allowed:
        reason = "granted"
    elif malformed:
        reason = "invalid_scope"
    else:
        reason = "role"
    return Decision(
        capability=cap.value,
        allowed=bool(allowed),
        effective_role=_effective_role_label(user, cap, company_id),
        reason=reason,
    )


def can(user: Any, capability: Union[Capability, str], company_id: Optional[str] = _UNSCOPED) -> bool:
    """Single capability query: allow/deny only."""
    return decide(user, capability, company_id).allowed


def require(user: Any, capability: Union[Capability, str], company_id: Optional[str] = _UNSCOPED) -> Decision:
    """Like `decide`, but raise on denial (transport seams only)."""
    d = decide(user, capability, company_id)
    if d.allowed:
        return d
    cap = parse_capability(capability) or capability
    if d.reason == "invalid_scope":
        raise InvalidScope(cap)
    raise AuthorizationDenied(cap, d.reason)


def capability_matrix(user: Any, company_id: Optional[str] = _UNSCOPED) -> dict[str, Any]:
    """Diagnostic view of every capability for one identity.

    Scoped capabilities are evaluated against `company_id` when one is given;
    MANAGE_USERS has no global form, so it reports False without one.
    """
    capabilities: dict[str, bool] = {}
    for cap in Capability:
        if cap in SCOPED_CAPABILITIES:
            capabilities[cap.value] = can(user, cap, company_id)
        else:
            capabilities[cap.value] = can(user, cap)

    company_role = company_role_of(user, company_id)
    effective = effective_company_role(user, company_id)
    return {
        "global_role": global_role_of(user).value,
        "company_id": company_id,
        "company_role": company_role.value if company_role else None,
        "effective_company_role": effective.value if effective else None,
        "roles": {
            "is_super_admin": is_super_admin(user),
            "is_company_owner": is_company_owner(user),
            "is_company_admin": is_company_admin(user, company_id),
            "is_member": is_member(user),
        },
        "capabilities": capabilities,
    }
