"""Role model for tenant access control.

Design:
- Two closed role vocabularies: one platform-wide global role, and one role
  per company assignment.
- Raw role strings are normalized once at the boundary (case-insensitive).
- Unknown or missing roles degrade to the least-privileged role; they never
  raise.
- Lookups are safe on partially populated identities (every field optional).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Mapping, Optional, Sequence


class GlobalRole(str, Enum):
    """Platform-wide roles (one per user)."""

    SUPER_ADMIN = "super_admin"
    COMPANY_OWNER = "company_owner"
    COMPANY_ADMIN = "company_admin"
    MEMBER = "member"


class CompanyRole(str, Enum):
    """Roles scoped to a single company assignment (ordered by privilege)."""

    OWNER = "owner"
    ADMIN = "admin"
    MANAGER = "manager"
    MEMBER = "member"
    VIEWER = "viewer"


class DuplicateCompanyAssignment(ValueError):
    """Raised when an identity lists the same company more than once."""


def _normalize(raw: Any) -> str:
    if isinstance(raw, Enum):
        raw = raw.value
    if not isinstance(raw, str):
        return ""
    return raw.strip().lower()


def parse_global_role(raw: Any) -> GlobalRole:
    """Normalize a raw global role; defaults to MEMBER."""
    try:
        return GlobalRole(_normalize(raw))
    except ValueError:
        return GlobalRole.MEMBER


def parse_company_role(raw: Any) -> CompanyRole:
    """Normalize a raw company role; defaults to VIEWER."""
    try:
        return CompanyRole(_normalize(raw))
    except ValueError:
        return CompanyRole.VIEWER


@dataclass(frozen=True, slots=True)
class CompanyRoleAssignment:
    company_id: str
    role: CompanyRole
    joined_at: Optional[datetime] = None

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "CompanyRoleAssignment":
        company_id = raw.get("company_id", raw.get("companyId"))
        joined_at = raw.get("joined_at", raw.get("joinedAt"))
        if isinstance(joined_at, str):
            try:
                joined_at = datetime.fromisoformat(joined_at.replace("Z", "+00:00"))
            except ValueError:
                joined_at = None
        elif not isinstance(joined_at, datetime):
            joined_at = None
        return cls(
            company_id=str(company_id) if company_id is not None else "",
            role=parse_company_role(raw.get("role")),
            joined_at=joined_at,
        )


@dataclass(frozen=True, slots=True)
class UserIdentity:
    """Immutable identity snapshot supplied by the identity provider per call.

    `global_role` accepts raw strings and is normalized on construction.
    Company assignments keep their order; a company may appear only once.
    """

    id: str = ""
    email: str = ""
    global_role: GlobalRole = GlobalRole.MEMBER
    company_roles: tuple[CompanyRoleAssignment, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "global_role", parse_global_role(self.global_role))
        roles = tuple(self.company_roles or ())
        seen: set[str] = set()
        for a in roles:
            if not a.company_id:
                continue
            if a.company_id in seen:
                raise DuplicateCompanyAssignment(f"Company {a.company_id!r} assigned more than once.")
            seen.add(a.company_id)
        object.__setattr__(self, "company_roles", roles)

    @classmethod
    def from_claims(cls, claims: Mapping[str, Any]) -> "UserIdentity":
        """Build an identity from token claims or an API payload.

        Accepts `global_role`/`globalRole`, falling back to the legacy `role`
        claim, and `company_roles`/`companyRoles` as a list of mappings.
        """
        raw_role = claims.get("global_role") or claims.get("globalRole") or claims.get("role")
        raw_assignments: Sequence[Any] = claims.get("company_roles") or claims.get("companyRoles") or ()
        # An entry without a company grants nothing; it is dropped, not rejected.
        assignments = tuple(
            CompanyRoleAssignment.from_mapping(a) for a in raw_assignments if isinstance(a, Mapping)
        )
        assignments = tuple(a for a in assignments if a.company_id.strip())
        return cls(
            id=str(claims.get("sub") or claims.get("id") or ""),
            email=str(claims.get("email") or ""),
            global_role=raw_role,  # type: ignore[arg-type]
            company_roles=assignments,
        )


def global_role_of(user: Any) -> GlobalRole:
    """Global role of any user-like object; MEMBER when absent or unknown."""
    return parse_global_role(getattr(user, "global_role", None))


def company_role_of(user: Any, company_id: Optional[str]) -> Optional[CompanyRole]:
    """Exact-match company role lookup; None when there is no assignment."""
    if not isinstance(company_id, str) or not company_id:
        return None
    for a in getattr(user, "company_roles", None) or ():
        if getattr(a, "company_id", None) == company_id:
            return parse_company_role(getattr(a, "role", None))
    return None


def company_ids_of(user: Any) -> list[str]:
    """Companies the user participates in (none for platform operators)."""
    if global_role_of(user) == GlobalRole.SUPER_ADMIN:
        return []
    return [a.company_id for a in getattr(user, "company_roles", None) or () if a.company_id]


def primary_company_id(user: Any) -> Optional[str]:
    ids = company_ids_of(user)
    return ids[0] if ids else None
