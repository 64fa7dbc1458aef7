"""Declarative access policy: (resource, action) -> allowed roles + tenant rule.

Every route asks `authorize` (through the `require` dependency) before doing any
work, then calls `ensure_same_tenant` once it has loaded a tenant-scoped row.
"""

from dataclasses import dataclass
from typing import FrozenSet

from facturo.app.core.errors import Forbidden
from facturo.app.core.logger import logger
from facturo.app.models.user import Role, User

READ = "read"
WRITE = "write"

STAFF = frozenset({Role.OWNER, Role.ADMIN, Role.MANAGER, Role.EMPLOYEE})
MANAGEMENT = frozenset({Role.OWNER, Role.ADMIN})
EVERYONE = frozenset(Role)


@dataclass(frozen=True)
class Policy:
    roles: FrozenSet[Role]
    # Rows carry a company_id that must match the principal's
    tenant_scoped: bool = True
    # SUPER_ADMIN may reach rows of any tenant
    super_admin_cross_tenant: bool = False


POLICIES: dict[tuple[str, str], Policy] = {
    ("companies", READ): Policy(frozenset({Role.SUPER_ADMIN}), tenant_scoped=False),
    ("companies", WRITE): Policy(frozenset({Role.SUPER_ADMIN}), tenant_scoped=False),
    ("company", READ): Policy(STAFF | {Role.CLIENT}),
    ("company", WRITE): Policy(MANAGEMENT),
    ("users", READ): Policy(STAFF | {Role.SUPER_ADMIN}, super_admin_cross_tenant=True),
    ("users", WRITE): Policy(MANAGEMENT | {Role.SUPER_ADMIN}, super_admin_cross_tenant=True),
    ("taxes", READ): Policy(EVERYONE, tenant_scoped=False),
    ("taxes", WRITE): Policy(MANAGEMENT | {Role.SUPER_ADMIN}, tenant_scoped=False),
    ("groups", READ): Policy(STAFF),
    ("groups", WRITE): Policy(STAFF),
    ("invoices", READ): Policy(STAFF | {Role.CLIENT}),
    ("invoices", WRITE): Policy(STAFF),
    ("transfers", READ): Policy(MANAGEMENT),
    ("transfers", WRITE): Policy(MANAGEMENT),
    ("exports", READ): Policy(MANAGEMENT),
    ("imports", WRITE): Policy(MANAGEMENT),
}


def get_policy(resource: str, action: str) -> Policy:
    try:
        return POLICIES[(resource, action)]
    except KeyError:
        raise KeyError(f"No access policy for {resource}:{action}") from None


def is_super_admin(user: User) -> bool:
    return user.role == Role.SUPER_ADMIN


def authorize(user: User, resource: str, action: str) -> Policy:
    """Check role membership and tenant attachment; return the matched policy."""
    policy = get_policy(resource, action)
    if user.role not in policy.roles:
        logger.warning(f"User {user.id} ({user.role.value}) denied {action} on {resource}")
        raise Forbidden("You do not have permission to perform this action")
    if policy.tenant_scoped and user.company_id is None:
        if not (policy.super_admin_cross_tenant and is_super_admin(user)):
            raise Forbidden("No company associated with this account")
    return policy


def ensure_same_tenant(user: User, company_id: int | None, policy: Policy) -> None:
    if not policy.tenant_scoped:
        return
    if policy.super_admin_cross_tenant and is_super_admin(user):
        return
    if company_id != user.company_id:
        logger.warning(f"User {user.id} denied access to a row of company {company_id}")
        raise Forbidden("Resource belongs to a different company")


def scope_company_id(user: User, policy: Policy) -> int | None:
    """Company to filter list queries by; None means every tenant."""
    if not policy.tenant_scoped:
        return None
    # A SUPER_ADMIN has no company and, where allowed, lists across tenants
    return user.company_id
