"""
Authorization policy: decides whether a principal may perform an operation on a resource.

Pure and transport-independent. Rules, first match wins:

1. No principal: deny everything except authenticate.
2. ADMIN: grants from ADMIN_GRANTS.
3. USER on User resources: deny (no self-service account management).
4. USER on their own Shift/Message/Upload: grants from OWNER_GRANTS.
5. Otherwise deny.
"""

from dataclasses import dataclass
from enum import Enum

from guardroster.core.errors import Forbidden, Unauthenticated
from guardroster.core.roles import Role


class Operation(str, Enum):
    AUTHENTICATE = "authenticate"
    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class ResourceType(str, Enum):
    USER = "user"
    SHIFT = "shift"
    MESSAGE = "message"
    UPLOAD = "upload"


@dataclass(frozen=True)
class Principal:
    id: str
    role: Role


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: str = ""


ALLOW = Decision(True)

# Messages are immutable and uploads cannot be deleted, so no role holds those grants.
ADMIN_GRANTS: dict[ResourceType, frozenset[Operation]] = {
    ResourceType.USER: frozenset(
        {Operation.READ, Operation.CREATE, Operation.UPDATE, Operation.DELETE}
    ),
    ResourceType.SHIFT: frozenset(
        {Operation.READ, Operation.CREATE, Operation.UPDATE, Operation.DELETE}
    ),
    ResourceType.MESSAGE: frozenset({Operation.READ, Operation.CREATE}),
    ResourceType.UPLOAD: frozenset({Operation.READ, Operation.CREATE}),
}

# What a USER may do on rows they own. Shifts are admin-assigned; uploads are listed by admins only.
OWNER_GRANTS: dict[ResourceType, frozenset[Operation]] = {
    ResourceType.USER: frozenset(),
    ResourceType.SHIFT: frozenset({Operation.READ}),
    ResourceType.MESSAGE: frozenset({Operation.READ, Operation.CREATE}),
    ResourceType.UPLOAD: frozenset({Operation.CREATE}),
}

for _table in (ADMIN_GRANTS, OWNER_GRANTS):
    _missing = set(ResourceType) - set(_table)
    if _missing:
        raise RuntimeError(f"grant table does not cover {sorted(m.value for m in _missing)}")


def authorize(
    principal: Principal | None,
    operation: Operation,
    resource_type: ResourceType,
    resource_owner_id: str | None = None,
) -> Decision:
    """Return ALLOW or a Decision(False, reason) for the given triple."""
    if operation is Operation.AUTHENTICATE:
        return ALLOW
    if principal is None:
        return Decision(False, "Authentication required.")

    if principal.role is Role.ADMIN:
        if operation in ADMIN_GRANTS[resource_type]:
            return ALLOW
        return Decision(False, f"{operation.value} is not supported on {resource_type.value} resources.")

    if principal.role is Role.USER:
        if resource_type is ResourceType.USER:
            return Decision(False, "Admin access required.")
        if resource_owner_id is not None and resource_owner_id == principal.id:
            if operation in OWNER_GRANTS[resource_type]:
                return ALLOW
            return Decision(False, f"Only admins may {operation.value} {resource_type.value} resources.")
        return Decision(False, f"Access to another user's {resource_type.value} resources is not allowed.")

    raise ValueError(f"Unhandled role: {principal.role!r}")


def enforce(
    principal: Principal | None,
    operation: Operation,
    resource_type: ResourceType,
    resource_owner_id: str | None = None,
) -> None:
    """Raise Unauthenticated (no principal) or Forbidden when authorize() denies."""
    decision = authorize(principal, operation, resource_type, resource_owner_id)
    if decision.allowed:
        return
    if principal is None:
        raise Unauthenticated(decision.reason)
    raise Forbidden(decision.reason)
