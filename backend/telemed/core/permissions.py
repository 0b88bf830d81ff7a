"""
Role checks shared by the role-gated dependencies and handlers.
Trust: the role always comes from the stored users.role column, never from
token claims or email addresses.
"""
from telemed.core.audit import AuditLog
from telemed.core.exceptions import ApiError
from telemed.models.enums import Role
from telemed.models.user import User


def has_role(user: User, *roles: Role) -> bool:
    return user.role in {r.value for r in roles}


def ensure_role(user: User, *roles: Role, resource: str = "endpoint") -> None:
    """Raise 403 (and audit it) unless the user holds one of ``roles``."""
    if not has_role(user, *roles):
        allowed = ", ".join(r.value for r in roles)
        AuditLog.log_access_denied("access", resource, None, user.id, f"role {user.role} not in {allowed}")
        raise ApiError.forbidden(f"user {user.id} with role {user.role} on {resource}")
