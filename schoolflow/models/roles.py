"""
Roles and account statuses shared by sessions and principals.
"""

from enum import Enum


class Role(str, Enum):
    """Kind of principal that can hold a session."""
    SUPER_ADMIN = "super_admin"
    SCHOOL_ADMIN = "school_admin"
    TEACHER = "teacher"


class PrincipalStatus(str, Enum):
    """Account status stored on every principal record."""
    ACTIVE = "active"
    PENDING = "pending"
    SUSPENDED = "suspended"
    INACTIVE = "inactive"
    DELETED = "deleted"


# Statuses that keep a signed-in principal out of its dashboard
BLOCKED_STATUSES = frozenset({
    PrincipalStatus.SUSPENDED,
    PrincipalStatus.INACTIVE,
    PrincipalStatus.DELETED,
})


def parse_role(value) -> "Role | None":
    """Return the Role for a stored value, or None if it is not a known role."""
    if isinstance(value, Role):
        return value
    try:
        return Role(value)
    except ValueError:
        return None


def parse_status(value) -> "PrincipalStatus | None":
    """Return the PrincipalStatus for a stored value, or None if unknown."""
    if isinstance(value, PrincipalStatus):
        return value
    try:
        return PrincipalStatus(value)
    except ValueError:
        return None
