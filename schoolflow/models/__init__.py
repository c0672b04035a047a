"""
SchoolFlow domain models.
"""

from schoolflow.models.roles import (
    Role,
    PrincipalStatus,
    BLOCKED_STATUSES,
    parse_role,
    parse_status,
)
from schoolflow.models.principal import (
    SuperAdmin,
    SchoolAdmin,
    Teacher,
    Principal,
    collection_for_role,
    principal_from_document,
    display_name,
)
from schoolflow.models.session import SessionRecord, SessionData, now_ms
from schoolflow.models.login_history import LoginHistoryEntry

__all__ = [
    "Role",
    "PrincipalStatus",
    "BLOCKED_STATUSES",
    "parse_role",
    "parse_status",
    "SuperAdmin",
    "SchoolAdmin",
    "Teacher",
    "Principal",
    "collection_for_role",
    "principal_from_document",
    "display_name",
    "SessionRecord",
    "SessionData",
    "now_ms",
    "LoginHistoryEntry",
]
