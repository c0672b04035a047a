"""
Auth client and dashboard shell checks.
"""

from schoolflow.client.auth_client import (
    ADMIN_ENDPOINTS,
    TEACHER_ENDPOINTS,
    AuthClient,
    AuthEndpoints,
    AuthState,
    AuthUser,
    ChangePasswordResult,
    LoginResult,
    StatusResult,
)
from schoolflow.client.shell_guard import (
    ShellDecision,
    ShellGuard,
    access_blocked_url,
    school_admin_shell,
    super_admin_shell,
    teacher_shell,
)

__all__ = [
    "ADMIN_ENDPOINTS",
    "TEACHER_ENDPOINTS",
    "AuthClient",
    "AuthEndpoints",
    "AuthState",
    "AuthUser",
    "ChangePasswordResult",
    "LoginResult",
    "StatusResult",
    "ShellDecision",
    "ShellGuard",
    "access_blocked_url",
    "school_admin_shell",
    "super_admin_shell",
    "teacher_shell",
]
