"""
Status-aware dashboard shell check.

The route guard only sees the role cached on the session. Each dashboard
shell re-checks on mount and on every session re-check: session first,
then role, then (school admin and teacher shells) the live account status.
"""

import logging
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlencode

from schoolflow.client.auth_client import AuthClient
from schoolflow.models.roles import BLOCKED_STATUSES, PrincipalStatus, Role, parse_status

logger = logging.getLogger(__name__)

ACCESS_BLOCKED_PATH = "/school-admin/access-blocked"

BLOCKED_REASONS = {
    PrincipalStatus.SUSPENDED: "Your account has been suspended.",
    PrincipalStatus.INACTIVE: "Your account has been deactivated.",
    PrincipalStatus.DELETED: "Your account has been deleted.",
}


@dataclass
class ShellDecision:
    """Whether a shell renders, and where it sends the user otherwise."""
    render: bool
    redirect_url: Optional[str] = None
    reason: Optional[str] = None


def access_blocked_url(status: PrincipalStatus, path: str = ACCESS_BLOCKED_PATH) -> str:
    """Access-blocked page URL carrying the reason and status."""
    query = urlencode({"reason": BLOCKED_REASONS[status], "status": status.value})
    return f"{path}?{query}"


class ShellGuard:
    """
    Per-shell verification run before rendering a dashboard.
    """

    def __init__(
        self,
        client: AuthClient,
        required_role: Role,
        check_status: bool,
        access_blocked_path: str = ACCESS_BLOCKED_PATH,
    ):
        """
        Initialize ShellGuard.

        Args:
            client: Auth client for this shell
            required_role: Role the shell renders for
            check_status: Look up the live account status
            access_blocked_path: Page for suspended, inactive and deleted accounts
        """
        self._client = client
        self._required_role = required_role
        self._check_status = check_status
        self._access_blocked_path = access_blocked_path

    async def verify(self) -> ShellDecision:
        """
        Decide whether the shell renders. Nothing is cached between calls.

        Returns:
            ShellDecision
        """
        state = await self._client.check_auth()
        login_page = self._client.endpoints.login_page

        if not state.authenticated or state.user is None:
            return ShellDecision(render=False, redirect_url=login_page)

        if state.user.role != self._required_role.value:
            return ShellDecision(render=False, redirect_url=login_page)

        if self._check_status:
            result = await self._client.fetch_status()
            if result is None:
                # Session is valid; an unreadable status does not block the shell
                logger.debug("Account status unavailable, rendering shell")
                return ShellDecision(render=True)

            status = parse_status(result.status)
            if status in BLOCKED_STATUSES:
                return ShellDecision(
                    render=False,
                    redirect_url=access_blocked_url(status, self._access_blocked_path),
                    reason=BLOCKED_REASONS[status],
                )

        return ShellDecision(render=True)


def super_admin_shell(client: AuthClient) -> ShellGuard:
    """Super-admin shell: role check only."""
    return ShellGuard(client, Role.SUPER_ADMIN, check_status=False)


def school_admin_shell(client: AuthClient) -> ShellGuard:
    """School-admin shell: role check plus live status."""
    return ShellGuard(client, Role.SCHOOL_ADMIN, check_status=True)


def teacher_shell(client: AuthClient) -> ShellGuard:
    """Teacher shell: role check plus live status."""
    return ShellGuard(client, Role.TEACHER, check_status=True)
