"""
Async auth client.

Mirrors what a dashboard needs from the auth API: hydrate the session on
mount, log in and out, change the password and read the live account
status. State lives on the client instance, one per shell; there is no
module-level cache, so concurrent users never share state.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import httpx

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthEndpoints:
    """Endpoint profile for one login flow."""
    session: str
    login: str
    logout: str
    change_password: str
    status: str
    login_page: str


ADMIN_ENDPOINTS = AuthEndpoints(
    session="/api/auth/session",
    login="/api/auth/login",
    logout="/api/auth/logout",
    change_password="/api/auth/change-password",
    status="/api/auth/status",
    login_page="/login",
)

TEACHER_ENDPOINTS = AuthEndpoints(
    session="/api/teacher-auth/session",
    login="/api/teacher-auth/login",
    logout="/api/teacher-auth/logout",
    change_password="/api/teacher-auth/change-password",
    status="/api/teacher-auth/status",
    login_page="/teacher/login",
)


@dataclass
class AuthUser:
    """Session fields returned by the session check."""
    userId: str
    email: str
    role: str
    schoolId: Optional[str] = None


@dataclass
class AuthState:
    """Client-side auth state. ``loading`` stays True until the first check."""
    user: Optional[AuthUser] = None
    loading: bool = True
    authenticated: bool = False


@dataclass
class LoginResult:
    success: bool
    message: str
    role: Optional[str] = None
    redirectTo: Optional[str] = None


@dataclass
class ChangePasswordResult:
    success: bool
    message: Optional[str] = None
    error: Optional[str] = None


@dataclass
class StatusResult:
    role: str
    status: str


def _error_message(response: httpx.Response, default: str) -> str:
    """Message from an API error body, or ``default``."""
    try:
        body = response.json()
    except ValueError:
        return default
    if not isinstance(body, dict):
        return default
    error = body.get("error")
    if isinstance(error, dict) and error.get("message"):
        return error["message"]
    return body.get("message") or default


class AuthClient:
    """
    Auth hooks over an ``httpx.AsyncClient``.

    The HTTP client carries the cookie jar, so the session cookie set by
    ``login`` is sent on every later call.
    """

    def __init__(self, http: httpx.AsyncClient, endpoints: AuthEndpoints = ADMIN_ENDPOINTS):
        """
        Initialize AuthClient.

        Args:
            http: Client bound to the API origin
            endpoints: Admin or teacher endpoint profile
        """
        self._http = http
        self._endpoints = endpoints
        self.state = AuthState()

    @property
    def endpoints(self) -> AuthEndpoints:
        return self._endpoints

    def _set_unauthenticated(self) -> None:
        self.state = AuthState(user=None, loading=False, authenticated=False)

    async def check_auth(self) -> AuthState:
        """
        Hydrate state from the session-check endpoint.

        Any failure, 401 or network error alike, leaves the client
        unauthenticated. Never raises.
        """
        try:
            response = await self._http.get(self._endpoints.session)
            data = response.json() if response.status_code == 200 else {}
        except (httpx.HTTPError, ValueError) as e:
            logger.debug(f"Auth check error: {e}")
            self._set_unauthenticated()
            return self.state

        if not isinstance(data, dict):
            data = {}

        session = data.get("session")
        if not isinstance(session, dict):
            session = {}

        if data.get("authenticated") and all(session.get(k) for k in ("userId", "email", "role")):
            self.state = AuthState(
                user=AuthUser(
                    userId=session["userId"],
                    email=session["email"],
                    role=session["role"],
                    schoolId=session.get("schoolId"),
                ),
                loading=False,
                authenticated=True,
            )
        else:
            self._set_unauthenticated()

        return self.state

    async def login(self, email: str, password: str) -> LoginResult:
        """
        Log in and hydrate state on success.

        Returns:
            LoginResult; failures carry the server message
        """
        try:
            response = await self._http.post(
                self._endpoints.login,
                json={"email": email, "password": password},
            )
        except httpx.HTTPError as e:
            logger.debug(f"Login failed: {e}")
            return LoginResult(success=False, message="Login failed. Please try again.")

        if response.status_code != 200:
            return LoginResult(success=False, message=_error_message(response, "Login failed"))

        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        data = body.get("data")
        if not isinstance(data, dict):
            data = {}
        await self.check_auth()

        return LoginResult(
            success=True,
            message=body.get("message", "Login successful"),
            role=data.get("role"),
            redirectTo=data.get("redirectTo"),
        )

    async def logout(self) -> str:
        """
        End the current session and reset state.

        Returns:
            Login page to navigate to
        """
        try:
            await self._http.post(self._endpoints.logout)
        except httpx.HTTPError as e:
            logger.debug(f"Logout error: {e}")

        self._set_unauthenticated()
        return self._endpoints.login_page

    async def change_password(self, current_password: str, new_password: str) -> ChangePasswordResult:
        """Change the signed-in principal's password."""
        try:
            response = await self._http.post(
                self._endpoints.change_password,
                json={"currentPassword": current_password, "newPassword": new_password},
            )
        except httpx.HTTPError as e:
            logger.debug(f"Password change failed: {e}")
            return ChangePasswordResult(
                success=False,
                error="Failed to change password. Please try again.",
            )

        if response.status_code == 200:
            return ChangePasswordResult(
                success=True,
                message=response.json().get("message"),
            )
        return ChangePasswordResult(
            success=False,
            error=_error_message(response, "Failed to change password"),
        )

    async def fetch_status(self) -> Optional[StatusResult]:
        """Live account status, or None when it cannot be read."""
        try:
            response = await self._http.get(self._endpoints.status)
            if response.status_code != 200:
                return None
            data = response.json().get("data") or {}
        except (httpx.HTTPError, ValueError) as e:
            logger.debug(f"Status check failed: {e}")
            return None

        if not data.get("status"):
            return None
        return StatusResult(role=data.get("role", ""), status=data["status"])
