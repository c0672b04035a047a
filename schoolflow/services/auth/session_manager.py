"""
Session management for cookie-based authentication.

Translates between the opaque token held in a session cookie and the
``SessionData`` contract used by every authorization check. One class
serves both the admin cookie and the teacher cookie; the instances differ
only by cookie name.
"""

import logging
from datetime import timedelta
from typing import Optional, Sequence, Tuple

from fastapi import Request, Response

from schoolflow.models.principal import Principal
from schoolflow.models.roles import Role
from schoolflow.models.session import SessionData, SessionRecord, now_ms
from schoolflow.services.auth.device_detector import DeviceDetector, DeviceInfo
from schoolflow.services.auth.ip_utils import extract_ip_address
from schoolflow.services.auth.session_store import SessionStore
from schoolflow.services.auth.token_hasher import TokenHasher

logger = logging.getLogger(__name__)


class SessionManager:
    """
    Owns one session cookie and resolves it against the session store.
    """

    DEFAULT_EXPIRATION_DAYS = 7

    def __init__(
        self,
        store: SessionStore,
        device_detector: DeviceDetector,
        cookie_name: str,
        expiration_days: int = DEFAULT_EXPIRATION_DAYS,
        secure_cookies: bool = False,
    ):
        """
        Initialize SessionManager.

        Args:
            store: Session persistence
            device_detector: Service for parsing User-Agent
            cookie_name: Name of the cookie holding the opaque token
            expiration_days: Session lifetime, fixed at creation
            secure_cookies: Set the Secure attribute (production)
        """
        self._store = store
        self._device_detector = device_detector
        self._cookie_name = cookie_name
        self._expiration_days = expiration_days
        self._secure_cookies = secure_cookies

    @property
    def cookie_name(self) -> str:
        return self._cookie_name

    @property
    def store(self) -> SessionStore:
        return self._store

    @property
    def max_age(self) -> int:
        """Cookie lifetime in seconds."""
        return int(timedelta(days=self._expiration_days).total_seconds())

    # ─────────────────────────────────────────────────────────────────
    # Cookie lifecycle
    # ─────────────────────────────────────────────────────────────────

    def set_session_cookie(self, response: Response, token: str) -> None:
        """Attach the session cookie to an outgoing response."""
        response.set_cookie(
            key=self._cookie_name,
            value=token,
            max_age=self.max_age,
            path="/",
            httponly=True,
            secure=self._secure_cookies,
            samesite="lax",
        )

    def get_session_token(self, request: Request) -> Optional[str]:
        """Read the raw token from the request cookie, None if absent."""
        token = request.cookies.get(self._cookie_name)
        return token or None

    def clear_session(self, response: Response) -> None:
        """Expire the session cookie. Safe to call when no cookie exists."""
        response.delete_cookie(
            key=self._cookie_name,
            path="/",
            httponly=True,
            secure=self._secure_cookies,
            samesite="lax",
        )

    # ─────────────────────────────────────────────────────────────────
    # Session resolution
    # ─────────────────────────────────────────────────────────────────

    async def resolve_token(self, token: Optional[str]) -> Optional[SessionData]:
        """
        Resolve a raw token to session data.

        Returns None when there is no token, no matching row, the row has
        expired, or the store cannot be reached. Never raises.
        """
        if not token:
            return None

        try:
            record = await self._store.get_by_token(token)
        except Exception as e:
            logger.warning(f"Session lookup failed, treating as unauthenticated: {e}")
            return None

        if record is None:
            return None

        if record.is_expired():
            logger.debug(f"Session for user {record.userId} has expired")
            return None

        return SessionData.from_record(record)

    async def get_session(self, request: Request) -> Optional[SessionData]:
        """Session for the incoming request, or None."""
        return await self.resolve_token(self.get_session_token(request))

    # ─────────────────────────────────────────────────────────────────
    # Session creation and teardown
    # ─────────────────────────────────────────────────────────────────

    async def create_session(
        self,
        principal: Principal,
        request: Request,
        response: Response,
    ) -> Tuple[str, SessionData, DeviceInfo]:
        """
        Create a new session for a principal and set the cookie.

        Every call issues a fresh token; earlier sessions of the same
        principal stay valid.

        Args:
            principal: The authenticated principal
            request: Incoming request (IP and User-Agent are captured)
            response: Outgoing response that receives the cookie

        Returns:
            tuple of (token, session_data, device_info)
        """
        token = TokenHasher.generate_token()
        ip_address = extract_ip_address(request.headers)
        device_info = self._device_detector.detect(request.headers.get("user-agent", ""))

        now = now_ms()
        school_id = None if principal.role == Role.SUPER_ADMIN.value else principal.schoolId

        record = SessionRecord(
            tokenHash=TokenHasher.hash_token(token),
            userId=principal.id,
            email=principal.email,
            role=Role(principal.role),
            schoolId=school_id,
            ipAddress=ip_address,
            device=device_info["device"],
            browser=device_info["browser"],
            os=device_info["os"],
            deviceType=device_info["deviceType"],
            createdAt=now,
            lastActivity=now,
            expiresAt=now + self.max_age * 1000,
        )

        await self._store.create(record)
        self.set_session_cookie(response, token)

        return token, SessionData.from_record(record), device_info

    async def destroy_session(self, request: Request, response: Response) -> Optional[str]:
        """
        Delete the current session row and clear the cookie.

        Other sessions of the same principal are untouched.

        Returns:
            Hash of the destroyed token, or None if there was no cookie
        """
        token = self.get_session_token(request)
        self.clear_session(response)

        if not token:
            return None

        try:
            await self._store.delete(token)
        except Exception as e:
            # Cookie is already cleared; the row expires on its own
            logger.warning(f"Failed to delete session row on logout: {e}")

        return TokenHasher.hash_token(token)


async def resolve_request_session(
    request: Request,
    managers: Sequence[SessionManager],
) -> Optional[SessionData]:
    """
    First valid session found across several cookies.

    The route guard uses this with the admin manager first and the teacher
    manager second so both cookies lead to the same ``SessionData`` shape.
    """
    for manager in managers:
        session = await manager.get_session(request)
        if session is not None:
            return session
    return None
