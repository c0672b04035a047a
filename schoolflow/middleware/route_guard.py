"""
Role-based route guard.

Runs once per incoming request before any page or API handler. Decides
allow or redirect from the path and the resolved session, tags the
response with a request id and tenant subdomain, and hands an access event
to the access logger without waiting on it.

The guard is a coarse role gate. It never looks at account status;
dashboard shells do that against the live principal record.
"""

import ipaddress
import logging
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Iterable, Optional, Sequence
from urllib.parse import urlencode

from fastapi import Request
from fastapi.responses import RedirectResponse

from schoolflow.config import Settings
from schoolflow.models.roles import Role
from schoolflow.models.session import SessionData
from schoolflow.services.auth.session_manager import SessionManager, resolve_request_session
from schoolflow.services.logging.access_logger import AccessLogger, build_access_event

logger = logging.getLogger(__name__)


class PathKind(str, Enum):
    PUBLIC = "public"
    API = "api"
    PROTECTED = "protected"


@dataclass
class GuardDecision:
    """Outcome of the guard for one request."""
    allowed: bool
    redirect_url: Optional[str] = None


def matches_prefix(path: str, prefix: str) -> bool:
    """
    Segment-aware prefix match.

    "/super-admin" matches "/super-admin" and "/super-admin/schools" but
    not "/super-adminx". A prefix ending in "/" matches anything below it.
    """
    if prefix.endswith("/"):
        return path.startswith(prefix)
    return path == prefix or path.startswith(prefix + "/")


class RouteGuard:
    """
    Pure path classification and allow/redirect decisions.
    """

    def __init__(
        self,
        public_paths: Iterable[str],
        public_prefixes: Iterable[str],
        api_prefix: str,
        role_prefixes: Dict[str, Role],
        login_path: str,
    ):
        """
        Initialize RouteGuard.

        Args:
            public_paths: Exact paths reachable without a session
            public_prefixes: Path prefixes reachable without a session
            api_prefix: Prefix of API routes, which authorize themselves
            role_prefixes: Area prefix -> role required to enter it
            login_path: Where unauthenticated and wrong-role requests go
        """
        self._public_paths = frozenset(public_paths)
        self._public_prefixes = tuple(public_prefixes)
        self._api_prefix = api_prefix.rstrip("/")
        self._role_prefixes = dict(role_prefixes)
        self._login_path = login_path

    @classmethod
    def from_settings(cls, settings: Settings) -> "RouteGuard":
        return cls(
            public_paths=settings.get_public_paths(),
            public_prefixes=settings.get_public_path_prefixes(),
            api_prefix=settings.API_PREFIX,
            role_prefixes={
                settings.SUPER_ADMIN_PREFIX: Role.SUPER_ADMIN,
                settings.SCHOOL_ADMIN_PREFIX: Role.SCHOOL_ADMIN,
            },
            login_path=settings.LOGIN_PATH,
        )

    def classify_path(self, path: str) -> PathKind:
        """Classify a request path as public, API or protected."""
        if matches_prefix(path, self._api_prefix):
            return PathKind.API
        if path in self._public_paths:
            return PathKind.PUBLIC
        if any(matches_prefix(path, prefix) for prefix in self._public_prefixes):
            return PathKind.PUBLIC
        return PathKind.PROTECTED

    def required_role(self, path: str) -> Optional[Role]:
        """Role an area demands, or None if any signed-in principal may enter."""
        for prefix, role in self._role_prefixes.items():
            if matches_prefix(path, prefix):
                return role
        return None

    def login_redirect(self, path: str) -> str:
        return f"{self._login_path}?{urlencode({'redirect': path})}"

    def decide(
        self,
        path: str,
        session: Optional[SessionData],
        kind: Optional[PathKind] = None,
    ) -> GuardDecision:
        """
        Allow or redirect.

        Args:
            path: Request path
            session: Resolved session, None if unauthenticated
            kind: Precomputed classification of ``path``

        Returns:
            GuardDecision
        """
        kind = kind or self.classify_path(path)

        if kind in (PathKind.PUBLIC, PathKind.API):
            return GuardDecision(allowed=True)

        if session is None:
            return GuardDecision(allowed=False, redirect_url=self.login_redirect(path))

        required = self.required_role(path)
        if required is not None and session.role != required:
            return GuardDecision(allowed=False, redirect_url=self._login_path)

        return GuardDecision(allowed=True)


def tenant_subdomain(host: str) -> Optional[str]:
    """
    Tenant label from a Host header.

    The first DNS label, ignoring ports, ``localhost``, ``www`` and IP
    addresses.
    """
    hostname = (host or "").split(":")[0].strip().lower()
    if not hostname:
        return None
    try:
        ipaddress.ip_address(hostname)
        return None
    except ValueError:
        pass

    subdomain = hostname.split(".")[0]
    if subdomain in ("", "localhost", "www"):
        return None
    return subdomain


class RouteGuardMiddleware:
    """
    FastAPI HTTP middleware wrapping ``RouteGuard``.

    Attaches:
        - request.state.request_id: correlation id for this request
        - request.state.session: resolved session (protected paths only)
    """

    def __init__(
        self,
        guard: RouteGuard,
        session_managers: Sequence[SessionManager],
        access_logger: AccessLogger,
        request_id_cookie_name: str = "x-request-id",
        request_id_cookie_max_age: int = 60,
    ):
        """
        Initialize RouteGuardMiddleware.

        Args:
            guard: Path classification and decisions
            session_managers: Tried in order to resolve the session
            access_logger: Receives one event per request
            request_id_cookie_name: Cookie carrying the request id on page routes
            request_id_cookie_max_age: Lifetime of that cookie in seconds
        """
        self._guard = guard
        self._session_managers = list(session_managers)
        self._access_logger = access_logger
        self._request_id_cookie_name = request_id_cookie_name
        self._request_id_cookie_max_age = request_id_cookie_max_age
        self._redacted_cookies = [m.cookie_name for m in self._session_managers]

    async def __call__(self, request: Request, call_next: Callable):
        path = request.url.path

        # The log endpoint is not itself logged or guarded
        if path == self._access_logger.endpoint_path:
            return await call_next(request)

        request_id = str(uuid.uuid4())
        request.state.request_id = request_id

        self._access_logger.emit(build_access_event(request, request_id, self._redacted_cookies))

        kind = self._guard.classify_path(path)

        session = None
        if kind == PathKind.PROTECTED:
            session = await resolve_request_session(request, self._session_managers)
            request.state.session = session

        decision = self._guard.decide(path, session, kind)

        if decision.allowed:
            response = await call_next(request)
        else:
            logger.debug(f"Redirecting {path} to {decision.redirect_url}")
            response = RedirectResponse(url=decision.redirect_url, status_code=307)

        response.headers["x-request-id"] = request_id

        subdomain = tenant_subdomain(request.headers.get("host", ""))
        if subdomain:
            response.headers["x-tenant-subdomain"] = subdomain

        if kind != PathKind.API:
            response.set_cookie(
                key=self._request_id_cookie_name,
                value=request_id,
                max_age=self._request_id_cookie_max_age,
                path="/",
                httponly=True,
                secure=request.url.scheme == "https",
                samesite="lax",
            )

        return response
