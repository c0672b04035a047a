"""
FastAPI dependencies for SchoolFlow.

Provides dependency injection for all services.
"""

from functools import lru_cache
from typing import Annotated, Callable, Optional

from fastapi import Depends, Request
from motor.motor_asyncio import AsyncIOMotorDatabase

from common.utils.exceptions import ForbiddenException, UnauthorizedException
from schoolflow.config import Settings, settings as app_settings
from schoolflow.middleware.route_guard import RouteGuard, RouteGuardMiddleware
from schoolflow.models.roles import Role
from schoolflow.models.session import SessionData
from schoolflow.services.auth.device_detector import DeviceDetector
from schoolflow.services.auth.login_history import LoginHistoryService
from schoolflow.services.auth.principal_service import PrincipalService
from schoolflow.services.auth.session_manager import SessionManager, resolve_request_session
from schoolflow.services.auth.session_store import SessionStore
from schoolflow.services.logging.access_logger import AccessLogger


# ─────────────────────────────────────────────────────────────────
# Global service instances
# ─────────────────────────────────────────────────────────────────

_session_store: Optional[SessionStore] = None
_session_manager: Optional[SessionManager] = None
_teacher_session_manager: Optional[SessionManager] = None
_principal_service: Optional[PrincipalService] = None
_login_history_service: Optional[LoginHistoryService] = None
_access_logger: Optional[AccessLogger] = None
_route_guard_middleware: Optional[RouteGuardMiddleware] = None


# ─────────────────────────────────────────────────────────────────
# Cached singletons
# ─────────────────────────────────────────────────────────────────

@lru_cache()
def get_device_detector() -> DeviceDetector:
    """Get cached DeviceDetector instance."""
    return DeviceDetector()


# ─────────────────────────────────────────────────────────────────
# Initialization functions
# ─────────────────────────────────────────────────────────────────

def init_auth_services(db: AsyncIOMotorDatabase, settings: Settings) -> None:
    """Initialize session, principal and login-history services."""
    global _session_store, _session_manager, _teacher_session_manager
    global _principal_service, _login_history_service

    _session_store = SessionStore(db=db)
    device_detector = get_device_detector()

    _session_manager = SessionManager(
        store=_session_store,
        device_detector=device_detector,
        cookie_name=settings.SESSION_COOKIE_NAME,
        expiration_days=settings.SESSION_EXPIRE_DAYS,
        secure_cookies=settings.is_production(),
    )
    _teacher_session_manager = SessionManager(
        store=_session_store,
        device_detector=device_detector,
        cookie_name=settings.TEACHER_SESSION_COOKIE_NAME,
        expiration_days=settings.SESSION_EXPIRE_DAYS,
        secure_cookies=settings.is_production(),
    )

    _principal_service = PrincipalService(db=db)
    _login_history_service = LoginHistoryService(db=db)


def init_route_guard(settings: Settings, access_logger: Optional[AccessLogger] = None) -> None:
    """Initialize the access logger and the route guard middleware."""
    global _access_logger, _route_guard_middleware

    _access_logger = access_logger or AccessLogger(
        base_url=settings.ACCESS_LOG_BASE_URL,
        endpoint_path=settings.ACCESS_LOG_ENDPOINT,
        enabled=settings.ACCESS_LOG_ENABLED,
        timeout=settings.ACCESS_LOG_TIMEOUT_SECONDS,
    )
    _route_guard_middleware = RouteGuardMiddleware(
        guard=RouteGuard.from_settings(settings),
        session_managers=[get_session_manager(), get_teacher_session_manager()],
        access_logger=_access_logger,
        request_id_cookie_name=settings.REQUEST_ID_COOKIE_NAME,
        request_id_cookie_max_age=settings.REQUEST_ID_COOKIE_MAX_AGE,
    )


def init_all_services(
    db: AsyncIOMotorDatabase,
    settings: Settings = app_settings,
    access_logger: Optional[AccessLogger] = None,
) -> None:
    """
    Initialize all services at application startup.

    Args:
        db: MongoDB database connection
        settings: Application settings
        access_logger: Replaces the HTTP access logger (tests)
    """
    init_auth_services(db, settings)
    init_route_guard(settings, access_logger)


# ─────────────────────────────────────────────────────────────────
# Service getters
# ─────────────────────────────────────────────────────────────────

def get_session_store() -> SessionStore:
    """Get session store instance."""
    if _session_store is None:
        raise RuntimeError("Auth services not initialized.")
    return _session_store


def get_session_manager() -> SessionManager:
    """Get the admin session manager."""
    if _session_manager is None:
        raise RuntimeError("Auth services not initialized.")
    return _session_manager


def get_teacher_session_manager() -> SessionManager:
    """Get the teacher session manager."""
    if _teacher_session_manager is None:
        raise RuntimeError("Auth services not initialized.")
    return _teacher_session_manager


def get_principal_service() -> PrincipalService:
    """Get principal service instance."""
    if _principal_service is None:
        raise RuntimeError("Auth services not initialized.")
    return _principal_service


def get_login_history_service() -> LoginHistoryService:
    """Get login history service instance."""
    if _login_history_service is None:
        raise RuntimeError("Auth services not initialized.")
    return _login_history_service


def get_access_logger() -> AccessLogger:
    """Get access logger instance."""
    if _access_logger is None:
        raise RuntimeError("Route guard not initialized.")
    return _access_logger


def get_route_guard_middleware() -> RouteGuardMiddleware:
    """Get route guard middleware instance."""
    if _route_guard_middleware is None:
        raise RuntimeError("Route guard not initialized.")
    return _route_guard_middleware


# ─────────────────────────────────────────────────────────────────
# Session dependencies
# ─────────────────────────────────────────────────────────────────

async def optional_session(
    request: Request,
    session_manager: Annotated[SessionManager, Depends(get_session_manager)],
) -> Optional[SessionData]:
    """Admin session for the request, or None."""
    return await session_manager.get_session(request)


async def optional_teacher_session(
    request: Request,
    session_manager: Annotated[SessionManager, Depends(get_teacher_session_manager)],
) -> Optional[SessionData]:
    """Teacher session for the request, or None."""
    return await session_manager.get_session(request)


async def require_session(
    session: Annotated[Optional[SessionData], Depends(optional_session)],
) -> SessionData:
    """Dependency that requires an admin session."""
    if session is None:
        raise UnauthorizedException(
            message="Authentication required",
            code="AUTH_REQUIRED"
        )
    return session


async def require_teacher_session(
    session: Annotated[Optional[SessionData], Depends(optional_teacher_session)],
) -> SessionData:
    """Dependency that requires a teacher session."""
    if session is None or session.role != Role.TEACHER:
        raise UnauthorizedException(
            message="Authentication required",
            code="AUTH_REQUIRED"
        )
    return session


async def require_any_session(
    request: Request,
    admin_manager: Annotated[SessionManager, Depends(get_session_manager)],
    teacher_manager: Annotated[SessionManager, Depends(get_teacher_session_manager)],
) -> SessionData:
    """Dependency that accepts either cookie."""
    session = await resolve_request_session(request, [admin_manager, teacher_manager])
    if session is None:
        raise UnauthorizedException(
            message="Authentication required",
            code="AUTH_REQUIRED"
        )
    return session


def require_roles(*roles: Role) -> Callable:
    """
    Build a dependency that requires an admin session with one of ``roles``.

    Usage:
        @router.get("/stats")
        async def stats(session: SessionData = Depends(require_roles(Role.SUPER_ADMIN))):
            ...
    """
    async def dependency(
        session: Annotated[SessionData, Depends(require_session)],
    ) -> SessionData:
        if session.role not in roles:
            raise ForbiddenException(
                message="Insufficient permissions",
                code="FORBIDDEN"
            )
        return session

    return dependency
