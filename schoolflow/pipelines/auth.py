"""
Auth pipeline functions.

Stateless orchestration logic for login, registration and logout.
"""

import logging
from typing import Iterable

from fastapi import Request, Response

from common.utils.exceptions import BadRequestException, UnauthorizedException
from schoolflow.models.principal import Principal, Teacher, display_name
from schoolflow.models.roles import Role
from schoolflow.schemas.auth import LoginResponse
from schoolflow.services.auth.device_detector import parse_user_agent
from schoolflow.services.auth.ip_utils import extract_ip_address
from schoolflow.services.auth.login_history import LoginHistoryService
from schoolflow.services.auth.principal_service import PrincipalService
from schoolflow.services.auth.session_manager import SessionManager

logger = logging.getLogger(__name__)

# Landing page after login, per role
HOME_PATHS = {
    Role.SUPER_ADMIN: "/super-admin",
    Role.SCHOOL_ADMIN: "/school-admin",
    Role.TEACHER: "/teacher",
}


def home_path(role: Role) -> str:
    """Dashboard a principal lands on after login."""
    try:
        return HOME_PATHS[role]
    except KeyError:
        raise ValueError(f"Unknown role: {role!r}")


def format_principal(principal: Principal) -> dict:
    """Public view of a principal for login responses."""
    user = {
        "id": principal.id,
        "email": principal.email,
        "name": display_name(principal),
        "role": principal.role,
        "schoolId": principal.schoolId,
        "status": principal.status.value,
    }
    if isinstance(principal, Teacher):
        user["teacherId"] = principal.teacherId
        user["firstName"] = principal.firstName
        user["lastName"] = principal.lastName
        user["photoUrl"] = principal.photoUrl
    return user


async def start_session(
    principal: Principal,
    session_manager: SessionManager,
    principal_service: PrincipalService,
    login_history: LoginHistoryService,
    request: Request,
    response: Response,
) -> dict:
    """
    Issue a session for an authenticated principal.

    Returns:
        dict with role, redirectTo and user
    """
    role = Role(principal.role)

    _, session, device_info = await session_manager.create_session(principal, request, response)

    await login_history.record_success(
        principal,
        ip_address=extract_ip_address(request.headers),
        device_info=device_info,
        session_id=session.sessionId,
    )

    try:
        await principal_service.update_last_login(role, principal.id)
    except Exception as e:
        logger.warning(f"Failed to update last login for {principal.id}: {e}")

    return LoginResponse(
        role=role.value,
        redirectTo=home_path(role),
        user=format_principal(principal),
    ).model_dump()


async def login_pipeline(
    principal_service: PrincipalService,
    session_manager: SessionManager,
    login_history: LoginHistoryService,
    request: Request,
    response: Response,
    identifier: str,
    password: str,
    roles: Iterable[Role],
) -> dict:
    """
    Orchestrates the login flow.

    Credentials are the only thing checked. A principal whose account is
    suspended still gets a session; the dashboard shell blocks it.

    Args:
        principal_service: For credential checks
        session_manager: Manager owning the cookie for this login form
        login_history: Audit trail
        request: Incoming request (IP, User-Agent)
        response: Outgoing response receiving the cookie
        identifier: Email, or school id for school admins
        password: Plain password
        roles: Principal kinds this login form accepts, in lookup order

    Returns:
        dict with role, redirectTo and user

    Raises:
        BadRequestException: Missing identifier or password
        UnauthorizedException: No principal matches the credentials
    """
    if not identifier or not password:
        raise BadRequestException(
            message="Email and password are required",
            code="MISSING_CREDENTIALS"
        )

    roles = tuple(roles)
    principal = await principal_service.authenticate(identifier, password, roles)

    if principal is None:
        await login_history.record_failure(
            identifier=identifier,
            ip_address=extract_ip_address(request.headers),
            device_info=parse_user_agent(request.headers.get("user-agent", "")),
            reason="Invalid credentials",
            role=roles[0] if len(roles) == 1 else None,
        )
        raise UnauthorizedException(
            message="Invalid credentials",
            code="INVALID_CREDENTIALS"
        )

    result = await start_session(
        principal, session_manager, principal_service, login_history, request, response
    )
    logger.info(f"{principal.role} {principal.id} logged in")
    return result


async def register_pipeline(
    principal_service: PrincipalService,
    session_manager: SessionManager,
    login_history: LoginHistoryService,
    request: Request,
    response: Response,
    name: str,
    email: str,
    password: str,
) -> dict:
    """
    Create the first super admin and sign them in.

    Raises:
        BadRequestException: Missing fields or weak password
        ConflictException: A super admin already exists
    """
    if not name or not email or not password:
        raise BadRequestException(
            message="All fields are required",
            code="MISSING_FIELDS"
        )

    principal = await principal_service.create_first_super_admin(name, email, password)
    return await start_session(
        principal, session_manager, principal_service, login_history, request, response
    )


async def logout_pipeline(
    session_manager: SessionManager,
    login_history: LoginHistoryService,
    request: Request,
    response: Response,
) -> None:
    """
    End the current session only. Idempotent.

    Other sessions of the same principal stay valid.
    """
    session_id = await session_manager.destroy_session(request, response)
    if session_id:
        await login_history.mark_logout(session_id)
