"""
FastAPI router for admin authentication.

Login, registration, session check, logout, password change and live
status for super admins and school admins.
"""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse

from common.utils import success_response, BadRequestException
from schoolflow.dependencies import (
    get_login_history_service,
    get_principal_service,
    get_session_manager,
    optional_session,
    require_roles,
    require_session,
)
from schoolflow.models.roles import PrincipalStatus, Role
from schoolflow.models.session import SessionData
from schoolflow.pipelines.auth import login_pipeline, logout_pipeline, register_pipeline
from schoolflow.schemas.auth import (
    ChangePasswordRequest,
    CreateSchoolAdminRequest,
    LoginRequest,
    RegisterRequest,
    SessionCheckResponse,
    SessionView,
    StatusResponse,
)
from schoolflow.services.auth.login_history import LoginHistoryService
from schoolflow.services.auth.principal_service import ADMIN_LOGIN_ROLES, PrincipalService
from schoolflow.services.auth.session_manager import SessionManager

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def session_check_response(session: Optional[SessionData]) -> JSONResponse:
    """``{authenticated, session}`` with 200 when signed in, 401 otherwise."""
    if session is None:
        body = SessionCheckResponse(authenticated=False, session=None)
        return JSONResponse(status_code=401, content=body.model_dump())

    body = SessionCheckResponse(
        authenticated=True,
        session=SessionView(**session.public_view()),
    )
    return JSONResponse(status_code=200, content=body.model_dump())


async def touch_session(session_manager: SessionManager, request: Request) -> None:
    """Bump lastActivity for the request's session, ignoring store errors."""
    token = session_manager.get_session_token(request)
    if not token:
        return
    try:
        await session_manager.store.update_activity(token)
    except Exception as e:
        logger.warning(f"Failed to update session activity: {e}")


async def status_payload(principal_service: PrincipalService, session: SessionData) -> dict:
    """Live status of the session's principal; a missing row reads as deleted."""
    status = await principal_service.get_status(session.role, session.userId)
    if status is None:
        status = PrincipalStatus.DELETED
    return StatusResponse(role=session.role.value, status=status.value).model_dump()


@router.post("/login")
async def login(
    request: Request,
    response: Response,
    body: LoginRequest,
    principal_service: Annotated[PrincipalService, Depends(get_principal_service)],
    session_manager: Annotated[SessionManager, Depends(get_session_manager)],
    login_history: Annotated[LoginHistoryService, Depends(get_login_history_service)],
):
    """
    Login as a super admin or school admin.

    Super admins are tried first, then school admins (by email or school id).
    """
    result = await login_pipeline(
        principal_service=principal_service,
        session_manager=session_manager,
        login_history=login_history,
        request=request,
        response=response,
        identifier=body.email,
        password=body.password,
        roles=ADMIN_LOGIN_ROLES,
    )
    return success_response(result, message="Login successful")


@router.post("/register")
async def register(
    request: Request,
    response: Response,
    body: RegisterRequest,
    principal_service: Annotated[PrincipalService, Depends(get_principal_service)],
    session_manager: Annotated[SessionManager, Depends(get_session_manager)],
    login_history: Annotated[LoginHistoryService, Depends(get_login_history_service)],
):
    """
    Register the first super admin.

    Rejected once any super admin exists.
    """
    result = await register_pipeline(
        principal_service=principal_service,
        session_manager=session_manager,
        login_history=login_history,
        request=request,
        response=response,
        name=body.name,
        email=body.email,
        password=body.password,
    )
    return success_response(result, message="Registration successful")


@router.post("/create-school-admin")
async def create_school_admin(
    body: CreateSchoolAdminRequest,
    session: Annotated[SessionData, Depends(require_roles(Role.SUPER_ADMIN))],
    principal_service: Annotated[PrincipalService, Depends(get_principal_service)],
):
    """
    Invite a school admin with a temporary password.

    The temporary password is echoed back once so the super admin can
    pass it on.
    """
    if not body.name or not body.email or not body.schoolId or not body.tempPassword:
        raise BadRequestException(
            message="Name, email, schoolId, and tempPassword are required",
            code="MISSING_FIELDS"
        )

    admin = await principal_service.create_school_admin(
        name=body.name,
        email=body.email,
        school_id=body.schoolId,
        temp_password=body.tempPassword,
        invited_by=session.userId,
    )
    return success_response({
        "adminId": admin.id,
        "schoolId": admin.schoolId,
        "tempPassword": body.tempPassword,
    }, message="School Admin created successfully")


@router.get("/session")
async def get_session(
    request: Request,
    session: Annotated[Optional[SessionData], Depends(optional_session)],
    session_manager: Annotated[SessionManager, Depends(get_session_manager)],
):
    """
    Session check for the admin cookie.

    Returns ``{authenticated, session}``; 401 when there is no valid session.
    """
    if session is not None:
        await touch_session(session_manager, request)
    return session_check_response(session)


@router.post("/logout")
async def logout(
    request: Request,
    response: Response,
    session_manager: Annotated[SessionManager, Depends(get_session_manager)],
    login_history: Annotated[LoginHistoryService, Depends(get_login_history_service)],
):
    """
    Logout from the current session.

    Clears the cookie even when there is no session.
    """
    await logout_pipeline(session_manager, login_history, request, response)
    return {"success": True}


@router.post("/change-password")
async def change_password(
    body: ChangePasswordRequest,
    session: Annotated[SessionData, Depends(require_roles(Role.SUPER_ADMIN, Role.SCHOOL_ADMIN))],
    principal_service: Annotated[PrincipalService, Depends(get_principal_service)],
):
    """
    Change the signed-in admin's password.

    Other sessions of the same admin are not revoked.
    """
    if not body.currentPassword or not body.newPassword:
        raise BadRequestException(
            message="Current password and new password are required",
            code="MISSING_FIELDS"
        )

    await principal_service.change_password(
        session.role, session.userId, body.currentPassword, body.newPassword
    )
    return success_response(message="Password changed successfully")


@router.get("/status")
async def get_status(
    session: Annotated[SessionData, Depends(require_session)],
    principal_service: Annotated[PrincipalService, Depends(get_principal_service)],
):
    """Live account status of the signed-in admin."""
    return success_response(await status_payload(principal_service, session))
