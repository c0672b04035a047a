"""
FastAPI router for teacher authentication.

Same contract as the admin endpoints, on the teacher session cookie.
"""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Request, Response

from common.utils import success_response, BadRequestException
from schoolflow.dependencies import (
    get_login_history_service,
    get_principal_service,
    get_teacher_session_manager,
    optional_teacher_session,
    require_teacher_session,
)
from schoolflow.models.session import SessionData
from schoolflow.pipelines.auth import login_pipeline, logout_pipeline
from schoolflow.routers.auth import session_check_response, status_payload, touch_session
from schoolflow.schemas.auth import ChangePasswordRequest, LoginRequest
from schoolflow.services.auth.login_history import LoginHistoryService
from schoolflow.services.auth.principal_service import TEACHER_LOGIN_ROLES, PrincipalService
from schoolflow.services.auth.session_manager import SessionManager

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/teacher-auth", tags=["teacher-auth"])


@router.post("/login")
async def login(
    request: Request,
    response: Response,
    body: LoginRequest,
    principal_service: Annotated[PrincipalService, Depends(get_principal_service)],
    session_manager: Annotated[SessionManager, Depends(get_teacher_session_manager)],
    login_history: Annotated[LoginHistoryService, Depends(get_login_history_service)],
):
    """Login as a teacher."""
    result = await login_pipeline(
        principal_service=principal_service,
        session_manager=session_manager,
        login_history=login_history,
        request=request,
        response=response,
        identifier=body.email,
        password=body.password,
        roles=TEACHER_LOGIN_ROLES,
    )
    return success_response(result, message="Login successful")


@router.get("/session")
async def get_session(
    request: Request,
    session: Annotated[Optional[SessionData], Depends(optional_teacher_session)],
    session_manager: Annotated[SessionManager, Depends(get_teacher_session_manager)],
):
    """Session check for the teacher cookie."""
    if session is not None:
        await touch_session(session_manager, request)
    return session_check_response(session)


@router.post("/logout")
async def logout(
    request: Request,
    response: Response,
    session_manager: Annotated[SessionManager, Depends(get_teacher_session_manager)],
    login_history: Annotated[LoginHistoryService, Depends(get_login_history_service)],
):
    """Logout from the current teacher session."""
    await logout_pipeline(session_manager, login_history, request, response)
    return {"success": True}


@router.post("/change-password")
async def change_password(
    body: ChangePasswordRequest,
    session: Annotated[SessionData, Depends(require_teacher_session)],
    principal_service: Annotated[PrincipalService, Depends(get_principal_service)],
):
    """Change the signed-in teacher's password."""
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
    session: Annotated[SessionData, Depends(require_teacher_session)],
    principal_service: Annotated[PrincipalService, Depends(get_principal_service)],
):
    """Live account status of the signed-in teacher."""
    return success_response(await status_payload(principal_service, session))
