"""
FastAPI router for session management.

Lets a signed-in principal see and revoke their own sessions and login
history. Super admins also get platform-wide session statistics.
"""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query

from common.utils import success_response, list_response, NotFoundException
from schoolflow.dependencies import (
    get_login_history_service,
    get_session_store,
    require_any_session,
    require_roles,
)
from schoolflow.models.roles import Role, parse_role
from schoolflow.models.session import SessionData
from schoolflow.schemas.auth import SessionItem
from schoolflow.services.auth.login_history import LoginHistoryService
from schoolflow.services.auth.session_store import SessionStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sessions", tags=["sessions"])


def _format_session(doc: dict, current_session_id: str) -> dict:
    """Session document as shown to its owner. The token hash is never exposed."""
    return SessionItem(
        id=str(doc["_id"]),
        device=doc.get("device", "Unknown Device"),
        browser=doc.get("browser", "Unknown Browser"),
        os=doc.get("os", "Unknown OS"),
        deviceType=doc.get("deviceType", "unknown"),
        ipAddress=doc.get("ipAddress", ""),
        createdAt=doc.get("createdAt", 0),
        lastActivity=doc.get("lastActivity", 0),
        expiresAt=doc["expiresAt"],
        isCurrent=doc.get("tokenHash") == current_session_id,
    ).model_dump()


@router.get("")
async def list_sessions(
    session: Annotated[SessionData, Depends(require_any_session)],
    store: Annotated[SessionStore, Depends(get_session_store)],
):
    """Active sessions of the signed-in principal, most recent first."""
    docs = await store.list_active(user_id=session.userId)
    return list_response([_format_session(doc, session.sessionId) for doc in docs])


@router.post("/revoke-others")
async def revoke_other_sessions(
    session: Annotated[SessionData, Depends(require_any_session)],
    store: Annotated[SessionStore, Depends(get_session_store)],
):
    """Sign out every other device of the signed-in principal."""
    revoked = await store.revoke_all_except(session.userId, session.sessionId)
    return success_response({"revoked": revoked})


@router.get("/login-history")
async def login_history(
    session: Annotated[SessionData, Depends(require_any_session)],
    history: Annotated[LoginHistoryService, Depends(get_login_history_service)],
    limit: int = Query(50, ge=1, le=200),
):
    """Recent login attempts of the signed-in principal."""
    entries = await history.list_for_user(session.userId, limit=limit)
    return list_response(entries)


@router.get("/stats")
async def session_stats(
    session: Annotated[SessionData, Depends(require_roles(Role.SUPER_ADMIN))],
    store: Annotated[SessionStore, Depends(get_session_store)],
    role: Optional[str] = None,
):
    """Session counts across the platform, optionally for one role."""
    return success_response(await store.get_stats(role=parse_role(role) if role else None))


@router.delete("/{session_id}")
async def revoke_session(
    session_id: str,
    session: Annotated[SessionData, Depends(require_any_session)],
    store: Annotated[SessionStore, Depends(get_session_store)],
):
    """Revoke one of the signed-in principal's sessions."""
    if not await store.delete_by_id(session.userId, session_id):
        raise NotFoundException(message="Session not found", code="SESSION_NOT_FOUND")
    return success_response(message="Session revoked")
