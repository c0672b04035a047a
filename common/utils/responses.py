"""
Response envelopes shared by every JSON endpoint.

Success bodies look like ``{"success": true, "data": ..., "message": ...}``,
errors like ``{"success": false, "error": {"message", "code", ...}}``. The
session-check endpoints are the one exception and return their own
``{authenticated, session}`` shape.

Example:
    from common.utils.responses import list_response

    @router.get("/sessions")
    async def list_sessions(session: SessionData = Depends(require_any_session)):
        sessions = await store.list_active(user_id=session.userId)
        return list_response(sessions)
"""

from typing import Any, Optional, Dict


def success_response(
    data: Any = None,
    message: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Success envelope. ``data`` and ``message`` are omitted when empty.

    Example:
        success_response({"role": "teacher", "status": "active"})
        # {"success": True, "data": {"role": "teacher", "status": "active"}}
    """
    body: Dict[str, Any] = {"success": True}
    if data is not None:
        body["data"] = data
    if message:
        body["message"] = message
    return body


def error_response(
    message: str,
    code: Optional[str] = None,
    details: Optional[Any] = None,
    errors: Optional[list] = None,
) -> Dict[str, Any]:
    """
    Error envelope.

    Args:
        message: Shown to the user as-is
        code: Stable identifier clients branch on, e.g. "INVALID_CREDENTIALS"
        details: Extra structured context
        errors: Per-field problems
    """
    error: Dict[str, Any] = {"message": message}
    if code:
        error["code"] = code
    if details is not None:
        error["details"] = details
    if errors:
        error["errors"] = errors
    return {"success": False, "error": error}


def list_response(
    items: list,
    message: Optional[str] = None,
) -> Dict[str, Any]:
    """Success envelope for a list, with its length under ``count``."""
    body = success_response(items, message)
    body["count"] = len(items)
    return body
