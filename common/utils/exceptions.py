"""
HTTP exceptions carrying a machine-readable error code.

Every error leaving the API is one of these, rendered by the application's
exception handler into the ``{"success": false, "error": {...}}`` envelope.

Example:
    from common.utils import NotFoundException

    @router.delete("/sessions/{session_id}")
    async def revoke_session(session_id: str, ...):
        if not await store.delete_by_id(session.userId, session_id):
            raise NotFoundException("Session not found", code="SESSION_NOT_FOUND")
"""

from typing import Optional, Any, Dict
from fastapi import HTTPException

from common.utils.responses import error_response


class APIException(HTTPException):
    """
    Base API exception with error code support.
    """

    def __init__(
        self,
        status_code: int,
        message: str,
        code: Optional[str] = None,
        details: Optional[Any] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        """
        Create an API exception.

        Args:
            status_code: HTTP status code
            message: Human-readable error message
            code: Machine-readable error code, e.g. "INVALID_CREDENTIALS"
            details: Additional error details
            headers: Optional response headers
        """
        detail: Dict[str, Any] = {"message": message}

        if code:
            detail["code"] = code

        if details is not None:
            detail["details"] = details

        super().__init__(
            status_code=status_code,
            detail=detail,
            headers=headers,
        )

    @property
    def code(self) -> Optional[str]:
        return self.detail.get("code")

    def to_response(self) -> Dict[str, Any]:
        """Error envelope for this exception."""
        return error_response(
            message=self.detail.get("message", "Error"),
            code=self.code,
            details=self.detail.get("details"),
        )


class BadRequestException(APIException):
    """400 - Missing fields, weak password, wrong current password."""

    def __init__(
        self,
        message: str = "Bad request",
        code: str = "BAD_REQUEST",
        details: Optional[Any] = None,
    ):
        super().__init__(400, message, code, details)


class UnauthorizedException(APIException):
    """401 - No valid session, or credentials that match no principal."""

    def __init__(
        self,
        message: str = "Unauthorized",
        code: str = "UNAUTHORIZED",
        details: Optional[Any] = None,
    ):
        super().__init__(401, message, code, details)


class ForbiddenException(APIException):
    """403 - Valid session whose role may not use the endpoint."""

    def __init__(
        self,
        message: str = "Forbidden",
        code: str = "FORBIDDEN",
        details: Optional[Any] = None,
    ):
        super().__init__(403, message, code, details)


class NotFoundException(APIException):
    """404 - Principal or session does not exist."""

    def __init__(
        self,
        message: str = "Not found",
        code: str = "NOT_FOUND",
        details: Optional[Any] = None,
    ):
        super().__init__(404, message, code, details)


class ConflictException(APIException):
    """409 - Account already exists."""

    def __init__(
        self,
        message: str = "Conflict",
        code: str = "CONFLICT",
        details: Optional[Any] = None,
    ):
        super().__init__(409, message, code, details)
