"""
Request and response schemas.
"""

from schoolflow.schemas.auth import (
    LoginRequest,
    RegisterRequest,
    CreateSchoolAdminRequest,
    ChangePasswordRequest,
    SessionView,
    SessionCheckResponse,
    LoginResponse,
    StatusResponse,
    SessionItem,
)

__all__ = [
    "LoginRequest",
    "RegisterRequest",
    "CreateSchoolAdminRequest",
    "ChangePasswordRequest",
    "SessionView",
    "SessionCheckResponse",
    "LoginResponse",
    "StatusResponse",
    "SessionItem",
]
