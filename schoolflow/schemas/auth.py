"""
Pydantic models for auth request/response validation.
"""

from typing import Optional
from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    """Request body for admin and teacher login."""
    email: Optional[str] = Field(None, description="Email, or school id for school admins")
    password: Optional[str] = None


class RegisterRequest(BaseModel):
    """Request body for creating the first super admin."""
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class CreateSchoolAdminRequest(BaseModel):
    """Request body for a super admin inviting a school admin."""
    name: Optional[str] = None
    email: Optional[str] = None
    schoolId: Optional[str] = None
    tempPassword: Optional[str] = None


class ChangePasswordRequest(BaseModel):
    """Request body for changing the signed-in principal's password."""
    currentPassword: Optional[str] = None
    newPassword: Optional[str] = None


class SessionView(BaseModel):
    """Session fields exposed to clients."""
    userId: str
    email: str
    role: str
    schoolId: Optional[str] = None


class SessionCheckResponse(BaseModel):
    """Response of the session-check endpoints."""
    authenticated: bool
    session: Optional[SessionView] = None


class LoginResponse(BaseModel):
    """Payload of a successful login."""
    role: str
    redirectTo: str
    user: dict


class StatusResponse(BaseModel):
    """Live account status of the signed-in principal."""
    role: str
    status: str


class SessionItem(BaseModel):
    """One active session in the sessions list."""
    id: str
    device: str
    browser: str
    os: str
    deviceType: str
    ipAddress: str
    createdAt: int
    lastActivity: int
    expiresAt: int
    isCurrent: bool = False
