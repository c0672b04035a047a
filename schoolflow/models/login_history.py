"""
Login history models.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class LoginHistoryEntry(BaseModel):
    """One login attempt, successful or not."""
    userId: Optional[str] = None
    identifier: Optional[str] = None
    userRole: Optional[str] = None
    status: str  # "success" | "failed"
    ipAddress: str
    device: str
    browser: str
    os: str
    deviceType: str
    failureReason: Optional[str] = None
    sessionId: Optional[str] = None
    loginTime: datetime
    logoutTime: Optional[datetime] = None
