"""
Session models.

``SessionRecord`` is what is persisted in the ``sessions`` collection;
``SessionData`` is the contract handed to authorization code.
"""

import time
from typing import Optional

from pydantic import BaseModel, Field

from schoolflow.models.roles import Role


def now_ms() -> int:
    """Current time as epoch milliseconds."""
    return int(time.time() * 1000)


class SessionRecord(BaseModel):
    """A persisted session row. Keyed by the hash of the opaque token."""
    tokenHash: str
    userId: str
    email: str
    role: Role
    schoolId: Optional[str] = None
    ipAddress: str = "127.0.0.1"
    device: str = "Unknown Device"
    browser: str = "Unknown Browser"
    os: str = "Unknown OS"
    deviceType: str = "unknown"
    createdAt: int = Field(default_factory=now_ms, description="epoch ms")
    lastActivity: int = Field(default_factory=now_ms, description="epoch ms")
    expiresAt: int = Field(..., description="epoch ms, fixed at creation")

    def is_expired(self, at_ms: Optional[int] = None) -> bool:
        """True once ``expiresAt`` is not in the future."""
        current = now_ms() if at_ms is None else at_ms
        return self.expiresAt <= current

    def to_document(self) -> dict:
        doc = self.model_dump()
        doc["role"] = self.role.value
        if self.schoolId is None:
            doc.pop("schoolId")
        return doc


class SessionData(BaseModel):
    """Authorization view of a valid, non-expired session."""
    userId: str
    email: str
    role: Role
    schoolId: Optional[str] = None
    sessionId: str = Field(..., description="Hash of the session token")
    expiresAt: int

    @classmethod
    def from_record(cls, record: SessionRecord) -> "SessionData":
        return cls(
            userId=record.userId,
            email=record.email,
            role=record.role,
            schoolId=record.schoolId,
            sessionId=record.tokenHash,
            expiresAt=record.expiresAt,
        )

    def public_view(self) -> dict:
        """Fields exposed by the session-check endpoints."""
        return {
            "userId": self.userId,
            "email": self.email,
            "role": self.role.value,
            "schoolId": self.schoolId,
        }
