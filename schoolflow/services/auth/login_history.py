"""
Login history for the security dashboards.

Every write here is best effort: a failure is logged and swallowed so an
audit problem never turns into a failed login.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import DESCENDING

from schoolflow.models.login_history import LoginHistoryEntry
from schoolflow.models.principal import Principal
from schoolflow.models.roles import Role
from schoolflow.services.auth.device_detector import DeviceInfo

logger = logging.getLogger(__name__)

LOGIN_HISTORY_COLLECTION = "login_history"


class LoginHistoryService:
    """
    Records login attempts and logouts.
    """

    def __init__(self, db: AsyncIOMotorDatabase):
        self._collection = db[LOGIN_HISTORY_COLLECTION]

    async def _insert(self, entry: LoginHistoryEntry) -> None:
        try:
            await self._collection.insert_one(entry.model_dump())
        except Exception as e:
            logger.warning(f"Failed to record login history: {e}")

    async def record_success(
        self,
        principal: Principal,
        ip_address: str,
        device_info: DeviceInfo,
        session_id: str,
    ) -> None:
        """
        Record a successful login.

        Args:
            principal: The authenticated principal
            ip_address: Client IP address
            device_info: Parsed User-Agent
            session_id: Hash of the issued session token
        """
        await self._insert(LoginHistoryEntry(
            userId=principal.id,
            identifier=principal.email,
            userRole=principal.role,
            status="success",
            ipAddress=ip_address,
            sessionId=session_id,
            loginTime=datetime.now(timezone.utc),
            **device_info,
        ))

    async def record_failure(
        self,
        identifier: str,
        ip_address: str,
        device_info: DeviceInfo,
        reason: str,
        role: Optional[Role] = None,
    ) -> None:
        """Record a failed login attempt for an identifier."""
        await self._insert(LoginHistoryEntry(
            identifier=identifier,
            userRole=role.value if role else None,
            status="failed",
            ipAddress=ip_address,
            failureReason=reason,
            loginTime=datetime.now(timezone.utc),
            **device_info,
        ))

    async def mark_logout(self, session_id: str) -> None:
        """Stamp the logout time on the entry for a session."""
        try:
            await self._collection.update_one(
                {"sessionId": session_id, "logoutTime": None},
                {"$set": {"logoutTime": datetime.now(timezone.utc)}},
            )
        except Exception as e:
            logger.warning(f"Failed to record logout: {e}")

    async def list_for_user(self, user_id: str, limit: int = 50) -> List[dict]:
        """
        Most recent login attempts of a principal.

        Returns:
            List of entries with ``_id`` removed, newest first
        """
        cursor = (
            self._collection.find({"userId": user_id})
            .sort("loginTime", DESCENDING)
            .limit(limit)
        )
        entries = await cursor.to_list(length=limit)
        for entry in entries:
            entry.pop("_id", None)
        return entries
