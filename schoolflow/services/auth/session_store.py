"""
Session persistence.

Stores one document per session in the ``sessions`` collection, keyed by
the SHA-256 hash of the opaque token. Expiry is passive: nothing here
deletes rows on a schedule, and readers must check ``expiresAt``.
"""

import logging
from typing import Optional, List

from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING

from schoolflow.models.roles import Role
from schoolflow.models.session import SessionRecord, now_ms
from schoolflow.services.auth.token_hasher import TokenHasher

logger = logging.getLogger(__name__)

SESSIONS_COLLECTION = "sessions"


class SessionStore:
    """
    CRUD over the sessions collection.
    """

    def __init__(self, db: AsyncIOMotorDatabase):
        """
        Initialize SessionStore.

        Args:
            db: MongoDB database connection
        """
        self._db = db
        self._sessions_collection = db[SESSIONS_COLLECTION]

    async def ensure_indexes(self) -> None:
        """Create the lookup indexes. Safe to call on every startup."""
        await self._sessions_collection.create_index(
            [("tokenHash", ASCENDING)], unique=True
        )
        await self._sessions_collection.create_index([("userId", ASCENDING)])
        await self._sessions_collection.create_index([("expiresAt", ASCENDING)])

    async def create(self, record: SessionRecord) -> str:
        """
        Persist a new session.

        Returns:
            The inserted document id as a string
        """
        result = await self._sessions_collection.insert_one(record.to_document())
        logger.info(f"Session created for {record.role.value} {record.userId}")
        return str(result.inserted_id)

    async def get_by_token(self, token: str) -> Optional[SessionRecord]:
        """
        Look up a session by its raw token.

        Does not check expiry; that is the caller's job.
        """
        doc = await self._sessions_collection.find_one(
            {"tokenHash": TokenHasher.hash_token(token)}
        )
        if not doc:
            return None
        return SessionRecord.model_validate(doc)

    async def delete(self, token: str) -> bool:
        """Delete the session for a raw token. Returns False if none existed."""
        result = await self._sessions_collection.delete_one(
            {"tokenHash": TokenHasher.hash_token(token)}
        )
        return result.deleted_count > 0

    async def delete_by_id(self, user_id: str, session_id: str) -> bool:
        """
        Delete one of a principal's sessions by document id.

        The ``userId`` filter keeps a principal from revoking someone
        else's session.
        """
        try:
            object_id = ObjectId(session_id)
        except (InvalidId, TypeError):
            return False

        result = await self._sessions_collection.delete_one(
            {"_id": object_id, "userId": user_id}
        )
        if result.deleted_count > 0:
            logger.info(f"Session {session_id} revoked for user {user_id}")
            return True
        return False

    async def list_active(
        self,
        user_id: Optional[str] = None,
        role: Optional[Role] = None,
    ) -> List[dict]:
        """
        Non-expired sessions, most recently active first.

        Args:
            user_id: Restrict to one principal
            role: Restrict to one principal kind

        Returns:
            List of raw session documents
        """
        query: dict = {"expiresAt": {"$gt": now_ms()}}
        if user_id:
            query["userId"] = user_id
        if role:
            query["role"] = role.value

        cursor = self._sessions_collection.find(query).sort("lastActivity", DESCENDING)
        return await cursor.to_list(length=None)

    async def revoke_all_except(self, user_id: str, current_session_id: str) -> int:
        """
        Delete every session of a principal except the current one.

        Args:
            user_id: Principal whose sessions are revoked
            current_session_id: Token hash of the session to keep

        Returns:
            Number of sessions removed
        """
        result = await self._sessions_collection.delete_many({
            "userId": user_id,
            "tokenHash": {"$ne": current_session_id},
        })
        if result.deleted_count:
            logger.info(f"Revoked {result.deleted_count} other sessions for user {user_id}")
        return result.deleted_count

    async def update_activity(self, token: str) -> None:
        """Bump ``lastActivity`` for a session."""
        await self._sessions_collection.update_one(
            {"tokenHash": TokenHasher.hash_token(token)},
            {"$set": {"lastActivity": now_ms()}},
        )

    async def cleanup_expired(self) -> int:
        """
        Remove expired rows. Housekeeping only; reads never rely on it.

        Returns:
            Number of sessions removed
        """
        result = await self._sessions_collection.delete_many(
            {"expiresAt": {"$lte": now_ms()}}
        )
        if result.deleted_count:
            logger.info(f"Cleaned up {result.deleted_count} expired sessions")
        return result.deleted_count

    async def get_stats(self, role: Optional[Role] = None) -> dict:
        """
        Session counts for the security dashboard.

        Returns:
            dict with active, total and deviceBreakdown (active sessions only)
        """
        query: dict = {}
        if role:
            query["role"] = role.value

        total = await self._sessions_collection.count_documents(query)
        active_sessions = await self.list_active(role=role)

        breakdown = {"desktop": 0, "mobile": 0, "tablet": 0, "unknown": 0}
        for session in active_sessions:
            device_type = session.get("deviceType", "unknown")
            if device_type not in breakdown:
                device_type = "unknown"
            breakdown[device_type] += 1

        return {
            "active": len(active_sessions),
            "total": total,
            "deviceBreakdown": breakdown,
        }
