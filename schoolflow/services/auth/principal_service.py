"""
Principal lookups and credential checks.

Super admins, school admins and teachers each live in their own
collection. This service is the only place that reads password hashes;
everything it returns outward is a ``Principal`` model without them.
"""

import logging
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Tuple

from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorDatabase

from common.utils.exceptions import BadRequestException, ConflictException, NotFoundException
from common.utils.password import check_password, hash_password, verify_password
from schoolflow.models.principal import (
    Principal,
    SchoolAdmin,
    SuperAdmin,
    collection_for_role,
    principal_from_document,
)
from schoolflow.models.roles import PrincipalStatus, Role, parse_status

logger = logging.getLogger(__name__)

# Roles accepted by the admin login form, in lookup order
ADMIN_LOGIN_ROLES = (Role.SUPER_ADMIN, Role.SCHOOL_ADMIN)
TEACHER_LOGIN_ROLES = (Role.TEACHER,)


def _normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def _to_object_id(value: str) -> Optional[ObjectId]:
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None


class PrincipalService:
    """
    Reads and updates principal records across the three collections.
    """

    def __init__(self, db: AsyncIOMotorDatabase):
        """
        Initialize PrincipalService.

        Args:
            db: MongoDB database connection
        """
        self._db = db

    def _collection(self, role: Role):
        return self._db[collection_for_role(role)]

    # ─────────────────────────────────────────────────────────────────
    # Lookups
    # ─────────────────────────────────────────────────────────────────

    async def get_document(self, role: Role, user_id: str) -> Optional[dict]:
        """Raw principal document, or None for a malformed or unknown id."""
        object_id = _to_object_id(user_id)
        if object_id is None:
            return None
        return await self._collection(role).find_one({"_id": object_id})

    async def get_principal(self, role: Role, user_id: str) -> Optional[Principal]:
        """
        Live principal record for a session.

        Args:
            role: Role recorded on the session, selects the collection
            user_id: Principal id recorded on the session

        Returns:
            SuperAdmin, SchoolAdmin or Teacher, or None if the row is gone
        """
        doc = await self.get_document(role, user_id)
        if not doc:
            return None
        return principal_from_document(role, doc)

    async def get_status(self, role: Role, user_id: str) -> Optional[PrincipalStatus]:
        """
        Current account status, None if the principal no longer exists.

        A stored status outside the known set reads as deleted.
        """
        doc = await self.get_document(role, user_id)
        if not doc:
            return None
        status = parse_status(doc.get("status", PrincipalStatus.ACTIVE.value))
        return status or PrincipalStatus.DELETED

    async def find_for_login(
        self,
        identifier: str,
        roles: Iterable[Role] = ADMIN_LOGIN_ROLES,
    ) -> List[Tuple[Role, dict]]:
        """
        Candidate principal documents for a login identifier.

        Super admins and teachers match on email. School admins match on
        email or on their school id, which the admin login form accepts
        as a username.

        Returns:
            list of (role, document), in the order of ``roles``
        """
        email = _normalize_email(identifier)
        candidates: List[Tuple[Role, dict]] = []

        for role in roles:
            if role == Role.SCHOOL_ADMIN:
                query = {"$or": [{"email": email}, {"schoolId": identifier.strip()}]}
            else:
                query = {"email": email}

            doc = await self._collection(role).find_one(query)
            if doc:
                candidates.append((role, doc))

        return candidates

    # ─────────────────────────────────────────────────────────────────
    # Credentials
    # ─────────────────────────────────────────────────────────────────

    async def _verify_document_password(self, role: Role, doc: dict, password: str) -> bool:
        """
        Check a password against a stored document.

        School admins created by a super admin carry a hashed ``tempPassword``
        until their first login; a match there is promoted to ``password``.
        """
        if doc.get("password") and verify_password(password, doc["password"]):
            return True

        temp_hash = doc.get("tempPassword")
        if role == Role.SCHOOL_ADMIN and temp_hash and verify_password(password, temp_hash):
            await self._collection(role).update_one(
                {"_id": doc["_id"]},
                {
                    "$set": {
                        "password": hash_password(password),
                        "updatedAt": datetime.now(timezone.utc),
                    },
                    "$unset": {"tempPassword": ""},
                },
            )
            logger.info(f"Promoted temporary password for school admin {doc['_id']}")
            return True

        return False

    async def authenticate(
        self,
        identifier: str,
        password: str,
        roles: Iterable[Role] = ADMIN_LOGIN_ROLES,
    ) -> Optional[Principal]:
        """
        Verify credentials against each candidate in order.

        Only credentials are checked. A suspended or inactive principal with
        the right password still authenticates; dashboards check status.

        Returns:
            The first principal whose password matches, or None
        """
        if not identifier or not password:
            return None

        for role, doc in await self.find_for_login(identifier, roles):
            if await self._verify_document_password(role, doc, password):
                return principal_from_document(role, doc)

        return None

    async def change_password(
        self,
        role: Role,
        user_id: str,
        current_password: str,
        new_password: str,
    ) -> None:
        """
        Replace a principal's password after checking the current one.

        Other sessions of the principal are left as they are.

        Raises:
            BadRequestException: Weak new password or wrong current password
            NotFoundException: Principal no longer exists
        """
        validation = check_password(new_password)
        if not validation["valid"]:
            raise BadRequestException(message=validation["message"], code="WEAK_PASSWORD")

        doc = await self.get_document(role, user_id)
        if not doc:
            raise NotFoundException(message="User not found", code="USER_NOT_FOUND")

        if not await self._verify_document_password(role, doc, current_password):
            raise BadRequestException(
                message="Current password is incorrect",
                code="INVALID_CURRENT_PASSWORD"
            )

        await self.update_password(role, user_id, hash_password(new_password))
        logger.info(f"Password changed for {role.value} {user_id}")

    async def update_password(self, role: Role, user_id: str, new_hash: str) -> None:
        """Store a new password hash and drop any temporary password."""
        await self._collection(role).update_one(
            {"_id": ObjectId(user_id)},
            {
                "$set": {"password": new_hash, "updatedAt": datetime.now(timezone.utc)},
                "$unset": {"tempPassword": ""},
            },
        )

    async def update_last_login(self, role: Role, user_id: str) -> None:
        """Record the time of a successful login."""
        await self._collection(role).update_one(
            {"_id": ObjectId(user_id)},
            {"$set": {"lastLogin": datetime.now(timezone.utc)}},
        )

    # ─────────────────────────────────────────────────────────────────
    # Account creation
    # ─────────────────────────────────────────────────────────────────

    async def has_super_admin(self) -> bool:
        count = await self._collection(Role.SUPER_ADMIN).count_documents({})
        return count > 0

    async def create_first_super_admin(self, name: str, email: str, password: str) -> SuperAdmin:
        """
        Create the platform owner account.

        Only allowed while no super admin exists.

        Raises:
            ConflictException: A super admin already exists
            BadRequestException: Weak password
        """
        if await self.has_super_admin():
            raise ConflictException(
                message="Super Admin already exists",
                code="SUPER_ADMIN_EXISTS"
            )

        validation = check_password(password)
        if not validation["valid"]:
            raise BadRequestException(message=validation["message"], code="WEAK_PASSWORD")

        now = datetime.now(timezone.utc)
        doc = {
            "name": name.strip(),
            "email": _normalize_email(email),
            "password": hash_password(password),
            "adminRole": "owner",
            "status": PrincipalStatus.ACTIVE.value,
            "createdAt": now,
            "updatedAt": now,
        }
        result = await self._collection(Role.SUPER_ADMIN).insert_one(doc)
        doc["_id"] = result.inserted_id

        logger.info(f"Super admin created: {result.inserted_id}")
        return principal_from_document(Role.SUPER_ADMIN, doc)

    async def create_school_admin(
        self,
        name: str,
        email: str,
        school_id: str,
        temp_password: str,
        invited_by: Optional[str] = None,
    ) -> SchoolAdmin:
        """
        Create a pending school admin with a temporary password.

        The temporary password is stored hashed and becomes the real password
        on first login.

        Raises:
            ConflictException: Email already used by a school admin
        """
        email = _normalize_email(email)
        collection = self._collection(Role.SCHOOL_ADMIN)

        if await collection.find_one({"email": email}):
            raise ConflictException(
                message="A school admin with this email already exists",
                code="EMAIL_EXISTS"
            )

        now = datetime.now(timezone.utc)
        doc = {
            "name": name.strip(),
            "email": email,
            "schoolId": school_id,
            "tempPassword": hash_password(temp_password),
            "status": PrincipalStatus.PENDING.value,
            "invitedBy": invited_by,
            "createdAt": now,
            "updatedAt": now,
        }
        result = await collection.insert_one(doc)
        doc["_id"] = result.inserted_id

        logger.info(f"School admin created for school {school_id}: {result.inserted_id}")
        return principal_from_document(Role.SCHOOL_ADMIN, doc)
