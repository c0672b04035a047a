"""
MongoDB connection manager.

One Motor client per process. Services receive the ``AsyncIOMotorDatabase``
and work on raw collections; no ODM sits in between.

Example:
    from common.database import MongoDB

    mongo = MongoDB()
    await mongo.connect(uri="mongodb://localhost:27017", database_name="schoolflow")
    init_all_services(db=mongo.db)
    ...
    await mongo.disconnect()
"""

import logging
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection, AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

logger = logging.getLogger(__name__)


def mask_uri(uri: str) -> str:
    """Connection string without credentials, for logs."""
    return uri.split("@")[-1] if "@" in uri else uri


class MongoDB:
    """Owns the Motor client for the application's lifetime."""

    def __init__(self):
        self._client: Optional[AsyncIOMotorClient] = None
        self._database_name: Optional[str] = None

    async def connect(
        self,
        uri: str,
        database_name: str,
        server_selection_timeout_ms: int = 5000,
    ) -> None:
        """
        Open the client and fail fast if no server answers.

        Args:
            uri: MongoDB connection string
            database_name: Database holding principals and sessions
            server_selection_timeout_ms: How long to wait for a server

        Raises:
            PyMongoError: The server could not be reached
        """
        logger.info(f"Connecting to MongoDB: {mask_uri(uri)}")

        client = AsyncIOMotorClient(uri, serverSelectionTimeoutMS=server_selection_timeout_ms)
        try:
            await client.admin.command("ping")
        except PyMongoError as e:
            logger.error(f"Failed to connect to MongoDB: {e}")
            client.close()
            raise

        self._client = client
        self._database_name = database_name
        logger.info(f"Connected to MongoDB database: {database_name}")

    async def disconnect(self) -> None:
        """Close the client. Safe to call when not connected."""
        if self._client is None:
            return
        logger.info(f"Disconnecting from MongoDB database: {self._database_name}")
        self._client.close()
        self._client = None
        self._database_name = None

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    @property
    def db(self) -> AsyncIOMotorDatabase:
        """The application database. Raises RuntimeError before ``connect``."""
        if self._client is None or not self._database_name:
            raise RuntimeError("Database not connected")
        return self._client[self._database_name]

    def get_collection(self, name: str) -> AsyncIOMotorCollection:
        """Raw Motor collection by name."""
        return self.db[name]

    async def ping(self) -> bool:
        """True if the server answers right now. Never raises."""
        if self._client is None:
            return False
        try:
            await self._client.admin.command("ping")
            return True
        except PyMongoError as e:
            logger.warning(f"MongoDB ping failed: {e}")
            return False
