"""
Async MongoDB connection built on Motor.

Holds one ``AsyncIOMotorClient`` for the process. The client is created
timezone-aware so datetimes read back from the ``users`` collection compare
correctly with ``datetime.now(timezone.utc)`` (OTP expiry, token timestamps).

Example:
    from common.database import MongoDB

    mongo = MongoDB()
    await mongo.connect("mongodb://localhost:27017", "tamu_customers")
    users = mongo.db["users"]
    healthy = await mongo.ping()
"""

import logging
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

logger = logging.getLogger(__name__)

DEFAULT_SERVER_SELECTION_TIMEOUT_MS = 5000


def mask_uri(uri: str) -> str:
    """Drop the ``user:password@`` part of a connection string."""
    scheme, sep, rest = uri.partition("://")
    if not sep:
        return uri.rsplit("@", 1)[-1]
    return f"{scheme}://{rest.rsplit('@', 1)[-1]}"


class MongoDB:
    """Process-wide Motor connection."""

    def __init__(self, server_selection_timeout_ms: int = DEFAULT_SERVER_SELECTION_TIMEOUT_MS):
        self._client: Optional[AsyncIOMotorClient] = None
        self._database: Optional[AsyncIOMotorDatabase] = None
        self._server_selection_timeout_ms = server_selection_timeout_ms

    async def connect(self, uri: str, database_name: str) -> None:
        """
        Open the client and fail fast if the server is unreachable.

        Args:
            uri: MongoDB connection string
            database_name: Database holding the application collections

        Raises:
            PyMongoError: The initial ping failed
        """
        logger.info(f"Connecting to MongoDB: {mask_uri(uri)}")

        client = AsyncIOMotorClient(
            uri,
            tz_aware=True,
            serverSelectionTimeoutMS=self._server_selection_timeout_ms,
        )
        try:
            await client.admin.command("ping")
        except PyMongoError as e:
            logger.error(f"Failed to connect to MongoDB: {e}")
            client.close()
            raise

        self._client = client
        self._database = client[database_name]
        logger.info(f"Connected to MongoDB database: {database_name}")

    async def disconnect(self) -> None:
        if self._client is None:
            return
        self._client.close()
        self._client = None
        self._database = None
        logger.info("MongoDB connection closed")

    async def ping(self) -> bool:
        """True if the server answers right now."""
        if self._client is None:
            return False
        try:
            await self._client.admin.command("ping")
        except PyMongoError as e:
            logger.warning(f"MongoDB ping failed: {e}")
            return False
        return True

    @property
    def is_connected(self) -> bool:
        return self._database is not None

    @property
    def db(self) -> AsyncIOMotorDatabase:
        if self._database is None:
            raise RuntimeError("Database not connected")
        return self._database
