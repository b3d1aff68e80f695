"""MongoDB connection for referral summary storage."""

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection, AsyncIOMotorDatabase
from typing import Optional
from juan_heart.config.settings import settings
import logging

logger = logging.getLogger(__name__)


class Database:
    """Process-wide motor client, opened by the app lifespan."""

    client: Optional[AsyncIOMotorClient] = None
    database: Optional[AsyncIOMotorDatabase] = None

    @classmethod
    async def connect_db(cls, uri: Optional[str] = None, name: Optional[str] = None):
        """Open the client and verify the server answers a ping."""
        uri = uri or settings.mongodb_uri
        name = name or settings.mongodb_database

        cls.client = AsyncIOMotorClient(
            uri, serverSelectionTimeoutMS=settings.mongodb_timeout_ms, tz_aware=False
        )
        cls.database = cls.client[name]
        try:
            await cls.client.admin.command("ping")
        except Exception:
            await cls.close_db()
            raise
        logger.info(f"Connected to MongoDB database {name!r}")

    @classmethod
    async def close_db(cls):
        if cls.client is not None:
            cls.client.close()
        cls.client = None
        cls.database = None

    @classmethod
    def get_database(cls) -> AsyncIOMotorDatabase:
        if cls.database is None:
            raise RuntimeError("MongoDB is not connected; Database.connect_db() runs in the app lifespan")
        return cls.database


async def get_referrals_collection() -> AsyncIOMotorCollection:
    """Collection holding stored referral summaries."""
    return Database.get_database()[settings.mongodb_collection_referrals]
