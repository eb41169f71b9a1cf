import logging

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING

from app.core.config import settings

logger = logging.getLogger(__name__)


class MongoDatabase:
    """MongoDB connection manager."""

    client: AsyncIOMotorClient = None
    db: AsyncIOMotorDatabase = None

mongodb = MongoDatabase()

async def connect_to_mongo():
    """Connect to MongoDB."""
    mongodb.client = AsyncIOMotorClient(settings.MONGODB_URI)
    mongodb.db = mongodb.client[settings.MONGODB_DB]

    await create_indexes()
    logger.info(f"Connected to MongoDB: {settings.MONGODB_DB}")

async def disconnect_from_mongo():
    """Disconnect from MongoDB."""
    if mongodb.client is not None:
        mongodb.client.close()
    logger.info("Disconnected from MongoDB")

async def create_indexes():
    """Create database indexes."""
    # User email unique index
    await mongodb.db["users"].create_index("email", unique=True)

    # Customer indexes
    await mongodb.db["customers"].create_index("area")
    await mongodb.db["customers"].create_index([("created_at", DESCENDING)])

    # Product indexes
    await mongodb.db["products"].create_index("name")

    # Invoice indexes; the number index rejects random-suffix collisions
    await mongodb.db["invoices"].create_index("invoice_number", unique=True)
    await mongodb.db["invoices"].create_index([("customer_id", ASCENDING), ("invoice_date", ASCENDING)])
    await mongodb.db["invoices"].create_index("created_by")

    # Payment indexes
    await mongodb.db["payments"].create_index([("invoice_id", ASCENDING), ("payment_date", ASCENDING)])

def get_db() -> AsyncIOMotorDatabase:
    """Get database instance."""
    return mongodb.db
