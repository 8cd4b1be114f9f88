"""
MongoDB Connection Utility

MongoDB stores:
- Legacy job applications (position, company, status pipeline, contacts)

WHY MongoDB for these?
- Schema-flexible: contacts, documents and tags are nested lists
- Document-oriented: each application is self-contained
- No joins needed: applications only reference the owning user id
"""
import logging

from pymongo import MongoClient
from pymongo.database import Database
from pymongo.collection import Collection
from app.core.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

# Global client (connection pooling handled internally by pymongo)
_client: MongoClient = None
_db: Database = None


def get_mongo_client() -> MongoClient:
    """Get or create MongoDB client (singleton pattern)"""
    global _client
    if _client is None:
        _client = MongoClient(settings.mongodb_uri, serverSelectionTimeoutMS=5000)
    return _client


def get_mongo_db() -> Database:
    """Get the application documents database"""
    global _db
    if _db is None:
        client = get_mongo_client()
        _db = client[settings.mongodb_db]
    return _db


def get_collection(name: str) -> Collection:
    """Collection handle by name, see COLLECTIONS."""
    db = get_mongo_db()
    return db[name]


def close_mongo_connection() -> None:
    """Close the shared client; the next call to get_mongo_client reconnects."""
    global _client, _db
    if _client is not None:
        _client.close()
        logger.info("MongoDB connection closed")
    _client = None
    _db = None


def test_mongo_connection() -> bool:
    """
    Test if MongoDB is reachable.
    Returns True if connection successful, False otherwise.
    """
    try:
        client = get_mongo_client()
        # ping command checks connection
        client.admin.command('ping')
        return True
    except Exception as e:
        logger.error("MongoDB connection failed: %s", e)
        return False


# Collection name constants (avoid typos)
COLLECTIONS = {
    "applications": "applications",
}


def init_mongo_indexes():
    """
    Create indexes for better query performance.
    Call this once during app startup.
    """
    db = get_mongo_db()
    applications = db[COLLECTIONS["applications"]]

    applications.create_index([("user_id", 1), ("created_at", -1)])
    applications.create_index([("user_id", 1), ("status", 1)])
    applications.create_index([("user_id", 1), ("company", 1)])
    applications.create_index([("applied_date", -1)])

    logger.info("MongoDB indexes created successfully")
