import logging
from functools import lru_cache

from pymongo import MongoClient
from pymongo.database import Database
from pymongo.errors import PyMongoError

from athena.core.config import MONGO_URI, MONGO_DB_NAME

logger = logging.getLogger(__name__)


@lru_cache()
def get_client() -> MongoClient:
    """Get the shared MongoDB client (connects lazily on first operation)."""
    return MongoClient(MONGO_URI, serverSelectionTimeoutMS=5000)


def get_database() -> Database:
    return get_client()[MONGO_DB_NAME]


def check_connection() -> bool:
    """Ping MongoDB and log the outcome. Never raises."""
    try:
        get_client().admin.command("ping")
        logger.info("MongoDB connection is successful!")
        return True
    except PyMongoError as e:
        logger.error(f"MongoDB connection failed: {e}")
        return False


# Collections
def users_collection():
    return get_database()["users"]


def conversations_collection():
    return get_database()["conversations"]


def messages_collection():
    return get_database()["messages"]


def counters_collection():
    return get_database()["counters"]


def fact_checks_collection():
    return get_database()["fact_checks"]
