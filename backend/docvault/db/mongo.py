"""
MongoDB connection management.

A single MongoClient is created on first use and reused for the lifetime
of the process. The client owns its own connection pool, so every request
shares it.
"""

import logging
import threading
from datetime import datetime, timezone
from typing import Optional

from bson import ObjectId
from gridfs import GridFSBucket
from pymongo import MongoClient
from pymongo.database import Database

from docvault.config import settings

logger = logging.getLogger(__name__)

_client: Optional[MongoClient] = None
_client_lock = threading.Lock()


def get_client() -> MongoClient:
    """Return the process-wide MongoClient, creating it on first call."""
    global _client
    if _client is None:
        with _client_lock:
            if _client is None:
                _client = MongoClient(
                    settings.MONGODB_URI,
                    serverSelectionTimeoutMS=settings.MONGODB_SERVER_SELECTION_TIMEOUT_MS,
                )
                logger.info(f"MongoDB client created for database {settings.MONGODB_DATABASE}")
    return _client


def close_client() -> None:
    """Close the shared client. Only called on application shutdown."""
    global _client
    with _client_lock:
        if _client is not None:
            _client.close()
            _client = None
            logger.info("MongoDB client closed")


def get_database() -> Database:
    """Return the application database."""
    return get_client()[settings.MONGODB_DATABASE]


def get_gridfs_bucket(db: Database, bucket_name: Optional[str] = None) -> GridFSBucket:
    """Return the GridFS bucket holding document bytes."""
    return GridFSBucket(db, bucket_name=bucket_name or settings.GRIDFS_BUCKET_NAME)


def get_db() -> Database:
    """
    Database dependency.

    Returns:
        Database: The shared application database handle.
    """
    return get_database()


def parse_object_id(value) -> Optional[ObjectId]:
    """Parse an ObjectId hex string, returning None if malformed."""
    if isinstance(value, ObjectId):
        return value
    if not value or not ObjectId.is_valid(value):
        return None
    return ObjectId(value)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
