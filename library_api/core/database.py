"""MongoDB connection bootstrap and index management."""

import logging

from bson import ObjectId
from pymongo import ASCENDING, MongoClient
from pymongo.database import Database
from pymongo.errors import PyMongoError

from library_api.core.config import Settings
from library_api.models.book import BOOKS_COLLECTION
from library_api.models.borrow import BORROWS_COLLECTION
from library_api.models.user import USERS_COLLECTION

logger = logging.getLogger(__name__)


class DatabaseConnectionError(Exception):
    """Raised when the MongoDB server cannot be reached at startup."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


def connect(settings: Settings) -> MongoClient:
    """
    Open a client for MONGO_URI and verify the server answers a ping.

    The client is closed again if the handshake fails, so callers only own
    clients that are known to be connected.
    """
    try:
        client: MongoClient = MongoClient(
            settings.MONGO_URI,
            serverSelectionTimeoutMS=settings.MONGO_SERVER_SELECTION_TIMEOUT_MS,
            tz_aware=True,
        )
    except PyMongoError as e:
        # Malformed URI or options; nothing was opened.
        raise DatabaseConnectionError(f"Invalid MongoDB configuration: {e}") from e
    try:
        client.admin.command("ping")
    except PyMongoError as e:
        client.close()
        raise DatabaseConnectionError(f"MongoDB connection failed: {e}") from e
    return client


def get_database(client: MongoClient, settings: Settings) -> Database:
    """Database named in the URI, or MONGO_DB_NAME when the URI names none."""
    return client.get_default_database(default=settings.MONGO_DB_NAME)


def ensure_indexes(db: Database) -> bool:
    """Create the indexes the collections rely on. Returns False (and logs) on failure."""
    try:
        db[USERS_COLLECTION].create_index([("email", ASCENDING)], unique=True)
        db[BOOKS_COLLECTION].create_index([("title", ASCENDING)])
        db[BORROWS_COLLECTION].create_index([("user_id", ASCENDING), ("status", ASCENDING)])
        db[BORROWS_COLLECTION].create_index([("book_id", ASCENDING), ("status", ASCENDING)])
    except PyMongoError:
        logger.exception("Index creation failed; continuing without guaranteed indexes.")
        return False
    return True


def parse_object_id(value: str) -> ObjectId | None:
    """ObjectId for a path parameter, or None when it is not a valid id."""
    if not ObjectId.is_valid(value):
        return None
    return ObjectId(value)
