"""Default librarian account: created once, never modified afterwards."""

import logging
from enum import Enum

from pymongo.database import Database
from pymongo.errors import DuplicateKeyError, PyMongoError

from library_api.core.security import hash_password
from library_api.models.user import USERS_COLLECTION, UserRole, new_user_document

logger = logging.getLogger(__name__)

LIBRARIAN_NAME = "Librarian"
LIBRARIAN_EMAIL = "librarian@gmail.com"
LIBRARIAN_PASSWORD = "librarian"


class SeedOutcome(str, Enum):
    CREATED = "created"
    EXISTS = "exists"
    FAILED = "failed"


def seed_librarian(db: Database) -> SeedOutcome:
    """
    Ensure the default librarian account exists.

    Idempotent: an existing account is left untouched. Errors are logged and
    reported as FAILED, never raised; the server keeps serving either way.
    """
    users = db[USERS_COLLECTION]
    try:
        if users.find_one({"email": LIBRARIAN_EMAIL}) is not None:
            logger.info("Librarian already exists")
            return SeedOutcome.EXISTS
        users.insert_one(
            new_user_document(
                name=LIBRARIAN_NAME,
                email=LIBRARIAN_EMAIL,
                password_hash=hash_password(LIBRARIAN_PASSWORD),
                role=UserRole.LIBRARIAN,
            )
        )
    except DuplicateKeyError:
        # Another process inserted it between our lookup and insert.
        logger.info("Librarian already exists (created concurrently)")
        return SeedOutcome.EXISTS
    except PyMongoError:
        logger.exception("Error seeding librarian user")
        return SeedOutcome.FAILED
    logger.info("Default librarian created: %s", LIBRARIAN_EMAIL)
    return SeedOutcome.CREATED
