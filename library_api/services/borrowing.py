"""Borrowing and returning copies of books."""

import logging
from datetime import UTC, datetime
from typing import Any

from bson import ObjectId
from pymongo import DESCENDING, ReturnDocument
from pymongo.database import Database
from pymongo.errors import PyMongoError

from library_api.core.config import Settings
from library_api.models.book import BOOKS_COLLECTION
from library_api.models.borrow import BORROWS_COLLECTION, BorrowStatus, new_borrow_document
from library_api.models.user import UserRole
from library_api.schemas.auth import CurrentUser

logger = logging.getLogger(__name__)


class BorrowingError(Exception):
    """Base class for borrowing rule violations."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class BookNotFoundError(BorrowingError):
    pass


class RecordNotFoundError(BorrowingError):
    pass


class BookUnavailableError(BorrowingError):
    pass


class AlreadyBorrowedError(BorrowingError):
    pass


class BorrowLimitReachedError(BorrowingError):
    pass


class AlreadyReturnedError(BorrowingError):
    pass


def borrow_book(
    db: Database,
    user_id: ObjectId,
    book_id: ObjectId,
    settings: Settings,
) -> dict[str, Any]:
    """
    Lend one copy of book_id to user_id and return the new borrow record.

    The available_copies decrement is a single guarded update, so two
    concurrent borrowers can never take the last copy twice.
    """
    books = db[BOOKS_COLLECTION]
    borrows = db[BORROWS_COLLECTION]
    if books.find_one({"_id": book_id}, {"_id": 1}) is None:
        raise BookNotFoundError("Book not found.")

    active = {"user_id": user_id, "status": BorrowStatus.BORROWED.value}
    if borrows.find_one({**active, "book_id": book_id}) is not None:
        raise AlreadyBorrowedError("You already have this book on loan.")
    if borrows.count_documents(active) >= settings.MAX_ACTIVE_BORROWS:
        raise BorrowLimitReachedError(
            f"Borrow limit reached ({settings.MAX_ACTIVE_BORROWS} books)."
        )

    book = books.find_one_and_update(
        {"_id": book_id, "available_copies": {"$gt": 0}},
        {"$inc": {"available_copies": -1}},
        return_document=ReturnDocument.AFTER,
    )
    if book is None:
        raise BookUnavailableError("No copies of this book are available.")

    record = new_borrow_document(user_id, book_id, settings.BORROW_DAYS)
    try:
        record["_id"] = borrows.insert_one(record).inserted_id
    except PyMongoError:
        # Put the copy back so a failed insert does not lose it.
        books.update_one({"_id": book_id}, {"$inc": {"available_copies": 1}})
        raise
    logger.info(
        "Book borrowed",
        extra={"book_id": str(book_id), "user_id": str(user_id), "available": book["available_copies"]},
    )
    return record


def return_book(db: Database, record_id: ObjectId, user: CurrentUser) -> dict[str, Any]:
    """
    Mark a borrow record returned and put the copy back on the shelf.

    Members can only return their own records; anyone else's look not found.
    """
    borrows = db[BORROWS_COLLECTION]
    record = borrows.find_one({"_id": record_id})
    if record is None:
        raise RecordNotFoundError("Borrow record not found.")
    if user.role != UserRole.LIBRARIAN.value and str(record["user_id"]) != user.id:
        raise RecordNotFoundError("Borrow record not found.")

    updated = borrows.find_one_and_update(
        {"_id": record_id, "status": BorrowStatus.BORROWED.value},
        {"$set": {"status": BorrowStatus.RETURNED.value, "returned_at": datetime.now(UTC)}},
        return_document=ReturnDocument.AFTER,
    )
    if updated is None:
        raise AlreadyReturnedError("This book has already been returned.")

    db[BOOKS_COLLECTION].update_one(
        {"_id": record["book_id"]},
        {"$inc": {"available_copies": 1}},
    )
    logger.info(
        "Book returned",
        extra={"book_id": str(record["book_id"]), "record_id": str(record_id)},
    )
    return updated


def list_records(db: Database, query: dict[str, Any]) -> list[dict[str, Any]]:
    """Borrow records matching query, newest first."""
    return list(db[BORROWS_COLLECTION].find(query).sort("borrowed_at", DESCENDING))
