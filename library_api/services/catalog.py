"""Book catalog operations that need more than a single query."""

import re
from datetime import UTC, datetime
from typing import Any

from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.database import Database

from library_api.models.book import BOOKS_COLLECTION
from library_api.models.borrow import BORROWS_COLLECTION, BorrowStatus
from library_api.schemas.books import BookUpdate


class CatalogError(Exception):
    """Base class for catalog rule violations."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class BookNotFoundError(CatalogError):
    pass


class BookOnLoanError(CatalogError):
    """Raised when a change would orphan copies that are currently borrowed."""


def build_book_filter(q: str | None = None, category: str | None = None) -> dict[str, Any]:
    """Mongo filter for the catalog listing; q matches title or author case-insensitively."""
    query: dict[str, Any] = {}
    if q and q.strip():
        pattern = re.escape(q.strip())
        query["$or"] = [
            {"title": {"$regex": pattern, "$options": "i"}},
            {"author": {"$regex": pattern, "$options": "i"}},
        ]
    if category and category.strip():
        query["category"] = category.strip()
    return query


def copies_on_loan(db: Database, book_id: ObjectId) -> int:
    return db[BORROWS_COLLECTION].count_documents(
        {"book_id": book_id, "status": BorrowStatus.BORROWED.value}
    )


def update_book(db: Database, book_id: ObjectId, changes: BookUpdate) -> dict[str, Any]:
    """
    Apply a partial update and return the updated document.

    Changing total_copies shifts available_copies by the same delta; the new
    total may not be lower than the number of copies on loan.
    """
    books = db[BOOKS_COLLECTION]
    book = books.find_one({"_id": book_id})
    if book is None:
        raise BookNotFoundError("Book not found.")

    fields = changes.model_dump(exclude_unset=True)
    update: dict[str, Any] = {"$set": {"updated_at": datetime.now(UTC)}}
    for key in ("title", "author"):
        if fields.get(key) is not None:
            update["$set"][key] = fields[key].strip()
    for key in ("isbn", "category", "description"):
        if key in fields:
            update["$set"][key] = fields[key]

    filter_: dict[str, Any] = {"_id": book_id}
    new_total = fields.get("total_copies")
    if new_total is not None and new_total != book["total_copies"]:
        on_loan = copies_on_loan(db, book_id)
        if new_total < on_loan:
            raise BookOnLoanError(
                f"Cannot reduce total copies below the {on_loan} currently on loan."
            )
        update["$set"]["total_copies"] = new_total
        update["$inc"] = {"available_copies": new_total - book["total_copies"]}
        # Guard against a concurrent total change between read and write.
        filter_["total_copies"] = book["total_copies"]

    updated = books.find_one_and_update(filter_, update, return_document=ReturnDocument.AFTER)
    if updated is None:
        raise BookOnLoanError("Book changed concurrently; retry the update.")
    return updated


def delete_book(db: Database, book_id: ObjectId) -> dict[str, Any]:
    """Delete a book with no copies on loan; returns the deleted document."""
    books = db[BOOKS_COLLECTION]
    book = books.find_one({"_id": book_id})
    if book is None:
        raise BookNotFoundError("Book not found.")
    if copies_on_loan(db, book_id) > 0:
        raise BookOnLoanError("Book has copies on loan and cannot be deleted.")
    books.delete_one({"_id": book_id})
    return book
