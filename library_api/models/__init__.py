"""MongoDB document shapes and collection names."""

from library_api.models.book import BOOKS_COLLECTION, new_book_document
from library_api.models.borrow import BORROWS_COLLECTION, BorrowStatus, new_borrow_document
from library_api.models.user import USERS_COLLECTION, UserRole, new_user_document

__all__ = [
    "BOOKS_COLLECTION",
    "BORROWS_COLLECTION",
    "USERS_COLLECTION",
    "BorrowStatus",
    "UserRole",
    "new_book_document",
    "new_borrow_document",
    "new_user_document",
]
