"""Borrow record documents: one per loan of one copy to one user."""

from datetime import UTC, datetime, timedelta
from enum import Enum
from typing import Any

from bson import ObjectId

BORROWS_COLLECTION = "borrows"


class BorrowStatus(str, Enum):
    BORROWED = "borrowed"
    RETURNED = "returned"


def new_borrow_document(
    user_id: ObjectId,
    book_id: ObjectId,
    loan_days: int,
) -> dict[str, Any]:
    now = datetime.now(UTC)
    return {
        "user_id": user_id,
        "book_id": book_id,
        "borrowed_at": now,
        "due_date": now + timedelta(days=loan_days),
        "returned_at": None,
        "status": BorrowStatus.BORROWED.value,
    }
