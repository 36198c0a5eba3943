"""Book catalog documents."""

from datetime import UTC, datetime
from typing import Any

BOOKS_COLLECTION = "books"


def new_book_document(
    title: str,
    author: str,
    total_copies: int = 1,
    isbn: str | None = None,
    category: str | None = None,
    description: str | None = None,
) -> dict[str, Any]:
    """Build a book document; every copy starts out available."""
    now = datetime.now(UTC)
    return {
        "title": title.strip(),
        "author": author.strip(),
        "isbn": isbn,
        "category": category,
        "description": description,
        "total_copies": total_copies,
        "available_copies": total_copies,
        "image": None,
        "created_at": now,
        "updated_at": now,
    }
