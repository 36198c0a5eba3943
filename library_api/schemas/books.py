"""Request/response schemas for the book catalog."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from library_api.schemas.common import as_utc

MAX_COPIES = 1000


class BookCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    author: str = Field(..., min_length=1, max_length=200)
    isbn: str | None = Field(default=None, max_length=20)
    category: str | None = Field(default=None, max_length=100)
    description: str | None = Field(default=None, max_length=5000)
    total_copies: int = Field(default=1, ge=1, le=MAX_COPIES)


class BookUpdate(BaseModel):
    """Partial update; only fields that are sent are changed."""

    title: str | None = Field(default=None, min_length=1, max_length=200)
    author: str | None = Field(default=None, min_length=1, max_length=200)
    isbn: str | None = Field(default=None, max_length=20)
    category: str | None = Field(default=None, max_length=100)
    description: str | None = Field(default=None, max_length=5000)
    total_copies: int | None = Field(default=None, ge=1, le=MAX_COPIES)


class BookOut(BaseModel):
    id: str
    title: str
    author: str
    isbn: str | None = None
    category: str | None = None
    description: str | None = None
    total_copies: int
    available_copies: int
    image: str | None = Field(default=None, description="Public path under /uploads")
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "BookOut":
        return cls(
            id=str(doc["_id"]),
            title=doc["title"],
            author=doc["author"],
            isbn=doc.get("isbn"),
            category=doc.get("category"),
            description=doc.get("description"),
            total_copies=doc["total_copies"],
            available_copies=doc["available_copies"],
            image=doc.get("image"),
            created_at=as_utc(doc.get("created_at")),
            updated_at=as_utc(doc.get("updated_at")),
        )


class BooksListResponse(BaseModel):
    books: list[BookOut]
