"""Schemas for borrow records."""

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field

from library_api.models.borrow import BorrowStatus
from library_api.schemas.common import as_utc


class BorrowRecordOut(BaseModel):
    id: str
    user_id: str
    book_id: str
    borrowed_at: datetime
    due_date: datetime
    returned_at: datetime | None = None
    status: BorrowStatus
    overdue: bool = Field(default=False, description="Still on loan and past the due date")

    @classmethod
    def from_document(cls, doc: dict[str, Any], now: datetime | None = None) -> "BorrowRecordOut":
        now = now or datetime.now(UTC)
        due_date = as_utc(doc["due_date"])
        status = BorrowStatus(doc["status"])
        return cls(
            id=str(doc["_id"]),
            user_id=str(doc["user_id"]),
            book_id=str(doc["book_id"]),
            borrowed_at=as_utc(doc["borrowed_at"]),
            due_date=due_date,
            returned_at=as_utc(doc.get("returned_at")),
            status=status,
            overdue=status == BorrowStatus.BORROWED and due_date < now,
        )


class BorrowListResponse(BaseModel):
    records: list[BorrowRecordOut]
