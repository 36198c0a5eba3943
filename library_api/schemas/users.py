"""Schemas for the user administration endpoints."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel

from library_api.schemas.common import as_utc


class UserOut(BaseModel):
    """User entry (no password hash)."""

    id: str
    name: str
    email: str
    role: str
    created_at: datetime | None = None

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "UserOut":
        return cls(
            id=str(doc["_id"]),
            name=doc.get("name", ""),
            email=doc["email"],
            role=doc["role"],
            created_at=as_utc(doc.get("created_at")),
        )


class UsersListResponse(BaseModel):
    """Response for GET /users (librarian only)."""

    users: list[UserOut]
