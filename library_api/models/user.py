"""User account documents (auth and RBAC)."""

from datetime import UTC, datetime
from enum import Enum
from typing import Any

USERS_COLLECTION = "users"


class UserRole(str, Enum):
    """Account role: 'librarian' administers the catalog, 'member' borrows."""

    LIBRARIAN = "librarian"
    MEMBER = "member"


def normalize_email(email: str) -> str:
    return email.strip().lower()


def new_user_document(
    name: str,
    email: str,
    password_hash: str,
    role: UserRole = UserRole.MEMBER,
) -> dict[str, Any]:
    """
    Build a user document ready for insert_one.

    email is stored lower-cased; a unique index on it enforces one account per address.
    """
    return {
        "name": name.strip(),
        "email": normalize_email(email),
        "password": password_hash,
        "role": role.value,
        "created_at": datetime.now(UTC),
    }
