"""User administration endpoints."""

import logging
from typing import Annotated

from bson import ObjectId
from fastapi import APIRouter, Depends, HTTPException, Response, status
from pymongo import ASCENDING
from pymongo.database import Database

from library_api.api.auth import get_current_user, require_librarian
from library_api.core.context import get_db
from library_api.core.database import parse_object_id
from library_api.models.borrow import BORROWS_COLLECTION, BorrowStatus
from library_api.models.user import USERS_COLLECTION, UserRole
from library_api.schemas.auth import CurrentUser
from library_api.schemas.users import UserOut, UsersListResponse

logger = logging.getLogger(__name__)
router = APIRouter()

USER_NOT_FOUND = "User not found."


@router.get("", response_model=UsersListResponse)
def list_users(
    _librarian: Annotated[CurrentUser, Depends(require_librarian)],
    db: Annotated[Database, Depends(get_db)],
) -> UsersListResponse:
    """List all users (librarian only). Password hashes are never returned."""
    users = db[USERS_COLLECTION].find({}, {"password": 0}).sort("created_at", ASCENDING)
    return UsersListResponse(users=[UserOut.from_document(u) for u in users])


@router.get("/{user_id}", response_model=UserOut)
def get_user(
    user_id: str,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Database, Depends(get_db)],
) -> UserOut:
    """A single user; members may only look themselves up."""
    oid = parse_object_id(user_id)
    if current_user.role != UserRole.LIBRARIAN.value and oid != ObjectId(current_user.id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Librarian access required")
    doc = db[USERS_COLLECTION].find_one({"_id": oid}, {"password": 0}) if oid else None
    if doc is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=USER_NOT_FOUND)
    return UserOut.from_document(doc)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(
    user_id: str,
    librarian: Annotated[CurrentUser, Depends(require_librarian)],
    db: Annotated[Database, Depends(get_db)],
) -> Response:
    oid = parse_object_id(user_id)
    if oid is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=USER_NOT_FOUND)
    if oid == ObjectId(librarian.id):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="You cannot delete your own account.")
    active = db[BORROWS_COLLECTION].count_documents(
        {"user_id": oid, "status": BorrowStatus.BORROWED.value}
    )
    if active:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="User has books on loan and cannot be deleted.",
        )
    result = db[USERS_COLLECTION].delete_one({"_id": oid})
    if result.deleted_count == 0:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=USER_NOT_FOUND)
    logger.info("User deleted", extra={"user_id": user_id})
    return Response(status_code=status.HTTP_204_NO_CONTENT)
