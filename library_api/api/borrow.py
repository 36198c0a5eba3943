"""Borrow and return endpoints."""

from typing import Annotated

from bson import ObjectId
from fastapi import APIRouter, Depends, HTTPException, Query, status
from pymongo.database import Database

from library_api.api.auth import get_current_user, require_librarian
from library_api.core.config import Settings
from library_api.core.context import get_app_settings, get_db
from library_api.core.database import parse_object_id
from library_api.models.borrow import BorrowStatus
from library_api.schemas.auth import CurrentUser
from library_api.schemas.borrow import BorrowListResponse, BorrowRecordOut
from library_api.services.borrowing import (
    AlreadyBorrowedError,
    AlreadyReturnedError,
    BookNotFoundError,
    BookUnavailableError,
    BorrowingError,
    BorrowLimitReachedError,
    RecordNotFoundError,
    borrow_book,
    list_records,
    return_book,
)

router = APIRouter()

_CONFLICTS = (AlreadyBorrowedError, AlreadyReturnedError, BookUnavailableError, BorrowLimitReachedError)


def _to_http(e: BorrowingError) -> HTTPException:
    if isinstance(e, (BookNotFoundError, RecordNotFoundError)):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    if isinstance(e, _CONFLICTS):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message)
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)


def _id_or_404(value: str, detail: str) -> ObjectId:
    oid = parse_object_id(value)
    if oid is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=detail)
    return oid


@router.get("", response_model=BorrowListResponse)
def list_all_records(
    db: Annotated[Database, Depends(get_db)],
    _librarian: Annotated[CurrentUser, Depends(require_librarian)],
    status_filter: Annotated[BorrowStatus | None, Query(alias="status")] = None,
) -> BorrowListResponse:
    """All borrow records (librarian only), optionally filtered by status."""
    query = {"status": status_filter.value} if status_filter else {}
    return BorrowListResponse(records=[BorrowRecordOut.from_document(r) for r in list_records(db, query)])


@router.get("/me", response_model=BorrowListResponse)
def list_my_records(
    db: Annotated[Database, Depends(get_db)],
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> BorrowListResponse:
    query = {"user_id": ObjectId(current_user.id)}
    return BorrowListResponse(records=[BorrowRecordOut.from_document(r) for r in list_records(db, query)])


@router.post("/{book_id}", response_model=BorrowRecordOut, status_code=status.HTTP_201_CREATED)
def post_borrow(
    book_id: str,
    db: Annotated[Database, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_app_settings)],
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> BorrowRecordOut:
    """Borrow one copy of the book for the current user."""
    oid = _id_or_404(book_id, "Book not found.")
    try:
        record = borrow_book(db, ObjectId(current_user.id), oid, settings)
    except BorrowingError as e:
        raise _to_http(e) from e
    return BorrowRecordOut.from_document(record)


@router.post("/{record_id}/return", response_model=BorrowRecordOut)
def post_return(
    record_id: str,
    db: Annotated[Database, Depends(get_db)],
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> BorrowRecordOut:
    oid = _id_or_404(record_id, "Borrow record not found.")
    try:
        record = return_book(db, oid, current_user)
    except BorrowingError as e:
        raise _to_http(e) from e
    return BorrowRecordOut.from_document(record)
