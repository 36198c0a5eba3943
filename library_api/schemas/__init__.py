"""Pydantic request/response schemas."""

from library_api.schemas.auth import (
    CurrentUser,
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    TokenResponse,
)
from library_api.schemas.books import BookCreate, BookOut, BooksListResponse, BookUpdate
from library_api.schemas.borrow import BorrowListResponse, BorrowRecordOut
from library_api.schemas.users import UserOut, UsersListResponse

__all__ = [
    "BookCreate",
    "BookOut",
    "BookUpdate",
    "BooksListResponse",
    "BorrowListResponse",
    "BorrowRecordOut",
    "CurrentUser",
    "LoginRequest",
    "MessageResponse",
    "RegisterRequest",
    "TokenResponse",
    "UserOut",
    "UsersListResponse",
]
