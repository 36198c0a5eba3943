"""API routes mounted under API_PREFIX."""

from fastapi import APIRouter

from library_api.api import auth, books, borrow, users

router = APIRouter()
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(books.router, prefix="/books", tags=["books"])
router.include_router(borrow.router, prefix="/borrow", tags=["borrow"])
router.include_router(users.router, prefix="/users", tags=["users"])
