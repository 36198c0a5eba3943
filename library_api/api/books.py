"""Book catalog endpoints: public reads, librarian-only writes and cover images."""

import logging
from pathlib import Path
from typing import Annotated

from bson import ObjectId
from fastapi import APIRouter, Depends, File, HTTPException, Query, Response, UploadFile, status
from pymongo import ASCENDING, ReturnDocument
from pymongo.database import Database

from library_api.api.auth import require_librarian
from library_api.core.config import Settings
from library_api.core.context import get_app_settings, get_db
from library_api.core.database import parse_object_id
from library_api.models.book import BOOKS_COLLECTION, new_book_document
from library_api.schemas.auth import CurrentUser
from library_api.schemas.books import BookCreate, BookOut, BooksListResponse, BookUpdate
from library_api.services.catalog import (
    BookNotFoundError,
    BookOnLoanError,
    build_book_filter,
    delete_book,
    update_book,
)
from library_api.services.uploads import UploadRejectedError, remove_image, save_image

logger = logging.getLogger(__name__)
router = APIRouter()

BOOK_NOT_FOUND = "Book not found."


def _book_id_or_404(book_id: str) -> ObjectId:
    oid = parse_object_id(book_id)
    if oid is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=BOOK_NOT_FOUND)
    return oid


@router.get("", response_model=BooksListResponse)
def list_books(
    db: Annotated[Database, Depends(get_db)],
    q: Annotated[str | None, Query(max_length=200, description="Match in title or author")] = None,
    category: Annotated[str | None, Query(max_length=100)] = None,
) -> BooksListResponse:
    cursor = db[BOOKS_COLLECTION].find(build_book_filter(q, category)).sort("title", ASCENDING)
    return BooksListResponse(books=[BookOut.from_document(doc) for doc in cursor])


@router.get("/{book_id}", response_model=BookOut)
def get_book(book_id: str, db: Annotated[Database, Depends(get_db)]) -> BookOut:
    doc = db[BOOKS_COLLECTION].find_one({"_id": _book_id_or_404(book_id)})
    if doc is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=BOOK_NOT_FOUND)
    return BookOut.from_document(doc)


@router.post("", response_model=BookOut, status_code=status.HTTP_201_CREATED)
def create_book(
    body: BookCreate,
    db: Annotated[Database, Depends(get_db)],
    _librarian: Annotated[CurrentUser, Depends(require_librarian)],
) -> BookOut:
    doc = new_book_document(
        title=body.title,
        author=body.author,
        total_copies=body.total_copies,
        isbn=body.isbn,
        category=body.category,
        description=body.description,
    )
    doc["_id"] = db[BOOKS_COLLECTION].insert_one(doc).inserted_id
    logger.info("Book created", extra={"book_id": str(doc["_id"])})
    return BookOut.from_document(doc)


@router.put("/{book_id}", response_model=BookOut)
def put_book(
    book_id: str,
    body: BookUpdate,
    db: Annotated[Database, Depends(get_db)],
    _librarian: Annotated[CurrentUser, Depends(require_librarian)],
) -> BookOut:
    """Update the fields present in the body. Changing total_copies keeps loans consistent."""
    try:
        doc = update_book(db, _book_id_or_404(book_id), body)
    except BookNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message) from e
    except BookOnLoanError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message) from e
    return BookOut.from_document(doc)


@router.delete("/{book_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_book(
    book_id: str,
    db: Annotated[Database, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_app_settings)],
    _librarian: Annotated[CurrentUser, Depends(require_librarian)],
) -> Response:
    try:
        doc = delete_book(db, _book_id_or_404(book_id))
    except BookNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message) from e
    except BookOnLoanError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message) from e
    remove_image(doc.get("image"), Path(settings.UPLOADS_DIR))
    logger.info("Book deleted", extra={"book_id": book_id})
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{book_id}/image", response_model=BookOut)
async def upload_book_image(
    book_id: str,
    file: Annotated[UploadFile, File(description="png, jpg, jpeg, gif or webp image")],
    db: Annotated[Database, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_app_settings)],
    _librarian: Annotated[CurrentUser, Depends(require_librarian)],
) -> BookOut:
    """
    Store a cover image for the book and serve it under /uploads.

    The previous image, if any, is deleted once the book points at the new one.
    """
    oid = _book_id_or_404(book_id)
    books = db[BOOKS_COLLECTION]
    existing = books.find_one({"_id": oid}, {"image": 1})
    if existing is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=BOOK_NOT_FOUND)

    uploads_dir = Path(settings.UPLOADS_DIR)
    # Read one byte past the limit so oversized files are detected without buffering them whole.
    content = await file.read(settings.MAX_UPLOAD_BYTES + 1)
    try:
        public_path = save_image(content, file.filename or "", uploads_dir, settings.MAX_UPLOAD_BYTES)
    except UploadRejectedError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message) from e

    doc = books.find_one_and_update(
        {"_id": oid},
        {"$set": {"image": public_path}},
        return_document=ReturnDocument.AFTER,
    )
    if doc is None:
        remove_image(public_path, uploads_dir)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=BOOK_NOT_FOUND)
    remove_image(existing.get("image"), uploads_dir)
    return BookOut.from_document(doc)
