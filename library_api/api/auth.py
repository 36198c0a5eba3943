"""Register, login/logout and auth dependencies (get_current_user, require_librarian)."""

import logging
from typing import Annotated

import jwt
from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from library_api.core.config import Settings
from library_api.core.context import get_app_settings, get_db
from library_api.core.database import parse_object_id
from library_api.core.security import create_access_token, decode_access_token, hash_password, verify_password
from library_api.models.user import USERS_COLLECTION, UserRole, new_user_document, normalize_email
from library_api.schemas.auth import (
    CurrentUser,
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    TokenResponse,
)
from library_api.schemas.users import UserOut

logger = logging.getLogger(__name__)
router = APIRouter()
security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


@router.post("/register", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def register(
    body: RegisterRequest,
    db: Annotated[Database, Depends(get_db)],
) -> UserOut:
    """Create a member account. Librarian accounts are only created by seeding or the CLI."""
    users = db[USERS_COLLECTION]
    email = normalize_email(body.email)
    if users.find_one({"email": email}) is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="An account with this email already exists.",
        )
    doc = new_user_document(
        name=body.name,
        email=email,
        password_hash=hash_password(body.password),
        role=UserRole.MEMBER,
    )
    try:
        doc["_id"] = users.insert_one(doc).inserted_id
    except DuplicateKeyError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="An account with this email already exists.",
        )
    logger.info("User registered", extra={"user_id": str(doc["_id"])})
    return UserOut.from_document(doc)


@router.post("/login", response_model=TokenResponse)
def login(
    body: LoginRequest,
    response: Response,
    db: Annotated[Database, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> TokenResponse:
    """
    Authenticate with email and password; returns a JWT access token.

    The token is also set as an httpOnly cookie so browser clients can rely on
    credentialed requests. API clients can send it as: Authorization: Bearer <access_token>
    """
    user = db[USERS_COLLECTION].find_one({"email": normalize_email(body.email)})
    if user is None or not verify_password(body.password, user.get("password", "")):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password.",
        )
    token = create_access_token(sub=str(user["_id"]), role=user["role"], settings=settings)
    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value=token,
        max_age=settings.JWT_EXPIRE_MINUTES * 60,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
    )
    return TokenResponse(access_token=token, token_type="bearer", user=CurrentUser.from_document(user))


@router.post("/logout", response_model=MessageResponse)
def logout(
    response: Response,
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> MessageResponse:
    response.delete_cookie(
        key=settings.AUTH_COOKIE_NAME,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
    )
    return MessageResponse(message="Logged out")


def get_current_user(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[Database, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> CurrentUser:
    """Dependency: require a valid JWT (Bearer header or auth cookie). Raises 401 if missing or invalid."""
    if credentials is not None:
        token = credentials.credentials
    else:
        token = request.cookies.get(settings.AUTH_COOKIE_NAME)
    if not token:
        raise _unauthorized("Not authenticated")
    try:
        payload = decode_access_token(token, settings)
    except jwt.PyJWTError:
        raise _unauthorized("Invalid or expired token")
    user_id = parse_object_id(str(payload.get("sub") or ""))
    if user_id is None:
        raise _unauthorized("Invalid token payload")
    user = db[USERS_COLLECTION].find_one({"_id": user_id})
    if user is None:
        raise _unauthorized("User not found")
    return CurrentUser.from_document(user)


def require_librarian(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> CurrentUser:
    """Dependency: require authenticated user with role 'librarian'. Raises 403 otherwise."""
    if current_user.role != UserRole.LIBRARIAN.value:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Librarian access required",
        )
    return current_user


@router.get("/me", response_model=CurrentUser)
def me(current_user: Annotated[CurrentUser, Depends(get_current_user)]) -> CurrentUser:
    return current_user
