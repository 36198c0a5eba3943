"""Request/response schemas for auth endpoints."""

from typing import Any

from pydantic import BaseModel, EmailStr, Field, field_validator

from library_api.core.security import (
    BCRYPT_MAX_BYTES,
    NAME_MAX_LEN,
    NAME_MIN_LEN,
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
)


class RegisterRequest(BaseModel):
    """New member account."""

    name: str = Field(..., min_length=NAME_MIN_LEN, max_length=NAME_MAX_LEN, description="Display name")
    email: EmailStr = Field(..., description="Login email (case-insensitive)")
    password: str = Field(
        ...,
        min_length=PASSWORD_MIN_LEN,
        max_length=PASSWORD_MAX_LEN,
        description="Password",
    )

    @field_validator("password")
    @classmethod
    def validate_password_bytes(cls, v: str) -> str:
        if len(v.encode("utf-8")) > BCRYPT_MAX_BYTES:
            raise ValueError(f"Password must be at most {BCRYPT_MAX_BYTES} bytes when UTF-8 encoded")
        return v


class LoginRequest(BaseModel):
    """Credentials for login."""

    email: EmailStr = Field(..., description="Login email")
    password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LEN, description="Password")


class CurrentUser(BaseModel):
    """Authenticated user (id, name, email, role) for dependency injection."""

    id: str
    name: str
    email: str
    role: str

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "CurrentUser":
        return cls(
            id=str(doc["_id"]),
            name=doc.get("name", ""),
            email=doc["email"],
            role=doc["role"],
        )


class TokenResponse(BaseModel):
    """JWT access token returned after successful login (also set as a cookie)."""

    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type")
    user: CurrentUser


class MessageResponse(BaseModel):
    message: str
