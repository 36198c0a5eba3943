"""Application configuration loaded from environment variables."""

from functools import lru_cache
from typing import Literal

from pydantic import SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Allowed URL schemes for MONGO_URI (module-level so validators can use it).
VALID_MONGO_URI_PREFIXES = (
    "mongodb://",
    "mongodb+srv://",
)

DEFAULT_ALLOWED_ORIGINS = [
    "http://localhost:5173",
    "http://localhost:5174",
    "http://127.0.0.1:5173",
    "http://127.0.0.1:5174",
]

DEFAULT_JWT_SECRET = "change-me-in-production"


class Settings(BaseSettings):
    """Validated, immutable application settings from env and optional .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
        frozen=True,
    )

    APP_ENV: Literal["dev", "prod"] = "dev"
    LOG_LEVEL: str = "INFO"

    HOST: str = "0.0.0.0"
    PORT: int = 5000
    API_PREFIX: str = "/api"

    # MongoDB: required; the process refuses to start without a reachable server
    MONGO_URI: str
    MONGO_DB_NAME: str = "library"
    MONGO_SERVER_SELECTION_TIMEOUT_MS: int = 30000

    # Browser origins allowed to make credentialed cross-origin requests
    ALLOWED_ORIGINS: list[str] = DEFAULT_ALLOWED_ORIGINS
    # When True, requests without an Origin header are rejected as well.
    CORS_REQUIRE_ORIGIN: bool = False

    UPLOADS_DIR: str = "uploads"
    MAX_UPLOAD_BYTES: int = 5 * 1024 * 1024

    # JWT authentication (Bearer header or httpOnly cookie)
    JWT_SECRET: SecretStr = SecretStr(DEFAULT_JWT_SECRET)
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_MINUTES: int = 1440
    AUTH_COOKIE_NAME: str = "token"
    COOKIE_SECURE: bool = False

    # Borrowing rules
    BORROW_DAYS: int = 14
    MAX_ACTIVE_BORROWS: int = 5

    @field_validator("MONGO_URI")
    @classmethod
    def validate_mongo_uri(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("MONGO_URI must be set and non-empty")
        if not any(v.strip().startswith(prefix) for prefix in VALID_MONGO_URI_PREFIXES):
            raise ValueError(
                "MONGO_URI must be a MongoDB URL (e.g. mongodb:// or mongodb+srv://)"
            )
        return v.strip()

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError("LOG_LEVEL must be one of DEBUG, INFO, WARNING, ERROR, CRITICAL")
        return level

    @field_validator("PORT")
    @classmethod
    def validate_port(cls, v: int) -> int:
        if v < 1 or v > 65535:
            raise ValueError("PORT must be between 1 and 65535")
        return v

    @field_validator("MONGO_SERVER_SELECTION_TIMEOUT_MS")
    @classmethod
    def validate_server_selection_timeout(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("MONGO_SERVER_SELECTION_TIMEOUT_MS must be greater than 0")
        return v

    @field_validator("ALLOWED_ORIGINS")
    @classmethod
    def validate_allowed_origins(cls, v: list[str]) -> list[str]:
        origins = [o.strip().rstrip("/") for o in v if o and o.strip()]
        for origin in origins:
            lowered = origin.lower()
            if not (lowered.startswith("http://") or lowered.startswith("https://")):
                raise ValueError(
                    f"ALLOWED_ORIGINS entries must use http or https (got {origin!r})"
                )
        return origins

    @field_validator("API_PREFIX")
    @classmethod
    def validate_api_prefix(cls, v: str) -> str:
        v = v.strip().rstrip("/")
        if not v.startswith("/"):
            raise ValueError("API_PREFIX must start with '/'")
        return v

    @field_validator("MAX_UPLOAD_BYTES")
    @classmethod
    def validate_max_upload_bytes(cls, v: int) -> int:
        if v < 1 or v > 50 * 1024 * 1024:
            raise ValueError("MAX_UPLOAD_BYTES must be between 1 and 52428800 (50 MB)")
        return v

    @field_validator("JWT_SECRET")
    @classmethod
    def validate_jwt_secret(cls, v: SecretStr) -> SecretStr:
        if not v.get_secret_value() or not v.get_secret_value().strip():
            raise ValueError("JWT_SECRET must be set and non-empty")
        return v

    @field_validator("JWT_EXPIRE_MINUTES")
    @classmethod
    def validate_jwt_expire_minutes(cls, v: int) -> int:
        if v < 1 or v > 43200:
            raise ValueError(
                "JWT_EXPIRE_MINUTES must be between 1 and 43200 (1 min to 30 days)"
            )
        return v

    @field_validator("BORROW_DAYS")
    @classmethod
    def validate_borrow_days(cls, v: int) -> int:
        if v < 1 or v > 365:
            raise ValueError("BORROW_DAYS must be between 1 and 365")
        return v

    @field_validator("MAX_ACTIVE_BORROWS")
    @classmethod
    def validate_max_active_borrows(cls, v: int) -> int:
        if v < 1 or v > 100:
            raise ValueError("MAX_ACTIVE_BORROWS must be between 1 and 100")
        return v

    @model_validator(mode="after")
    def validate_production_secret(self) -> "Settings":
        if self.APP_ENV == "prod" and self.JWT_SECRET.get_secret_value() == DEFAULT_JWT_SECRET:
            raise ValueError("JWT_SECRET must be changed from the default in production")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance. Raises pydantic.ValidationError on bad config."""
    return Settings()
