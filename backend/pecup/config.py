"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache) — single instance per process
    - Upload allow-lists are lowercase; extensions carry no leading dot

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - List settings accept either JSON arrays or comma-separated strings
      (hosting dashboards only offer plain text fields)
    - environment gates development-only behaviour (bootstrap endpoint,
      AUTHORIZED_EMAILS fallback, larger admin page size)
"""

from functools import lru_cache
from typing import Annotated

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from pecup.core.file_validation import (
    DEFAULT_ALLOWED_EXTENSIONS, DEFAULT_ALLOWED_MIME_TYPES,
)


def _split_csv(v):
    if isinstance(v, str):
        return [part.strip() for part in v.split(",") if part.strip()]
    return v


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = "postgresql+asyncpg://pecup:pecup@db:5432/pecup"

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosted Postgres hands out postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10

    environment: str = "production"

    # API
    cors_origins: Annotated[list[str], NoDecode] = ["http://localhost:3000"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    # Auth
    auth_jwt_secret: str = "change-me"
    auth_jwt_algorithm: str = "HS256"
    authorized_emails: Annotated[list[str], NoDecode] = []

    # Uploads
    max_upload_bytes: int = 25 * 1024 * 1024
    allowed_upload_mime_types: Annotated[list[str], NoDecode] = list(
        DEFAULT_ALLOWED_MIME_TYPES,
    )
    allowed_upload_extensions: Annotated[list[str], NoDecode] = list(
        DEFAULT_ALLOWED_EXTENSIONS,
    )

    # Object storage (Supabase Storage REST)
    storage_url: str = "http://localhost:54321/storage/v1"
    storage_service_key: str = ""
    storage_default_bucket: str = "resources"
    storage_timeout_seconds: float = 30.0
    storage_max_retries: int = 2

    secure_url_ttl_seconds: int = 3600
    academic_config_cache_seconds: int = 300

    @field_validator("cors_origins", "authorized_emails", mode="before")
    @classmethod
    def split_lists(cls, v):
        return _split_csv(v)

    @field_validator("authorized_emails")
    @classmethod
    def lowercase_emails(cls, v: list[str]) -> list[str]:
        return [email.lower() for email in v]

    @field_validator("allowed_upload_mime_types", mode="before")
    @classmethod
    def normalize_mimes(cls, v):
        return [m.lower() for m in _split_csv(v)]

    @field_validator("allowed_upload_extensions", mode="before")
    @classmethod
    def normalize_extensions(cls, v):
        return [e.lower().lstrip(".") for e in _split_csv(v)]

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"


@lru_cache
def get_settings() -> Settings:
    return Settings()
