"""
Configuration and settings for the pin board service.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from shared.constants import (
    DEFAULT_AUTHOR,
    DEFAULT_BOARD,
    MAX_IMAGE_SIZE_MB,
    PINS_COLLECTION,
    RANDOM_PIN_SOURCE_URL,
    REQUEST_TIMEOUT_SECONDS,
)


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    api_prefix: str = Field(default="/api")
    log_level: str = Field(default="INFO")

    # SQL document store (Postgres, or SQLite for local runs)
    database_url: Optional[str] = Field(default=None)

    # Firebase (Firestore documents + Firebase Storage blobs)
    firebase_credentials_path: Optional[str] = Field(default=None)
    firebase_project_id: Optional[str] = Field(default=None)
    firebase_storage_bucket: Optional[str] = Field(default=None)

    # S3-compatible blob storage
    s3_endpoint: Optional[str] = Field(default=None)
    s3_region: Optional[str] = Field(default=None)
    s3_bucket: Optional[str] = Field(default=None)
    s3_public_base_url: Optional[str] = Field(default=None)
    aws_access_key_id: Optional[str] = Field(default=None)
    aws_secret_access_key: Optional[str] = Field(default=None)

    # Development toggles
    use_in_memory_backends: bool = Field(default=False)

    # Pins
    pins_collection: str = Field(default=PINS_COLLECTION)
    default_author: str = Field(default=DEFAULT_AUTHOR)
    default_board: str = Field(default=DEFAULT_BOARD)
    max_image_size_mb: float = Field(default=MAX_IMAGE_SIZE_MB, gt=0)

    # Random pin source; {width} and {height} are filled in per request.
    random_pin_source_url: str = Field(default=RANDOM_PIN_SOURCE_URL)
    request_timeout_seconds: float = Field(default=REQUEST_TIMEOUT_SECONDS, gt=0)

    @property
    def firebase_enabled(self) -> bool:
        return bool(self.firebase_credentials_path or self.firebase_project_id)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
