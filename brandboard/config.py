"""
Configuration and settings for the branding board service.
"""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_ALLOWED_IMAGE_TYPES = [
    "image/jpeg",
    "image/png",
    "image/svg+xml",
    "image/gif",
]


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    api_prefix: str = Field(default="/api")
    log_level: str = Field(default="INFO")

    # JSON document store
    data_dir: str = Field(default="data")
    submissions_file: Optional[str] = Field(default=None)
    current_logo_file: Optional[str] = Field(default=None)

    # Optional SQL backend (Postgres, SQLite, ...)
    database_url: Optional[str] = Field(default=None)

    # Identity
    admin_email: str = Field(default="admin@example.com")
    jwt_secret: str = Field(default="change-me")
    jwt_algorithm: str = Field(default="HS256")
    session_cookie_name: str = Field(default="session-token")

    # Logo uploads
    upload_dir: str = Field(default="public/uploads")
    upload_url_prefix: str = Field(default="/uploads")
    max_upload_bytes: int = Field(default=10 * 1024 * 1024)
    allowed_image_types: list[str] = Field(
        default_factory=lambda: list(DEFAULT_ALLOWED_IMAGE_TYPES)
    )

    # S3-compatible storage
    s3_bucket: Optional[str] = Field(default=None)
    s3_region: Optional[str] = Field(default=None)
    s3_endpoint: Optional[str] = Field(default=None)
    aws_access_key_id: Optional[str] = Field(default=None)
    aws_secret_access_key: Optional[str] = Field(default=None)

    # Development toggles
    use_in_memory_backends: bool = Field(default=False)

    # Shown alongside the current logo ledger
    current_logo_name: str = Field(default="Gram Mitra")
    current_logo_image_url: str = Field(default="/placeholder.svg")

    @property
    def submissions_path(self) -> str:
        return self.submissions_file or os.path.join(
            self.data_dir, "submissions.json"
        )

    @property
    def current_logo_path(self) -> str:
        return self.current_logo_file or os.path.join(
            self.data_dir, "current_logo.json"
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
