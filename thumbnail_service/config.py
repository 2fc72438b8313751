"""
Configuration loader for the product thumbnail service.

Environment variables are centralized here to keep the rest of the code
focused on business logic and to make operational tuning clear.
"""

from functools import lru_cache
from typing import Optional, Tuple

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # Thumbnail output
    thumbnail_width: int = Field(150)
    thumbnail_height: int = Field(150)
    jpeg_quality: int = Field(85)

    # Batch processing
    max_concurrency: int = Field(4)
    connect_timeout_seconds: float = Field(5.0)
    request_timeout_seconds: float = Field(30.0)
    max_image_bytes: int = Field(20 * 1024 * 1024)
    fetch_deadline_seconds: Optional[float] = Field(None)  # defaults to connect + read

    # S3-compatible object store for thumbnails
    s3_endpoint: Optional[str] = Field(None)
    aws_access_key_id: Optional[str] = Field(None)
    aws_secret_access_key: Optional[str] = Field(None)
    aws_region: Optional[str] = Field(None)
    thumbnail_bucket: Optional[str] = Field(None)
    thumbnail_key_prefix: str = Field("")
    public_base_url: Optional[str] = Field(None)

    # Catalog table
    catalog_table: Optional[str] = Field(None)
    dynamodb_endpoint: Optional[str] = Field(None)

    # Completion notifications
    notification_endpoint: Optional[str] = Field(None)
    notification_access_key: Optional[str] = Field(None)

    log_level: str = Field("INFO")

    @field_validator("thumbnail_width", "thumbnail_height")
    @classmethod
    def validate_dimension(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("thumbnail dimensions must be positive")
        return v

    @field_validator("jpeg_quality")
    @classmethod
    def validate_quality(cls, v: int) -> int:
        if not 1 <= v <= 95:
            raise ValueError("JPEG_QUALITY must be between 1 and 95")
        return v

    @field_validator("max_concurrency")
    @classmethod
    def validate_concurrency(cls, v: int) -> int:
        if v < 1:
            raise ValueError("MAX_CONCURRENCY must be at least 1")
        return v

    @property
    def timeout(self) -> Tuple[float, float]:
        """(connect, read) pair in the shape `requests` expects."""
        return (self.connect_timeout_seconds, self.request_timeout_seconds)


@lru_cache()
def get_settings() -> Settings:
    """Return cached settings to avoid reparsing env on every call."""
    return Settings()
