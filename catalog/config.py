"""Application configuration using pydantic-settings."""

from typing import Any

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_PRODUCT_PER_PAGE = 10


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Database
    database_url: str = "postgresql://localhost:5432/catalog"

    # Search pagination
    product_per_page: int = DEFAULT_PRODUCT_PER_PAGE

    # Cloudinary (remote image host)
    cloudinary_cloud_name: str = ""
    cloudinary_api_key: str = ""
    cloudinary_api_secret: str = ""
    cloudinary_base_url: str = "https://api.cloudinary.com"
    cloudinary_folder: str = "products"

    # Product photo uploads
    max_photo_size: int = 5 * 1024 * 1024  # bytes

    # Application
    debug: bool = False
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    @field_validator("product_per_page", mode="before")
    @classmethod
    def _default_page_size(cls, value: Any) -> int:
        """Fall back to the default page size for blank, invalid or non-positive values."""
        try:
            size = int(value)
        except (TypeError, ValueError):
            return DEFAULT_PRODUCT_PER_PAGE
        return size if size > 0 else DEFAULT_PRODUCT_PER_PAGE


settings = Settings()
