"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    admin_token: str
    cloudinary_cloud_name: str | None = None
    cloudinary_upload_preset: str | None = None
    cloudinary_api_key: str | None = None
    cloudinary_api_secret: str | None = None
    cloudinary_base_url: str = "https://api.cloudinary.com/v1_1"
    signature_url: str | None = None
    signature_timeout_seconds: float = 2.5
    upload_timeout_seconds: float = 30.0
    max_upload_bytes: int = 10 * 1024 * 1024
    storage_dir: str = ".fiesta_finder"
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
