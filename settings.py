"""
Environment-backed configuration for the portfolio API.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings read from the process environment and an optional .env file."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    environment: str = Field(default="development")
    log_level: str = Field(default="INFO")
    api_prefix: str = Field(default="/api")
    cors_origins: str = Field(default="http://localhost:5173")

    # MongoDB
    mongodb_uri: Optional[str] = Field(default=None)
    database_name: str = Field(default="portfolio")

    # Auth
    jwt_secret: str = Field(default="super-secret-key-change")
    jwt_algorithm: str = Field(default="HS256")
    jwt_expire_minutes: int = Field(default=60 * 24 * 30)

    # Cloudinary
    cloudinary_cloud_name: Optional[str] = Field(default=None)
    cloudinary_api_key: Optional[str] = Field(default=None)
    cloudinary_api_secret: Optional[str] = Field(default=None)
    media_folder: str = Field(default="portfolio")
    max_upload_bytes: int = Field(default=5 * 1024 * 1024)

    # Rate limiting and response hardening
    rate_limit_enabled: bool = Field(default=True)
    rate_limit_window_ms: int = Field(default=15 * 60 * 1000)
    rate_limit_max_requests: int = Field(default=100)
    security_headers_enabled: bool = Field(default=True)

    # Development toggles
    use_in_memory_backends: bool = Field(default=False)

    # Contact notifications (SMTP)
    email_host: Optional[str] = Field(default=None)
    email_port: int = Field(default=587)
    email_user: Optional[str] = Field(default=None)
    email_pass: Optional[str] = Field(default=None)

    # Seed credentials
    admin_email: str = Field(default="admin@portfolio.dev")
    admin_password: str = Field(default="admin123456")

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def allowed_origins(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @property
    def media_configured(self) -> bool:
        return bool(
            self.cloudinary_cloud_name
            and self.cloudinary_api_key
            and self.cloudinary_api_secret
        )

    @property
    def email_configured(self) -> bool:
        return bool(self.email_host and self.email_user and self.email_pass)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
