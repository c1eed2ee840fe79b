"""Application configuration"""

import logging
from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Application
    app_name: str = "BarFlow"
    debug: bool = False
    cors_origins: str = "http://localhost:3000"

    # Database
    database_path: str = "/app/data/barflow.json"

    # Redis
    redis_url: str = "redis://localhost:6379"

    # Security
    secret_key: str = "dev-secret-change-me"
    access_token_expire_minutes: int = 60 * 24  # 24 hours

    # Notifications
    notification_queue: str = "queue:notifications:normal"
    notification_max_attempts: int = 3

    # Email: "sendgrid" (default) or "office365"
    email_provider: str = "sendgrid"
    email_from_email: Optional[str] = None
    email_from_name: str = "BarFlow"
    sendgrid_api_key: Optional[str] = None
    smtp_host: str = "smtp.office365.com"
    smtp_port: int = 587
    smtp_username: Optional[str] = None
    smtp_password: Optional[str] = None

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


def validate_production_settings(settings: Settings) -> list:
    """Validate that all required settings are configured for production"""
    errors = []

    if settings.secret_key == "dev-secret-change-me":
        errors.append("SECRET_KEY must be changed from default value")

    if not settings.email_from_email:
        errors.append("EMAIL_FROM_EMAIL is required to send notifications")

    if settings.email_provider == "sendgrid" and not settings.sendgrid_api_key:
        errors.append("SENDGRID_API_KEY is required when EMAIL_PROVIDER is sendgrid")

    if settings.email_provider == "office365" and not (settings.smtp_username and settings.smtp_password):
        errors.append("SMTP_USERNAME and SMTP_PASSWORD are required when EMAIL_PROVIDER is office365")

    return errors


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    base_settings = Settings()

    if not base_settings.debug:
        for error in validate_production_settings(base_settings):
            logger.warning(f"Production config warning: {error}")

    return base_settings


# Convenience access
settings = get_settings()
