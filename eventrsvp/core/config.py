"""
Configuration settings for the application
"""

import os
from typing import List
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """Application settings"""

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./event_rsvp.db")

    # Application
    BASE_URL: str = os.getenv("BASE_URL", "http://localhost:8000")
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")

    # Sessions
    RSVP_SESSION_SECRET: str = os.getenv("RSVP_SESSION_SECRET", "development-secret")
    ORGANIZER_TOKEN_SECRET: str = os.getenv("ORGANIZER_TOKEN_SECRET", "development-organizer-secret")
    ANON_SESSION_DAYS: int = 365
    USER_SESSION_DAYS: int = 7
    VERIFICATION_TOKEN_TTL_HOURS: int = 24

    # Email
    SMTP_SERVER: str = os.getenv("SMTP_SERVER", "localhost")
    SMTP_PORT: int = int(os.getenv("SMTP_PORT", "587"))
    SMTP_USERNAME: str = os.getenv("SMTP_USERNAME", "")
    SMTP_PASSWORD: str = os.getenv("SMTP_PASSWORD", "")
    SMTP_USE_TLS: bool = os.getenv("SMTP_USE_TLS", "true").lower() in ("1", "true", "yes")
    EMAIL_FROM: str = os.getenv("EMAIL_FROM", "Event RSVP <noreply@localhost>")
    NOTIFICATION_WORKERS: int = 8

    # RSVP rules
    RECHECK_CAPACITY_ON_UPDATE: bool = os.getenv("RECHECK_CAPACITY_ON_UPDATE", "true").lower() in ("1", "true", "yes")

    # CORS
    ALLOW_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:8000",
    ]

    # File limits
    UPLOAD_DIR: str = os.getenv("UPLOAD_DIR", "uploads")
    MAX_UPLOAD_SIZE: int = 5 * 1024 * 1024  # 5MB
    ALLOWED_IMAGE_TYPES: List[str] = ["image/jpeg", "image/png", "image/webp", "image/gif"]

    # Rate limiting
    RATE_LIMIT_PER_MINUTE: int = 30

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

    class Config:
        env_file = ".env"

settings = Settings()
