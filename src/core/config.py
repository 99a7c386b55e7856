"""
Core configuration module for the Grand Gate listings backend.

This module uses Pydantic BaseSettings to manage environment-based
configuration for database connections, authentication, media hosting
and application settings.
"""

import os
from typing import Optional
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Uses Pydantic BaseSettings for automatic environment variable parsing
    and validation.
    """

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=True, extra="ignore"
    )

    # Application Settings
    APP_NAME: str = "Grand Gate Listings API"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False

    # Database Configuration
    DATABASE_URL: str = "sqlite+aiosqlite:///./grandgate.db"

    @field_validator("DATABASE_URL")
    @classmethod
    def assemble_db_connection(cls, v: str) -> str:
        """
        Ensure the database URL uses the asyncpg driver for PostgreSQL.
        Hosting providers hand out 'postgresql://', but the async engine needs 'postgresql+asyncpg://'.
        """
        if v and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    # CORS Configuration
    CORS_ORIGINS: list = [
        "http://localhost:5173",
        "http://localhost:3000",
        "https://grandgatepropertiesllc.com",
        "http://grandgatepropertiesllc.com",
        "https://www.grandgatepropertiesllc.com",
    ]

    # API Configuration
    API_V1_PREFIX: str = "/api/v1"

    # File Upload Configuration
    MAX_UPLOAD_SIZE_MB: int = 10

    # Logging Configuration
    LOG_LEVEL: str = "INFO"

    # Security
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30 * 24 * 60
    COOKIE_NAME: str = "token"

    # Cloudinary media host
    CLOUDINARY_CLOUD_NAME: str = ""
    CLOUDINARY_API_KEY: str = ""
    CLOUDINARY_API_SECRET: str = ""
    CLOUDINARY_API_BASE: str = "https://api.cloudinary.com/v1_1"
    CLOUDINARY_DELIVERY_HOST: str = "res.cloudinary.com"

    # Server
    PORT: int = 5000
    WEB_CONCURRENCY: Optional[int] = None

    @property
    def cookie_secure(self) -> bool:
        return self.ENVIRONMENT == "production"

    @property
    def worker_count(self) -> int:
        return self.WEB_CONCURRENCY or os.cpu_count() or 1


# Global settings instance
settings = Settings()
