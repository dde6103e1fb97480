"""
Application configuration using Pydantic Settings.

Loads environment variables and provides typed configuration access.
"""

from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "DocVault"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    API_V1_PREFIX: str = "/api/v1"
    LOG_LEVEL: str = "INFO"
    ENVIRONMENT: str = "development"

    # MongoDB
    MONGODB_URI: str = "mongodb://localhost:27017"
    MONGODB_DATABASE: str = "docvault"
    MONGODB_SERVER_SELECTION_TIMEOUT_MS: int = 5000
    GRIDFS_BUCKET_NAME: str = "documents"

    # Uploads
    MAX_UPLOAD_SIZE: int = 50 * 1024 * 1024  # 50 MiB
    ALLOWED_MIME_TYPE: str = "application/pdf"
    DEFAULT_CATEGORY: str = "Other"
    ORPHAN_BLOB_GRACE_MINUTES: int = 60

    # Identity provider session tokens
    IDENTITY_JWT_SECRET: str = "change-me-identity-provider-secret"
    IDENTITY_JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # CORS
    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    # Rate limiting
    RATE_LIMIT_ENABLED: bool = True

    # Sentry
    SENTRY_DSN: Optional[str] = None
    SENTRY_TRACES_SAMPLE_RATE: float = 0.1

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
