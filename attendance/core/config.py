"""Configuration settings for the face attendance service."""
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings.

    These settings are loaded from environment variables with the following precedence:
    1. Environment variables
    2. .env file
    3. Default values

    Attributes:
        COLLECTION_ID: Name of the Rekognition collection holding enrolled faces
        SIMILARITY_THRESHOLD: Minimum similarity (0-100) for a face to count as a match
        PROVIDER_TIMEOUT: Upper bound in seconds for a single vision provider call
        RECOGNITION_CONCURRENCY: Number of faces searched at once within one image
    """
    model_config = SettingsConfigDict(
        case_sensitive=True,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_prefix="",
        env_nested_delimiter="__"
    )

    # Core Settings
    PROJECT_NAME: str = "Face Attendance Service"
    VERSION: str = "0.1.0"
    API_PREFIX: str = "/api"
    ENVIRONMENT: str = "development"

    # CORS Settings
    ALLOWED_ORIGINS: str = "*"

    @property
    def cors_origins(self) -> List[str]:
        """Get list of allowed origins."""
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",")]

    # AWS Settings
    AWS_ACCESS_KEY_ID: str = ""
    AWS_SECRET_ACCESS_KEY: str = ""
    AWS_REGION: str = "us-east-1"

    # Vision provider settings
    COLLECTION_ID: str = "KrishFaces"
    SIMILARITY_THRESHOLD: float = 75.0
    INDEX_MAX_FACES: int = 1
    PROVIDER_TIMEOUT: float = 10.0
    PROVIDER_MAX_ATTEMPTS: int = 3

    # Recognition settings
    RECOGNITION_CONCURRENCY: int = 1

    # Identity store settings
    DATABASE_URL: str = "sqlite+aiosqlite:///./attendance.db"
    STATS_DAYS: int = 7

    # Optional settings with defaults
    LOG_LEVEL: str = "INFO"
    DEBUG: bool = False
    HOST: str = "0.0.0.0"
    PORT: int = 5002


settings = Settings()
