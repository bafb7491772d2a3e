"""
Configuration settings for the Network Layer.

All settings are loaded from environment variables with sensible defaults.
Use .env file for local development.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === Application ===
    APP_NAME: str = "APP"
    APP_VERSION: str = "0.1.0"
    PLATFORM: str = "python"
    LOG_LEVEL: str = "INFO"
    ENVIRONMENT: str = "development"

    # === Backend ===
    SERVER_URL: str = "https://api.example.com"
    REQUEST_TIMEOUT: float = 30.0  # seconds, per transport attempt
    UPLOAD_TIMEOUT: float = 30 * 60  # seconds, file-streamed multipart uploads
    VALID_STATUS_MIN: int = 200
    VALID_STATUS_MAX: int = 299

    # === Retry ===
    DEFAULT_MAX_RETRY_COUNT: int = 3
    SESSION_REFRESH_DELAY: float = 1.0  # seconds between token refresh and resubmission
    TRANSIENT_RETRY_BACKOFF_BASE: float = 2.0  # Exponential backoff multiplier
    TRANSIENT_RETRY_MAX_DELAY: float = 30.0


# Global settings instance
settings = Settings()
