"""
Application configuration using Pydantic Settings.

Configuration values can be set via environment variables or .env file.
"""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application settings
    APP_NAME: str = "sessionbridge"
    DEBUG: bool = False
    DEV_MODE: bool = False
    LOG_LEVEL: str = "INFO"
    HOST: str = "127.0.0.1"
    PORT: int = 8000

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./sessions.db"

    # Signs the session id cookie
    SECRET_KEY: str = "change-me-sessionbridge-development-key"

    # Session store
    SESSION_PREFIX: str = "sess"
    # Seconds; unset or 0 disables expiry enforcement
    SESSION_TTL: Optional[int] = None
    SESSION_DOCUMENT: str = "SessionData"
    SESSION_MANAGER: str = "default"
    SESSION_SID_FIELD: str = "sid"
    SESSION_DATA_FIELD: str = "data"
    SESSION_EXPIRE_FIELD: Optional[str] = "expires_at"

    # Session cookie
    SESSION_COOKIE: str = "session"
    SESSION_MAX_AGE: int = 14 * 24 * 60 * 60  # 14 days
    SESSION_HTTPS_ONLY: bool = False


# Global settings instance
settings = Settings()
