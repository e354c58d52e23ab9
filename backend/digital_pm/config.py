"""Application configuration."""
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings."""

    # App
    APP_NAME: str = "Digital_PM_Scheduling"
    ENV: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"
    ALLOWED_ORIGINS: str = "http://localhost:3000"

    # Database
    DATABASE_URL: str = "sqlite:///./digital_pm.db"
    DATABASE_POOL_SIZE: int = 20
    DATABASE_MAX_OVERFLOW: int = 10
    # Store calls must fail fast with a retryable error instead of hanging the caller.
    DATABASE_POOL_TIMEOUT_SECONDS: int = 5
    DATABASE_STATEMENT_TIMEOUT_MS: int = 5000

    # Celery
    CELERY_BROKER_URL: str = "redis://localhost:6379/1"
    CELERY_RESULT_BACKEND: str = "redis://localhost:6379/2"

    # Notification redelivery
    NOTIFICATION_RETRY_ENABLED: bool = True
    NOTIFICATION_RETRY_MAX_ATTEMPTS: int = 5

    # Scheduling
    WORKDAY_HOURS: float = 8.0
    WORK_WEEK_DAYS: int = 5

    # Messaging
    MESSAGE_NOTIFICATION_PREVIEW_CHARS: int = 100
    OFFICE_SENDER_NAMES: str = "admin,Office"
    ADMIN_SENDER_ID: str = "admin"

    # Lifecycle
    DEFAULT_REJECTION_REASON: str = "No reason provided"

    class Config:
        env_file = ".env"
        case_sensitive = True

    @property
    def cors_origins(self) -> list[str]:
        """Get CORS origins as list."""
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",") if origin.strip()]

    @property
    def office_sender_names(self) -> set[str]:
        """Office identities, lower-cased for case-insensitive matching."""
        return {name.strip().lower() for name in self.OFFICE_SENDER_NAMES.split(",") if name.strip()}

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
