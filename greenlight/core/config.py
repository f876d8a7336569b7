"""
Application settings

Environment-driven configuration managed with pydantic-settings
"""

from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Basics
    ENV: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False
    APP_NAME: str = "Greenlight"

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./greenlight.db"

    # Connection pool (ignored for SQLite)
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 1800  # 30 minutes

    # Redis holds the schema version marker
    REDIS_URL: str = "redis://localhost:6379/0"
    SCHEMA_VERSION_KEY: str = "DB_SCHEMA_VERSION"

    # Identity proxy
    IDENTITY_HEADER: str = "Cf-Access-Authenticated-User-Email"
    ROOT_USERS: str = ""  # comma-separated emails

    # JIRA
    JIRA_BASE_URL: str = ""
    JIRA_USER_EMAIL: str = ""
    JIRA_API_TOKEN: str = ""
    JIRA_TIMEOUT_SECONDS: float = 10.0

    # Notifications
    NOTIFICATIONS_ENABLED: bool = False
    NOTIFICATION_EMAIL_FROM: str = ""
    NOTIFICATION_EMAIL_TO: str = ""  # comma-separated
    SMTP_HOST: str = ""
    SMTP_PORT: int = 587
    SMTP_USERNAME: str = ""
    SMTP_PASSWORD: str = ""
    SMTP_STARTTLS: bool = True
    SMTP_TIMEOUT_SECONDS: float = 10.0

    # CORS
    CORS_ORIGINS: List[str] = ["*"]

    @property
    def root_users(self) -> List[str]:
        return [email.strip() for email in self.ROOT_USERS.split(",") if email.strip()]

    @property
    def jira_configured(self) -> bool:
        return bool(self.JIRA_USER_EMAIL and self.JIRA_API_TOKEN)

    @property
    def notification_recipients(self) -> List[str]:
        return [addr.strip() for addr in self.NOTIFICATION_EMAIL_TO.split(",") if addr.strip()]


@lru_cache
def get_settings() -> Settings:
    """Return the settings singleton"""
    return Settings()


settings = get_settings()
