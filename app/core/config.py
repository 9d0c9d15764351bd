"""
Configuration settings for the application
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings"""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    APP_NAME: str = "ewm-service"
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "sqlite:///./ewm.db"

    # Redis (locks and celery broker)
    REDIS_URL: str = "redis://localhost:6379/0"
    LOCK_TIMEOUT_SECONDS: int = 10
    LOCK_BLOCKING_TIMEOUT_SECONDS: int = 10

    # Events
    EVENT_MIN_LEAD_HOURS: int = 2
    DEFAULT_PAGE_SIZE: int = 10

    # Statistics service
    STATS_ENABLED: bool = True
    STATS_SERVICE_URL: str = "http://localhost:9090"
    STATS_TIMEOUT_SECONDS: float = 2.0


settings = Settings()


def get_redis_url() -> str:
    return settings.REDIS_URL
