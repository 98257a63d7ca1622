"""
Application configuration using Pydantic Settings
"""
from typing import List, Optional
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Application
    APP_NAME: str = "JobBoard"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False

    # Database
    DATABASE_URL: str
    DATABASE_POOL_SIZE: int = 10
    DATABASE_MAX_OVERFLOW: int = 20

    # Redis
    REDIS_URL: str = "redis://localhost:6379/0"
    REDIS_CACHE_TTL: int = 3600

    # Async Tasks
    CELERY_BROKER_URL: str = "redis://localhost:6379/1"
    CELERY_RESULT_BACKEND: str = "redis://localhost:6379/2"

    # CORS
    CORS_ORIGINS: List[str] = ["http://localhost:3000"]
    CORS_ALLOW_CREDENTIALS: bool = True

    # Observability
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    # Search
    SEARCH_DEFAULT_LIMIT: int = 10
    LOCATION_SEARCH_LIMIT: int = 20
    FILTERS_OPTIONS_CACHE_TTL: int = 3600  # 1 hour

    # Events tracking
    EVENTS_TRACKING_ENABLED: bool = True
    EVENTS_FLUSH_FREQUENCY_SECONDS: float = 300  # 5 minutes

    # Optional default board used by the seeding scripts
    DEFAULT_BOARD_NAME: Optional[str] = "default"

    @property
    def cors_origins_list(self) -> List[str]:
        return self.CORS_ORIGINS

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
