from typing import Optional
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str

    REDIS_URL: str = "redis://localhost:6379/0"

    RATE_LIMIT: int = 100
    RATE_LIMIT_WINDOW: int = 600  # 10 minutes

    IDEMPOTENCY_TTL: int = 300  # 5 minutes
    PRICE_CACHE_TTL: int = 60   # 60 seconds

    WEBHOOK_URL: Optional[str] = None
    WEBHOOK_TIMEOUT: int = 10
    WEBHOOK_RETRIES: int = 3

    CELERY_BROKER_URL: str = "redis://localhost:6379/1"
    CELERY_BACKEND: str = "redis://localhost:6379/2"

    BUSINESS_TIMEZONE: str = "Asia/Seoul"
    VAT_RATE: float = 0.1
    DEFAULT_SUPPLIER: str = "삼성전자"

    API_TITLE: str = "HVAC Order Operations"
    API_DESCRIPTION: str = "Order intake, delivery, installation schedule and settlement tracking"
    API_VERSION: str = "1.0.0"

    LOG_LEVEL: str = "INFO"
    DEBUG: bool = False

    class Config:
        env_file = ".env"
        case_sensitive = True

settings = Settings()
