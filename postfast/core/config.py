# postfast/core/config.py
from pydantic_settings import BaseSettings
from functools import lru_cache

class Settings(BaseSettings):
    # --- App Config ---
    APP_NAME: str = "PostFast"
    APP_ENV: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # --- Database ---
    DATABASE_URL: str | None = None
    POSTGRES_USER: str = "postfast"
    POSTGRES_PASSWORD: str = "postfast"
    POSTGRES_DB: str = "postfast"
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432

    # --- Cache ---
    REDIS_URL: str = "redis://localhost:6379/0"
    CACHE_ENABLED: bool = True
    CACHE_TTL_SECONDS: int = 600

    # --- Posts ---
    FEED_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 100
    SLUG_MAX_ATTEMPTS: int = 10_000

    # --- Scheduled publishing ---
    SCHEDULER_ENABLED: bool = True
    PUBLISH_INTERVAL_SECONDS: int = 60

    # --- JWT / Auth ---
    JWT_SECRET_KEY: str = "change-me"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30

    class Config:
        env_file = ".env"

@lru_cache()
def get_settings():
    return Settings()
