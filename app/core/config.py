# app/core/config.py
import os
from pydantic_settings import BaseSettings
from pydantic import validator
from typing import List, Optional


class Settings(BaseSettings):
    """Application settings loaded from .env"""

    # === Database ===
    DATABASE_URL: str
    DATABASE_TEST_URL: Optional[str] = None

    @validator("DATABASE_URL")
    def validate_database_url(cls, v):
        """Ensure database URL is safe for current environment"""
        env = os.getenv("ENVIRONMENT", "development").lower()
        if env == "production" and "localhost" in v:
            raise ValueError("🚨 Production environment cannot use localhost database!")
        return v

    # === Connection pool ===
    # The hosting plan allows one physical connection; requests queue behind it.
    DB_POOL_SIZE: int = 1
    DB_MAX_OVERFLOW: int = 0
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 120

    # === Aggregation engine ===
    DB_SNAPSHOT_ISOLATION_LEVEL: str = "REPEATABLE READ"
    QUERY_STEP_TIMEOUT_SECONDS: float = 15.0
    ORDER_FETCH_STRATEGY: str = "narrowed"  # 'narrowed' | 'direct'
    DEFAULT_APP_CHANNEL: str = "WR_RECEPTION"
    BOOKING_LOOKBACK_HOURS: int = 5  # bookings ending earlier than this are no longer listed

    @validator("ORDER_FETCH_STRATEGY")
    def validate_fetch_strategy(cls, v):
        v = v.lower()
        if v not in ("narrowed", "direct"):
            raise ValueError("ORDER_FETCH_STRATEGY must be 'narrowed' or 'direct'")
        return v

    # === CORS ===
    ALLOWED_ORIGINS: List[str] = ["*"]
    ALLOWED_METHODS: List[str] = ["*"]
    ALLOWED_HEADERS: List[str] = ["*"]

    # === System ===
    DEBUG: bool = False
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


# Create a global settings instance
settings = Settings()
