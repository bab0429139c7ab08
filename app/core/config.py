# app/core/config.py
import os
from pydantic_settings import BaseSettings
from pydantic_settings import SettingsConfigDict
from typing import Optional
from functools import lru_cache

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra='ignore')

    # Application Settings
    APP_NAME: str = "Birthdate Fields"
    APP_VERSION: str = "0.2.2"
    DEBUG: bool = False

    # Database Settings
    DATABASE_URL: str = os.environ.get("DATABASE_URL", "sqlite:///./birthdate.db")

    # Key/value cache backing the field id mapping: sql, redis or memory
    CACHE_BACKEND: str = "sql"
    REDIS_URL: Optional[str] = os.environ.get("REDIS_URL", None)
    REDIS_PREFIX: str = "kv:"

    # Logging Settings
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # Birthdate fields
    BIRTHDATE_ENABLED: bool = True
    BIRTHDATE_MIN_AGE: int = 0  # 0 disables
    BIRTHDATE_MAX_AGE: int = 0  # 0 disables
    BIRTHDATE_YEAR_RANGE_YEARS: int = 120
    BIRTHDATE_LOCK_AFTER_SIGNUP: bool = False
    BIRTHDATE_REQUIRE_ON_EXISTING: bool = False
    BIRTHDATE_TIMEZONE: str = "UTC"

@lru_cache()
def get_settings() -> Settings:
    return Settings()

settings: Settings = get_settings()
