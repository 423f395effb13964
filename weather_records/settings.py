from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized configuration.

    Loaded from:
    - environment variables
    - .env file (if present)
    """
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_name: str = "Weather API"
    app_version: str = "1.0.0"

    # Any SQLAlchemy URL works; SQLite keeps local runs dependency-free
    database_url: str = "sqlite:///weather_records.sqlite3"

    api_prefix: str = "/api/v1"
    cors_origins: List[str] = ["*"]

    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 3000


@lru_cache
def get_settings() -> Settings:
    """Process-wide settings instance."""
    return Settings()
