from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings"""

    model_config = SettingsConfigDict(
        env_prefix="AIRSCOPE_",
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    # Logging
    LOG_LEVEL: str = "INFO"
    TRACE: bool = False

    # Storage
    DB_PATH: str = "airscope.db"
    MODEL_DIR: str = "models"

    # Override heuristic
    CITY_PROFILES_PATH: Optional[str] = None
    OVERRIDE_RATIO: float = 0.6


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
