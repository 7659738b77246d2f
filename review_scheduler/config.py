"""
Configuration management for the review scheduler
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    # Database Configuration
    database_url: str = Field(default="sqlite:///data/scheduler.db")
    store_timeout: float = Field(default=5.0, gt=0)

    # Application Configuration
    log_level: str = Field(default="INFO")

    # Spaced Repetition Configuration
    default_easiness_factor: float = Field(default=2.5)
    min_easiness_factor: float = Field(default=1.3)
    min_evaluation: float = Field(default=0.0)
    max_evaluation: float = Field(default=5.0)
    forgotten_threshold: float = Field(default=3.0)
    extra_repeat_threshold: float = Field(default=4.0)
    first_interval_days: int = Field(default=1)
    second_interval_days: int = Field(default=6)
    forgotten_interval_days: int = Field(default=1)
    conflict_retries: int = Field(default=1, ge=0)

    # Session Configuration
    daily_new_limit: int = Field(default=10, ge=0)
    review_interval_days: int = Field(default=6)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_nested_delimiter="__",
        extra="ignore"
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


def get_database_path(settings: Settings | None = None) -> str:
    """Get the database file path from URL"""
    settings = settings or get_settings()
    if settings.database_url.startswith("sqlite:///"):
        return settings.database_url.replace("sqlite:///", "")
    return "data/scheduler.db"
