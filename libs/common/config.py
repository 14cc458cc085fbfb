from functools import lru_cache
from typing import Literal, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Global application settings."""

    # Application
    ENVIRONMENT: Literal["local", "development", "production"] = "local"
    LOG_LEVEL: str = "INFO"
    TIMEZONE: str = "UTC"
    DEFAULT_LANGUAGE: str = "en"

    # Database
    DATABASE_URL: str
    DB_POOL_SIZE: int = 20
    DB_MAX_OVERFLOW: int = 10
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 1800

    # Supabase (identity provider)
    # Placeholder values keep local/test runs from failing when real
    # credentials are not required. Deployments override via env.
    SUPABASE_URL: str = "http://localhost"
    SUPABASE_JWT_SECRET: str = "test-jwt-secret"
    JWT_AUDIENCE: Optional[str] = "authenticated"

    # Requester resolution retry policy
    PROFILE_LOOKUP_MAX_ATTEMPTS: int = 3
    PROFILE_LOOKUP_BACKOFF_SECONDS: float = 0.2

    # Onboarding
    CHILD_MIN_AGE: int = 5
    CHILD_MAX_AGE: int = 17

    # Progress goals seeded into new aggregates
    PARENT_WEEKLY_POINTS_GOAL: int = 100
    PARENT_MONTHLY_GOAL_EXERCISES: int = 20
    CHILD_WEEKLY_POINTS_GOAL: int = 50
    CHILD_MONTHLY_GOAL_EXERCISES: int = 15

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    @field_validator("DATABASE_URL")
    @classmethod
    def assemble_db_connection(cls, v: Optional[str]) -> str:
        if isinstance(v, str):
            if v.startswith("postgres://"):
                v = v.replace("postgres://", "postgresql://", 1)
            if v.startswith("postgresql://"):
                return v.replace("postgresql://", "postgresql+psycopg://", 1)
        return v

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")


@lru_cache
def get_settings() -> Settings:
    """
    Return the global settings instance, cached.
    """
    return Settings()
