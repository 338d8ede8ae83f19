"""
Configuration Management

Centralized configuration management using Pydantic Settings for type safety
and environment variable integration.
"""

from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

# Load environment variables from .env file if it exists
load_dotenv(dotenv_path=Path(".") / ".env")


_MODEL_CONFIG = {
    "env_file": ".env",
    "env_file_encoding": "utf-8",
    "case_sensitive": True,
    "extra": "ignore",
}


class DatabaseSettings(BaseSettings):
    """Database configuration settings"""

    DATABASE_URL: str = Field(default="sqlite+pysqlite:///./hostel_occupancy.db")

    # Connection pool settings (ignored by sqlite)
    DB_POOL_SIZE: int = Field(default=20)
    DB_MAX_OVERFLOW: int = Field(default=30)
    DB_POOL_TIMEOUT: int = Field(default=30)
    DB_POOL_RECYCLE: int = Field(default=3600)

    DB_ECHO: bool = Field(default=False)

    model_config = _MODEL_CONFIG

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")


class LoggingSettings(BaseSettings):
    """Logging configuration settings"""

    LOG_LEVEL: str = Field(default="INFO")
    LOG_FORMAT: str = Field(default="json")  # json or text
    LOG_FILE: Optional[str] = Field(default=None)
    LOG_RETENTION: int = Field(default=30)  # days

    # Structured logging
    ENABLE_STRUCTURED_LOGGING: bool = Field(default=True)
    LOG_SQL_QUERIES: bool = Field(default=False)

    model_config = _MODEL_CONFIG

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v.upper()

    @field_validator("LOG_FORMAT")
    @classmethod
    def validate_log_format(cls, v):
        if v not in ("json", "text"):
            raise ValueError("Log format must be 'json' or 'text'")
        return v


class OccupancySettings(BaseSettings):
    """Booking and occupancy rules"""

    # Attempts for a coordinator unit that lost an optimistic room-version race
    OCCUPANCY_RETRY_ATTEMPTS: int = Field(default=3, ge=1)

    STUDENT_CODE_PREFIX: str = Field(default="STU")
    STUDENT_CODE_ATTEMPTS: int = Field(default=5, ge=1)

    MIN_BOOKING_MONTHS: int = Field(default=1, ge=1)
    MAX_BOOKING_MONTHS: int = Field(default=24, ge=1)

    # Day of month used when generating monthly bills without explicit due date
    DEFAULT_DUE_DAY: int = Field(default=5, ge=1, le=28)

    model_config = _MODEL_CONFIG


class Settings(BaseSettings):
    """Main application settings"""

    # Environment
    ENVIRONMENT: str = Field(default="development")
    DEBUG: bool = Field(default=False)

    # Project information
    PROJECT_NAME: str = Field(default="Hostel Occupancy Service")
    PROJECT_VERSION: str = Field(default="1.0.0")
    API_V1_STR: str = "/api/v1"
    CORS_ORIGINS: List[str] = Field(default=["*"])

    # Include all sub-settings
    database: DatabaseSettings = DatabaseSettings()
    logging: LoggingSettings = LoggingSettings()
    occupancy: OccupancySettings = OccupancySettings()

    model_config = _MODEL_CONFIG

    @field_validator("ENVIRONMENT")
    @classmethod
    def validate_environment(cls, v):
        valid_envs = ["development", "staging", "production", "testing"]
        if v not in valid_envs:
            raise ValueError(f"Environment must be one of {valid_envs}")
        return v

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @property
    def is_testing(self) -> bool:
        return self.ENVIRONMENT == "testing"


@lru_cache()
def get_settings() -> Settings:
    """Get cached application settings"""
    return Settings()


# Global settings instance
settings = get_settings()
